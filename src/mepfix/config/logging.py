"""Console logging and the append-only run log."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

RUN_LOG_FORMAT: Final[str] = "%(asctime)s: %(message)s"


def configure_logging(*, level: int = logging.INFO, force: bool = False) -> None:
    """Console logging for the CLI; the run log is attached separately per batch."""

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        force=force,
    )


@contextmanager
def open_run_log(path: Path, *, logger_name: str) -> Iterator[logging.Logger]:
    """Attach an append-mode file handler to ``logger_name`` for the block.

    Entries are line oriented: one timestamp and one message per line, with
    tracebacks following the line of a logged exception.
    """

    path.parent.mkdir(parents=True, exist_ok=True)
    logger = logging.getLogger(logger_name)
    handler = logging.FileHandler(path, mode="a", encoding="utf-8")
    handler.setFormatter(logging.Formatter(RUN_LOG_FORMAT))
    handler.setLevel(logging.INFO)
    previous_level = logger.level
    logger.addHandler(handler)
    if logger.getEffectiveLevel() > logging.INFO:
        logger.setLevel(logging.INFO)
    try:
        yield logger
    finally:
        logger.removeHandler(handler)
        logger.setLevel(previous_level)
        handler.close()
