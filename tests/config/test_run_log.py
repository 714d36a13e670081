from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from mepfix.config import open_run_log

if TYPE_CHECKING:
    from pathlib import Path

_ENTRY = re.compile(r"^\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2},\d{3}: (?P<message>.*)$")


def test_entries_are_timestamped_lines(tmp_path: Path) -> None:
    path = tmp_path / "logs" / "run.log"

    with open_run_log(path, logger_name="mepfix.test.run") as run_log:
        run_log.info("Opened %s", "a.emodel")
        run_log.debug("not written")

    lines = path.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 1
    match = _ENTRY.match(lines[0])
    assert match is not None
    assert match.group("message") == "Opened a.emodel"


def test_existing_log_is_appended(tmp_path: Path) -> None:
    path = tmp_path / "run.log"
    path.write_text("earlier entry\n", encoding="utf-8")

    with open_run_log(path, logger_name="mepfix.test.run") as run_log:
        run_log.info("second run")

    lines = path.read_text(encoding="utf-8").splitlines()
    assert lines[0] == "earlier entry"
    assert lines[1].endswith(": second run")


def test_handler_is_detached_after_the_block(tmp_path: Path) -> None:
    path = tmp_path / "run.log"
    logger = logging.getLogger("mepfix.test.run")
    handlers_before = list(logger.handlers)

    with open_run_log(path, logger_name="mepfix.test.run") as run_log:
        run_log.info("inside")
    logger.info("outside")

    assert logger.handlers == handlers_before
    assert "outside" not in path.read_text(encoding="utf-8")


def test_exception_traceback_follows_its_line(tmp_path: Path) -> None:
    path = tmp_path / "run.log"

    with open_run_log(path, logger_name="mepfix.test.run") as run_log:
        try:
            raise RuntimeError("disk full")
        except RuntimeError:
            run_log.exception("Save failed for %s", "a.emodel")

    lines = path.read_text(encoding="utf-8").splitlines()
    assert lines[0].endswith(": Save failed for a.emodel")
    assert lines[-1] == "RuntimeError: disk full"
