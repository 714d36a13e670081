"""Operator keypress polling for cooperative cancellation."""

from __future__ import annotations

import os
import select
import sys
from typing import TYPE_CHECKING, TextIO

if TYPE_CHECKING:
    from mepfix.domain.batch.cancellation import CancellationPoll

CANCEL_KEY = "q"


def _wants_cancel(text: str) -> bool:
    return CANCEL_KEY in text.strip().lower()


def stdin_poller(stream: TextIO | None = None) -> CancellationPoll:
    """Return a non-blocking poll that fires once the operator types ``q``.

    On POSIX the bytes already available are read and buffered until a full
    line arrives; on Windows single keypresses are read from the console.
    """

    source = stream or sys.stdin

    if os.name == "nt" and stream is None:
        import msvcrt  # noqa: PLC0415

        def poll_console() -> bool:
            while msvcrt.kbhit():
                if _wants_cancel(msvcrt.getwch()):
                    return True
            return False

        return poll_console

    fd = source.fileno()
    pending = bytearray()

    def poll() -> bool:
        readable, _, _ = select.select([fd], [], [], 0)
        if not readable:
            return False
        # only what is already there; a partial line must not block the monitor
        chunk = os.read(fd, 1024)
        if not chunk:
            return False
        pending.extend(chunk)
        while b"\n" in pending:
            line, _, rest = bytes(pending).partition(b"\n")
            pending[:] = rest
            if _wants_cancel(line.decode(errors="replace")):
                return True
        return False

    return poll
