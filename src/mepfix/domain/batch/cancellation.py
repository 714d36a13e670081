"""Cooperative cancellation between a monitor task and the batch loop."""

from __future__ import annotations

import threading
from logging import getLogger
from typing import TYPE_CHECKING, Literal, TypeAlias

if TYPE_CHECKING:
    from collections.abc import Callable
    from types import TracebackType

log = getLogger(__name__)

CancellationPoll: TypeAlias = "Callable[[], bool]"


class CancellationToken:
    """One-way flag; once cancelled it stays cancelled."""

    def __init__(self) -> None:
        self._event = threading.Event()
        self._reason: str | None = None

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> str | None:
        return self._reason

    def cancel(self, reason: str = "cancellation requested") -> None:
        if not self._event.is_set():
            self._reason = reason
            self._event.set()

    def wait(self, timeout: float | None = None) -> bool:
        return self._event.wait(timeout)


class CancellationMonitor:
    """Background poller that cancels a token when ``poll()`` returns True.

    The poller only ever writes to the token. The thread is stopped and joined
    when the context exits, so it never outlives the batch.
    """

    def __init__(
        self,
        token: CancellationToken,
        poll: CancellationPoll,
        *,
        interval: float = 0.2,
    ) -> None:
        self.token = token
        self.poll = poll
        self.interval = interval
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def __enter__(self) -> CancellationMonitor:
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._run, name="mepfix-cancellation-monitor", daemon=True
        )
        self._thread.start()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        self._stop.set()
        if self._thread is not None:
            self._thread.join()
            self._thread = None
        return False

    def _run(self) -> None:
        while not self._stop.is_set() and not self.token.cancelled:
            try:
                requested = self.poll()
            except Exception:
                log.exception("Cancellation poll failed; monitor stopped")
                return
            if requested:
                log.info("Cancellation requested by operator")
                self.token.cancel("operator request")
                return
            self._stop.wait(self.interval)
