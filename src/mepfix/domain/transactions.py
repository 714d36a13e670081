"""Atomic mutation scopes and advisory suppression for unattended runs.

Two scopes nest around every remediation:

    with AdvisorySuppressionScope(document, DismissAdvisories()):
        with MutationScope(document, "Remediate panel overloads") as scope:
            ...
            scope.commit()

The outer scope installs an advisory policy for its lifetime. The inner scope
snapshots the graph on entry and restores it unless ``commit()`` was reached
without an exception. Neither scope swallows exceptions.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Literal

from mepfix.domain.model import DocumentState, Resolution, Severity
from mepfix.domain.ports.unit_of_work import MutationUnitOfWork

if TYPE_CHECKING:
    from types import TracebackType

    from mepfix.domain.model import AdvisoryPolicy, Document, GraphSnapshot, HostCondition

log = getLogger(__name__)


class ScopeStateError(RuntimeError):
    """Raised when a scope is used outside its lifecycle."""


@dataclass(eq=False, slots=True)
class DismissAdvisories:
    """Policy that dismisses every advisory; fatal conditions never reach it."""

    dismissed: int = 0

    def resolve(self, condition: HostCondition) -> Resolution:
        if condition.severity is not Severity.WARNING:
            return Resolution.ESCALATE
        self.dismissed += 1
        log.debug("Auto-dismissed advisory: %s", condition.message)
        return Resolution.DISMISS


class AdvisorySuppressionScope:
    """Install an advisory policy on a document for the lifetime of the scope."""

    def __init__(self, document: Document, policy: AdvisoryPolicy) -> None:
        self.document = document
        self.policy = policy
        self._active = False

    def __enter__(self) -> AdvisorySuppressionScope:
        if self._active:
            raise ScopeStateError("Advisory suppression scope already active")
        self.document.install_policy(self.policy)
        self._active = True
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        self.document.uninstall_policy(self.policy)
        self._active = False
        return False


@dataclass(slots=True)
class _ScopeState:
    snapshot: GraphSnapshot | None = None
    baseline: bytes | None = None
    committed: bool = False
    rolled_back: bool = False
    previous_state: DocumentState = field(default=DocumentState.OPEN)


class MutationScope(MutationUnitOfWork):
    """All-or-nothing boundary around graph mutations of one document."""

    def __init__(self, document: Document, name: str = "Mutation") -> None:
        self.document = document
        self.name = name
        self._state: _ScopeState | None = None

    @property
    def active(self) -> bool:
        return self._state is not None

    @property
    def committed(self) -> bool:
        return self._state is not None and self._state.committed

    def __enter__(self) -> MutationScope:
        if not self.document.is_open:
            raise ScopeStateError(f"Cannot start {self.name!r}: {self.document.name} is closed")
        if self._state is not None:
            raise ScopeStateError(f"Mutation scope {self.name!r} already started")
        graph = self.document.graph
        self._state = _ScopeState(
            snapshot=graph.snapshot(),
            baseline=graph.dumps(),
            previous_state=self.document.state,
        )
        log.debug("Started mutation scope %r on %s", self.name, self.document.name)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        state = self._require_state()
        if exc_type is not None or not state.committed:
            self.rollback()
        self._state = None
        return False  # don't swallow exceptions

    def commit(self) -> None:
        state = self._require_state()
        if state.committed:
            raise ScopeStateError(f"Mutation scope {self.name!r} already committed")
        if state.rolled_back:
            raise ScopeStateError(f"Mutation scope {self.name!r} was rolled back")
        state.committed = True
        if self.document.graph.dumps() != state.baseline:
            self.document.mark_dirty()
        log.debug("Committed mutation scope %r on %s", self.name, self.document.name)

    def rollback(self) -> None:
        state = self._require_state()
        if state.rolled_back or state.committed or state.snapshot is None:
            return
        self.document.graph.restore(state.snapshot)
        self.document.state = state.previous_state
        state.rolled_back = True
        log.debug("Rolled back mutation scope %r on %s", self.name, self.document.name)

    def _require_state(self) -> _ScopeState:
        if self._state is None:
            raise ScopeStateError(f"Mutation scope {self.name!r} is not active")
        return self._state
