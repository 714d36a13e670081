"""The open model document: explicit session object for one host file."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from mepfix.domain.model.conditions import FatalHostConditionError, UnhandledAdvisoryError
from mepfix.domain.model.enums import DocumentState, Resolution, Severity

if TYPE_CHECKING:
    from pathlib import Path

    from mepfix.domain.model.conditions import AdvisoryPolicy, HostCondition
    from mepfix.domain.model.graph import ConnectorGraph

log = getLogger(__name__)


@dataclass(eq=False, slots=True)
class Document:
    """One engineering model opened against the host.

    The document binds itself as the graph's condition listener. Conditions are
    routed through the advisory policies installed by the active suppression
    scopes, innermost first.
    """

    path: Path
    graph: ConnectorGraph
    phases: tuple[str, ...] = ()
    state: DocumentState = DocumentState.OPEN
    _policies: list[AdvisoryPolicy] = field(default_factory=list["AdvisoryPolicy"], repr=False)
    _dismissed: list[HostCondition] = field(default_factory=list["HostCondition"], repr=False)

    def __post_init__(self) -> None:
        self.graph.bind_listener(self.post)

    @property
    def name(self) -> str:
        return self.path.stem

    @property
    def is_open(self) -> bool:
        return self.state is not DocumentState.CLOSED

    @property
    def dismissed(self) -> tuple[HostCondition, ...]:
        return tuple(self._dismissed)

    def post(self, condition: HostCondition) -> None:
        """Route a host condition; raises when nothing dismisses it."""

        if condition.severity is Severity.ERROR:
            raise FatalHostConditionError(condition)
        for policy in reversed(self._policies):
            if policy.resolve(condition) is Resolution.DISMISS:
                self._dismissed.append(condition)
                log.debug("Dismissed advisory in %s: %s", self.name, condition.message)
                return
        raise UnhandledAdvisoryError(condition)

    def install_policy(self, policy: AdvisoryPolicy) -> None:
        self._policies.append(policy)

    def uninstall_policy(self, policy: AdvisoryPolicy) -> None:
        # identity, not equality: two policies may compare equal
        self._policies = [installed for installed in self._policies if installed is not policy]

    def mark_dirty(self) -> None:
        if self.is_open:
            self.state = DocumentState.DIRTY

    def mark_saved(self) -> None:
        if self.is_open:
            self.state = DocumentState.SAVED

    def mark_closed(self) -> None:
        self.state = DocumentState.CLOSED
        self._policies.clear()
        self.graph.bind_listener(None)
