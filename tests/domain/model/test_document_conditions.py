from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import pytest

from mepfix.domain.model import (
    ConnectorGraph,
    Document,
    DocumentState,
    FatalHostConditionError,
    HostCondition,
    Resolution,
    Severity,
    UnhandledAdvisoryError,
)


@dataclass(slots=True)
class _FixedPolicy:
    resolution: Resolution
    seen: list[HostCondition] = field(default_factory=list[HostCondition])

    def resolve(self, condition: HostCondition) -> Resolution:
        self.seen.append(condition)
        return self.resolution


def _advisory() -> HostCondition:
    return HostCondition(severity=Severity.WARNING, message="Connection broken")


def _document() -> Document:
    return Document(path=Path("model.emodel"), graph=ConnectorGraph())


def test_advisory_without_policy_is_unhandled() -> None:
    document = _document()

    with pytest.raises(UnhandledAdvisoryError) as excinfo:
        document.post(_advisory())

    assert excinfo.value.condition.message == "Connection broken"


def test_innermost_policy_decides_first() -> None:
    document = _document()
    outer = _FixedPolicy(Resolution.ESCALATE)
    inner = _FixedPolicy(Resolution.DISMISS)
    document.install_policy(outer)
    document.install_policy(inner)

    document.post(_advisory())

    assert len(inner.seen) == 1
    assert outer.seen == []
    assert document.dismissed == (_advisory(),)


def test_error_conditions_never_reach_policies() -> None:
    document = _document()
    policy = _FixedPolicy(Resolution.DISMISS)
    document.install_policy(policy)

    with pytest.raises(FatalHostConditionError):
        document.post(HostCondition(severity=Severity.ERROR, message="Element is corrupt"))

    assert policy.seen == []


def test_uninstalled_policy_stops_dismissing() -> None:
    document = _document()
    policy = _FixedPolicy(Resolution.DISMISS)
    document.install_policy(policy)
    document.uninstall_policy(policy)

    with pytest.raises(UnhandledAdvisoryError):
        document.post(_advisory())


def test_state_transitions() -> None:
    document = _document()
    assert document.state is DocumentState.OPEN

    document.mark_dirty()
    assert document.state is DocumentState.DIRTY
    document.mark_saved()
    assert document.state is DocumentState.SAVED

    document.mark_closed()
    assert not document.is_open
    document.mark_dirty()
    assert document.state is DocumentState.CLOSED


def test_closing_unbinds_the_graph_listener() -> None:
    graph = ConnectorGraph()
    document = Document(path=Path("model.emodel"), graph=graph)
    document.mark_closed()

    assert graph._listener is None  # noqa: SLF001  # pyright: ignore[reportPrivateUsage]
