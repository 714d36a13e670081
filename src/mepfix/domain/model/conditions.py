"""Conditions reported by the model host while the graph is mutated."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, TypeAlias, runtime_checkable

from mepfix.domain.model.enums import Resolution, Severity

if TYPE_CHECKING:
    from collections.abc import Callable

    from mepfix.domain.model.primitives import ElementId


@dataclass(frozen=True, slots=True)
class HostCondition:
    """A structural warning (advisory) or a fatal error raised by the host."""

    severity: Severity
    message: str
    element_ids: tuple[ElementId, ...] = ()

    def __str__(self) -> str:
        return f"{self.severity}: {self.message}"


ConditionListener: TypeAlias = "Callable[[HostCondition], None]"


@runtime_checkable
class AdvisoryPolicy(Protocol):
    """Capability deciding what happens to an advisory raised during mutation."""

    def resolve(self, condition: HostCondition) -> Resolution: ...


class HostConditionError(RuntimeError):
    """Base class for conditions that must abort the current mutation."""

    def __init__(self, condition: HostCondition) -> None:
        super().__init__(str(condition))
        self.condition = condition


class UnhandledAdvisoryError(HostConditionError):
    """Raised when an advisory is posted and no installed policy dismisses it."""


class FatalHostConditionError(HostConditionError):
    """Raised for ERROR severity conditions; these are never dismissed."""


class GraphIntegrityError(ValueError):
    """Raised when a graph operation references elements that cannot take part in it."""


class ConnectorLockedError(GraphIntegrityError):
    """Raised when disconnecting a link whose connector is pinned."""
