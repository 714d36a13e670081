"""Connector graph elements. Ownership lives on the node that holds the manager.

Owners here:
- Equipment owns its Connectors through a ConnectorManager
- Subsystem owns the Connectors it mediates through a ConnectorManager

Peer links between connectors are not stored on the elements; the graph arena
keeps them as an adjacency map keyed by connector id.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, ClassVar

from mepfix.domain.model.entity import Element
from mepfix.domain.model.enums import EntityType
from mepfix.domain.model.primitives import APPARENT_LOAD, CAPACITY, require_non_negative

if TYPE_CHECKING:
    from collections.abc import Mapping

    from mepfix.domain.model.enums import EquipmentCategory, SubsystemKind
    from mepfix.domain.model.primitives import ElementId, ParameterValue


@dataclass(eq=False, kw_only=True)
class ConnectorManager:
    """Ordered set of connector ids owned by one element."""

    _connector_ids: list[ElementId] = field(default_factory=list["ElementId"])

    @property
    def connector_ids(self) -> tuple[ElementId, ...]:
        return tuple(self._connector_ids)

    def __contains__(self, connector_id: object) -> bool:
        return connector_id in self._connector_ids

    def __len__(self) -> int:
        return len(self._connector_ids)

    # Friend primitives (called only by the graph)
    def _attach(self, connector_id: ElementId) -> None:
        if connector_id not in self._connector_ids:
            self._connector_ids.append(connector_id)


@dataclass(eq=False, kw_only=True)
class Equipment(Element):
    """A physical node such as a panel, fixture, pipe or duct segment."""

    ENTITY_TYPE: ClassVar[EntityType] = EntityType.EQUIPMENT

    category: EquipmentCategory
    _parameters: dict[str, ParameterValue] = field(
        default_factory=dict["str", "ParameterValue"], repr=False
    )
    connector_manager: ConnectorManager = field(default_factory=ConnectorManager, repr=False)

    def __post_init__(self) -> None:
        self._parameters = {
            key: require_non_negative(key, value) for key, value in self._parameters.items()
        }

    @property
    def parameters(self) -> Mapping[str, ParameterValue]:
        return dict(self._parameters)

    def parameter(self, name: str) -> ParameterValue:
        """Return a numeric parameter; missing parameters read as 0."""
        return self._parameters.get(name, 0.0)

    def set_parameter(self, name: str, value: float) -> None:
        self._parameters[name] = require_non_negative(name, value)

    @property
    def apparent_load(self) -> ParameterValue:
        return self.parameter(APPARENT_LOAD)

    @property
    def capacity(self) -> ParameterValue:
        return self.parameter(CAPACITY)


@dataclass(eq=False, kw_only=True)
class Connector(Element):
    """Attachment point owned by an equipment node or a subsystem."""

    ENTITY_TYPE: ClassVar[EntityType] = EntityType.CONNECTOR

    owner_id: ElementId
    owner_type: EntityType
    # pinned connectors refuse disconnection
    locked: bool = False


@dataclass(eq=False, kw_only=True)
class Subsystem(Element):
    """Distribution aggregate (circuit, piping or duct system)."""

    ENTITY_TYPE: ClassVar[EntityType] = EntityType.SUBSYSTEM

    kind: SubsystemKind
    connector_manager: ConnectorManager = field(default_factory=ConnectorManager, repr=False)
    _member_ids: list[ElementId] = field(default_factory=list["ElementId"], repr=False)

    @property
    def member_ids(self) -> tuple[ElementId, ...]:
        """Equipment served by this subsystem; survives disconnection."""
        return tuple(self._member_ids)

    def _add_member(self, equipment_id: ElementId) -> None:
        if equipment_id not in self._member_ids:
            self._member_ids.append(equipment_id)
