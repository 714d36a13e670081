"""Connector graph arena for one model document.

All elements live in id-keyed dicts and peer links are kept as an adjacency
map of connector ids. Nothing holds a direct reference to another element, so
deleting a subsystem or severing a link is a pair of dict/set operations and a
stale id simply resolves to ``None``.

Link rules:
- links are symmetric: ``b in links[a]`` iff ``a in links[b]``
- an equipment connector linked to a subsystem connector makes the equipment
  a member of that subsystem; membership is kept after the link is severed
- severing a live link posts a WARNING condition to the bound listener
  *before* the link is removed, so an escalated advisory leaves the graph
  untouched
"""

from __future__ import annotations

import copy
import json
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from mepfix.domain.model.conditions import (
    ConnectorLockedError,
    GraphIntegrityError,
    HostCondition,
)
from mepfix.domain.model.elements import Connector, Equipment, Subsystem
from mepfix.domain.model.enums import EntityType, EquipmentCategory, Severity, SubsystemKind

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from mepfix.domain.model.conditions import ConditionListener
    from mepfix.domain.model.primitives import ElementId


@dataclass(frozen=True, slots=True)
class GraphSnapshot:
    """Opaque memento produced by :meth:`ConnectorGraph.snapshot`."""

    equipment: dict[ElementId, Equipment]
    connectors: dict[ElementId, Connector]
    subsystems: dict[ElementId, Subsystem]
    links: dict[ElementId, set[ElementId]]
    next_id: int


@dataclass(slots=True)
class ConnectorGraph:
    """Arena of equipment, connectors and subsystems with index-based links."""

    _equipment: dict[ElementId, Equipment] = field(
        default_factory=dict["ElementId", "Equipment"], repr=False
    )
    _connectors: dict[ElementId, Connector] = field(
        default_factory=dict["ElementId", "Connector"], repr=False
    )
    _subsystems: dict[ElementId, Subsystem] = field(
        default_factory=dict["ElementId", "Subsystem"], repr=False
    )
    _links: dict[ElementId, set[ElementId]] = field(
        default_factory=dict["ElementId", "set[ElementId]"], repr=False
    )
    _next_id: int = 1
    _listener: ConditionListener | None = field(default=None, repr=False)

    # Arena -------------------------------------------------------------------

    def bind_listener(self, listener: ConditionListener | None) -> None:
        self._listener = listener

    def _claim_id(self, element_id: ElementId | None) -> ElementId:
        if element_id is None:
            element_id = self._next_id
        if element_id <= 0:
            raise GraphIntegrityError(f"element ids must be positive, got {element_id}")
        if self._exists(element_id):
            raise GraphIntegrityError(f"element id {element_id} is already in use")
        self._next_id = max(self._next_id, element_id + 1)
        return element_id

    def _exists(self, element_id: ElementId) -> bool:
        return (
            element_id in self._equipment
            or element_id in self._connectors
            or element_id in self._subsystems
        )

    def add_equipment(
        self,
        *,
        name: str,
        category: EquipmentCategory,
        parameters: Mapping[str, float] | None = None,
        element_id: ElementId | None = None,
    ) -> Equipment:
        equipment = Equipment(
            id=self._claim_id(element_id),
            name=name,
            category=category,
            _parameters=dict(parameters or {}),
        )
        self._equipment[equipment.id] = equipment
        return equipment

    def add_subsystem(
        self,
        *,
        name: str,
        kind: SubsystemKind,
        element_id: ElementId | None = None,
    ) -> Subsystem:
        subsystem = Subsystem(id=self._claim_id(element_id), name=name, kind=kind)
        self._subsystems[subsystem.id] = subsystem
        return subsystem

    def add_connector(
        self,
        owner: Equipment | Subsystem,
        *,
        name: str = "",
        locked: bool = False,
        element_id: ElementId | None = None,
    ) -> Connector:
        if self._owner(owner.id) is not owner:
            raise GraphIntegrityError(f"{owner.label} is not part of this graph")
        connector = Connector(
            id=self._claim_id(element_id),
            name=name,
            owner_id=owner.id,
            owner_type=owner.entity_type,
            locked=locked,
        )
        self._connectors[connector.id] = connector
        self._links[connector.id] = set()
        owner.connector_manager._attach(connector.id)  # pyright: ignore[reportPrivateUsage] # noqa: SLF001
        return connector

    def add_member(self, subsystem: Subsystem, equipment: Equipment) -> None:
        """Record ``equipment`` as served by ``subsystem`` without linking anything."""

        if self._subsystems.get(subsystem.id) is not subsystem:
            raise GraphIntegrityError(f"{subsystem.label} is not part of this graph")
        if self._equipment.get(equipment.id) is not equipment:
            raise GraphIntegrityError(f"{equipment.label} is not part of this graph")
        subsystem._add_member(equipment.id)  # pyright: ignore[reportPrivateUsage] # noqa: SLF001

    # Lookups -----------------------------------------------------------------

    @property
    def equipment(self) -> tuple[Equipment, ...]:
        return tuple(self._equipment[key] for key in sorted(self._equipment))

    @property
    def connectors(self) -> tuple[Connector, ...]:
        return tuple(self._connectors[key] for key in sorted(self._connectors))

    @property
    def subsystems(self) -> tuple[Subsystem, ...]:
        return tuple(self._subsystems[key] for key in sorted(self._subsystems))

    def equipment_of(self, category: EquipmentCategory) -> tuple[Equipment, ...]:
        return tuple(item for item in self.equipment if item.category is category)

    def get_equipment(self, element_id: ElementId) -> Equipment | None:
        return self._equipment.get(element_id)

    def connector(self, element_id: ElementId) -> Connector | None:
        return self._connectors.get(element_id)

    def subsystem(self, element_id: ElementId) -> Subsystem | None:
        return self._subsystems.get(element_id)

    def _owner(self, element_id: ElementId) -> Equipment | Subsystem | None:
        return self._equipment.get(element_id) or self._subsystems.get(element_id)

    def connectors_of(self, owner_id: ElementId) -> tuple[Connector, ...]:
        owner = self._owner(owner_id)
        if owner is None:
            return ()
        return tuple(
            self._connectors[connector_id]
            for connector_id in owner.connector_manager.connector_ids
            if connector_id in self._connectors
        )

    def peers(self, connector_id: ElementId) -> tuple[ElementId, ...]:
        return tuple(
            sorted(peer for peer in self._links.get(connector_id, ()) if peer in self._connectors)
        )

    def is_connected(self, connector_id: ElementId) -> bool:
        return bool(self.peers(connector_id))

    def is_linked(self, first: ElementId, second: ElementId) -> bool:
        return second in self._links.get(first, ()) and second in self._connectors

    def links(self) -> tuple[tuple[ElementId, ElementId], ...]:
        pairs = {
            (min(first, second), max(first, second))
            for first, peers in self._links.items()
            for second in peers
        }
        return tuple(sorted(pairs))

    # Mutation ----------------------------------------------------------------

    def connect(self, first: ElementId, second: ElementId) -> None:
        first_connector = self._require_connector(first)
        second_connector = self._require_connector(second)
        if first == second:
            raise GraphIntegrityError(f"connector {first} cannot be linked to itself")
        if first_connector.owner_id == second_connector.owner_id:
            raise GraphIntegrityError(
                f"connectors {first} and {second} share owner {first_connector.owner_id}"
            )
        self._links[first].add(second)
        self._links[second].add(first)
        self._record_membership(first_connector, second_connector)
        self._record_membership(second_connector, first_connector)

    def disconnect(self, first: ElementId, second: ElementId) -> bool:
        """Sever the link between two connectors.

        Returns ``True`` when a link was removed. Severing an already severed
        pair, or a pair where either side no longer exists, is a no-op.
        """

        if not self.is_linked(first, second):
            return False
        for connector_id in (first, second):
            if self._connectors[connector_id].locked:
                raise ConnectorLockedError(
                    f"connector {connector_id} is locked; cannot disconnect {first} from {second}"
                )
        self._notify(
            HostCondition(
                severity=Severity.WARNING,
                message=f"Connection broken between {first} and {second}",
                element_ids=(first, second),
            )
        )
        self._links[first].discard(second)
        self._links[second].discard(first)
        return True

    def delete_subsystem(self, subsystem_id: ElementId) -> Subsystem:
        """Remove a subsystem together with every connector it owns."""

        subsystem = self._subsystems.get(subsystem_id)
        if subsystem is None:
            raise GraphIntegrityError(f"subsystem {subsystem_id} does not exist")
        for connector_id in subsystem.connector_manager.connector_ids:
            for peer in self._links.pop(connector_id, set()):
                self._links.get(peer, set()).discard(connector_id)
            self._connectors.pop(connector_id, None)
        del self._subsystems[subsystem_id]
        return subsystem

    def _require_connector(self, connector_id: ElementId) -> Connector:
        connector = self._connectors.get(connector_id)
        if connector is None:
            raise GraphIntegrityError(f"connector {connector_id} does not exist")
        return connector

    def _record_membership(self, own: Connector, other: Connector) -> None:
        if own.owner_type is not EntityType.SUBSYSTEM:
            return
        if other.owner_type is not EntityType.EQUIPMENT:
            return
        self._subsystems[own.owner_id]._add_member(other.owner_id)  # pyright: ignore[reportPrivateUsage] # noqa: SLF001

    def _notify(self, condition: HostCondition) -> None:
        if self._listener is not None:
            self._listener(condition)

    # Derived views -----------------------------------------------------------

    def members_of(self, subsystem_id: ElementId) -> tuple[Equipment, ...]:
        subsystem = self._subsystems.get(subsystem_id)
        if subsystem is None:
            return ()
        return tuple(
            self._equipment[member_id]
            for member_id in sorted(subsystem.member_ids)
            if member_id in self._equipment
        )

    def subsystems_serving(self, equipment_id: ElementId) -> tuple[Subsystem, ...]:
        """Subsystems that list the equipment as a member or are linked to it."""

        found: set[ElementId] = {
            subsystem.id
            for subsystem in self._subsystems.values()
            if equipment_id in subsystem.member_ids
        }
        for connector in self.connectors_of(equipment_id):
            for peer in self.peers(connector.id):
                peer_connector = self._connectors[peer]
                if peer_connector.owner_type is EntityType.SUBSYSTEM:
                    found.add(peer_connector.owner_id)
        return tuple(self._subsystems[key] for key in sorted(found) if key in self._subsystems)

    def has_live_connector(
        self,
        equipment_id: ElementId,
        *,
        within: Iterable[ElementId] | None = None,
    ) -> bool:
        """Whether any connector of the equipment still has a peer.

        ``within`` restricts the peers that count to the given connector ids.
        """

        allowed = set(within) if within is not None else None
        for connector in self.connectors_of(equipment_id):
            peers = self.peers(connector.id)
            if allowed is None and peers:
                return True
            if allowed is not None and any(peer in allowed for peer in peers):
                return True
        return False

    def _linked_equipment(self, subsystem_id: ElementId) -> set[ElementId]:
        linked: set[ElementId] = set()
        for connector in self.connectors_of(subsystem_id):
            for peer in self.peers(connector.id):
                peer_connector = self._connectors[peer]
                if peer_connector.owner_type is EntityType.EQUIPMENT:
                    linked.add(peer_connector.owner_id)
        return linked

    def mediated_load(self, subsystem_id: ElementId) -> float:
        """Apparent load of every equipment node live-linked to the subsystem."""

        return sum(
            self._equipment[equipment_id].apparent_load
            for equipment_id in self._linked_equipment(subsystem_id)
            if equipment_id in self._equipment
        )

    def total_connected_load(self, equipment_id: ElementId) -> float:
        """Load served through the subsystems the equipment is live-linked to."""

        served: set[ElementId] = set()
        for subsystem in self.subsystems_serving(equipment_id):
            linked = self._linked_equipment(subsystem.id)
            if equipment_id in linked:
                served.update(linked)
        served.discard(equipment_id)
        return sum(self._equipment[key].apparent_load for key in served)

    # Memento -----------------------------------------------------------------

    def snapshot(self) -> GraphSnapshot:
        return GraphSnapshot(
            equipment=copy.deepcopy(self._equipment),
            connectors=copy.deepcopy(self._connectors),
            subsystems=copy.deepcopy(self._subsystems),
            links={key: set(peers) for key, peers in self._links.items()},
            next_id=self._next_id,
        )

    def restore(self, snapshot: GraphSnapshot) -> None:
        self._equipment = copy.deepcopy(snapshot.equipment)
        self._connectors = copy.deepcopy(snapshot.connectors)
        self._subsystems = copy.deepcopy(snapshot.subsystems)
        self._links = {key: set(peers) for key, peers in snapshot.links.items()}
        self._next_id = snapshot.next_id

    def to_payload(self) -> dict[str, Any]:
        """Plain, deterministically ordered representation of the graph."""

        return {
            "next_id": self._next_id,
            "equipment": [
                {
                    "id": item.id,
                    "name": item.name,
                    "category": str(item.category),
                    "parameters": dict(sorted(item.parameters.items())),
                    "connectors": sorted(item.connector_manager.connector_ids),
                }
                for item in self.equipment
            ],
            "subsystems": [
                {
                    "id": item.id,
                    "name": item.name,
                    "kind": str(item.kind),
                    "connectors": sorted(item.connector_manager.connector_ids),
                    "members": sorted(item.member_ids),
                }
                for item in self.subsystems
            ],
            "connectors": [
                {
                    "id": item.id,
                    "name": item.name,
                    "owner_id": item.owner_id,
                    "owner_type": str(item.owner_type),
                    "locked": item.locked,
                }
                for item in self.connectors
            ],
            "links": [list(pair) for pair in self.links()],
        }

    def dumps(self) -> bytes:
        return json.dumps(self.to_payload(), sort_keys=True, separators=(",", ":")).encode()

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> ConnectorGraph:
        """Rebuild a graph from :meth:`to_payload` output."""

        graph = cls()
        for item in payload.get("equipment", ()):
            graph.add_equipment(
                name=item["name"],
                category=EquipmentCategory(item["category"]),
                parameters=item.get("parameters") or {},
                element_id=item["id"],
            )
        for item in payload.get("subsystems", ()):
            graph.add_subsystem(
                name=item["name"],
                kind=SubsystemKind(item["kind"]),
                element_id=item["id"],
            )
        for item in payload.get("connectors", ()):
            owner = graph._owner(item["owner_id"])  # noqa: SLF001
            if owner is None:
                raise GraphIntegrityError(
                    f"connector {item['id']} references missing owner {item['owner_id']}"
                )
            graph.add_connector(
                owner,
                name=item.get("name", ""),
                locked=bool(item.get("locked", False)),
                element_id=item["id"],
            )
        for item in payload.get("subsystems", ()):
            subsystem = graph._subsystems[item["id"]]  # noqa: SLF001
            for member_id in item.get("members", ()):
                equipment = graph.get_equipment(member_id)
                if equipment is not None:
                    graph.add_member(subsystem, equipment)
        for first, second in payload.get("links", ()):
            graph.connect(first, second)
        graph._next_id = max(graph._next_id, int(payload.get("next_id", 1)))  # noqa: SLF001
        return graph
