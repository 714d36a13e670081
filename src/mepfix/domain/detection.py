"""Capacity-violation detection over an open document."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from mepfix.domain.model import EquipmentCategory

if TYPE_CHECKING:
    from collections.abc import Iterator

    from mepfix.domain.model import ConnectorGraph, Document, ElementId, Equipment

DEFAULT_MONITORED_CATEGORY = EquipmentCategory.ELECTRICAL_EQUIPMENT


@dataclass(frozen=True, slots=True)
class Mismatch:
    """Equipment whose connected load exceeds its capacity."""

    equipment_id: ElementId
    equipment_name: str
    total_load: float
    capacity: float

    @property
    def excess(self) -> float:
        return self.total_load - self.capacity


def is_overloaded(graph: ConnectorGraph, equipment: Equipment) -> bool:
    """Strict ``load > capacity``; missing capacity reads as 0."""

    return graph.total_connected_load(equipment.id) > equipment.capacity


def detect_mismatches(
    document: Document,
    *,
    category: EquipmentCategory = DEFAULT_MONITORED_CATEGORY,
) -> Iterator[Mismatch]:
    """Lazily yield one mismatch per overloaded equipment node of ``category``.

    Read-only: the graph is never mutated. An empty sequence is the common case.
    """

    graph = document.graph
    for equipment in graph.equipment_of(category):
        total_load = graph.total_connected_load(equipment.id)
        if total_load > equipment.capacity:
            yield Mismatch(
                equipment_id=equipment.id,
                equipment_name=equipment.name,
                total_load=total_load,
                capacity=equipment.capacity,
            )
