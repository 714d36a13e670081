"""Translate an open document into an interchange payload."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from .schema import (
    ConnectorRecord,
    EquipmentRecord,
    InterchangeDocument,
    InterchangeHeader,
    QuantitySet,
    SubsystemRecord,
)

if TYPE_CHECKING:
    from mepfix.domain.exporting import ExportConfiguration
    from mepfix.domain.model import Document, Equipment


def _property_sets(
    equipment: Equipment, configuration: ExportConfiguration
) -> dict[str, dict[str, Any]]:
    sets: dict[str, dict[str, Any]] = {}
    if configuration.include_common_property_sets:
        sets["Pset_Common"] = {"Name": equipment.name, "Category": str(equipment.category)}
    if configuration.include_internal_property_sets:
        sets["Internal"] = {"ElementId": equipment.id, **dict(equipment.parameters)}
    return sets


def build_interchange_document(
    document: Document,
    configuration: ExportConfiguration,
    *,
    exported_at: datetime | None = None,
) -> InterchangeDocument:
    graph = document.graph
    header = InterchangeHeader(
        file_version=str(configuration.ifc_version),
        source=document.path.name,
        exported_at=exported_at or datetime.now(UTC),
        phase=configuration.phase_name,
        space_boundaries=int(configuration.space_boundaries),
        site_placement=str(configuration.site_basis),
        options=configuration.as_options(),
    )
    return InterchangeDocument(
        header=header,
        equipment=[
            EquipmentRecord(
                id=item.id,
                name=item.name,
                category=str(item.category),
                connectors=sorted(item.connector_manager.connector_ids),
                quantities=QuantitySet(apparent_load=item.apparent_load, capacity=item.capacity)
                if configuration.export_base_quantities
                else None,
                property_sets=_property_sets(item, configuration),
            )
            for item in graph.equipment
        ],
        subsystems=[
            SubsystemRecord(
                id=item.id,
                name=item.name,
                kind=str(item.kind),
                connectors=sorted(item.connector_manager.connector_ids),
                members=sorted(item.member_ids),
            )
            for item in graph.subsystems
        ],
        connectors=[
            ConnectorRecord(
                id=item.id,
                owner_id=item.owner_id,
                name=item.name,
                peers=list(graph.peers(item.id)),
            )
            for item in graph.connectors
        ],
    )
