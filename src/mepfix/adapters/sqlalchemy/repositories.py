"""Load and persist a connector graph through a SQLAlchemy connection."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import delete, insert, select

from mepfix.adapters.sqlalchemy.mappings import (
    GRAPH_TABLES,
    SCHEMA_VERSION,
    connector_link_table,
    connector_table,
    document_info_table,
    equipment_parameter_table,
    equipment_table,
    phase_table,
    subsystem_member_table,
    subsystem_table,
)
from mepfix.domain.model import ConnectorGraph

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy.engine import Connection


class SqlAlchemyGraphRepository:
    """Reads and replaces the single document stored in a model file."""

    def __init__(self, connection: Connection) -> None:
        self.connection = connection

    def load_phases(self) -> tuple[str, ...]:
        rows = self.connection.execute(
            select(phase_table.c.name).order_by(phase_table.c.position)
        )
        return tuple(rows.scalars())

    def load_graph(self) -> ConnectorGraph:
        return ConnectorGraph.from_payload(self.load_payload())

    def load_payload(self) -> dict[str, Any]:
        conn = self.connection
        info = conn.execute(select(document_info_table.c.next_id)).scalar_one_or_none()

        parameters: dict[int, dict[str, float]] = {}
        for row in conn.execute(select(equipment_parameter_table)):
            parameters.setdefault(row.equipment_id, {})[row.name] = row.value

        members: dict[int, list[int]] = {}
        for row in conn.execute(
            select(subsystem_member_table).order_by(subsystem_member_table.c.equipment_id)
        ):
            members.setdefault(row.subsystem_id, []).append(row.equipment_id)

        return {
            "next_id": info or 1,
            "equipment": [
                {
                    "id": row.id,
                    "name": row.name,
                    "category": str(row.category),
                    "parameters": parameters.get(row.id, {}),
                }
                for row in conn.execute(select(equipment_table).order_by(equipment_table.c.id))
            ],
            "subsystems": [
                {
                    "id": row.id,
                    "name": row.name,
                    "kind": str(row.kind),
                    "members": members.get(row.id, []),
                }
                for row in conn.execute(select(subsystem_table).order_by(subsystem_table.c.id))
            ],
            "connectors": [
                {
                    "id": row.id,
                    "name": row.name,
                    "owner_id": row.owner_id,
                    "owner_type": str(row.owner_type),
                    "locked": bool(row.locked),
                }
                for row in conn.execute(select(connector_table).order_by(connector_table.c.id))
            ],
            "links": [
                [row.first_id, row.second_id]
                for row in conn.execute(
                    select(connector_link_table).order_by(
                        connector_link_table.c.first_id, connector_link_table.c.second_id
                    )
                )
            ],
        }

    def replace(
        self,
        graph: ConnectorGraph,
        *,
        phases: Sequence[str],
        title: str = "",
    ) -> None:
        """Overwrite the stored document with ``graph``; caller owns the transaction."""

        conn = self.connection
        for table in GRAPH_TABLES:
            conn.execute(delete(table))
        conn.execute(delete(document_info_table))

        payload = graph.to_payload()
        conn.execute(
            insert(document_info_table).values(
                id=1,
                schema_version=SCHEMA_VERSION,
                title=title,
                next_id=payload["next_id"],
                saved_at=datetime.now(UTC),
            )
        )
        self._insert(
            phase_table,
            [{"position": index, "name": name} for index, name in enumerate(phases)],
        )
        self._insert(
            equipment_table,
            [
                {"id": item.id, "name": item.name, "category": item.category}
                for item in graph.equipment
            ],
        )
        self._insert(
            equipment_parameter_table,
            [
                {"equipment_id": item.id, "name": name, "value": value}
                for item in graph.equipment
                for name, value in sorted(item.parameters.items())
            ],
        )
        self._insert(
            subsystem_table,
            [{"id": item.id, "name": item.name, "kind": item.kind} for item in graph.subsystems],
        )
        self._insert(
            subsystem_member_table,
            [
                {"subsystem_id": item.id, "equipment_id": member_id}
                for item in graph.subsystems
                for member_id in sorted(item.member_ids)
                if graph.get_equipment(member_id) is not None
            ],
        )
        self._insert(
            connector_table,
            [
                {
                    "id": item.id,
                    "name": item.name,
                    "owner_id": item.owner_id,
                    "owner_type": item.owner_type,
                    "locked": item.locked,
                }
                for item in graph.connectors
            ],
        )
        self._insert(
            connector_link_table,
            [{"first_id": first, "second_id": second} for first, second in graph.links()],
        )

    def _insert(self, table: Any, rows: list[dict[str, Any]]) -> None:
        if rows:
            self.connection.execute(insert(table), rows)
