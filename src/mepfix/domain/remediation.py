"""Sever subsystem connections and prune evacuated subsystems.

Responsibilities of this stage:
- find every subsystem reachable from the target equipment
- sever each peer link of each connected subsystem connector, one by one
- optionally sweep whole equipment categories (pipes, ducts) free of links
- apply the retention policy and delete subsystems that carry no live
  connection anywhere in their membership

Per-link failures are logged and counted; the run continues with the next
link. Host conditions that escalate (unhandled advisories, fatal errors) are
not per-link failures: they propagate so the enclosing mutation scope rolls
back.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING

from mepfix.domain.detection import DEFAULT_MONITORED_CATEGORY
from mepfix.domain.model import EquipmentCategory, HostConditionError

if TYPE_CHECKING:
    from collections.abc import Iterable

    from mepfix.domain.model import ConnectorGraph, Document, ElementId, Subsystem

log = getLogger(__name__)


class RetentionScope(StrEnum):
    """Which live connectors on a member block deletion of a subsystem."""

    ANY_CONNECTOR = "any-connector"
    SUBSYSTEM_ONLY = "subsystem-only"


class RemediationTarget(StrEnum):
    IMPLICATED = "implicated"
    CATEGORY = "category"


@dataclass(frozen=True, slots=True)
class RetentionPolicy:
    """Decide whether a severed subsystem may be deleted."""

    scope: RetentionScope = RetentionScope.ANY_CONNECTOR

    def should_delete(self, graph: ConnectorGraph, subsystem: Subsystem) -> bool:
        own_connectors = set(subsystem.connector_manager.connector_ids)
        if any(graph.is_connected(connector_id) for connector_id in own_connectors):
            return False
        within = None if self.scope is RetentionScope.ANY_CONNECTOR else own_connectors
        return not any(
            graph.has_live_connector(member.id, within=within)
            for member in graph.members_of(subsystem.id)
        )


@dataclass(frozen=True, slots=True)
class RemediationPlan:
    target: RemediationTarget = RemediationTarget.IMPLICATED
    category: EquipmentCategory = DEFAULT_MONITORED_CATEGORY
    sweep_categories: frozenset[EquipmentCategory] = frozenset()
    retention: RetentionPolicy = field(default_factory=RetentionPolicy)


@dataclass(frozen=True, slots=True)
class LinkFailure:
    connector_id: ElementId
    peer_id: ElementId
    message: str


@dataclass(slots=True)
class RemediationResult:
    """Summary of in-memory mutations performed by the remediator."""

    subsystems_visited: int = 0
    links_severed: int = 0
    failed_links: list[LinkFailure] = field(default_factory=list[LinkFailure])
    deleted_subsystems: list[ElementId] = field(default_factory=list["ElementId"])
    retained_subsystems: list[ElementId] = field(default_factory=list["ElementId"])

    @property
    def mutated(self) -> bool:
        return bool(self.links_severed or self.deleted_subsystems)

    def describe(self) -> str:
        return (
            f"subsystems={self.subsystems_visited}, severed={self.links_severed}, "
            f"failed={len(self.failed_links)}, deleted={len(self.deleted_subsystems)}, "
            f"retained={len(self.retained_subsystems)}"
        )


@dataclass(slots=True)
class ConnectorGraphRemediator:
    """Run the sever-then-prune algorithm on one open document."""

    plan: RemediationPlan = field(default_factory=RemediationPlan)

    def target_equipment(
        self,
        document: Document,
        implicated: Iterable[ElementId] = (),
    ) -> tuple[ElementId, ...]:
        if self.plan.target is RemediationTarget.CATEGORY:
            return tuple(item.id for item in document.graph.equipment_of(self.plan.category))
        return tuple(sorted(set(implicated)))

    def remediate(
        self,
        document: Document,
        equipment_ids: Iterable[ElementId],
    ) -> RemediationResult:
        graph = document.graph
        result = RemediationResult()

        subsystems = reachable_subsystems(graph, equipment_ids)
        result.subsystems_visited = len(subsystems)

        for subsystem_id in subsystems:
            subsystem = graph.subsystem(subsystem_id)
            if subsystem is None:
                continue
            self._sever_all(
                graph,
                (connector.id for connector in graph.connectors_of(subsystem.id)),
                result,
            )

        for category in sorted(self.plan.sweep_categories):
            for equipment in graph.equipment_of(category):
                self._sever_all(
                    graph,
                    (connector.id for connector in graph.connectors_of(equipment.id)),
                    result,
                )

        for subsystem_id in subsystems:
            subsystem = graph.subsystem(subsystem_id)
            if subsystem is None:
                continue
            if self.plan.retention.should_delete(graph, subsystem):
                graph.delete_subsystem(subsystem_id)
                result.deleted_subsystems.append(subsystem_id)
                log.info("Deleted subsystem %s in %s", subsystem.label, document.name)
            else:
                result.retained_subsystems.append(subsystem_id)
                log.debug("Retained subsystem %s in %s", subsystem.label, document.name)

        return result

    def _sever_all(
        self,
        graph: ConnectorGraph,
        connector_ids: Iterable[ElementId],
        result: RemediationResult,
    ) -> None:
        for connector_id in list(connector_ids):
            if not graph.is_connected(connector_id):
                continue
            for peer_id in graph.peers(connector_id):
                try:
                    if graph.disconnect(connector_id, peer_id):
                        result.links_severed += 1
                except HostConditionError:
                    raise
                except Exception as exc:
                    log.exception(
                        "Failed to disconnect connector %s from %s", connector_id, peer_id
                    )
                    result.failed_links.append(
                        LinkFailure(connector_id=connector_id, peer_id=peer_id, message=str(exc))
                    )


def reachable_subsystems(
    graph: ConnectorGraph,
    equipment_ids: Iterable[ElementId],
) -> tuple[ElementId, ...]:
    """Ids of subsystems serving any of the given equipment, ascending."""

    found: set[ElementId] = set()
    for equipment_id in equipment_ids:
        found.update(subsystem.id for subsystem in graph.subsystems_serving(equipment_id))
    return tuple(sorted(found))
