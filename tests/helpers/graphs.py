"""Graph builders shared by domain and adapter tests."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from mepfix.domain.model import (
    APPARENT_LOAD,
    CAPACITY,
    ConnectorGraph,
    Document,
    EquipmentCategory,
    SubsystemKind,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from mepfix.domain.model import Connector, Equipment, Subsystem

DEFAULT_PHASES = ("Existing", "New Construction")


@dataclass(frozen=True, slots=True)
class PanelCircuit:
    """A panel feeding one circuit that serves a few fixtures."""

    graph: ConnectorGraph
    panel: Equipment
    circuit: Subsystem
    fixtures: tuple[Equipment, ...]
    panel_connector: Connector
    circuit_supply: Connector
    circuit_loads: Connector
    fixture_connectors: tuple[Connector, ...]


def build_panel_circuit(
    *,
    capacity: float | None = 100.0,
    loads: Sequence[float] = (70.0, 50.0),
    locked_fixture: int | None = None,
    graph: ConnectorGraph | None = None,
    panel_name: str = "Panel A",
) -> PanelCircuit:
    graph = graph or ConnectorGraph()
    panel_parameters = {CAPACITY: capacity} if capacity is not None else {}
    panel = graph.add_equipment(
        name=panel_name,
        category=EquipmentCategory.ELECTRICAL_EQUIPMENT,
        parameters=panel_parameters,
    )
    panel_connector = graph.add_connector(panel, name="supply")
    circuit = graph.add_subsystem(
        name=f"{panel_name} circuit", kind=SubsystemKind.ELECTRICAL_CIRCUIT
    )
    circuit_supply = graph.add_connector(circuit, name="from panel")
    circuit_loads = graph.add_connector(circuit, name="to loads")
    graph.connect(panel_connector.id, circuit_supply.id)

    fixtures: list[Equipment] = []
    fixture_connectors: list[Connector] = []
    for index, load in enumerate(loads):
        fixture = graph.add_equipment(
            name=f"Fixture {index + 1}",
            category=EquipmentCategory.ELECTRICAL_FIXTURE,
            parameters={APPARENT_LOAD: load},
        )
        connector = graph.add_connector(
            fixture, name="power", locked=locked_fixture == index
        )
        graph.connect(connector.id, circuit_loads.id)
        fixtures.append(fixture)
        fixture_connectors.append(connector)

    return PanelCircuit(
        graph=graph,
        panel=panel,
        circuit=circuit,
        fixtures=tuple(fixtures),
        panel_connector=panel_connector,
        circuit_supply=circuit_supply,
        circuit_loads=circuit_loads,
        fixture_connectors=tuple(fixture_connectors),
    )


def add_shared_circuit(layout: PanelCircuit, *, fixture_index: int = -1) -> Subsystem:
    """Serve one fixture from a second circuit through its own connector."""

    graph = layout.graph
    fixture = layout.fixtures[fixture_index]
    other = graph.add_subsystem(name="Emergency circuit", kind=SubsystemKind.ELECTRICAL_CIRCUIT)
    other_connector = graph.add_connector(other, name="to loads")
    fixture_connector = graph.add_connector(fixture, name="emergency power")
    graph.connect(fixture_connector.id, other_connector.id)
    return other


def make_document(
    graph: ConnectorGraph,
    path: Path | str = "model.emodel",
    *,
    phases: Sequence[str] = DEFAULT_PHASES,
) -> Document:
    return Document(path=Path(path), graph=graph, phases=tuple(phases))
