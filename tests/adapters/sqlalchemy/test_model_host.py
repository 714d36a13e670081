from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine, select

from mepfix.adapters.sqlalchemy import SqlAlchemyModelHost, create_model_file, has_model_tables
from mepfix.adapters.sqlalchemy.mappings import document_info_table
from mepfix.domain.model import DocumentState
from mepfix.domain.ports import DocumentOpenError, HostBusyError
from mepfix.domain.transactions import (
    AdvisorySuppressionScope,
    DismissAdvisories,
    MutationScope,
)

from tests.helpers.graphs import DEFAULT_PHASES, PanelCircuit, add_shared_circuit

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture
def model_file(tmp_path: Path, panel_circuit: PanelCircuit) -> Path:
    add_shared_circuit(panel_circuit)
    return create_model_file(
        tmp_path / "tower.emodel", panel_circuit.graph, phases=DEFAULT_PHASES
    )


def test_open_loads_the_stored_graph(model_file: Path, panel_circuit: PanelCircuit) -> None:
    host = SqlAlchemyModelHost()

    document = host.open_document(model_file)
    try:
        assert document.graph.dumps() == panel_circuit.graph.dumps()
        assert document.phases == DEFAULT_PHASES
        assert document.state is DocumentState.OPEN
        assert document.name == "tower"
    finally:
        host.close(document)

    assert document.state is DocumentState.CLOSED
    assert host.active_document is None


def test_only_one_document_may_be_open(model_file: Path, tmp_path: Path) -> None:
    other = create_model_file(tmp_path / "other.emodel")
    host = SqlAlchemyModelHost()
    document = host.open_document(model_file)

    with pytest.raises(HostBusyError):
        host.open_document(other)

    host.close(document)
    second = host.open_document(other)
    host.close(second)


def test_missing_file_cannot_be_opened(tmp_path: Path) -> None:
    with pytest.raises(DocumentOpenError, match="not found"):
        SqlAlchemyModelHost().open_document(tmp_path / "missing.emodel")


def test_corrupt_file_cannot_be_opened(tmp_path: Path) -> None:
    path = tmp_path / "broken.emodel"
    path.write_bytes(b"this is not a model file at all" * 10)
    host = SqlAlchemyModelHost()

    with pytest.raises(DocumentOpenError):
        host.open_document(path)
    assert host.active_document is None


def test_empty_database_is_not_a_model_file(tmp_path: Path) -> None:
    path = tmp_path / "empty.emodel"
    engine = create_engine(f"sqlite:///{path}")
    with engine.begin() as connection:
        connection.exec_driver_sql("CREATE TABLE unrelated (id INTEGER)")
    engine.dispose()

    with pytest.raises(DocumentOpenError, match="not a model file"):
        SqlAlchemyModelHost().open_document(path)


def test_save_persists_committed_mutations(model_file: Path, panel_circuit: PanelCircuit) -> None:
    host = SqlAlchemyModelHost()
    document = host.open_document(model_file)
    with (
        AdvisorySuppressionScope(document, DismissAdvisories()),
        MutationScope(document) as scope,
    ):
        document.graph.disconnect(
            panel_circuit.panel_connector.id, panel_circuit.circuit_supply.id
        )
        scope.commit()
    expected = document.graph.dumps()
    host.save(document)
    assert document.state is DocumentState.SAVED
    host.close(document)

    reopened = host.open_document(model_file)
    try:
        assert reopened.graph.dumps() == expected
        assert not reopened.graph.is_linked(
            panel_circuit.panel_connector.id, panel_circuit.circuit_supply.id
        )
    finally:
        host.close(reopened)

    engine = create_engine(f"sqlite:///{model_file}")
    try:
        with engine.connect() as connection:
            assert has_model_tables(connection)
            saved_at = connection.execute(select(document_info_table.c.saved_at)).scalar_one()
    finally:
        engine.dispose()
    assert saved_at is not None
    assert saved_at.tzinfo is not None


def test_close_discards_unsaved_changes(model_file: Path, panel_circuit: PanelCircuit) -> None:
    host = SqlAlchemyModelHost()
    document = host.open_document(model_file)
    original = document.graph.dumps()
    document.install_policy(DismissAdvisories())
    document.graph.disconnect(panel_circuit.panel_connector.id, panel_circuit.circuit_supply.id)
    document.mark_dirty()

    host.close(document, discard_changes=True)

    reopened = host.open_document(model_file)
    try:
        assert reopened.graph.dumps() == original
    finally:
        host.close(reopened)


def test_close_can_keep_changes(model_file: Path, panel_circuit: PanelCircuit) -> None:
    host = SqlAlchemyModelHost()
    document = host.open_document(model_file)
    document.install_policy(DismissAdvisories())
    document.graph.disconnect(panel_circuit.panel_connector.id, panel_circuit.circuit_supply.id)
    document.mark_dirty()
    expected = document.graph.dumps()

    host.close(document, discard_changes=False)

    reopened = host.open_document(model_file)
    try:
        assert reopened.graph.dumps() == expected
    finally:
        host.close(reopened)


def test_save_rejects_documents_of_another_host(model_file: Path) -> None:
    first = SqlAlchemyModelHost()
    document = first.open_document(model_file)
    try:
        with pytest.raises(DocumentOpenError):
            SqlAlchemyModelHost().save(document)
    finally:
        first.close(document)
