"""Model host backed by SQLite model files.

Only one document may be open at a time. Opening loads the whole graph into
memory; the file is only written again by :meth:`SqlAlchemyModelHost.save`.
"""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError

from mepfix.adapters.sqlalchemy.mappings import create_all_tables, has_model_tables
from mepfix.adapters.sqlalchemy.repositories import SqlAlchemyGraphRepository
from mepfix.domain.model import ConnectorGraph, Document, DocumentState, GraphIntegrityError
from mepfix.domain.ports import DocumentOpenError, DocumentSaveError, HostBusyError

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from sqlalchemy.engine import Engine

log = getLogger(__name__)


def _engine_for(path: Path) -> Engine:
    return create_engine(f"sqlite:///{path}", future=True)


@dataclass(slots=True)
class _OpenHandle:
    document: Document
    engine: Engine


class SqlAlchemyModelHost:
    """Opens, saves and closes SQLite model files."""

    def __init__(self) -> None:
        self._handle: _OpenHandle | None = None

    @property
    def active_document(self) -> Document | None:
        return self._handle.document if self._handle is not None else None

    def open_document(self, path: Path) -> Document:
        if self._handle is not None:
            raise HostBusyError(
                f"Cannot open {path}: {self._handle.document.path} is still open"
            )
        if not path.is_file():
            raise DocumentOpenError(f"Model file not found: {path}")

        engine = _engine_for(path)
        try:
            with engine.connect() as connection:
                if not has_model_tables(connection):
                    raise DocumentOpenError(f"{path} is not a model file")
                repository = SqlAlchemyGraphRepository(connection)
                graph = repository.load_graph()
                phases = repository.load_phases()
        except DocumentOpenError:
            engine.dispose()
            raise
        except (SQLAlchemyError, GraphIntegrityError, ValueError) as exc:
            engine.dispose()
            raise DocumentOpenError(f"Cannot read model file {path}: {exc}") from exc

        document = Document(path=path, graph=graph, phases=phases)
        self._handle = _OpenHandle(document=document, engine=engine)
        log.debug("Opened %s (%d element(s))", path, len(graph.equipment))
        return document

    def save(self, document: Document) -> None:
        handle = self._require_handle(document)
        try:
            with handle.engine.begin() as connection:
                SqlAlchemyGraphRepository(connection).replace(
                    document.graph, phases=document.phases, title=document.name
                )
        except SQLAlchemyError as exc:
            raise DocumentSaveError(f"Cannot save {document.path}: {exc}") from exc
        document.mark_saved()

    def close(self, document: Document, *, discard_changes: bool = True) -> None:
        handle = self._require_handle(document)
        try:
            if not discard_changes and document.state is DocumentState.DIRTY:
                self.save(document)
        finally:
            handle.engine.dispose()
            document.mark_closed()
            self._handle = None
            log.debug("Closed %s", document.path)

    def _require_handle(self, document: Document) -> _OpenHandle:
        if self._handle is None or self._handle.document is not document:
            raise DocumentOpenError(f"{document.path} is not open in this host")
        return self._handle


def create_model_file(
    path: Path,
    graph: ConnectorGraph | None = None,
    *,
    phases: Sequence[str] = (),
) -> Path:
    """Write a new model file; used to author fixtures and sample data."""

    engine = _engine_for(path)
    try:
        with engine.begin() as connection:
            create_all_tables(connection)
            SqlAlchemyGraphRepository(connection).replace(
                graph or ConnectorGraph(), phases=phases, title=path.stem
            )
    finally:
        engine.dispose()
    return path
