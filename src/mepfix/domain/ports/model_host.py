"""Port for the application that owns model documents."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from pathlib import Path

    from mepfix.domain.model import Document


class DocumentOpenError(RuntimeError):
    """Raised when a model file cannot be opened (unreadable, corrupt, missing)."""


class HostBusyError(DocumentOpenError):
    """Raised when a second document is opened while one is still open."""


class DocumentSaveError(RuntimeError):
    """Raised when a document cannot be persisted."""


@runtime_checkable
class ModelHost(Protocol):
    """Opens, persists and releases documents; one open document at a time."""

    def open_document(self, path: Path) -> Document: ...

    def save(self, document: Document) -> None: ...

    def close(self, document: Document, *, discard_changes: bool = True) -> None: ...
