"""Domain port definitions for adapters."""

from __future__ import annotations

from .exporting import DocumentExporter
from .model_host import DocumentOpenError, DocumentSaveError, HostBusyError, ModelHost
from .unit_of_work import MutationUnitOfWork

__all__ = [
    "DocumentExporter",
    "DocumentOpenError",
    "DocumentSaveError",
    "HostBusyError",
    "ModelHost",
    "MutationUnitOfWork",
]
