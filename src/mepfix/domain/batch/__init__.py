"""Batch orchestration of model documents."""

from __future__ import annotations

from .cancellation import CancellationMonitor, CancellationToken
from .context import BatchSettings, DocumentContext
from .orchestrator import (
    BatchEnvironmentError,
    BatchOrchestrator,
    DocumentPipeline,
    default_document_pipeline,
    iter_model_files,
)
from .phases import DetectPhase, DocumentPhase, ExportPhase, RemediatePhase, SavePhase
from .state import RUN_LOGGER_NAME, BatchResult, BatchStatus, DocumentReport, DocumentStage

__all__ = [
    "RUN_LOGGER_NAME",
    "BatchEnvironmentError",
    "BatchOrchestrator",
    "BatchResult",
    "BatchSettings",
    "BatchStatus",
    "CancellationMonitor",
    "CancellationToken",
    "DetectPhase",
    "DocumentContext",
    "DocumentPhase",
    "DocumentPipeline",
    "DocumentReport",
    "DocumentStage",
    "ExportPhase",
    "RemediatePhase",
    "SavePhase",
    "default_document_pipeline",
    "iter_model_files",
]
