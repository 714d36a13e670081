"""Settings and per-document session state shared by the batch phases."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import Logger, getLogger
from typing import TYPE_CHECKING

from mepfix.domain.batch.state import RUN_LOGGER_NAME
from mepfix.domain.detection import DEFAULT_MONITORED_CATEGORY
from mepfix.domain.exporting import ExportIntent
from mepfix.domain.remediation import ConnectorGraphRemediator, RemediationPlan

if TYPE_CHECKING:
    from pathlib import Path

    from mepfix.domain.batch.state import DocumentReport
    from mepfix.domain.model import Document, EquipmentCategory
    from mepfix.domain.ports import DocumentExporter, ModelHost


@dataclass(frozen=True, slots=True)
class BatchSettings:
    """Operator choices that stay fixed for a whole batch."""

    export_dir: Path
    export_intent: ExportIntent = field(default_factory=ExportIntent)
    plan: RemediationPlan = field(default_factory=RemediationPlan)
    category: EquipmentCategory = DEFAULT_MONITORED_CATEGORY


@dataclass(slots=True)
class DocumentContext:
    """Everything a phase may touch while one document is open.

    Passed explicitly to each phase; nothing here outlives the document.
    """

    document: Document
    report: DocumentReport
    host: ModelHost
    exporter: DocumentExporter
    settings: BatchSettings
    remediator: ConnectorGraphRemediator
    run_log: Logger = field(default_factory=lambda: getLogger(RUN_LOGGER_NAME))

    @classmethod
    def for_document(
        cls,
        document: Document,
        report: DocumentReport,
        *,
        host: ModelHost,
        exporter: DocumentExporter,
        settings: BatchSettings,
        remediator: ConnectorGraphRemediator | None = None,
    ) -> DocumentContext:
        return cls(
            document=document,
            report=report,
            host=host,
            exporter=exporter,
            settings=settings,
            remediator=remediator or ConnectorGraphRemediator(settings.plan),
        )

    @property
    def path(self) -> Path:
        return self.report.path
