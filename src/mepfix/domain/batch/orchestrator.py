"""Drive documents through the phase pipeline, one file at a time."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from mepfix.domain.batch.cancellation import CancellationToken
from mepfix.domain.batch.context import BatchSettings, DocumentContext
from mepfix.domain.batch.phases import DetectPhase, ExportPhase, RemediatePhase, SavePhase
from mepfix.domain.batch.state import (
    RUN_LOGGER_NAME,
    BatchResult,
    BatchStatus,
    DocumentReport,
    DocumentStage,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from pathlib import Path

    from mepfix.domain.batch.phases import DocumentPhase
    from mepfix.domain.model import Document
    from mepfix.domain.ports import DocumentExporter, ModelHost
    from mepfix.domain.remediation import ConnectorGraphRemediator

log = getLogger(__name__)
run_log = getLogger(RUN_LOGGER_NAME)


class BatchEnvironmentError(RuntimeError):
    """Raised when the batch cannot enumerate its input."""


def iter_model_files(directory: Path, extension: str) -> list[Path]:
    """Model files directly inside ``directory``, lexically sorted."""

    suffix = extension if extension.startswith(".") else f".{extension}"
    try:
        entries = list(directory.iterdir())
    except OSError as exc:
        raise BatchEnvironmentError(f"Cannot read input directory {directory}: {exc}") from exc
    return sorted(
        entry for entry in entries if entry.is_file() and entry.suffix.lower() == suffix.lower()
    )


@dataclass(slots=True)
class DocumentPipeline:
    """Ordered phases run against one open document."""

    phases: Sequence[DocumentPhase] = field(default_factory=tuple)

    def with_phase(self, phase: DocumentPhase) -> DocumentPipeline:
        return DocumentPipeline(phases=(*self.phases, phase))

    def extend(self, phases: Iterable[DocumentPhase]) -> DocumentPipeline:
        return DocumentPipeline(phases=(*self.phases, *tuple(phases)))

    def run(self, context: DocumentContext) -> DocumentReport:
        for phase in self.phases:
            log.debug("Running phase %s on %s", phase.name, context.path)
            phase.run(context)
        return context.report


def default_document_pipeline() -> DocumentPipeline:
    return DocumentPipeline(phases=(DetectPhase(), RemediatePhase(), SavePhase(), ExportPhase()))


@dataclass(slots=True)
class BatchOrchestrator:
    """Process model files sequentially against a single model host.

    One file's failure never aborts the batch. Cancellation is checked once per
    file boundary; a file that has been opened always runs to its close.
    """

    host: ModelHost
    exporter: DocumentExporter
    settings: BatchSettings
    pipeline: DocumentPipeline = field(default_factory=default_document_pipeline)
    remediator: ConnectorGraphRemediator | None = None

    def run(
        self,
        paths: Iterable[Path],
        token: CancellationToken | None = None,
    ) -> BatchResult:
        active_token = token or CancellationToken()
        result = BatchResult()
        for path in sorted(paths):
            if active_token.cancelled:
                result.status = BatchStatus.ABORTED
                run_log.info("Batch aborted by cancellation before %s", path)
                break
            result.reports.append(self.process(path))
        self._log_summary(result)
        return result

    def run_directory(
        self,
        directory: Path,
        extension: str,
        token: CancellationToken | None = None,
    ) -> BatchResult:
        """Enumerate ``directory`` and run the batch; enumeration errors abort it."""

        try:
            paths = iter_model_files(directory, extension)
        except BatchEnvironmentError as exc:
            run_log.exception("Batch aborted: %s", exc)
            return BatchResult(status=BatchStatus.ABORTED, succeeded=False)
        log.info("Found %d model file(s) in %s", len(paths), directory)
        return self.run(paths, token)

    def process(self, path: Path) -> DocumentReport:
        report = DocumentReport(path=path)
        report.advance(DocumentStage.OPENING)
        try:
            document = self.host.open_document(path)
        except Exception as exc:
            report.record_error(DocumentStage.OPENING, exc)
            report.advance(DocumentStage.ERRORED)
            run_log.exception("Failed to open %s: %s", path, exc)
            return report

        report.advance(DocumentStage.OPENED)
        run_log.info("Opened %s", path)
        try:
            context = DocumentContext.for_document(
                document,
                report,
                host=self.host,
                exporter=self.exporter,
                settings=self.settings,
                remediator=self.remediator,
            )
            self.pipeline.run(context)
        except Exception as exc:
            report.record_error(report.stage, exc)
            report.advance(DocumentStage.ERRORED)
            run_log.exception("Error processing %s", path)
        finally:
            self._release(document, report)
        return report

    def _release(self, document: Document, report: DocumentReport) -> None:
        try:
            self.host.close(document, discard_changes=True)
        except Exception as exc:
            report.record_error(DocumentStage.CLOSED, exc)
            if report.stage is not DocumentStage.ERRORED:
                report.advance(DocumentStage.ERRORED)
            run_log.exception("Failed to close %s", report.path)
            return
        report.advance(DocumentStage.CLOSED)

    @staticmethod
    def _log_summary(result: BatchResult) -> None:
        run_log.info(
            "Batch finished: status=%s, processed=%d, remediated=%d, failed=%d",
            result.status,
            result.processed,
            len(result.remediated),
            len(result.failed),
        )
