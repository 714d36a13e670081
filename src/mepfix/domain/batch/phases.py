"""The per-document phases: detect, remediate, save, export.

Only detection lets exceptions escape; the orchestrator turns those into an
errored document. The later phases catch and log their own failures so the
next phase still runs.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from mepfix.domain.batch.state import DocumentStage
from mepfix.domain.detection import detect_mismatches
from mepfix.domain.exporting import resolve_export_configuration
from mepfix.domain.transactions import (
    AdvisorySuppressionScope,
    DismissAdvisories,
    MutationScope,
)

if TYPE_CHECKING:
    from mepfix.domain.batch.context import DocumentContext


class DocumentPhase(Protocol):
    """Contract implemented by each per-document phase."""

    name: str

    def run(self, context: DocumentContext) -> None: ...


class DetectPhase:
    name = "detect"

    def run(self, context: DocumentContext) -> None:
        context.report.advance(DocumentStage.DETECTING)
        for mismatch in detect_mismatches(context.document, category=context.settings.category):
            context.report.mismatches.append(mismatch)
            context.run_log.info(
                "Mismatch found for %s #%s (load=%s, capacity=%s)",
                mismatch.equipment_name or "equipment",
                mismatch.equipment_id,
                mismatch.total_load,
                mismatch.capacity,
            )


class RemediatePhase:
    """Sever and prune inside one atomic scope with advisories dismissed."""

    name = "remediate"

    def run(self, context: DocumentContext) -> None:
        report = context.report
        if not report.mismatches:
            return
        report.advance(DocumentStage.REMEDIATING)

        document = context.document
        remediator = context.remediator
        targets = remediator.target_equipment(
            document, (mismatch.equipment_id for mismatch in report.mismatches)
        )
        try:
            with (
                AdvisorySuppressionScope(document, DismissAdvisories()),
                MutationScope(document, f"Remediate {document.name}") as scope,
            ):
                result = remediator.remediate(document, targets)
                scope.commit()
        except Exception as exc:
            report.rolled_back = True
            report.record_error(DocumentStage.REMEDIATING, exc)
            context.run_log.exception("Remediation failed for %s: %s", context.path, exc)
            return

        report.remediation = result
        context.run_log.info("Remediated %s: %s", context.path, result.describe())


class SavePhase:
    name = "save"

    def run(self, context: DocumentContext) -> None:
        context.report.advance(DocumentStage.SAVING)
        try:
            context.host.save(context.document)
        except Exception as exc:
            context.report.record_error(DocumentStage.SAVING, exc)
            context.run_log.exception("Save failed for %s: %s", context.path, exc)
            return
        context.report.saved = True
        context.run_log.info("Saved %s", context.path)


class ExportPhase:
    """Resolve the export configuration once and hand it to the exporter."""

    name = "export"

    def run(self, context: DocumentContext) -> None:
        context.report.advance(DocumentStage.EXPORTING)
        document = context.document
        configuration = resolve_export_configuration(
            context.settings.export_intent, document.phases
        )
        try:
            exported = context.exporter(
                document,
                target_dir=context.settings.export_dir,
                name=document.name,
                configuration=configuration,
            )
        except Exception as exc:
            context.report.record_error(DocumentStage.EXPORTING, exc)
            context.run_log.exception("Export failed for %s: %s", context.path, exc)
            return
        context.report.exported_to = exported
        context.run_log.info("Exported %s to %s", context.path, exported)
