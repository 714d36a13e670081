"""Per-document and per-batch state records."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from pathlib import Path

    from mepfix.domain.detection import Mismatch
    from mepfix.domain.remediation import RemediationResult

RUN_LOGGER_NAME: Final[str] = "mepfix.run"


class DocumentStage(StrEnum):
    PENDING = "pending"
    OPENING = "opening"
    OPENED = "opened"
    DETECTING = "detecting"
    REMEDIATING = "remediating"
    SAVING = "saving"
    EXPORTING = "exporting"
    CLOSED = "closed"
    ERRORED = "errored"


class BatchStatus(StrEnum):
    COMPLETED = "completed"
    ABORTED = "aborted"


@dataclass(slots=True)
class DocumentReport:
    """Outcome of one file. ``history`` lists every stage that was entered."""

    path: Path
    history: list[DocumentStage] = field(
        default_factory=lambda: [DocumentStage.PENDING]
    )
    mismatches: list[Mismatch] = field(default_factory=list["Mismatch"])
    remediation: RemediationResult | None = None
    rolled_back: bool = False
    saved: bool = False
    exported_to: Path | None = None
    errors: dict[DocumentStage, str] = field(default_factory=dict[DocumentStage, str])

    @property
    def stage(self) -> DocumentStage:
        return self.history[-1]

    @property
    def errored(self) -> bool:
        return DocumentStage.ERRORED in self.history

    @property
    def released(self) -> bool:
        return self.stage is DocumentStage.CLOSED

    def advance(self, stage: DocumentStage) -> None:
        self.history.append(stage)

    def record_error(self, stage: DocumentStage, exc: BaseException) -> None:
        self.errors[stage] = str(exc) or type(exc).__name__


@dataclass(slots=True)
class BatchResult:
    """Summary of one batch run.

    ``succeeded`` only turns false when the environment itself failed; single
    file failures are reported through the reports and the run log.
    """

    status: BatchStatus = BatchStatus.COMPLETED
    reports: list[DocumentReport] = field(default_factory=list[DocumentReport])
    succeeded: bool = True

    @property
    def processed(self) -> int:
        return len(self.reports)

    @property
    def failed(self) -> tuple[DocumentReport, ...]:
        return tuple(report for report in self.reports if report.errors)

    @property
    def remediated(self) -> tuple[DocumentReport, ...]:
        return tuple(
            report
            for report in self.reports
            if report.remediation is not None and not report.rolled_back
        )
