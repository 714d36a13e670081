"""Application orchestration entry points."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from mepfix.adapters.interchange import InterchangeFileWriter, RemoteConversionExporter
from mepfix.adapters.sqlalchemy import SqlAlchemyModelHost
from mepfix.config import ExportServiceConfig, open_run_log
from mepfix.domain.batch import (
    RUN_LOGGER_NAME,
    BatchOrchestrator,
    BatchSettings,
    CancellationMonitor,
    CancellationToken,
)
from mepfix.domain.detection import DEFAULT_MONITORED_CATEGORY
from mepfix.domain.exporting import ExportIntent
from mepfix.domain.remediation import RemediationPlan

if TYPE_CHECKING:
    from mepfix.config import BatchConfig
    from mepfix.domain.batch import BatchResult
    from mepfix.domain.batch.cancellation import CancellationPoll
    from mepfix.domain.model import EquipmentCategory
    from mepfix.domain.ports import DocumentExporter, ModelHost

log = getLogger(__name__)


def build_exporter(*, remote: bool = False) -> DocumentExporter:
    """Local interchange writer, or the remote conversion service when asked."""

    if remote:
        return RemoteConversionExporter(config=ExportServiceConfig.from_environment())
    return InterchangeFileWriter()


def run_batch_remediation(
    config: BatchConfig,
    *,
    export_intent: ExportIntent | None = None,
    plan: RemediationPlan | None = None,
    category: EquipmentCategory = DEFAULT_MONITORED_CATEGORY,
    host: ModelHost | None = None,
    exporter: DocumentExporter | None = None,
    token: CancellationToken | None = None,
    cancellation_poll: CancellationPoll | None = None,
) -> BatchResult:
    """Remediate every model file in ``config.input_dir`` and export the results.

    The run log receives one line per file outcome. When ``cancellation_poll``
    is given it is polled on a background thread that is joined before return.
    """

    settings = BatchSettings(
        export_dir=config.export_dir,
        export_intent=export_intent or ExportIntent(),
        plan=plan or RemediationPlan(category=category),
        category=category,
    )
    orchestrator = BatchOrchestrator(
        host=host or SqlAlchemyModelHost(),
        exporter=exporter or InterchangeFileWriter(),
        settings=settings,
    )
    active_token = token or CancellationToken()
    log.info(
        "Starting batch: input=%s, extension=%s, export=%s, log=%s",
        config.input_dir,
        config.model_extension,
        config.export_dir,
        config.log_file,
    )

    with open_run_log(config.log_file, logger_name=RUN_LOGGER_NAME) as run_log:
        run_log.info("Batch started in %s", config.input_dir)
        if cancellation_poll is None:
            result = orchestrator.run_directory(
                config.input_dir, config.model_extension, active_token
            )
        else:
            with CancellationMonitor(active_token, cancellation_poll):
                result = orchestrator.run_directory(
                    config.input_dir, config.model_extension, active_token
                )

    log.info(
        "Finished batch: status=%s, processed=%d, remediated=%d, failed=%d",
        result.status,
        result.processed,
        len(result.remediated),
        len(result.failed),
    )
    return result
