from __future__ import annotations

import json
import re
import threading
from typing import TYPE_CHECKING

from mepfix.adapters.interchange import InterchangeFileWriter
from mepfix.adapters.sqlalchemy import SqlAlchemyModelHost, create_model_file
from mepfix.app import build_exporter, run_batch_remediation
from mepfix.config import BatchConfig
from mepfix.domain.batch import BatchStatus, DocumentStage
from mepfix.domain.batch.cancellation import CancellationToken
from mepfix.domain.detection import detect_mismatches

from tests.helpers.graphs import DEFAULT_PHASES, add_shared_circuit, build_panel_circuit

if TYPE_CHECKING:
    from pathlib import Path

_LINE = re.compile(r"^\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2},\d{3}: ")


def _batch_config(tmp_path: Path) -> BatchConfig:
    input_dir = tmp_path / "models"
    input_dir.mkdir()
    shared = build_panel_circuit(panel_name="Panel B")
    add_shared_circuit(shared)
    create_model_file(
        input_dir / "1-overloaded.emodel", build_panel_circuit().graph, phases=DEFAULT_PHASES
    )
    (input_dir / "2-corrupt.emodel").write_bytes(b"garbage" * 64)
    create_model_file(input_dir / "3-shared.emodel", shared.graph, phases=DEFAULT_PHASES)
    create_model_file(
        input_dir / "4-healthy.emodel", build_panel_circuit(loads=(10.0,)).graph, phases=()
    )
    (input_dir / "readme.txt").write_text("not a model")
    return BatchConfig(
        input_dir=input_dir,
        log_file=tmp_path / "logs" / "run.log",
        export_dir=tmp_path / "exports",
    )


def test_batch_remediates_saves_and_exports(tmp_path: Path) -> None:
    config = _batch_config(tmp_path)

    result = run_batch_remediation(config)

    assert result.succeeded
    assert result.status is BatchStatus.COMPLETED
    assert [report.path.name for report in result.reports] == [
        "1-overloaded.emodel",
        "2-corrupt.emodel",
        "3-shared.emodel",
        "4-healthy.emodel",
    ]
    overloaded, corrupt, shared, healthy = result.reports
    assert corrupt.history[-1] is DocumentStage.ERRORED
    assert overloaded.remediation is not None
    assert overloaded.remediation.deleted_subsystems
    assert shared.remediation is not None
    assert shared.remediation.retained_subsystems
    assert healthy.remediation is None
    assert all(report.saved for report in (overloaded, shared, healthy))

    exported = sorted(path.name for path in config.export_dir.iterdir())
    assert exported == [
        "1-overloaded.ifc.json",
        "3-shared.ifc.json",
        "4-healthy.ifc.json",
    ]
    healthy_export = json.loads((config.export_dir / "4-healthy.ifc.json").read_text())
    assert healthy_export["header"]["phase"] is None


def test_saved_models_have_no_mismatch_left(tmp_path: Path) -> None:
    config = _batch_config(tmp_path)
    run_batch_remediation(config)
    host = SqlAlchemyModelHost()

    for name in ("1-overloaded.emodel", "3-shared.emodel"):
        document = host.open_document(config.input_dir / name)
        try:
            assert list(detect_mismatches(document)) == []
        finally:
            host.close(document)


def test_second_run_changes_nothing(tmp_path: Path) -> None:
    config = _batch_config(tmp_path)
    run_batch_remediation(config)
    log_size = config.log_file.stat().st_size

    result = run_batch_remediation(config)

    assert all(report.remediation is None for report in result.reports)
    assert all(report.mismatches == [] for report in result.reports)
    second_run = config.log_file.read_text(encoding="utf-8")[log_size:]
    assert "Mismatch found" not in second_run
    assert "Remediated" not in second_run


def test_run_log_is_line_oriented_and_appended(tmp_path: Path) -> None:
    config = _batch_config(tmp_path)

    run_batch_remediation(config)
    run_batch_remediation(config)

    text = config.log_file.read_text(encoding="utf-8")
    entries = [line for line in text.splitlines() if _LINE.match(line)]
    messages = [_LINE.sub("", line) for line in entries]
    assert messages.count(f"Batch started in {config.input_dir}") == 2
    assert any(message.startswith("Failed to open ") for message in messages)
    assert any(message.startswith("Mismatch found for Panel A") for message in messages)
    assert any(message.startswith("Remediated ") for message in messages)
    assert any(message.startswith("Exported ") for message in messages)
    assert messages[-1].startswith("Batch finished: status=completed, processed=4")


def test_cancelled_token_aborts_before_first_file(tmp_path: Path) -> None:
    config = _batch_config(tmp_path)
    token = CancellationToken()
    token.cancel()

    result = run_batch_remediation(config, token=token)

    assert result.status is BatchStatus.ABORTED
    assert result.succeeded
    assert result.reports == []
    assert "Batch aborted by cancellation before" in config.log_file.read_text(encoding="utf-8")


def test_monitor_thread_does_not_outlive_the_batch(tmp_path: Path) -> None:
    config = _batch_config(tmp_path)
    polled = threading.Event()

    def poll() -> bool:
        polled.set()
        return False

    result = run_batch_remediation(config, cancellation_poll=poll)

    assert result.status is BatchStatus.COMPLETED
    assert not any(
        thread.name == "mepfix-cancellation-monitor" for thread in threading.enumerate()
    )


def test_missing_input_directory_fails_the_batch(tmp_path: Path) -> None:
    config = BatchConfig(
        input_dir=tmp_path / "missing",
        log_file=tmp_path / "run.log",
        export_dir=tmp_path / "exports",
    )

    result = run_batch_remediation(config)

    assert not result.succeeded
    assert "Batch aborted: Cannot read input directory" in config.log_file.read_text(
        encoding="utf-8"
    )


def test_local_exporter_is_the_default() -> None:
    assert isinstance(build_exporter(), InterchangeFileWriter)
