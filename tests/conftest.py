from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import pytest

from mepfix.domain.batch import RUN_LOGGER_NAME

from tests.helpers.graphs import PanelCircuit, build_panel_circuit

if TYPE_CHECKING:
    from collections.abc import Iterator


@pytest.fixture(autouse=True)
def _isolate_environment(
    monkeypatch: pytest.MonkeyPatch, tmp_path_factory: pytest.TempPathFactory
) -> None:
    for name in (
        "MEPFIX_INPUT_DIR",
        "MEPFIX_LOG_FILE",
        "MEPFIX_EXPORT_DIR",
        "MEPFIX_MODEL_EXTENSION",
        "MEPFIX_EXPORT_SERVICE_URL",
        "MEPFIX_EXPORT_SERVICE_TOKEN",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("MEPFIX_DATA_DIR", str(tmp_path_factory.mktemp("mepfix-data")))


@pytest.fixture
def panel_circuit() -> PanelCircuit:
    return build_panel_circuit()


@pytest.fixture
def run_log_records(caplog: pytest.LogCaptureFixture) -> Iterator[pytest.LogCaptureFixture]:
    """Capture INFO records of the run log."""

    with caplog.at_level(logging.INFO, logger=RUN_LOGGER_NAME):
        yield caplog
