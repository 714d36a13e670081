"""Local exporter writing interchange files next to each other in one folder."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from mepfix.domain.exporting import export_file_name
from mepfix.domain.ports import DocumentExporter

from .translator import build_interchange_document

if TYPE_CHECKING:
    from pathlib import Path

    from mepfix.domain.exporting import ExportConfiguration
    from mepfix.domain.model import Document

log = getLogger(__name__)


@dataclass(slots=True)
class InterchangeFileWriter:
    indent: int | None = 2

    def __call__(
        self,
        document: Document,
        *,
        target_dir: Path,
        name: str,
        configuration: ExportConfiguration,
    ) -> Path:
        target_dir.mkdir(parents=True, exist_ok=True)
        target = target_dir / export_file_name(name)
        payload = build_interchange_document(document, configuration)
        target.write_text(
            payload.model_dump_json(by_alias=True, indent=self.indent), encoding="utf-8"
        )
        log.debug("Wrote %s", target)
        return target


if TYPE_CHECKING:
    _exporter_check: DocumentExporter = InterchangeFileWriter()
