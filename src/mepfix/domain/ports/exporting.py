"""Port for the interchange-format exporter."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from pathlib import Path

    from mepfix.domain.exporting import ExportConfiguration
    from mepfix.domain.model import Document


@runtime_checkable
class DocumentExporter(Protocol):
    """Callable port writing one interchange file for a saved document."""

    def __call__(
        self,
        document: Document,
        *,
        target_dir: Path,
        name: str,
        configuration: ExportConfiguration,
    ) -> Path: ...
