"""Exporter delegating conversion to a remote service."""

from __future__ import annotations

import asyncio
import hashlib
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

import httpx
from pydantic import ValidationError

from mepfix.adapters.http_resilience import ResilienceConfig, ResilientClient
from mepfix.config.export_service import ExportServiceConfig
from mepfix.domain.exporting import export_file_name
from mepfix.domain.ports import DocumentExporter

from .schema import ConversionResponse, InterchangeDocument, ServiceErrorResponse
from .translator import build_interchange_document

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

    from mepfix.domain.exporting import ExportConfiguration
    from mepfix.domain.model import Document

log = getLogger(__name__)

CONVERSIONS_PATH = "/v1/conversions"


class ExportServiceError(RuntimeError):
    """Raised when the conversion service rejects or fails a request."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def idempotency_key(request: InterchangeDocument) -> str:
    """Stable key for a conversion; the export timestamp does not take part."""

    content = request.model_dump_json(by_alias=True, exclude={"header": {"exported_at"}})
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


@dataclass(slots=True)
class RemoteConversionExporter:
    config: ExportServiceConfig = field(default_factory=ExportServiceConfig.from_environment)
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=_default_client_factory
    )

    def __call__(
        self,
        document: Document,
        *,
        target_dir: Path,
        name: str,
        configuration: ExportConfiguration,
    ) -> Path:
        request = build_interchange_document(document, configuration)
        content = asyncio.run(self._convert(request, name=name))
        target_dir.mkdir(parents=True, exist_ok=True)
        target = target_dir / export_file_name(name)
        target.write_text(content, encoding="utf-8")
        return target

    async def _convert(self, request: InterchangeDocument, *, name: str) -> str:
        url = f"{self.config.base_url}{CONVERSIONS_PATH}"
        body = {"name": name, "document": request.model_dump(mode="json", by_alias=True)}
        headers = {**self.config.headers(), "Idempotency-Key": idempotency_key(request)}
        async with self.client_factory(self.config.resilience_config()) as client:
            try:
                response = await client.post(url, json=body, headers=headers)
            except httpx.HTTPError as exc:
                raise ExportServiceError(f"Conversion request for {name} failed: {exc}") from exc
        return self._parse(response, name=name)

    @staticmethod
    def _parse(response: httpx.Response, *, name: str) -> str:
        try:
            payload = response.json()
        except ValueError:
            payload = None

        if response.is_error:
            message = response.reason_phrase or "request failed"
            if isinstance(payload, dict) and "error" in payload:
                error = ServiceErrorResponse.model_validate(payload)
                message = error.message
            log.error("Conversion service error %s for %s: %s", response.status_code, name, message)
            raise ExportServiceError(message, status_code=response.status_code)

        try:
            result = ConversionResponse.model_validate(payload)
        except ValidationError as exc:
            raise ExportServiceError(f"Unexpected conversion response for {name}") from exc
        if result.status != "completed" or result.content is None:
            raise ExportServiceError(result.message or f"Conversion of {name} did not complete")
        return result.content


if TYPE_CHECKING:
    _exporter_check: DocumentExporter = RemoteConversionExporter()
