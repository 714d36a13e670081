"""Interchange exporters: local file writer and remote conversion service."""

from __future__ import annotations

from .schema import ConversionResponse, InterchangeDocument, ServiceErrorResponse
from .service import ExportServiceError, RemoteConversionExporter
from .translator import build_interchange_document
from .writer import InterchangeFileWriter

__all__ = [
    "ConversionResponse",
    "ExportServiceError",
    "InterchangeDocument",
    "InterchangeFileWriter",
    "RemoteConversionExporter",
    "ServiceErrorResponse",
    "build_interchange_document",
]
