"""Pydantic models for interchange files and the conversion service."""

from __future__ import annotations

from datetime import datetime  # noqa: TC003
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

_MODEL_CONFIG = ConfigDict(extra="ignore", populate_by_name=True)


class QuantitySet(BaseModel):
    model_config = _MODEL_CONFIG

    apparent_load: float = 0.0
    capacity: float = 0.0


class EquipmentRecord(BaseModel):
    model_config = _MODEL_CONFIG

    id: int
    name: str = ""
    category: str
    connectors: list[int] = Field(default_factory=list[int])
    quantities: QuantitySet | None = None
    property_sets: dict[str, dict[str, Any]] = Field(
        default_factory=dict[str, dict[str, Any]], alias="propertySets"
    )


class SubsystemRecord(BaseModel):
    model_config = _MODEL_CONFIG

    id: int
    name: str = ""
    kind: str
    connectors: list[int] = Field(default_factory=list[int])
    members: list[int] = Field(default_factory=list[int])


class ConnectorRecord(BaseModel):
    model_config = _MODEL_CONFIG

    id: int
    owner_id: int = Field(alias="ownerId")
    name: str = ""
    peers: list[int] = Field(default_factory=list[int])


class InterchangeHeader(BaseModel):
    model_config = _MODEL_CONFIG

    file_version: str = Field(alias="fileVersion")
    source: str
    exported_at: datetime = Field(alias="exportedAt")
    phase: str | None = None
    space_boundaries: int = Field(default=0, alias="spaceBoundaries")
    site_placement: str = Field(alias="sitePlacement")
    options: dict[str, Any] = Field(default_factory=dict[str, Any])


class InterchangeDocument(BaseModel):
    model_config = _MODEL_CONFIG

    header: InterchangeHeader
    equipment: list[EquipmentRecord] = Field(default_factory=list[EquipmentRecord])
    subsystems: list[SubsystemRecord] = Field(default_factory=list[SubsystemRecord])
    connectors: list[ConnectorRecord] = Field(default_factory=list[ConnectorRecord])


class ConversionResponse(BaseModel):
    model_config = _MODEL_CONFIG

    status: Literal["completed", "failed"]
    content: str | None = None
    message: str | None = None


class ServiceErrorResponse(BaseModel):
    model_config = _MODEL_CONFIG

    error: int | str
    message: str
