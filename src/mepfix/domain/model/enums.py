"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class EntityType(StrEnum):
    """Discriminator for the three element kinds stored in a connector graph."""

    EQUIPMENT = "equipment"
    CONNECTOR = "connector"
    SUBSYSTEM = "subsystem"


class EquipmentCategory(StrEnum):
    ELECTRICAL_EQUIPMENT = "electrical_equipment"
    ELECTRICAL_FIXTURE = "electrical_fixture"
    MECHANICAL_EQUIPMENT = "mechanical_equipment"
    PIPE = "pipe"
    DUCT = "duct"


class SubsystemKind(StrEnum):
    ELECTRICAL_CIRCUIT = "electrical_circuit"
    PIPING_SYSTEM = "piping_system"
    DUCT_SYSTEM = "duct_system"


class DocumentState(StrEnum):
    CLOSED = "closed"
    OPEN = "open"
    DIRTY = "dirty"
    SAVED = "saved"


class Severity(StrEnum):
    WARNING = "warning"
    ERROR = "error"


class Resolution(StrEnum):
    DISMISS = "dismiss"
    ESCALATE = "escalate"
