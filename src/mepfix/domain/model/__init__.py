"""Public domain model surface."""

from __future__ import annotations

from mepfix.domain.model.conditions import (
    AdvisoryPolicy,
    ConditionListener,
    ConnectorLockedError,
    FatalHostConditionError,
    GraphIntegrityError,
    HostCondition,
    HostConditionError,
    UnhandledAdvisoryError,
)
from mepfix.domain.model.document import Document
from mepfix.domain.model.elements import Connector, ConnectorManager, Equipment, Subsystem
from mepfix.domain.model.entity import Element
from mepfix.domain.model.enums import (
    DocumentState,
    EntityType,
    EquipmentCategory,
    Resolution,
    Severity,
    SubsystemKind,
)
from mepfix.domain.model.graph import ConnectorGraph, GraphSnapshot
from mepfix.domain.model.primitives import APPARENT_LOAD, CAPACITY, ElementId, ParameterValue

__all__ = [  # noqa: RUF022
    # base
    "Element",
    "ElementId",
    "ParameterValue",
    "APPARENT_LOAD",
    "CAPACITY",
    # elements
    "Equipment",
    "Connector",
    "ConnectorManager",
    "Subsystem",
    # graph + document
    "ConnectorGraph",
    "GraphSnapshot",
    "Document",
    # conditions
    "AdvisoryPolicy",
    "ConditionListener",
    "HostCondition",
    "HostConditionError",
    "UnhandledAdvisoryError",
    "FatalHostConditionError",
    "GraphIntegrityError",
    "ConnectorLockedError",
    # enums
    "DocumentState",
    "EntityType",
    "EquipmentCategory",
    "Resolution",
    "Severity",
    "SubsystemKind",
]
