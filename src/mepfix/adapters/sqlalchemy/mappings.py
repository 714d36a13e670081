"""SQLAlchemy Core tables describing one model file.

Each model file is a self-contained SQLite database holding a single document:
its phases, its elements and the links between connectors.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Final

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Dialect,
    Enum,
    Float,
    ForeignKey,
    Integer,
    MetaData,
    String,
    Table,
    TypeDecorator,
    inspect,
)

from mepfix.domain.model import EntityType, EquipmentCategory, SubsystemKind

if TYPE_CHECKING:
    from sqlalchemy.engine import Connection, Engine

log = logging.getLogger(__name__)

SCHEMA_VERSION: Final[int] = 1


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


metadata = MetaData(
    naming_convention={
        "ix": "ix_%(column_0_label)s",
        "uq": "uq_%(table_name)s_%(column_0_label)s",
        "ck": "ck_%(table_name)s_%(constraint_name)s",
        "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
        "pk": "pk_%(table_name)s",
    }
)

# Core tables -----------------------------------------------------------------

document_info_table = Table(
    "document_info",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("schema_version", Integer, nullable=False, default=SCHEMA_VERSION),
    Column("title", String, nullable=False, default=""),
    Column("next_id", Integer, nullable=False, default=1),
    Column("saved_at", UTCDateTime(), nullable=True),
)

phase_table = Table(
    "phase",
    metadata,
    Column("position", Integer, primary_key=True),
    Column("name", String, nullable=False),
)

equipment_table = Table(
    "equipment",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=False),
    Column("name", String, nullable=False, default=""),
    Column("category", Enum(EquipmentCategory, native_enum=False), nullable=False),
)

equipment_parameter_table = Table(
    "equipment_parameter",
    metadata,
    Column(
        "equipment_id",
        Integer,
        ForeignKey("equipment.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column("name", String, primary_key=True),
    Column("value", Float, nullable=False),
    CheckConstraint("value >= 0", name="non_negative"),
)

subsystem_table = Table(
    "subsystem",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=False),
    Column("name", String, nullable=False, default=""),
    Column("kind", Enum(SubsystemKind, native_enum=False), nullable=False),
)

subsystem_member_table = Table(
    "subsystem_member",
    metadata,
    Column(
        "subsystem_id",
        Integer,
        ForeignKey("subsystem.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "equipment_id",
        Integer,
        ForeignKey("equipment.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)

connector_table = Table(
    "connector",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=False),
    Column("name", String, nullable=False, default=""),
    Column("owner_id", Integer, nullable=False, index=True),
    Column("owner_type", Enum(EntityType, native_enum=False), nullable=False),
    Column("locked", Boolean, nullable=False, default=False),
)

# links are stored once per pair with first_id < second_id
connector_link_table = Table(
    "connector_link",
    metadata,
    Column(
        "first_id",
        Integer,
        ForeignKey("connector.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "second_id",
        Integer,
        ForeignKey("connector.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    CheckConstraint("first_id < second_id", name="ordered_pair"),
)

# child tables first, so deletes respect foreign keys
GRAPH_TABLES: Final[tuple[Table, ...]] = (
    connector_link_table,
    connector_table,
    subsystem_member_table,
    subsystem_table,
    equipment_parameter_table,
    equipment_table,
    phase_table,
)


def create_all_tables(bind: Engine | Connection) -> None:
    """Create the model file tables if they are missing."""

    log.info("Creating model file tables")
    metadata.create_all(bind)


def has_model_tables(bind: Engine | Connection) -> bool:
    existing = set(inspect(bind).get_table_names())
    return {table.name for table in metadata.sorted_tables} <= existing
