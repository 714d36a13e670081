"""SQLAlchemy adapter package for mepfix model files."""

from __future__ import annotations

from .host import SqlAlchemyModelHost, create_model_file
from .mappings import create_all_tables, has_model_tables, metadata
from .repositories import SqlAlchemyGraphRepository

__all__ = [
    "SqlAlchemyGraphRepository",
    "SqlAlchemyModelHost",
    "create_all_tables",
    "create_model_file",
    "has_model_tables",
    "metadata",
]
