"""
Base building blocks:
element identity and the entity_type contract.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar

if TYPE_CHECKING:
    from mepfix.domain.model.enums import EntityType
    from mepfix.domain.model.primitives import ElementId


@dataclass(eq=False, kw_only=True)
class Element:
    """Identity is assigned by the owning graph arena and never reused."""

    id: ElementId
    name: str = ""

    # class-level discriminator; subclasses must override
    ENTITY_TYPE: ClassVar[EntityType]

    @property
    def entity_type(self) -> EntityType:
        return self.ENTITY_TYPE

    @property
    def label(self) -> str:
        """Human readable reference used in log lines."""
        return f"{self.name or self.entity_type} #{self.id}"
