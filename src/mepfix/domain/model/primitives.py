"""Domain primitives: scalar aliases + parameter names.

Scalar aliases may be promoted to proper value objects later without changing imports.
"""

from __future__ import annotations

import math
from typing import Final, TypeAlias

ElementId: TypeAlias = int
ParameterValue: TypeAlias = float

APPARENT_LOAD: Final[str] = "apparent_load"
CAPACITY: Final[str] = "capacity"


def require_non_negative(name: str, value: float) -> float:
    """Return ``value`` as float or raise if it is negative, NaN or infinite."""

    number = float(value)
    if not math.isfinite(number):
        raise ValueError(f"parameter {name!r} must be finite, got {number}")
    if number < 0:
        raise ValueError(f"parameter {name!r} must be non-negative, got {number}")
    return number
