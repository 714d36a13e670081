"""Environment variable loaders for configuration.

Blank values count as unset everywhere, so an empty ``MEPFIX_INPUT_DIR=`` line
in a ``.env`` file falls back to the default instead of the working directory.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING

from .errors import MissingConfigurationError

if TYPE_CHECKING:
    from collections.abc import Sequence


def optional_env_var(name: str) -> str | None:
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return value.strip()


def optional_env_path(name: str) -> Path | None:
    value = optional_env_var(name)
    return Path(value).expanduser() if value is not None else None


def require_env_vars(names: Sequence[str]) -> dict[str, str]:
    """Return every named value, or raise naming all that are missing."""

    values = {name: optional_env_var(name) for name in names}
    missing = [name for name, value in values.items() if value is None]
    if missing:
        raise MissingConfigurationError(missing)
    return {name: value for name, value in values.items() if value is not None}
