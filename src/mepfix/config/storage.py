"""Default locations for model files, exports and the run log."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from .env import optional_env_path

APP_DIR_NAME: Final[str] = "mepfix"


@dataclass(frozen=True, slots=True)
class StorageConfig:
    """Per-user data folder; each batch location defaults to a child of it."""

    data_dir: Path

    @property
    def root(self) -> Path:
        return self.data_dir.expanduser().resolve()

    def input_dir(self) -> Path:
        return self.root / "models"

    def export_dir(self) -> Path:
        return self.root / "exports"

    def log_path(self) -> Path:
        return self.root / "mepfix-run.log"


def _platform_data_home() -> Path:
    if os.name == "nt":
        return optional_env_path("LOCALAPPDATA") or Path.home() / "AppData" / "Local"
    return optional_env_path("XDG_DATA_HOME") or Path.home() / ".local" / "share"


def get_storage_config() -> StorageConfig:
    data_dir = optional_env_path("MEPFIX_DATA_DIR") or _platform_data_home() / APP_DIR_NAME
    return StorageConfig(data_dir=data_dir)
