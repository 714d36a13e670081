"""Batch run locations: input folder, run log and export folder."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Final

from .env import optional_env_var
from .errors import ConfigurationError
from .storage import StorageConfig, get_storage_config

if TYPE_CHECKING:
    from collections.abc import Mapping

DEFAULT_MODEL_EXTENSION: Final[str] = ".emodel"

_ENV_NAMES: Final[dict[str, str]] = {
    "input_dir": "MEPFIX_INPUT_DIR",
    "log_file": "MEPFIX_LOG_FILE",
    "export_dir": "MEPFIX_EXPORT_DIR",
    "model_extension": "MEPFIX_MODEL_EXTENSION",
}


@dataclass(frozen=True, slots=True)
class BatchConfig:
    input_dir: Path
    log_file: Path
    export_dir: Path
    model_extension: str = DEFAULT_MODEL_EXTENSION

    def validate(self) -> BatchConfig:
        if self.input_dir.exists() and not self.input_dir.is_dir():
            raise ConfigurationError(f"Input path is not a directory: {self.input_dir}")
        if self.export_dir.exists() and not self.export_dir.is_dir():
            raise ConfigurationError(f"Export path is not a directory: {self.export_dir}")
        if self.log_file.is_dir():
            raise ConfigurationError(f"Log file path is a directory: {self.log_file}")
        return self


def normalise_extension(extension: str) -> str:
    cleaned = extension.strip()
    if not cleaned or cleaned == ".":
        raise ConfigurationError("Model file extension must not be empty")
    return cleaned if cleaned.startswith(".") else f".{cleaned}"


def get_batch_config(
    overrides: Mapping[str, str | Path | None] | None = None,
    *,
    storage: StorageConfig | None = None,
) -> BatchConfig:
    """Resolve batch locations: explicit overrides, then environment, then defaults."""

    given = dict(overrides or {})

    def pick(key: str) -> str | Path | None:
        value = given.get(key)
        if value is not None and str(value).strip():
            return value
        return optional_env_var(_ENV_NAMES[key])

    storage_config = storage or get_storage_config()
    input_dir = pick("input_dir")
    log_file = pick("log_file")
    export_dir = pick("export_dir")
    extension = pick("model_extension")

    return BatchConfig(
        input_dir=Path(input_dir).expanduser() if input_dir else storage_config.input_dir(),
        log_file=Path(log_file).expanduser() if log_file else storage_config.log_path(),
        export_dir=Path(export_dir).expanduser() if export_dir else storage_config.export_dir(),
        model_extension=normalise_extension(str(extension))
        if extension
        else DEFAULT_MODEL_EXTENSION,
    ).validate()
