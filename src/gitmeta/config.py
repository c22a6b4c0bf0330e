"""TOML configuration loading for gitmeta."""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any, Mapping

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .filesystem import default_nobody_id
from .models import MalformedRecordError, MetadataRecord

DEFAULT_CONFIG_FILENAME = "gitmeta.toml"
DEFAULT_STORE_DIR = ".gitmeta"


class ConfigError(RuntimeError):
    """Raised when a configuration file cannot be parsed or validated."""


class Settings(BaseModel):
    """Per-repository options."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    store_dir: str = DEFAULT_STORE_DIR
    command: str = "gitmeta"
    symlink_mode: str = "0777"
    placeholder: str = "0644 0:0"
    nobody_id: int = Field(default_factory=default_nobody_id)
    pin_group_by_owner: bool = False

    @field_validator("store_dir")
    @classmethod
    def _check_store_dir(cls, value: str) -> str:
        value = value.strip().strip("/")
        if not value or "/" in value or value in {".", "..", ".git"}:
            raise ValueError("store_dir must be a single directory name inside the repository")
        return value

    @field_validator("symlink_mode")
    @classmethod
    def _check_mode(cls, value: str) -> str:
        if not (3 <= len(value) <= 4) or any(char not in "01234567" for char in value):
            raise ValueError(f"'{value}' is not an octal mode")
        return value.zfill(4)

    @field_validator("placeholder")
    @classmethod
    def _check_placeholder(cls, value: str) -> str:
        try:
            return MetadataRecord.parse(value).format()
        except MalformedRecordError as exc:
            raise ValueError(str(exc)) from exc

    @property
    def placeholder_record(self) -> MetadataRecord:
        return MetadataRecord.parse(self.placeholder)

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any]) -> "Settings":
        try:
            return cls(**raw)
        except ValidationError as exc:
            raise ConfigError(f"Invalid [settings]: {exc}") from exc


class RepoContext(BaseModel):
    """Repository root and settings, resolved once per invocation."""

    model_config = ConfigDict(frozen=True)

    root: Path
    settings: Settings = Field(default_factory=Settings)

    @property
    def store_path(self) -> Path:
        return self.root / self.settings.store_dir

    def absolute(self, path: str) -> Path:
        """Return the filesystem location of the repository path ``path``."""

        return self.root / path


def load_settings(path: Path | None = None, *, root: Path) -> Settings:
    """Load settings from ``path`` or from ``gitmeta.toml`` in ``root``.

    An explicit ``path`` must exist; the implicit file in ``root`` is optional.
    """

    config_path = _resolve_config_path(path, root)
    if config_path is None:
        return Settings()

    try:
        with config_path.open("rb") as handle:
            data = tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Configuration file '{config_path}' is not valid TOML: {exc}") from exc

    raw_settings = data.get("settings") or {}
    if not isinstance(raw_settings, Mapping):
        raise ConfigError(f"'settings' in '{config_path}' must be a table")
    return Settings.from_raw(raw_settings)


def load_context(root: Path, config: Path | None = None) -> RepoContext:
    return RepoContext(root=root, settings=load_settings(config, root=root))


def write_settings(settings: Settings, path: Path) -> None:
    payload = {"settings": settings.model_dump()}
    with path.open("wb") as handle:
        tomli_w.dump(payload, handle)


def _resolve_config_path(path: Path | None, root: Path) -> Path | None:
    if path is None:
        candidate = root / DEFAULT_CONFIG_FILENAME
        return candidate if candidate.is_file() else None

    path = Path(path)
    if not path.exists():
        raise ConfigError(f"Configuration file '{path}' does not exist")
    if path.is_dir():
        candidate = path / DEFAULT_CONFIG_FILENAME
        if not candidate.exists():
            raise ConfigError(f"Expected to find '{DEFAULT_CONFIG_FILENAME}' inside '{path}', but none was located")
        path = candidate

    return path.resolve(strict=False)
