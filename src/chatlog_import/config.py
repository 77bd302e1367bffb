"""Configuration loading and management."""

import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

# Name of the legacy client's folder under %APPDATA% / %LOCALAPPDATA%
LEGACY_APP_DIRNAME = "slimCat"


def _default_app_dir(env_var: str) -> Path | None:
    """Resolve the legacy client folder under a Windows profile directory."""
    base = os.environ.get(env_var)
    if not base:
        return None
    return Path(base) / LEGACY_APP_DIRNAME


@dataclass
class SourceConfig:
    roaming_dir: Path | None = None  # per-character transcripts and settings
    local_dir: Path | None = None  # per-install user.config files


@dataclass
class StorageConfig:
    data_dir: Path = field(default_factory=lambda: Path.home() / "chatlog-import" / "data")


@dataclass
class Config:
    source: SourceConfig = field(default_factory=SourceConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    log_dir: Path = field(default_factory=lambda: Path.home() / "chatlog-import" / "logs")


def expand_path(path_str: str) -> Path:
    """Expand ~ and environment variables in path."""
    return Path(os.path.expandvars(os.path.expanduser(path_str)))


def _optional_path(value: str | None, env_var: str) -> Path | None:
    if value is None:
        return _default_app_dir(env_var)
    if not value:
        return None
    return expand_path(value)


def load_config(config_path: Path | None = None) -> Config:
    """Load configuration from YAML file.

    Environment-derived defaults for the legacy source directories are only
    computed here; everything downstream receives explicit paths.
    """
    if config_path is None:
        search_paths = [
            Path.cwd() / "config.yaml",
            Path.home() / ".config" / "chatlog-import" / "config.yaml",
            Path("/etc/chatlog-import/config.yaml"),
        ]
        for path in search_paths:
            if path.exists():
                config_path = path
                break

    data: dict = {}
    if config_path is not None and config_path.exists():
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}

    source_data = data.get("source", {})
    source = SourceConfig(
        roaming_dir=_optional_path(source_data.get("roaming_dir"), "APPDATA"),
        local_dir=_optional_path(source_data.get("local_dir"), "LOCALAPPDATA"),
    )

    storage_data = data.get("storage", {})
    storage = StorageConfig(
        data_dir=expand_path(storage_data.get("data_dir", "~/chatlog-import/data")),
    )

    return Config(
        source=source,
        storage=storage,
        log_dir=expand_path(data.get("log_dir", "~/chatlog-import/logs")),
    )
