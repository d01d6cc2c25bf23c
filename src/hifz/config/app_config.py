"""Application configuration loader.

Loads centralized configuration from data/config/app_config_v1.yaml,
falling back to built-in defaults when the file is absent.

Usage:
    from hifz.config.app_config import load_app_config

    config = load_app_config()
    backend = config.storage.backend
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import structlog
import yaml

logger = structlog.get_logger(__name__)

# Config file path (relative to project root)
CONFIG_FILE = Path("data/config/app_config_v1.yaml")

# Environment override for storage.backend
BACKEND_ENV = "HIFZ_STORAGE_BACKEND"

STORAGE_BACKENDS = ("memory", "sqlite", "blobs")


@dataclass
class StorageConfig:
    """Which record store to build and where it keeps its data."""

    backend: str = "sqlite"
    sqlite_path: Path = Path("data/hifz.db")
    blobs_dir: Path = Path("data/blobs")


@dataclass
class TenancyConfig:
    """Owner used when a request does not name a sheikh."""

    default_owner_id: str = "default"


@dataclass
class ServerConfig:
    """Bind address for `hifz serve`."""

    host: str = "127.0.0.1"
    port: int = 8000


@dataclass
class AppConfig:
    """Application-wide configuration."""

    storage: StorageConfig = field(default_factory=StorageConfig)
    tenancy: TenancyConfig = field(default_factory=TenancyConfig)
    server: ServerConfig = field(default_factory=ServerConfig)


# Module-level cache
_cached_config: AppConfig | None = None


def _get_defaults() -> dict[str, Any]:
    """Get default configuration values."""
    return {
        "storage": {
            "backend": "sqlite",
            "sqlite_path": "data/hifz.db",
            "blobs_dir": "data/blobs",
        },
        "tenancy": {
            "default_owner_id": "default",
        },
        "server": {
            "host": "127.0.0.1",
            "port": 8000,
        },
    }


def _parse_config(data: dict[str, Any]) -> AppConfig:
    """Parse configuration dictionary into AppConfig object."""
    defaults = _get_defaults()

    storage_data = {**defaults["storage"], **(data.get("storage") or {})}
    backend = os.environ.get(BACKEND_ENV) or storage_data["backend"]
    if backend not in STORAGE_BACKENDS:
        raise ValueError(
            f"Unknown storage backend '{backend}'. Expected one of: {', '.join(STORAGE_BACKENDS)}"
        )
    storage = StorageConfig(
        backend=backend,
        sqlite_path=Path(storage_data["sqlite_path"]),
        blobs_dir=Path(storage_data["blobs_dir"]),
    )

    tenancy_data = {**defaults["tenancy"], **(data.get("tenancy") or {})}
    tenancy = TenancyConfig(default_owner_id=str(tenancy_data["default_owner_id"]))

    server_data = {**defaults["server"], **(data.get("server") or {})}
    server = ServerConfig(host=server_data["host"], port=int(server_data["port"]))

    return AppConfig(storage=storage, tenancy=tenancy, server=server)


def load_app_config(force_reload: bool = False) -> AppConfig:
    """Load application config.

    Args:
        force_reload: If True, ignore cached config and reload from file.

    Returns:
        AppConfig object with all settings.

    Raises:
        ValueError: If the configured storage backend is unknown.
    """
    global _cached_config

    if _cached_config is not None and not force_reload:
        return _cached_config

    data: dict[str, Any]

    if CONFIG_FILE.exists():
        logger.debug("loading_app_config", source=str(CONFIG_FILE))
        data = yaml.safe_load(CONFIG_FILE.read_text(encoding="utf-8")) or {}
    else:
        logger.info("using_default_config")
        data = _get_defaults()

    _cached_config = _parse_config(data)
    return _cached_config


def clear_config_cache() -> None:
    """Clear the configuration cache.

    Useful for testing or when config is modified at runtime.
    """
    global _cached_config
    _cached_config = None
