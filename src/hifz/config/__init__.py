"""Configuration package for the hifz tracker."""

from hifz.config.app_config import (
    AppConfig,
    ServerConfig,
    StorageConfig,
    TenancyConfig,
    clear_config_cache,
    load_app_config,
)

__all__ = [
    "AppConfig",
    "ServerConfig",
    "StorageConfig",
    "TenancyConfig",
    "clear_config_cache",
    "load_app_config",
]
