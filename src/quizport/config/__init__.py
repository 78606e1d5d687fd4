"""Application configuration helpers."""

from __future__ import annotations

from .env import optional_env_var, optional_int_env_var, optional_uuid_env_var
from .errors import ConfigurationError
from .importing import DEFAULT_ATTACHMENT_HOST, ImportConfig, get_import_config
from .logging import configure_logging
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config

__all__ = [
    "DEFAULT_ATTACHMENT_HOST",
    "ConfigurationError",
    "DatabaseConfig",
    "ImportConfig",
    "StorageConfig",
    "configure_logging",
    "get_database_config",
    "get_import_config",
    "get_storage_config",
    "optional_env_var",
    "optional_int_env_var",
    "optional_uuid_env_var",
]
