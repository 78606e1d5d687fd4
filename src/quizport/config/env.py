"""Environment variable loaders for configuration."""

from __future__ import annotations

import os
from uuid import UUID

from .errors import ConfigurationError


def optional_env_var(name: str) -> str | None:
    """Return the trimmed value of ``name``, treating blank values as unset."""

    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return value.strip()


def optional_int_env_var(name: str, *, minimum: int | None = None) -> int | None:
    value = optional_env_var(name)
    if value is None:
        return None
    try:
        parsed = int(value)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got {value!r}") from exc
    if minimum is not None and parsed < minimum:
        raise ConfigurationError(f"{name} must be at least {minimum}, got {parsed}")
    return parsed


def optional_uuid_env_var(name: str) -> UUID | None:
    value = optional_env_var(name)
    if value is None:
        return None
    try:
        return UUID(value)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a UUID, got {value!r}") from exc
