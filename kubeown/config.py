"""Configuration loading from environment variables."""

from __future__ import annotations

import os
import re

from kubeown.errors import ConfigError, MalformedPathError
from kubeown.models.config import (
    DEFAULT_FIELD_MANAGER,
    DEFAULT_MAX_DEPTH,
    KubeOwnConfig,
    LogConfig,
    OwnershipConfig,
)
from kubeown.paths.parser import parse_path

# Field manager names follow the same constraints the API server enforces.
_MANAGER_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._:/-]{0,127}$")


def _env(key: str, default: str = "") -> str:
    return os.environ.get(f"KUBEOWN_{key}", default)


def _env_int(key: str, default: int, min_val: int | None = None, max_val: int | None = None) -> int:
    raw = _env(key, str(default))
    try:
        val = int(raw)
    except ValueError as exc:
        raise ConfigError(f"KUBEOWN_{key} must be an integer, got {raw!r}") from exc
    if min_val is not None:
        val = max(val, min_val)
    if max_val is not None:
        val = min(val, max_val)
    return val


def _env_list(key: str) -> list[str]:
    return [item.strip() for item in _env(key).split(",") if item.strip()]


def _validate_field_manager(value: str) -> str:
    if not _MANAGER_RE.match(value):
        raise ConfigError(f"Invalid field manager: {value!r}")
    return value


def _validate_log_level(value: str) -> str:
    valid = {"debug", "info", "warning", "error"}
    if value.lower() not in valid:
        raise ConfigError(f"Invalid log level: {value}. Must be one of {valid}")
    return value.lower()


def _validate_ignore_fields(values: list[str]) -> list[str]:
    # Predicate patterns are resolved later against an object; only the
    # plain dotted/bracketed ones can be checked up front.
    for value in values:
        if "[?(" in value:
            continue
        try:
            parse_path(value)
        except MalformedPathError as exc:
            raise ConfigError(f"Invalid ignore field {value!r}: {exc.reason}") from exc
    return values


def load_config() -> KubeOwnConfig:
    """Load configuration from KUBEOWN_* environment variables."""
    return KubeOwnConfig(
        ownership=OwnershipConfig(
            field_manager=_validate_field_manager(_env("FIELD_MANAGER", DEFAULT_FIELD_MANAGER)),
            max_depth=_env_int("MAX_DEPTH", DEFAULT_MAX_DEPTH, min_val=8, max_val=512),
            ignore_fields=_validate_ignore_fields(_env_list("IGNORE_FIELDS")),
        ),
        log=LogConfig(
            level=_validate_log_level(_env("LOG_LEVEL", "info")),
        ),
    )
