"""Configuration data structures."""

from __future__ import annotations

from dataclasses import dataclass, field

DEFAULT_FIELD_MANAGER = "kubeown"
DEFAULT_MAX_DEPTH = 64


@dataclass
class OwnershipConfig:
    """Ownership extraction and projection configuration."""

    field_manager: str = DEFAULT_FIELD_MANAGER
    max_depth: int = DEFAULT_MAX_DEPTH
    ignore_fields: list[str] = field(default_factory=list)


@dataclass
class LogConfig:
    """Logging configuration."""

    level: str = "info"


@dataclass
class KubeOwnConfig:
    """Top-level KubeOwn configuration."""

    ownership: OwnershipConfig = field(default_factory=OwnershipConfig)
    log: LogConfig = field(default_factory=LogConfig)
