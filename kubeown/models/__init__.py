"""Core data structures for KubeOwn."""

from kubeown.models.config import KubeOwnConfig, LogConfig, OwnershipConfig
from kubeown.models.fields import (
    IDENTITY_PATHS,
    ManagedFieldsEntry,
    Operation,
    OwnershipMap,
    managed_fields_of,
)

__all__ = [
    "IDENTITY_PATHS",
    "KubeOwnConfig",
    "LogConfig",
    "ManagedFieldsEntry",
    "Operation",
    "OwnershipConfig",
    "OwnershipMap",
    "managed_fields_of",
]
