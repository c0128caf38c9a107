"""Exception hierarchy for KubeOwn."""

from __future__ import annotations


class KubeOwnError(Exception):
    """Base class for every error raised by KubeOwn."""


class MalformedPathError(KubeOwnError):
    """Raised when a dotted/bracketed field path cannot be parsed."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"malformed field path {path!r}: {reason}")
        self.path = path
        self.reason = reason


class MergeKeyError(KubeOwnError):
    """Raised when a ``k:`` selector does not carry a JSON object literal."""


class ProjectionError(KubeOwnError):
    """Raised when a path set and an object disagree about the object's shape."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"cannot project {path!r}: {reason}")
        self.path = path
        self.reason = reason


class ConfigError(KubeOwnError, ValueError):
    """Raised when a KUBEOWN_* environment variable holds an invalid value."""
