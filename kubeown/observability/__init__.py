"""Observability helpers (structured logging)."""

from kubeown.observability.logging import bind_object, get_logger, setup_logging

__all__ = ["bind_object", "get_logger", "setup_logging"]
