"""structlog setup for the kubeown CLI and for library callers that want it.

Library code never configures logging: it asks :func:`get_logger` for a
component logger, and only the CLI (or an embedding application) calls
:func:`setup_logging`. Events are JSON lines on stderr so that stdout stays
reserved for command output.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Mapping, MutableMapping, Set
from typing import IO, Any

import structlog

from kubeown.paths.segments import FieldPath


def _field_paths_to_text(_logger: Any, _method: str, event_dict: MutableMapping[str, Any]) -> MutableMapping[str, Any]:
    """Render FieldPath values, and sets of them, as dotted strings."""
    for key, value in event_dict.items():
        if isinstance(value, FieldPath):
            event_dict[key] = str(value)
        elif isinstance(value, Set) and value and all(isinstance(p, FieldPath) for p in value):
            event_dict[key] = sorted(str(p) for p in value)
    return event_dict


def setup_logging(level: str = "info", *, stream: IO[str] | None = None) -> None:
    """Configure structlog to write JSON lines at ``level`` or above."""
    log_level = getattr(logging, level.upper(), logging.INFO)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            _field_paths_to_text,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso", utc=True, key="ts"),
            structlog.processors.JSONRenderer(sort_keys=True),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=stream if stream is not None else sys.stderr),
        cache_logger_on_first_use=False,
    )


def get_logger(component: str) -> structlog.stdlib.BoundLogger:
    """Logger bound to ``component`` (``cli``, ``ownership.accumulator``, ...)."""
    return structlog.get_logger(component=component)  # type: ignore[no-any-return]


def bind_object(logger: structlog.stdlib.BoundLogger, obj: Mapping[str, object] | None) -> structlog.stdlib.BoundLogger:
    """Bind the Kubernetes identity of ``obj`` (kind, namespace, name) to ``logger``."""
    if not obj:
        return logger
    metadata = obj.get("metadata")
    if not isinstance(metadata, Mapping):
        metadata = {}
    return logger.bind(
        kind=obj.get("kind", ""),
        namespace=metadata.get("namespace", ""),
        name=metadata.get("name", ""),
    )
