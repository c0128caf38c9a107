"""Flat, human-readable rendering of projections for plan output."""

from __future__ import annotations

from collections.abc import Iterable

from kubeown.paths.access import MismatchMode, lookup
from kubeown.paths.parser import as_path
from kubeown.paths.segments import FieldPath
from kubeown.paths.selectors import stringify


def format_value_for_display(value: object) -> str:
    """``<nil>``, ``true``/``false``, plain numbers and strings, compact JSON for containers."""
    return stringify(value)


def flatten_projection(projection: dict[str, object], paths: Iterable[FieldPath | str]) -> dict[str, str]:
    """Map each path present in ``projection`` to its display string.

    A projection diff rendered this way shows one line per owned field
    instead of a nested document.
    """
    result: dict[str, str] = {}
    for raw in paths:
        path = as_path(raw)
        found, value = lookup(projection, path, on_mismatch=MismatchMode.SKIP)
        if found:
            result[str(path)] = format_value_for_display(value)
    return result
