"""Shared read access to JSON-like objects by FieldPath.

Every caller that needs to look a path up in an object goes through
:func:`resolve`: ownership projection, status-field extraction and ignore
handling. Callers choose what a shape disagreement means through
:class:`MismatchMode`; an absent key, an out-of-range index, an unmatched
merge key or a JSON null on the way is always just "not present".

:func:`copy_value` copies what was found without recursing, so a value
nested deeper than the interpreter stack is still copied.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from kubeown.errors import ProjectionError
from kubeown.paths.parser import as_path
from kubeown.paths.segments import FieldPath, FieldSegment, IndexSegment, Segment
from kubeown.paths.selectors import ArraySelector


class MismatchMode(StrEnum):
    """What to do when the object's shape disagrees with the path."""

    SKIP = "skip"
    RAISE = "raise"


@dataclass(frozen=True)
class Resolved:
    """A path located in a concrete object.

    ``path`` has every keyed selector replaced by the element's index in the
    object.
    """

    path: FieldPath
    value: object


def type_name(value: object) -> str:
    if isinstance(value, dict):
        return "map"
    if isinstance(value, list):
        return "array"
    if value is None:
        return "null"
    return type(value).__name__


def resolve(
    obj: object,
    path: FieldPath | str,
    *,
    on_mismatch: MismatchMode = MismatchMode.SKIP,
) -> Resolved | None:
    """Locate ``path`` in ``obj``; ``None`` when any segment is absent."""
    path = as_path(path)
    current = obj
    concrete: list[Segment] = []

    for segment in path.segments:
        if current is None:
            # JSON null is "not set", not a shape disagreement.
            return None
        if isinstance(segment, FieldSegment):
            if not isinstance(current, dict):
                return _mismatch(on_mismatch, path, concrete, "map", current)
            if segment.name not in current:
                return None
            current = current[segment.name]
            concrete.append(segment)
            continue

        if not isinstance(current, list):
            return _mismatch(on_mismatch, path, concrete, "array", current)
        selector = ArraySelector.for_segment(segment)
        index = selector.locate(current) if selector is not None else None
        if index is None:
            return None
        concrete.append(IndexSegment(index))
        current = current[index]

    return Resolved(FieldPath(tuple(concrete)), current)


def lookup(
    obj: object,
    path: FieldPath | str,
    *,
    on_mismatch: MismatchMode = MismatchMode.SKIP,
) -> tuple[bool, object]:
    """Return ``(found, value)`` for ``path`` in ``obj``."""
    found = resolve(obj, path, on_mismatch=on_mismatch)
    if found is None:
        return False, None
    return True, found.value


def _mismatch(
    mode: MismatchMode,
    path: FieldPath,
    concrete: list[Segment],
    expected: str,
    actual: object,
) -> None:
    if mode is MismatchMode.RAISE:
        at = str(FieldPath(tuple(concrete))) or "<root>"
        raise ProjectionError(str(path), f"expected {expected} at {at}, found {type_name(actual)}")
    return None


def copy_value(value: object) -> Any:
    """Deep copy of a JSON-like value; maps and arrays are copied iteratively."""
    if not isinstance(value, dict | list):
        return copy.deepcopy(value)
    root: dict[Any, Any] | list[Any] = {} if isinstance(value, dict) else []
    pending: list[tuple[dict[Any, Any] | list[Any], dict[Any, Any] | list[Any]]] = [(value, root)]
    while pending:
        source, target = pending.pop()
        items = source.items() if isinstance(source, dict) else enumerate(source)
        for key, item in items:
            if isinstance(item, dict | list):
                child: Any = {} if isinstance(item, dict) else []
                pending.append((item, child))
            else:
                child = copy.deepcopy(item)
            if isinstance(target, dict):
                target[key] = child
            else:
                target.append(child)
    return root
