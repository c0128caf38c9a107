"""Array selectors: how one path segment addresses an array."""

from __future__ import annotations

import json
import math
from dataclasses import dataclass
from enum import StrEnum

from kubeown.paths.segments import IndexSegment, KeySegment, Segment


class SelectorKind(StrEnum):
    """Tag of an :class:`ArraySelector`."""

    EMPTY = "empty"
    POSITIONAL = "positional"
    KEYED = "keyed"


def stringify(value: object) -> str:
    """Render a decoded JSON value the way Go's ``%v`` renders it.

    Merge-key matching compares values as strings so that ``80`` (int from a
    Python decoder) and ``80.0`` (float from a Go decoder) and ``"80"`` agree.
    """
    if value is None:
        return "<nil>"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and math.isfinite(value) and value.is_integer():
        return str(int(value))
    if isinstance(value, dict | list):
        return json.dumps(value, separators=(",", ":"), sort_keys=True)
    return str(value)


@dataclass(frozen=True)
class ArraySelector:
    """Tagged variant ``Empty | Positional(index) | Keyed(field, value)``."""

    kind: SelectorKind
    index: int = -1
    field: str = ""
    value: str = ""

    @classmethod
    def empty(cls) -> ArraySelector:
        return cls(SelectorKind.EMPTY)

    @classmethod
    def positional(cls, index: int) -> ArraySelector:
        return cls(SelectorKind.POSITIONAL, index=index)

    @classmethod
    def keyed(cls, field: str, value: str) -> ArraySelector:
        return cls(SelectorKind.KEYED, field=field, value=value)

    @classmethod
    def for_segment(cls, segment: Segment) -> ArraySelector | None:
        """Selector for an array-addressing segment, ``None`` for field segments."""
        if isinstance(segment, IndexSegment):
            return cls.positional(segment.index)
        if isinstance(segment, KeySegment):
            return cls.keyed(segment.field, segment.value)
        return None

    def locate(self, array: list[object]) -> int | None:
        """Index of the addressed element in ``array``, or ``None`` when absent.

        An empty selector addresses the array as a whole and never an element.
        """
        if self.kind is SelectorKind.POSITIONAL:
            return self.index if 0 <= self.index < len(array) else None
        if self.kind is SelectorKind.KEYED:
            for i, item in enumerate(array):
                if isinstance(item, dict) and self.field in item and stringify(item[self.field]) == self.value:
                    return i
        return None
