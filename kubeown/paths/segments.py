"""Typed field-path segments and the immutable FieldPath value."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class FieldSegment:
    """Descend into a mapping by key."""

    name: str

    def render(self, first: bool) -> str:
        return self.name if first else f".{self.name}"


@dataclass(frozen=True)
class IndexSegment:
    """Address one array element by position."""

    index: int

    def render(self, first: bool) -> str:
        return f"[{self.index}]"


@dataclass(frozen=True)
class KeySegment:
    """Address one array element by a merge-key value (``containers[name=nginx]``)."""

    field: str
    value: str

    def render(self, first: bool) -> str:
        return f"[{self.field}={self.value}]"


Segment = FieldSegment | IndexSegment | KeySegment


@dataclass(frozen=True, order=False)
class FieldPath:
    """An ordered, hashable sequence of path segments.

    Equality is structural, so two paths built independently from the same
    segments deduplicate in a set. ``str()`` yields the dotted/bracketed form
    (``spec.containers[0].image``).
    """

    segments: tuple[Segment, ...] = ()

    @classmethod
    def of(cls, *names: str) -> FieldPath:
        """Build a path of plain field segments."""
        return cls(tuple(FieldSegment(n) for n in names))

    def child(self, name: str) -> FieldPath:
        return FieldPath((*self.segments, FieldSegment(name)))

    def at(self, index: int) -> FieldPath:
        return FieldPath((*self.segments, IndexSegment(index)))

    def keyed(self, field: str, value: str) -> FieldPath:
        return FieldPath((*self.segments, KeySegment(field, value)))

    def startswith(self, prefix: FieldPath) -> bool:
        n = len(prefix.segments)
        return self.segments[:n] == prefix.segments

    @property
    def parent(self) -> FieldPath:
        return FieldPath(self.segments[:-1])

    @property
    def is_root(self) -> bool:
        return not self.segments

    def __len__(self) -> int:
        return len(self.segments)

    def __str__(self) -> str:
        return "".join(seg.render(i == 0) for i, seg in enumerate(self.segments))

    def __repr__(self) -> str:
        return f"FieldPath({str(self)!r})"
