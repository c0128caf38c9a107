"""Dotted/bracketed path parsing.

Grammar accepted by :func:`parse_path`::

    path     := part ("." part)*
    part     := name selector*
    selector := "[" digits "]" | "[" field "=" value "]"

Dots inside brackets do not split, so ``env[name=app.kubernetes.io]`` is a
single keyed selector. A part that *starts* with ``[`` has no field name to
attach the selector to and is kept verbatim as a literal field name
(``[0]`` -> field ``"[0]"``).
"""

from __future__ import annotations

from kubeown.errors import MalformedPathError
from kubeown.paths.segments import FieldPath, FieldSegment, IndexSegment, KeySegment, Segment


def parse_path(text: str) -> FieldPath:
    """Parse ``a.b[2].c`` into a :class:`FieldPath`.

    Raises MalformedPathError on empty input, empty segments, unterminated
    brackets and non-numeric index content.
    """
    if not text:
        raise MalformedPathError(text, "empty path")

    segments: list[Segment] = []
    for part in _split_parts(text):
        segments.extend(_parse_part(text, part))
    return FieldPath(tuple(segments))


def format_path(path: FieldPath) -> str:
    """Render a path back to its dotted/bracketed string form."""
    return str(path)


def as_path(path: FieldPath | str) -> FieldPath:
    """Accept either representation and return a FieldPath."""
    if isinstance(path, FieldPath):
        return path
    return parse_path(path)


def _split_parts(text: str) -> list[str]:
    parts: list[str] = []
    depth = 0
    start = 0
    for i, ch in enumerate(text):
        if ch == "[":
            depth += 1
        elif ch == "]" and depth:
            depth -= 1
        elif ch == "." and depth == 0:
            parts.append(text[start:i])
            start = i + 1
    parts.append(text[start:])
    return parts


def _parse_part(text: str, part: str) -> list[Segment]:
    if not part:
        raise MalformedPathError(text, "empty segment")

    bracket = part.find("[")
    if bracket <= 0:
        return [FieldSegment(part)]

    segments: list[Segment] = [FieldSegment(part[:bracket])]
    rest = part[bracket:]
    while rest:
        if not rest.startswith("["):
            raise MalformedPathError(text, f"unexpected {rest!r} after ']' in {part!r}")
        end = rest.find("]")
        if end == -1:
            raise MalformedPathError(text, f"unterminated '[' in {part!r}")
        segments.append(_parse_selector(text, rest[1:end]))
        rest = rest[end + 1 :]
    return segments


def _parse_selector(text: str, token: str) -> Segment:
    if "=" in token:
        field, value = token.split("=", 1)
        if not field:
            raise MalformedPathError(text, f"empty merge key field in [{token}]")
        return KeySegment(field, value)
    if token.isascii() and token.isdigit():
        return IndexSegment(int(token))
    raise MalformedPathError(text, f"non-numeric index {token!r}")
