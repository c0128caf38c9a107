"""Projection: rebuild the minimal subset of an object covering a path set.

The projection of the live object and the projection of the desired object
over the same owned-path set are what the plan step compares, so the two
must be built identically and must never contain anything the source does
not: absent paths contribute nothing, present values (empty or zero
included) are copied as-is, and array elements keep their source positions
with unreferenced slots set to ``None``.
"""

from __future__ import annotations

from collections.abc import Iterable

from kubeown.errors import MalformedPathError, ProjectionError
from kubeown.models.config import DEFAULT_MAX_DEPTH
from kubeown.paths.access import MismatchMode, copy_value, lookup, resolve, type_name
from kubeown.paths.parser import as_path, parse_path
from kubeown.paths.segments import FieldPath, FieldSegment, IndexSegment, Segment

_STATUS_PREFIX = "status."


def project_fields(
    source: dict[str, object],
    paths: Iterable[FieldPath | str],
    *,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> dict[str, object]:
    """Project ``paths`` out of ``source``.

    Keyed selectors (``containers[name=nginx]``) are resolved against the
    source and written at the element's source index. Only the addressed
    fields are written: the merge-key field appears in the output when
    ``paths`` addresses it, as extracted and manifest path sets always do.

    Raises ProjectionError when the source's shape disagrees with a path
    (a map where an array is addressed or vice versa) or a path is deeper
    than ``max_depth``, and MalformedPathError for unparseable string paths.
    """
    projection: dict[str, object] = {}
    for raw in paths:
        path = as_path(raw)
        if path.is_root:
            continue
        if len(path) > max_depth:
            raise ProjectionError(str(path), f"path has more than {max_depth} segments")

        found = resolve(source, path, on_mismatch=MismatchMode.RAISE)
        if found is None:
            continue
        assign(projection, found.path, found.value)
    return projection


def assign(target: dict[str, object], path: FieldPath, value: object) -> None:
    """Write a deep copy of ``value`` at ``path`` in ``target``.

    ``path`` must be concrete (field and index segments only). Intermediate
    maps and arrays are created on demand; arrays are padded with ``None``.
    Raises ProjectionError when ``target`` already holds an incompatible
    container on the way.
    """
    segments = path.segments
    current: object = target
    for i, segment in enumerate(segments):
        last = i == len(segments) - 1
        nxt = None if last else segments[i + 1]

        if isinstance(segment, FieldSegment):
            if not isinstance(current, dict):
                raise ProjectionError(str(path), f"expected map at {_prefix(segments, i)}, found {type_name(current)}")
            if last:
                current[segment.name] = copy_value(value)
                return
            current = _child(current, segment.name, nxt, path, segments, i)  # type: ignore[arg-type]
            continue

        if not isinstance(segment, IndexSegment):
            raise ProjectionError(str(path), "keyed selector in a concrete path")
        if not isinstance(current, list):
            raise ProjectionError(str(path), f"expected array at {_prefix(segments, i)}, found {type_name(current)}")
        if len(current) <= segment.index:
            current.extend([None] * (segment.index + 1 - len(current)))
        if last:
            current[segment.index] = copy_value(value)
            return
        current = _child(current, segment.index, nxt, path, segments, i)  # type: ignore[arg-type]


def _child(
    container: dict[str, object] | list[object],
    key: str | int,
    nxt: Segment,
    path: FieldPath,
    segments: tuple[Segment, ...],
    i: int,
) -> object:
    wants_list = isinstance(nxt, IndexSegment)
    existing = container.get(key) if isinstance(container, dict) else container[key]  # type: ignore[arg-type, index]
    if existing is None:
        created: object = [] if wants_list else {}
        container[key] = created  # type: ignore[index]
        return created
    if wants_list and not isinstance(existing, list):
        raise ProjectionError(str(path), f"expected array at {_prefix(segments, i + 1)}, found {type_name(existing)}")
    if not wants_list and not isinstance(existing, dict):
        raise ProjectionError(str(path), f"expected map at {_prefix(segments, i + 1)}, found {type_name(existing)}")
    return existing


def _prefix(segments: tuple[Segment, ...], n: int) -> str:
    return str(FieldPath(segments[:n])) or "<root>"


def prune_to_field(status: dict[str, object] | None, field_path: str) -> dict[str, object] | None:
    """Extract one field of a status block, keeping its nesting.

    ``prune_to_field(status, "status.loadBalancer.ingress[0].ip")`` returns
    ``{"loadBalancer": {"ingress": [{"ip": ...}]}}``. Returns ``None`` when
    the field is absent, the path is malformed or the shapes disagree: a wait
    on a field simply keeps waiting.
    """
    if not status or not field_path:
        return None
    text = field_path[len(_STATUS_PREFIX) :] if field_path.startswith(_STATUS_PREFIX) else field_path
    try:
        path = parse_path(text)
    except MalformedPathError:
        return None

    found = resolve(status, path, on_mismatch=MismatchMode.SKIP)
    if found is None:
        return None
    pruned: dict[str, object] = {}
    assign(pruned, found.path, found.value)
    return pruned


def get_field_value(obj: object, path: FieldPath | str) -> object:
    """The value at ``path``, or ``None`` when absent or the shapes disagree."""
    try:
        _, value = lookup(obj, path, on_mismatch=MismatchMode.SKIP)
    except MalformedPathError:
        return None
    return value
