"""User-declared ignore fields.

An ignore pattern releases a field to other managers: it is dropped from the
owned-path set (so drift on it is not reported) and stripped from the apply
payload (so this manager stops claiming it). Patterns use the dotted/bracketed
path syntax plus JSONPath equality predicates::

    metadata.annotations
    spec.replicas
    webhooks[0].clientConfig.caBundle
    spec.containers[?(@.name=='nginx')].resources
"""

from __future__ import annotations

import copy
import re
from collections.abc import Iterable

from kubeown.errors import MalformedPathError
from kubeown.paths.access import MismatchMode, resolve
from kubeown.paths.parser import as_path, parse_path
from kubeown.paths.segments import FieldPath, FieldSegment, Segment
from kubeown.paths.selectors import ArraySelector, stringify

_PREDICATE_RE = re.compile(r"""\[\?\(@\.([^=]+)==['"]([^'"]+)['"]\)\]""")


def resolve_predicates(pattern: str, obj: object) -> str:
    """Replace ``[?(@.field=='value')]`` predicates with ``[index]``, left to right.

    Resolution stops at the first predicate that cannot be resolved against
    ``obj``; the rest of the pattern is returned unchanged.
    """
    result = pattern
    while match := _PREDICATE_RE.search(result):
        field, value = match.group(1), match.group(2)
        array: object = obj
        if match.start() > 0:
            try:
                found = resolve(obj, parse_path(result[: match.start()]), on_mismatch=MismatchMode.SKIP)
            except MalformedPathError:
                break
            array = found.value if found is not None else None
        if not isinstance(array, list):
            break
        index = next(
            (i for i, item in enumerate(array) if isinstance(item, dict) and field in item and stringify(item[field]) == value),
            None,
        )
        if index is None:
            break
        result = f"{result[: match.start()]}[{index}]{result[match.end() :]}"
    return result


def _pattern_path(pattern: str, obj: object) -> FieldPath | None:
    if "[?(" in pattern:
        if obj is None:
            return None
        pattern = resolve_predicates(pattern, obj)
        if "[?(" in pattern:
            return None
    try:
        return parse_path(pattern)
    except MalformedPathError:
        return None


def path_matches_ignore_pattern(path: FieldPath | str, pattern: str, obj: object = None) -> bool:
    """True when ``pattern`` equals ``path`` or is a segment-wise prefix of it.

    ``metadata.annotations`` matches ``metadata.annotations.team`` but
    ``metadata.label`` does not match ``metadata.labels``. Selectors must
    match exactly; a pattern segment with no selector covers every element.
    """
    pattern_path = _pattern_path(pattern, obj)
    if pattern_path is None:
        return False
    return as_path(path).startswith(pattern_path)


def filter_ignored_paths(
    paths: Iterable[FieldPath | str],
    ignore_patterns: Iterable[str],
    obj: object = None,
) -> list[FieldPath]:
    """Paths not covered by any ignore pattern, in input order."""
    patterns = [p for p in (_pattern_path(raw, obj) for raw in ignore_patterns) if p is not None]
    kept: list[FieldPath] = []
    for raw in paths:
        path = as_path(raw)
        if not any(path.startswith(p) for p in patterns):
            kept.append(path)
    return kept


def remove_fields(obj: dict[str, object], ignore_patterns: Iterable[str]) -> dict[str, object]:
    """Deep copy of ``obj`` with every ignored field removed.

    A map left empty by a removal is removed too: an empty map in an SSA
    payload claims ownership of the map itself. Patterns that match nothing
    are no-ops.
    """
    result = copy.deepcopy(obj)
    for pattern in ignore_patterns:
        path = _pattern_path(pattern, result)
        if path is not None and not path.is_root:
            _remove(result, path.segments)
    return result


def _remove(node: object, segments: tuple[Segment, ...]) -> None:
    segment, rest = segments[0], segments[1:]

    if isinstance(segment, FieldSegment):
        if not isinstance(node, dict) or segment.name not in node:
            return
        if not rest:
            del node[segment.name]
            return
        child = node[segment.name]
        _remove(child, rest)
        if isinstance(child, dict) and not child:
            del node[segment.name]
        return

    if not isinstance(node, list):
        return
    selector = ArraySelector.for_segment(segment)
    index = selector.locate(node) if selector is not None else None
    if index is None:
        return
    if not rest:
        del node[index]
        return
    _remove(node[index], rest)
