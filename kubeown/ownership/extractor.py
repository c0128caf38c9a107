"""FieldsV1 ownership-tree walker.

A FieldsV1 tree is a nested JSON object whose keys follow the
structured-merge-diff fieldset encoding:

    f:<name>     a named field; value is the subtree owned below it
    k:<json>     a list element selected by a key/value predicate
    v:<json>     a member of a set-valued list (e.g. finalizers)
    i:<n>        a list element selected by position
    .            marker: the enclosing field itself is owned

The walk pairs the tree with a reference object (normally the live object
the tree was fetched with) so that ``k:`` identities can be turned into
concrete array indices. Unknown key shapes are skipped without aborting.
"""

from __future__ import annotations

from collections.abc import Mapping

import structlog

from kubeown.errors import MergeKeyError
from kubeown.models.config import DEFAULT_MAX_DEPTH
from kubeown.ownership.mergekeys import MergeKey
from kubeown.paths.segments import FieldPath

FIELD_PREFIX = "f:"
KEY_PREFIX = "k:"
VALUE_PREFIX = "v:"
INDEX_PREFIX = "i:"
SELF_MARKER = "."


def extract_owned_paths(
    fields_tree: Mapping[str, object],
    reference: object,
    *,
    prefix: FieldPath | None = None,
    max_depth: int = DEFAULT_MAX_DEPTH,
    logger: structlog.stdlib.BoundLogger | None = None,
) -> set[FieldPath]:
    """Return the flat set of leaf paths owned under ``fields_tree``.

    ``reference`` is only consulted to resolve ``k:`` selectors; plain ``f:``
    traversal works without it. Branches whose shape disagrees with the
    reference are skipped, never raised. Subtrees deeper than ``max_depth``
    are reported as owned at the depth where the walk stopped.
    """
    paths: set[FieldPath] = set()
    _walk(fields_tree, prefix if prefix is not None else FieldPath(), reference, 0, max_depth, logger, paths)
    return paths


def is_leaf(node: object) -> bool:
    """True for ``{}``, ``{".": {}}`` and non-mapping values."""
    if not isinstance(node, Mapping) or not node:
        return True
    return len(node) == 1 and SELF_MARKER in node


def _walk(
    tree: Mapping[str, object],
    prefix: FieldPath,
    reference: object,
    depth: int,
    max_depth: int,
    log: structlog.stdlib.BoundLogger | None,
    out: set[FieldPath],
) -> None:
    if depth >= max_depth:
        if not prefix.is_root:
            out.add(prefix)
        if log is not None:
            log.debug("ownership_depth_limit", path=str(prefix), max_depth=max_depth)
        return

    for key, value in tree.items():
        if key.startswith(FIELD_PREFIX):
            name = key[len(FIELD_PREFIX) :]
            path = prefix.child(name)
            if is_leaf(value):
                out.add(path)
                continue
            child_ref = reference.get(name) if isinstance(reference, dict) else None
            _walk(value, path, child_ref, depth + 1, max_depth, log, out)  # type: ignore[arg-type]

        elif key.startswith(KEY_PREFIX):
            if not isinstance(reference, list):
                if log is not None:
                    log.debug("merge_key_reference_not_array", path=str(prefix), selector=key)
                continue
            try:
                merge_key = MergeKey.parse(key)
            except MergeKeyError as exc:
                if log is not None:
                    log.debug("merge_key_unparseable", path=str(prefix), error=str(exc))
                continue
            index = merge_key.find_index(reference)
            if index is None:
                if log is not None:
                    log.debug("merge_key_unmatched", path=str(prefix), selector=key)
                continue
            _descend_element(value, prefix.at(index), reference[index], depth, max_depth, log, out)

        elif key.startswith(INDEX_PREFIX):
            raw = key[len(INDEX_PREFIX) :]
            if not (raw.isascii() and raw.isdigit()):
                continue
            index = int(raw)
            element = reference[index] if isinstance(reference, list) and index < len(reference) else None
            _descend_element(value, prefix.at(index), element, depth, max_depth, log, out)

        elif key.startswith(VALUE_PREFIX):
            # Set members have no stable path of their own.
            if not prefix.is_root:
                out.add(prefix)

        # "." is consumed by the parent's leaf test; other shapes are ignored.


def _descend_element(
    value: object,
    path: FieldPath,
    element: object,
    depth: int,
    max_depth: int,
    log: structlog.stdlib.BoundLogger | None,
    out: set[FieldPath],
) -> None:
    if not isinstance(value, Mapping):
        return
    if is_leaf(value):
        out.add(path)
        return
    _walk(value, path, element, depth + 1, max_depth, log, out)  # type: ignore[arg-type]
