"""Per-manager ownership accumulation.

An object can carry several managedFields entries for the same manager (an
``Apply`` entry, an ``Update`` entry, one per subresource). Ownership for a
manager is the union of all of them, so the trees are deep-merged before a
single extraction pass. When the manager has no ownership recorded yet (first
apply, or an object imported from another tool) the set falls back to every
field of the user-authored manifest.
"""

from __future__ import annotations

import json
from collections import defaultdict
from collections.abc import Iterable, Mapping

import structlog

from kubeown.models.config import DEFAULT_MAX_DEPTH
from kubeown.models.fields import IDENTITY_PATHS, ManagedFieldsEntry, OwnershipMap
from kubeown.observability.logging import get_logger
from kubeown.ownership.extractor import FIELD_PREFIX, KEY_PREFIX, SELF_MARKER, extract_owned_paths, is_leaf
from kubeown.ownership.policy import DEFAULT_POLICY, ArrayAddressing, ArrayAddressingPolicy
from kubeown.paths.access import copy_value
from kubeown.paths.segments import FieldPath

_logger = get_logger("ownership.accumulator")


def group_by_manager(entries: Iterable[ManagedFieldsEntry]) -> dict[str, list[ManagedFieldsEntry]]:
    """Group entries by manager name, preserving their original order."""
    grouped: dict[str, list[ManagedFieldsEntry]] = defaultdict(list)
    for entry in entries:
        grouped[entry.manager].append(entry)
    return dict(grouped)


def decode_fields_tree(
    entry: ManagedFieldsEntry,
    logger: structlog.stdlib.BoundLogger | None = None,
) -> dict[str, object] | None:
    """Decode one entry's FieldsV1 payload; ``None`` (and a warning) when malformed."""
    try:
        return entry.decode()
    except ValueError as exc:
        (logger if logger is not None else _logger).warning(
            "fields_v1_decode_failed",
            manager=entry.manager,
            operation=str(entry.operation),
            api_version=entry.api_version,
            error=str(exc),
        )
        return None


def merge_fields_trees(dest: dict[str, object], source: Mapping[str, object]) -> dict[str, object]:
    """Deep-merge ``source`` into ``dest`` and return ``dest``.

    Mappings present on both sides merge level by level; any other value from
    ``source`` overwrites. ``source`` is never aliased into ``dest``. The walk
    keeps its own stack, so arbitrarily deep trees merge without recursion.
    """
    pending: list[tuple[dict[str, object], Mapping[str, object]]] = [(dest, source)]
    while pending:
        into, src = pending.pop()
        for key, src_val in src.items():
            dest_val = into.get(key)
            if isinstance(dest_val, dict) and isinstance(src_val, Mapping):
                pending.append((dest_val, src_val))
            else:
                into[key] = copy_value(src_val)
    return dest


def merged_tree_for(
    entries: Iterable[ManagedFieldsEntry],
    manager: str,
    logger: structlog.stdlib.BoundLogger | None = None,
) -> dict[str, object]:
    """Union of every decodable FieldsV1 tree ``manager`` holds on the object."""
    merged: dict[str, object] = {}
    for entry in group_by_manager(entries).get(manager, []):
        tree = decode_fields_tree(entry, logger)
        if tree:
            merge_fields_trees(merged, tree)
    return merged


def manifest_paths(
    manifest: Mapping[str, object],
    *,
    policy: ArrayAddressingPolicy = DEFAULT_POLICY,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> set[FieldPath]:
    """Every field path present in a user-authored manifest.

    Arrays follow the addressing policy conservatively: keyed arrays are
    addressed per element only when *every* element is a mapping with a
    non-empty merge key, positional arrays per index, and everything else
    (including empty arrays) as a single whole-array path.
    """
    paths: set[FieldPath] = set()
    _walk_manifest(manifest, FieldPath(), policy, 0, max_depth, paths)
    return paths


def _walk_manifest(
    node: Mapping[str, object],
    prefix: FieldPath,
    policy: ArrayAddressingPolicy,
    depth: int,
    max_depth: int,
    out: set[FieldPath],
) -> None:
    if depth >= max_depth and not prefix.is_root:
        out.add(prefix)
        return

    for key, value in node.items():
        path = prefix.child(key)
        if isinstance(value, dict):
            if value:
                _walk_manifest(value, path, policy, depth + 1, max_depth, out)
            else:
                out.add(path)
        elif isinstance(value, list):
            _walk_manifest_array(key, value, path, policy, depth, max_depth, out)
        else:
            out.add(path)


def _walk_manifest_array(
    key: str,
    items: list[object],
    path: FieldPath,
    policy: ArrayAddressingPolicy,
    depth: int,
    max_depth: int,
    out: set[FieldPath],
) -> None:
    addressing = policy.classify(key)
    if not items or addressing is ArrayAddressing.OPAQUE:
        out.add(path)
        return

    element_paths: list[tuple[FieldPath, object]] = []
    for i, item in enumerate(items):
        selector = policy.selector_for(key, item, i)
        if addressing is ArrayAddressing.KEYED:
            if not selector.field:
                # One element without a usable merge key: track the whole array.
                out.add(path)
                return
            element_paths.append((path.keyed(selector.field, selector.value), item))
        else:
            element_paths.append((path.at(i), item))

    for element_path, item in element_paths:
        if isinstance(item, dict) and item:
            _walk_manifest(item, element_path, policy, depth + 1, max_depth, out)
        else:
            out.add(element_path)


def owned_paths(
    entries: Iterable[ManagedFieldsEntry],
    manager: str,
    *,
    reference: object = None,
    manifest: Mapping[str, object] | None = None,
    policy: ArrayAddressingPolicy = DEFAULT_POLICY,
    max_depth: int = DEFAULT_MAX_DEPTH,
    logger: structlog.stdlib.BoundLogger | None = None,
) -> OwnershipMap:
    """Compute the OwnershipMap of ``manager``.

    ``reference`` resolves ``k:`` selectors (pass the object the entries were
    fetched with, or a dry-run result). ``manifest`` is the user-authored
    object used when the manager has no ownership recorded. Malformed entries
    are skipped individually. The identity fields are always included.
    """
    log = logger if logger is not None else _logger
    merged = merged_tree_for(entries, manager, log)

    from_manifest = not merged
    if from_manifest:
        log.debug("ownership_fallback_to_manifest", manager=manager, has_manifest=manifest is not None)
        paths = manifest_paths(manifest or {}, policy=policy, max_depth=max_depth)
    else:
        paths = extract_owned_paths(merged, reference, max_depth=max_depth, logger=logger)

    paths.update(IDENTITY_PATHS)
    return OwnershipMap(manager=manager, paths=frozenset(paths), from_manifest=from_manifest)


def extract_managed_fields_json(entries: Iterable[ManagedFieldsEntry], manager: str) -> str:
    """The merged FieldsV1 tree of ``manager`` as compact JSON; ``"{}"`` when none."""
    merged = merged_tree_for(entries, manager)
    return json.dumps(merged, separators=(",", ":"), sort_keys=True)


def paths_from_fields_json(text: str) -> list[str]:
    """Paths in a stored FieldsV1 JSON string, without a reference object.

    With nothing to resolve ``k:`` selectors against, their JSON literal is
    appended to the path verbatim (``spec.ports{"port":80}.protocol``). The
    result is for display and comparison of stored ownership only.

    Raises ValueError when ``text`` is not a JSON object.
    """
    tree = json.loads(text)
    if not isinstance(tree, dict):
        raise ValueError("managed fields JSON must be an object")
    out: list[str] = []
    _walk_unresolved(tree, "", out)
    return sorted(out)


def _walk_unresolved(tree: Mapping[str, object], prefix: str, out: list[str]) -> None:
    for key, value in tree.items():
        if key.startswith(FIELD_PREFIX):
            name = key[len(FIELD_PREFIX) :]
            path = f"{prefix}.{name}" if prefix else name
            if is_leaf(value):
                out.append(path)
            elif isinstance(value, Mapping):
                _walk_unresolved(value, path, out)
        elif key.startswith(KEY_PREFIX) and isinstance(value, Mapping):
            path = prefix + key[len(KEY_PREFIX) :]
            if is_leaf(value):
                out.append(path)
            else:
                _walk_unresolved(value, path, out)
        elif key == SELF_MARKER:
            continue
