"""Ownership across all field managers on one object.

Used for visibility (who owns what) and for spotting ownership transitions
between plan and apply. Status fields and annotations the control plane
writes on its own are filtered out of the visible report because they change
outside anyone's configuration.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from kubeown.models.config import DEFAULT_MAX_DEPTH
from kubeown.models.fields import ManagedFieldsEntry
from kubeown.ownership.accumulator import group_by_manager, merged_tree_for
from kubeown.ownership.extractor import extract_owned_paths
from kubeown.paths.segments import FieldPath, FieldSegment

SYSTEM_ANNOTATION_PREFIXES: tuple[str, ...] = (
    "kubectl.kubernetes.io/",
    "deployment.kubernetes.io/",
    "autoscaling.alpha.kubernetes.io/",
    "control-plane.alpha.kubernetes.io/",
)

_ANNOTATIONS = FieldPath.of("metadata", "annotations")
_STATUS = FieldSegment("status")


def extract_all_ownership(
    entries: Iterable[ManagedFieldsEntry],
    reference: object,
    *,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> dict[FieldPath, list[str]]:
    """Map every owned path to the sorted list of managers owning it."""
    owners: dict[FieldPath, set[str]] = {}
    entries = list(entries)
    for manager in group_by_manager(entries):
        merged = merged_tree_for(entries, manager)
        for path in extract_owned_paths(merged, reference, max_depth=max_depth):
            owners.setdefault(path, set()).add(manager)
    return {path: sorted(managers) for path, managers in owners.items()}


def is_status_path(path: FieldPath) -> bool:
    return bool(path.segments) and path.segments[0] == _STATUS


def is_kubernetes_system_annotation(path: FieldPath | str) -> bool:
    """True for ``metadata.annotations.<key>`` where ``<key>`` is written by the control plane."""
    if isinstance(path, str):
        prefix = f"{_ANNOTATIONS}."
        key = path[len(prefix) :] if path.startswith(prefix) else ""
    else:
        if len(path) != len(_ANNOTATIONS) + 1 or not path.startswith(_ANNOTATIONS):
            return False
        last = path.segments[-1]
        key = last.name if isinstance(last, FieldSegment) else ""
    return any(key.startswith(p) for p in SYSTEM_ANNOTATION_PREFIXES)


def visible_ownership(ownership: Mapping[FieldPath, list[str]]) -> dict[FieldPath, list[str]]:
    """Drop status paths and system annotations from an ownership report."""
    return {
        path: managers
        for path, managers in ownership.items()
        if not is_status_path(path) and not is_kubernetes_system_annotation(path)
    }


def flatten_ownership(ownership: Mapping[FieldPath, list[str]]) -> dict[str, str]:
    """``path -> "manager-a,manager-b"`` with string keys, for display."""
    return {str(path): ",".join(managers) for path, managers in ownership.items() if managers}


def remove_parent_paths(flat: Mapping[str, str]) -> dict[str, str]:
    """Drop entries whose path is a dotted parent of another entry.

    ``{"data": "a", "data.owner": "b"}`` becomes ``{"data.owner": "b"}`` so
    that a parent's owner never masks a child's.
    """
    result = dict(flat)
    for path in flat:
        parts = path.split(".")
        for i in range(1, len(parts)):
            result.pop(".".join(parts[:i]), None)
    return result
