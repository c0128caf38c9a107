"""Managed-fields and ownership data structures."""

from __future__ import annotations

import json
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from enum import StrEnum

from kubeown.paths.parser import as_path
from kubeown.paths.segments import FieldPath

IDENTITY_PATHS: tuple[FieldPath, ...] = (
    FieldPath.of("apiVersion"),
    FieldPath.of("kind"),
    FieldPath.of("metadata", "name"),
    FieldPath.of("metadata", "namespace"),
)


class Operation(StrEnum):
    """Kind of write that produced a managedFields entry."""

    APPLY = "Apply"
    UPDATE = "Update"


@dataclass(frozen=True)
class ManagedFieldsEntry:
    """One ``metadata.managedFields`` record as fetched from the API server.

    Immutable snapshot. ``fields_v1`` holds the raw FieldsV1 payload: JSON text
    or bytes as sent on the wire, or a mapping when the caller's client already
    decoded it. Decoding happens lazily so that one malformed entry can be
    skipped without affecting its siblings.
    """

    manager: str
    operation: Operation = Operation.APPLY
    api_version: str = ""
    fields_v1: str | bytes | Mapping[str, object] | None = None
    subresource: str = ""

    @classmethod
    def from_dict(cls, raw: Mapping[str, object]) -> ManagedFieldsEntry:
        """Build an entry from the Kubernetes wire shape (camelCase keys)."""
        try:
            operation = Operation(str(raw.get("operation") or Operation.APPLY))
        except ValueError:
            operation = Operation.UPDATE
        return cls(
            manager=str(raw.get("manager") or ""),
            operation=operation,
            api_version=str(raw.get("apiVersion") or ""),
            fields_v1=raw.get("fieldsV1"),  # type: ignore[arg-type]
            subresource=str(raw.get("subresource") or ""),
        )

    def decode(self) -> dict[str, object]:
        """Return the FieldsV1 tree.

        Raises ValueError (json.JSONDecodeError included) when the payload is
        not a JSON object, is neither text nor a mapping, or is nested too
        deeply to decode.
        """
        payload = self.fields_v1
        if payload is None:
            return {}
        if isinstance(payload, Mapping):
            return dict(payload)
        if not isinstance(payload, str | bytes | bytearray):
            raise ValueError(f"FieldsV1 for manager {self.manager!r} is a {type(payload).__name__}, not JSON text")
        try:
            tree = json.loads(payload)
        except RecursionError as exc:
            raise ValueError(f"FieldsV1 for manager {self.manager!r} is nested too deeply") from exc
        if not isinstance(tree, dict):
            raise ValueError(f"FieldsV1 for manager {self.manager!r} is not a JSON object")
        return tree


def managed_fields_of(obj: Mapping[str, object]) -> list[ManagedFieldsEntry]:
    """Read ``metadata.managedFields`` off a fetched object."""
    metadata = obj.get("metadata")
    if not isinstance(metadata, Mapping):
        return []
    raw = metadata.get("managedFields")
    if not isinstance(raw, list):
        return []
    return [ManagedFieldsEntry.from_dict(item) for item in raw if isinstance(item, Mapping)]


@dataclass(frozen=True)
class OwnershipMap:
    """The set of field paths one manager owns on one object.

    Unordered. ``from_manifest`` is True when the set was derived from the
    user manifest because no ownership metadata existed yet.
    """

    manager: str
    paths: frozenset[FieldPath] = field(default_factory=frozenset)
    from_manifest: bool = False

    def __contains__(self, path: object) -> bool:
        if isinstance(path, str | FieldPath):
            return as_path(path) in self.paths
        return False

    def __iter__(self) -> Iterator[FieldPath]:
        return iter(self.paths)

    def __len__(self) -> int:
        return len(self.paths)

    def as_strings(self) -> list[str]:
        """Sorted string form, for display and for storing in plan state."""
        return sorted(str(p) for p in self.paths)
