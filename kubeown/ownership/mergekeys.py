"""Resolution of ``k:{...}`` merge-key selectors against live arrays.

Kubernetes identifies elements of strategic-merge lists by a stable subset of
their own fields (``{"name": "nginx"}``, ``{"containerPort": 80,
"protocol": "TCP"}``) rather than by position. A FieldsV1 tree records those
identities as ``k:`` keys; this module finds which element of a concrete
array a given identity refers to.
"""

from __future__ import annotations

import json
from dataclasses import dataclass

from kubeown.errors import MergeKeyError
from kubeown.paths.selectors import stringify

MERGE_KEY_PREFIX = "k:"


@dataclass(frozen=True)
class MergeKey:
    """A parsed merge-key predicate. Immutable; safe to share between threads."""

    pairs: tuple[tuple[str, object], ...]

    @classmethod
    def parse(cls, token: str) -> MergeKey:
        """Parse ``k:{"name":"nginx"}`` (the ``k:`` prefix is optional)."""
        literal = token[len(MERGE_KEY_PREFIX) :] if token.startswith(MERGE_KEY_PREFIX) else token
        try:
            decoded = json.loads(literal)
        except json.JSONDecodeError as exc:
            raise MergeKeyError(f"merge key {token!r} is not valid JSON: {exc.msg}") from exc
        if not isinstance(decoded, dict) or not decoded:
            raise MergeKeyError(f"merge key {token!r} must be a non-empty JSON object")
        return cls(tuple(sorted(decoded.items(), key=lambda kv: kv[0])))

    def as_dict(self) -> dict[str, object]:
        return dict(self.pairs)

    def matches(self, item: object) -> bool:
        """True when ``item`` carries every predicate field with an equal value.

        Values are compared by their ``%v`` stringification, not deep equality.
        """
        if not isinstance(item, dict):
            return False
        return all(key in item and stringify(item[key]) == stringify(value) for key, value in self.pairs)

    def find_index(self, array: list[object]) -> int | None:
        """Index of the first matching element, or ``None``."""
        for i, item in enumerate(array):
            if self.matches(item):
                return i
        return None


def find_merge_key_index(token: str, array: list[object]) -> int | None:
    """Parse ``token`` and locate it in ``array``; ``None`` when unparseable or absent."""
    try:
        key = MergeKey.parse(token)
    except MergeKeyError:
        return None
    return key.find_index(array)
