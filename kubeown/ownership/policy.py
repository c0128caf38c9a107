"""Array addressing policy.

Decides, by field name alone, how elements of an array are identified:

* keyed      -- strategic-merge lists, elements identified by a merge key;
* positional -- lists whose order is the identity (``args``, ``command``);
* opaque     -- everything else, tracked only as a whole array.

Fields not listed are opaque, custom resource fields included.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from types import MappingProxyType

from kubeown.paths.selectors import ArraySelector, stringify


class ArrayAddressing(StrEnum):
    """How an array field's elements are addressed."""

    POSITIONAL = "positional"
    KEYED = "keyed"
    OPAQUE = "opaque"


STRATEGIC_MERGE_KEYS: Mapping[str, str] = MappingProxyType(
    {
        "containers": "name",
        "volumes": "name",
        "env": "name",
        "volumeMounts": "name",
        "initContainers": "name",
    }
)

POSITIONAL_FIELDS: frozenset[str] = frozenset({"args", "command"})


@dataclass(frozen=True, eq=False)
class ArrayAddressingPolicy:
    """Immutable field-name -> addressing table."""

    keyed: Mapping[str, str] = field(default_factory=lambda: STRATEGIC_MERGE_KEYS)
    positional: frozenset[str] = POSITIONAL_FIELDS

    def __post_init__(self) -> None:
        object.__setattr__(self, "keyed", MappingProxyType(dict(self.keyed)))
        object.__setattr__(self, "positional", frozenset(self.positional))

    def classify(self, field_name: str) -> ArrayAddressing:
        if field_name in self.keyed:
            return ArrayAddressing.KEYED
        if field_name in self.positional:
            return ArrayAddressing.POSITIONAL
        return ArrayAddressing.OPAQUE

    def merge_key(self, field_name: str) -> str | None:
        return self.keyed.get(field_name)

    def selector_for(self, field_name: str, element: object, index: int) -> ArraySelector:
        """Selector addressing ``element`` (found at ``index``) of array ``field_name``.

        Keyed arrays fall back to an empty (whole-array) selector when the
        element has no usable merge key.
        """
        addressing = self.classify(field_name)
        if addressing is ArrayAddressing.POSITIONAL:
            return ArraySelector.positional(index)
        if addressing is ArrayAddressing.KEYED:
            key = self.keyed[field_name]
            if isinstance(element, dict) and element.get(key) not in (None, ""):
                return ArraySelector.keyed(key, stringify(element[key]))
        return ArraySelector.empty()


DEFAULT_POLICY = ArrayAddressingPolicy()


def classify_array(field_name: str, policy: ArrayAddressingPolicy = DEFAULT_POLICY) -> ArrayAddressing:
    """Classify ``field_name`` under ``policy``."""
    return policy.classify(field_name)
