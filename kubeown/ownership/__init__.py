"""Field-ownership extraction from managedFields / FieldsV1.

Submodules:
    mergekeys    -- MergeKey: parse ``k:{...}`` selectors, locate the element in a live array.
    policy       -- ArrayAddressingPolicy: keyed / positional / opaque array classification.
    extractor    -- Walk one FieldsV1 tree with a reference object, emit owned paths.
    accumulator  -- Merge a manager's entries, manifest fallback, identity fields.
    report       -- Ownership across all managers, filtered and flattened for display.
"""

from kubeown.ownership.accumulator import (
    extract_managed_fields_json,
    group_by_manager,
    manifest_paths,
    merge_fields_trees,
    owned_paths,
    paths_from_fields_json,
)
from kubeown.ownership.extractor import extract_owned_paths
from kubeown.ownership.mergekeys import MergeKey, find_merge_key_index
from kubeown.ownership.policy import DEFAULT_POLICY, ArrayAddressing, ArrayAddressingPolicy, classify_array
from kubeown.ownership.report import (
    extract_all_ownership,
    flatten_ownership,
    is_kubernetes_system_annotation,
    remove_parent_paths,
    visible_ownership,
)

__all__ = [
    "DEFAULT_POLICY",
    "ArrayAddressing",
    "ArrayAddressingPolicy",
    "MergeKey",
    "classify_array",
    "extract_all_ownership",
    "extract_managed_fields_json",
    "extract_owned_paths",
    "find_merge_key_index",
    "flatten_ownership",
    "group_by_manager",
    "is_kubernetes_system_annotation",
    "manifest_paths",
    "merge_fields_trees",
    "owned_paths",
    "paths_from_fields_json",
    "remove_parent_paths",
    "visible_ownership",
]
