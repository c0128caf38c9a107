"""Projection of objects onto owned-path sets.

Submodules:
    projector  -- project_fields: minimal sub-object covering a path set.
    ignore     -- User ignore patterns: filter owned paths, strip apply payloads.
    display    -- Flat one-line-per-field rendering of a projection.
"""

from kubeown.projection.display import flatten_projection, format_value_for_display
from kubeown.projection.ignore import (
    filter_ignored_paths,
    path_matches_ignore_pattern,
    remove_fields,
    resolve_predicates,
)
from kubeown.projection.projector import assign, get_field_value, project_fields, prune_to_field

__all__ = [
    "assign",
    "filter_ignored_paths",
    "flatten_projection",
    "format_value_for_display",
    "get_field_value",
    "path_matches_ignore_pattern",
    "project_fields",
    "prune_to_field",
    "remove_fields",
    "resolve_predicates",
]
