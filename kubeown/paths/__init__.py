"""Field paths shared by ownership extraction, projection and ignore handling.

Submodules:
    segments   -- FieldPath and its Field / Index / Key segments.
    parser     -- Dotted/bracketed string <-> FieldPath.
    selectors  -- ArraySelector (empty, positional, keyed) and %v stringification.
    access     -- Read/resolve a path in an object with configurable mismatch handling.
"""

from kubeown.paths.access import MismatchMode, Resolved, copy_value, lookup, resolve
from kubeown.paths.parser import as_path, format_path, parse_path
from kubeown.paths.segments import FieldPath, FieldSegment, IndexSegment, KeySegment, Segment
from kubeown.paths.selectors import ArraySelector, SelectorKind, stringify

__all__ = [
    "ArraySelector",
    "FieldPath",
    "FieldSegment",
    "IndexSegment",
    "KeySegment",
    "MismatchMode",
    "Resolved",
    "Segment",
    "SelectorKind",
    "as_path",
    "copy_value",
    "format_path",
    "lookup",
    "parse_path",
    "resolve",
    "stringify",
]
