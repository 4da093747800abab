"""
Layered settings merging.

Resolves ``extends`` chains of JSON-with-comments files into one settings
mapping with per-key provenance, plus the diff helpers used to reconcile
external edits of the merged result.
"""

from layered_settings.merging.equality import ObjectDiff, deep_equal, diff_objects
from layered_settings.merging.jsonc import JsoncParseError, parse_jsonc
from layered_settings.merging.lcs import ArrayDiff, ArrayDiffKind, diff_arrays
from layered_settings.merging.merger import (
    ChainEntry,
    ConfigMergerCore,
    MergerCallbacks,
    UrlFetcher,
    is_language_key,
    normalize_path,
)
from layered_settings.merging.types import (
    ArraySegmentProvenance,
    KeyProvenance,
    LayeredConfig,
    OverrideEntry,
    ProvenanceMap,
    Setting,
)

__all__ = [
    "ArrayDiff",
    "ArrayDiffKind",
    "ArraySegmentProvenance",
    "ChainEntry",
    "ConfigMergerCore",
    "JsoncParseError",
    "KeyProvenance",
    "LayeredConfig",
    "MergerCallbacks",
    "ObjectDiff",
    "OverrideEntry",
    "ProvenanceMap",
    "Setting",
    "UrlFetcher",
    "deep_equal",
    "diff_arrays",
    "diff_objects",
    "is_language_key",
    "normalize_path",
    "parse_jsonc",
]
