"""
Translation stores: reading, reconciling, regrouping and writing.
"""

from .generator import LocalePlan, TranslationGenerator
from .reconciler import (
    apply_translations,
    default_value,
    find_missing_keys,
    is_missing,
    merge_existing,
    reconcile,
)
from .serializer import TranslationSerializer, ensure_directory
from .store import TranslationStore
from .tree import (
    Branch,
    Leaf,
    TranslationUnit,
    build_units,
    flatten_tree,
    flatten_units,
)

__all__ = [
    "Branch",
    "Leaf",
    "LocalePlan",
    "TranslationGenerator",
    "TranslationSerializer",
    "TranslationStore",
    "TranslationUnit",
    "apply_translations",
    "build_units",
    "default_value",
    "ensure_directory",
    "find_missing_keys",
    "flatten_tree",
    "flatten_units",
    "is_missing",
    "merge_existing",
    "reconcile",
]
