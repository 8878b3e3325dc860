"""Consistency module - keeps the gallery document and its image mirror in step.

This module provides:
- Duplicate shape-name recovery within a category
- Category name-box lookup, creation and synchronization
- Two-way reconciliation of category shapes and mirror images
- The gallery-wide check deciding whether a gallery may be opened
"""

from shapegallery.consistency.checker import ConsistencyChecker
from shapegallery.consistency.context import ReconciliationContext
from shapegallery.consistency.duplicates import DuplicateResolution, DuplicateResolver
from shapegallery.consistency.mirror import MirrorStore, validate_name
from shapegallery.consistency.name_box import NameBoxResolver
from shapegallery.consistency.reconciler import MirrorReconciler, ReconcileResult

__all__ = [
    "ConsistencyChecker",
    "DuplicateResolution",
    "DuplicateResolver",
    "MirrorReconciler",
    "MirrorStore",
    "NameBoxResolver",
    "ReconcileResult",
    "ReconciliationContext",
    "validate_name",
]
