"""Shape gallery - a categorized shape library mirrored to per-shape images.

Each category is a slide of a presentation holding named shapes and one
name box, and a folder of PNG exports on disk. Opening a gallery checks
and repairs the two representations before anything else touches them.
"""

from shapegallery.config import Settings, get_settings
from shapegallery.consistency import ConsistencyChecker, MirrorStore, ReconciliationContext
from shapegallery.errors import (
    AmbiguousShapeError,
    CategoryNotFoundError,
    GalleryCorruptedError,
    GalleryError,
    GalleryNotOpenError,
    GalleryOpenError,
    InvalidNameError,
    NameConflictError,
    ShapeNotFoundError,
)
from shapegallery.file_guard import FileIdentityGuard
from shapegallery.gallery import ShapeGallery
from shapegallery.models import ConsistencyIssue, ConsistencyReport, InconsistencyKind

__version__ = "0.1.0"

__all__ = [
    "AmbiguousShapeError",
    "CategoryNotFoundError",
    "ConsistencyChecker",
    "ConsistencyIssue",
    "ConsistencyReport",
    "FileIdentityGuard",
    "GalleryCorruptedError",
    "GalleryError",
    "GalleryNotOpenError",
    "GalleryOpenError",
    "InconsistencyKind",
    "InvalidNameError",
    "MirrorStore",
    "NameConflictError",
    "ReconciliationContext",
    "Settings",
    "ShapeGallery",
    "ShapeNotFoundError",
    "get_settings",
]
