"""Exceptions raised by the shape gallery."""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from shapegallery.models import ConsistencyReport


class GalleryError(Exception):
    """Base class for all gallery errors."""


class GalleryOpenError(GalleryError):
    """The gallery document could not be loaded."""


class GalleryNotOpenError(GalleryError):
    """An operation needs an open gallery."""


class GalleryCorruptedError(GalleryError):
    """The consistency check failed outside imported-file mode.

    Repairs have already been written to disk; the gallery must still be
    treated as unusable.
    """

    def __init__(self, report: "ConsistencyReport"):
        super().__init__(report.summary())
        self.report = report


class CategoryNotFoundError(GalleryError, KeyError):
    """No category with the given name."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""


class ShapeNotFoundError(GalleryError, KeyError):
    """No shape with the given name in the category."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""


class AmbiguousShapeError(GalleryError):
    """Several shapes share the requested name."""


class NameConflictError(GalleryError):
    """The target name is already taken by a category, shape or folder."""


class InvalidNameError(GalleryError, ValueError):
    """A category or shape name cannot be used as a file or folder name."""
