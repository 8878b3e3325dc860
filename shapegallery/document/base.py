"""Abstract interface of the host document that stores the gallery.

The consistency engine and the gallery only talk to these three classes,
so any document backend that can name shapes, hold text, copy shapes
between containers and export a shape to an image can host a gallery.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Sequence


class GalleryShape(ABC):
    """A named shape inside a category container."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Shape name, its identity within the category."""

    @name.setter
    @abstractmethod
    def name(self, value: str) -> None: ...

    @property
    @abstractmethod
    def shape_id(self) -> int:
        """Container-unique numeric id of the shape."""

    @property
    @abstractmethod
    def is_text_box(self) -> bool:
        """Whether the shape is a plain text box."""

    @property
    @abstractmethod
    def text(self) -> str | None:
        """Text held by the shape, or None when it cannot hold text."""

    @text.setter
    @abstractmethod
    def text(self, value: str) -> None: ...

    def __repr__(self) -> str:
        return f"<{type(self).__name__} id={self.shape_id} name={self.name!r}>"


class CategorySlide(ABC):
    """A container holding the shapes of one category."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Raw container name."""

    @name.setter
    @abstractmethod
    def name(self, value: str) -> None: ...

    @property
    @abstractmethod
    def position(self) -> int:
        """0-based position of the container in the document."""

    @property
    @abstractmethod
    def shapes(self) -> list[GalleryShape]:
        """Top-level shapes in container order."""

    @abstractmethod
    def add_text_box(self, text: str) -> GalleryShape:
        """Add an empty-sized text box holding ``text``."""

    @abstractmethod
    def paste(self, sources: Sequence[GalleryShape]) -> list[GalleryShape]:
        """Copy shapes, possibly from another document, into this container."""

    @abstractmethod
    def group(self, shapes: Sequence[GalleryShape]) -> GalleryShape:
        """Group shapes of this container into a single shape."""

    @abstractmethod
    def delete_shape(self, shape: GalleryShape) -> None:
        """Remove a shape from this container."""

    def shapes_named(self, name: str) -> list[GalleryShape]:
        """All shapes carrying ``name``, in container order."""
        return [shape for shape in self.shapes if shape.name == name]

    def has_shape(self, name: str) -> bool:
        """Whether any shape carries ``name``."""
        return any(shape.name == name for shape in self.shapes)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} position={self.position} name={self.name!r}>"


class GalleryDocument(ABC):
    """A persisted document made of category containers."""

    @property
    @abstractmethod
    def path(self) -> Path:
        """Where the document is saved."""

    @property
    @abstractmethod
    def categories(self) -> list[CategorySlide]:
        """Category containers in document order."""

    @property
    def category_count(self) -> int:
        """Number of category containers."""
        return len(self.categories)

    @abstractmethod
    def add_category(self, name: str) -> CategorySlide:
        """Append an empty container named ``name``."""

    @abstractmethod
    def remove_category(self, category: CategorySlide) -> None:
        """Delete a container and everything in it."""

    @abstractmethod
    def append_category(self, source: CategorySlide) -> CategorySlide:
        """Append a copy of a container from this or another document."""

    @abstractmethod
    def export_shape(self, shape: GalleryShape, path: Path) -> None:
        """Write an image of ``shape`` to ``path``."""

    @abstractmethod
    def save(self) -> None:
        """Persist the document to :attr:`path`."""

    @abstractmethod
    def close(self) -> None:
        """Release the document. It must not be used afterwards."""

    @abstractmethod
    def protect_last_actions(self, repeat: int) -> None:
        """Keep the host's undo history from unwinding the last mutation.

        Called after every committed mutation with a fixed ``repeat``
        count taken from the settings.
        """
