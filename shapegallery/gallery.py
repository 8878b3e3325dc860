"""
gallery.py — The shape gallery: categories of reusable shapes.

A gallery is a presentation with one slide per category plus a mirror
folder holding one PNG per shape. Opening a gallery runs the full
consistency check; every mutation afterwards keeps the document and the
mirror in step and is committed straight away.
"""

import logging
import os
import shutil
import stat
import tempfile
from pathlib import Path
from typing import Sequence

from shapegallery.config import Settings, get_settings
from shapegallery.consistency import (
    ConsistencyChecker,
    DuplicateResolver,
    MirrorReconciler,
    MirrorStore,
    NameBoxResolver,
    ReconciliationContext,
    validate_name,
)
from shapegallery.consistency.name_box import format_text
from shapegallery.document import CategorySlide, GalleryDocument, GalleryShape, PptxGalleryDocument
from shapegallery.errors import (
    AmbiguousShapeError,
    CategoryNotFoundError,
    GalleryCorruptedError,
    GalleryNotOpenError,
    NameConflictError,
    ShapeNotFoundError,
)
from shapegallery.file_guard import FileIdentityGuard
from shapegallery.models import ConsistencyReport

logger = logging.getLogger(__name__)


class ShapeGallery:
    """A categorized library of shapes mirrored to per-shape images.

    The default category is the target of shape operations that do not
    name a category. It is kept as an index into :attr:`categories`.
    """

    def __init__(
        self,
        path: Path | str | None = None,
        mirror_root: Path | str | None = None,
        imported: bool = False,
        settings: Settings | None = None,
    ) -> None:
        """Initialize the gallery.

        Args:
            path: Working (.pptx) path of the gallery file. Defaults to the
                configured gallery file.
            mirror_root: Folder holding the category folders. Defaults to
                the folder of the gallery file.
            imported: Check in imported-file mode, tolerating (and
                reconciling) inconsistencies of a foreign gallery.
            settings: Settings; the cached environment settings by default.
        """
        self.settings = settings or get_settings()
        self.path = Path(path) if path else self.settings.gallery_file
        self.mirror = MirrorStore(mirror_root if mirror_root else self.path.parent)
        self.imported = imported
        self.guard = FileIdentityGuard(self.path, self.settings.closed_extension)

        self.document: GalleryDocument | None = None
        self.last_report: ConsistencyReport | None = None
        self.name_box_resolver = NameBoxResolver()

        self._categories: list[str] = []
        self._name_boxes: list[GalleryShape] = []
        self._default_index: int | None = None

    # ------------------------------------------------------------------
    # Open / close
    # ------------------------------------------------------------------

    @property
    def is_open(self) -> bool:
        return self.document is not None

    def open(self) -> ConsistencyReport:
        """Open the gallery and run the consistency check.

        The closed file form is turned back into the working form first.
        A new, empty gallery file is created when neither form exists.

        Returns:
            The consistency report of the passed check.

        Raises:
            GalleryOpenError: If the gallery file cannot be read.
            GalleryCorruptedError: If the check failed outside imported-file
                mode. Repairs are on disk, but the gallery stays closed.
        """
        if self.document is not None:
            return self.last_report

        self.guard.retrieve_working_file()

        try:
            if self.path.exists():
                document = PptxGalleryDocument.open(self.path, export_dpi=self.settings.export_dpi)
            else:
                document = PptxGalleryDocument.create(self.path, export_dpi=self.settings.export_dpi)
        except Exception:
            self.guard.store_closed_file()
            raise

        checker = ConsistencyChecker(document, self.mirror, self.settings.protect_repeat)
        context = ReconciliationContext(imported=self.imported)
        try:
            report = checker.run(context)
        except Exception:
            document.close()
            self.guard.store_closed_file()
            raise
        self.last_report = report

        if not report.passed:
            document.close()
            self.guard.store_closed_file()
            raise GalleryCorruptedError(report)

        self.document = document
        self._categories = list(report.categories)
        self._name_boxes = [context.name_boxes[i] for i in range(len(self._categories))]
        self._default_index = 0 if self._categories else None

        logger.info(f"Opened gallery {self.path.name} with {len(self._categories)} categories")
        return report

    def close(self) -> None:
        """Save and close the gallery, storing the closed file form."""
        if self.document is None:
            return

        self.document.save()
        self.document.close()
        self.document = None

        self._categories = []
        self._name_boxes = []
        self._default_index = None

        self.guard.store_closed_file()
        logger.info(f"Closed gallery {self.path.name}")

    def __enter__(self) -> "ShapeGallery":
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Categories
    # ------------------------------------------------------------------

    @property
    def categories(self) -> list[str]:
        """Category names in document order."""
        return list(self._categories)

    @property
    def default_category(self) -> str | None:
        if self._default_index is None:
            return None
        return self._categories[self._default_index]

    @default_category.setter
    def default_category(self, name: str) -> None:
        self._default_index = self._category_index(name)

    def has_category(self, name: str) -> bool:
        return name in self._categories

    def get_category(self, name: str) -> CategorySlide:
        """Category container, usable as a source for :meth:`append_category`."""
        return self._category(name)[1]

    def add_category(self, name: str, set_as_default: bool = True) -> None:
        """Add an empty category.

        An existing category is left alone (and made default if asked).

        Raises:
            InvalidNameError: If the name is not filesystem-safe.
            NameConflictError: If a folder of that name already exists.
        """
        document = self._require_open()
        validate_name(name)

        if name in self._categories:
            if set_as_default:
                self._default_index = self._categories.index(name)
            return

        if self.mirror.folder_exists(name):
            raise NameConflictError(f"Folder '{name}' already exists in {self.mirror.root}")

        category = document.add_category(name)
        name_box = category.add_text_box(format_text(name))
        self.mirror.create_folder(name)

        self._categories.append(name)
        self._name_boxes.append(name_box)
        if set_as_default:
            self._default_index = len(self._categories) - 1

        self._commit()
        logger.info(f"Added category '{name}'")

    def remove_category(self, name: str | None = None) -> None:
        """Remove a category, its shapes and its mirror folder.

        Args:
            name: Category to remove; the default category when omitted.
        """
        document = self._require_open()
        index, category = self._category(name)
        removed = self._categories[index]

        document.remove_category(category)
        self.mirror.delete_folder(removed)

        del self._categories[index]
        del self._name_boxes[index]

        if self._default_index == index:
            self._default_index = None
        elif self._default_index is not None and self._default_index > index:
            self._default_index -= 1

        self._commit()
        logger.info(f"Removed category '{removed}'")

    def rename_category(self, new_name: str, category: str | None = None) -> None:
        """Rename a category, its name box and its mirror folder.

        Args:
            new_name: New category name.
            category: Category to rename; the default category when omitted.
        """
        self._require_open()
        validate_name(new_name)
        index, slide = self._category(category)
        old_name = self._categories[index]

        if new_name == old_name:
            return
        if new_name in self._categories or self.mirror.folder_exists(new_name):
            raise NameConflictError(f"Category '{new_name}' already exists")

        self.name_box_resolver.sync(slide, self._name_boxes[index], new_name)
        self.mirror.rename_folder(old_name, new_name)
        self._categories[index] = new_name

        self._commit()
        logger.info(f"Renamed category '{old_name}' to '{new_name}'")

    def append_category(self, source: CategorySlide) -> str:
        """Append a copy of a category from another gallery document.

        The copy is named by its name box, with ``" 1"``, ``" 2"``, ...
        appended while a category or a folder of that name exists, so an
        existing folder is never merged into. Shape names are made unique
        and file-safe, then every shape is exported to the new folder.

        Args:
            source: Category container to copy.

        Returns:
            Name of the appended category.
        """
        document = self._require_open()
        category = document.append_category(source)

        context = ReconciliationContext()
        name_box = self.name_box_resolver.resolve(category, context)
        name = self._unique_category_name(category.name)
        self.name_box_resolver.sync(category, name_box, name)
        DuplicateResolver(document, self.mirror).resolve(category, None, context)

        self.mirror.create_folder(name)
        reconciler = MirrorReconciler(document, self.mirror, self.name_box_resolver)
        shapes = [shape for shape in category.shapes if shape.shape_id != name_box.shape_id]
        reconciler.export_missing_images(name, shapes, set(), context)

        self._categories.append(name)
        self._name_boxes.append(name_box)

        self._commit()
        logger.info(f"Appended category '{name}' ({len(shapes)} shapes)")
        return name

    def import_gallery(self, path: Path | str) -> list[str]:
        """Import every category of a foreign gallery file.

        The file is copied first and the copy is checked in imported-file
        mode against a scratch mirror, so neither the foreign file nor this
        gallery's folders are touched by the check. Each category is then
        appended, taking a suffixed name when its folder already exists.

        Args:
            path: Foreign gallery file, in working or closed form.

        Returns:
            Names of the appended categories.
        """
        self._require_open()
        source_path = Path(path)

        with tempfile.TemporaryDirectory(prefix="shapegallery_import_") as tmp:
            working = Path(tmp) / f"{source_path.stem}.pptx"
            shutil.copy2(source_path, working)
            os.chmod(working, working.stat().st_mode | stat.S_IWUSR)

            foreign = ShapeGallery(
                working,
                mirror_root=Path(tmp) / "mirror",
                imported=True,
                settings=self.settings,
            )
            foreign.open()
            try:
                names = [self.append_category(foreign.get_category(name)) for name in foreign.categories]
            finally:
                foreign.close()

        logger.info(f"Imported {len(names)} categories from {source_path.name}")
        return names

    # ------------------------------------------------------------------
    # Shapes
    # ------------------------------------------------------------------

    def shape_names(self, category: str | None = None) -> list[str]:
        """Names of the shapes in a category, name box excluded."""
        self._require_open()
        index, slide = self._category(category)
        name_box_id = self._name_boxes[index].shape_id
        return [shape.name for shape in slide.shapes if shape.shape_id != name_box_id]

    def get_shape(self, name: str, category: str | None = None) -> GalleryShape:
        """The single shape named ``name``, usable as a copy source.

        Raises:
            ShapeNotFoundError: If no shape has that name.
            AmbiguousShapeError: If several shapes have it.
        """
        self._require_open()
        _, slide = self._category(category)
        return self._single_shape(slide, name)

    def add_shape(
        self,
        sources: GalleryShape | Sequence[GalleryShape],
        name: str,
        category: str | None = None,
    ) -> GalleryShape:
        """Copy shapes into a category as one named shape and export its image.

        Several sources are grouped into a single shape.

        Args:
            sources: Shape or shapes to copy, from any gallery document.
            name: Name of the new shape.
            category: Target category; the default category when omitted.

        Returns:
            The new shape.
        """
        document = self._require_open()
        validate_name(name)
        if isinstance(sources, GalleryShape):
            sources = [sources]
        if not sources:
            raise ValueError("At least one source shape is required")

        index, slide = self._category(category)
        category_name = self._categories[index]
        if slide.has_shape(name):
            raise NameConflictError(f"Shape '{name}' already exists in '{category_name}'")

        pasted = slide.paste(sources)
        shape = pasted[0] if len(pasted) == 1 else slide.group(pasted)
        shape.name = name

        self.mirror.create_folder(category_name)
        document.export_shape(shape, self.mirror.image_path(category_name, name))

        self._commit()
        logger.info(f"Added shape '{name}' to '{category_name}'")
        return shape

    def remove_shape(self, name: str, category: str | None = None) -> None:
        """Remove every shape named ``name`` and its image."""
        self._require_open()
        index, slide = self._category(category)
        shapes = slide.shapes_named(name)
        if not shapes:
            raise ShapeNotFoundError(f"Shape '{name}' not found in '{self._categories[index]}'")

        for shape in shapes:
            slide.delete_shape(shape)
        self.mirror.delete_image(self._categories[index], name)

        self._commit()
        logger.info(f"Removed shape '{name}' from '{self._categories[index]}'")

    def rename_shape(self, old_name: str, new_name: str, category: str | None = None) -> None:
        """Rename a shape and its image."""
        document = self._require_open()
        validate_name(new_name)
        index, slide = self._category(category)
        category_name = self._categories[index]

        shapes = slide.shapes_named(old_name)
        if not shapes:
            raise ShapeNotFoundError(f"Shape '{old_name}' not found in '{category_name}'")
        if new_name == old_name:
            return
        if slide.has_shape(new_name):
            raise NameConflictError(f"Shape '{new_name}' already exists in '{category_name}'")

        for shape in shapes:
            shape.name = new_name

        if not self.mirror.rename_image(category_name, old_name, new_name):
            document.export_shape(shapes[0], self.mirror.image_path(category_name, new_name))

        self._commit()
        logger.info(f"Renamed shape '{old_name}' to '{new_name}' in '{category_name}'")

    def move_shape(self, name: str, dest: str, category: str | None = None) -> None:
        """Move a shape (and its image) to another category."""
        self._transfer_shape(name, dest, category, keep_source=False)

    def copy_shape(self, name: str, dest: str, category: str | None = None) -> None:
        """Copy a shape (and its image) to another category."""
        self._transfer_shape(name, dest, category, keep_source=True)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _transfer_shape(
        self,
        name: str,
        dest: str,
        category: str | None,
        keep_source: bool,
    ) -> None:
        document = self._require_open()
        source_index, source_slide = self._category(category)
        dest_index, dest_slide = self._category(dest)
        if source_index == dest_index:
            return

        source_name = self._categories[source_index]
        dest_name = self._categories[dest_index]
        shape = self._single_shape(source_slide, name)
        if dest_slide.has_shape(name):
            raise NameConflictError(f"Shape '{name}' already exists in '{dest_name}'")

        pasted = dest_slide.paste([shape])[0]

        if keep_source:
            transferred = self.mirror.copy_image(name, source_name, dest_name)
        else:
            source_slide.delete_shape(shape)
            transferred = self.mirror.move_image(name, source_name, dest_name)

        if not transferred:
            document.export_shape(pasted, self.mirror.image_path(dest_name, name))

        self._commit()
        action = "Copied" if keep_source else "Moved"
        logger.info(f"{action} shape '{name}' from '{source_name}' to '{dest_name}'")

    def _single_shape(self, slide: CategorySlide, name: str) -> GalleryShape:
        shapes = slide.shapes_named(name)
        if not shapes:
            raise ShapeNotFoundError(f"Shape '{name}' not found in '{slide.name}'")
        if len(shapes) > 1:
            raise AmbiguousShapeError(f"{len(shapes)} shapes named '{name}' in '{slide.name}'")
        return shapes[0]

    def _require_open(self) -> GalleryDocument:
        if self.document is None:
            raise GalleryNotOpenError(f"Gallery {self.path.name} is not open")
        return self.document

    def _category_index(self, name: str) -> int:
        try:
            return self._categories.index(name)
        except ValueError:
            raise CategoryNotFoundError(f"Category '{name}' not found") from None

    def _category(self, name: str | None) -> tuple[int, CategorySlide]:
        """Index and container of a category, the default one when unnamed."""
        document = self._require_open()
        if name is None:
            if self._default_index is None:
                raise CategoryNotFoundError("No default category selected")
            index = self._default_index
        else:
            index = self._category_index(name)
        return index, document.categories[index]

    def _unique_category_name(self, name: str) -> str:
        candidate = name
        suffix = 1
        while candidate in self._categories or self.mirror.folder_exists(candidate):
            candidate = f"{name} {suffix}"
            suffix += 1
        return candidate

    def _commit(self) -> None:
        """Persist the last mutation and protect it from the host's undo."""
        self.document.save()
        self.document.protect_last_actions(self.settings.protect_repeat)
