"""Two-way reconciliation between a category's shapes and its image folder."""

import logging
from dataclasses import dataclass, field
from pathlib import Path

from shapegallery.consistency.context import ReconciliationContext
from shapegallery.consistency.mirror import IMAGE_SUFFIX, MirrorStore
from shapegallery.consistency.name_box import NameBoxResolver
from shapegallery.document.base import CategorySlide, GalleryDocument, GalleryShape
from shapegallery.models import InconsistencyKind

logger = logging.getLogger(__name__)


@dataclass
class ReconcileResult:
    """Outcome of reconciling one category with its mirror folder."""
    category: str
    folder: Path
    exported: list[str] = field(default_factory=list)
    deleted: list[str] = field(default_factory=list)

    @property
    def image_lost(self) -> bool:
        """Some shape had no image and was exported."""
        return bool(self.exported)

    @property
    def shape_lost(self) -> bool:
        """Some image had no shape and was deleted."""
        return bool(self.deleted)


class MirrorReconciler:
    """Repairs divergence between one category and its on-disk folder.

    Runs after duplicate recovery and name-box resolution, so it only ever
    sees final shape and category names.
    """

    def __init__(
        self,
        document: GalleryDocument,
        mirror: MirrorStore,
        name_boxes: NameBoxResolver | None = None,
    ) -> None:
        self.document = document
        self.mirror = mirror
        self.name_boxes = name_boxes or NameBoxResolver()

    def reconcile(
        self,
        category: CategorySlide,
        name_box: GalleryShape,
        context: ReconciliationContext,
    ) -> ReconcileResult:
        """Reconcile a category with its mirror folder.

        Args:
            category: Category container, already carrying its resolved name.
            name_box: The category's name box, excluded from the mirror.
            context: Current pass.

        Returns:
            ReconcileResult with the final folder and the repairs made.
        """
        final_name = self.resolve_folder(category.name, context)
        context.claimed_names.add(final_name)

        if final_name != category.name:
            self.name_boxes.sync(category, name_box, final_name)

        result = ReconcileResult(
            category=final_name,
            folder=self.mirror.category_path(final_name),
        )

        images = set(self.mirror.list_images(final_name))
        shapes = [shape for shape in category.shapes if shape.shape_id != name_box.shape_id]

        result.exported = self.export_missing_images(final_name, shapes, images, context)
        result.deleted = self.delete_orphan_images(final_name, shapes, images, context)
        return result

    def resolve_folder(self, name: str, context: ReconciliationContext) -> str:
        """Pick (and create) the folder a category is mirrored to.

        A missing folder is created. An existing folder is reused unless the
        gallery is being imported or another category already took the name
        in this pass; then ``" 1"``, ``" 2"``, ... is appended until the
        folder name is free, so existing folders are never merged into.

        Args:
            name: Category name.
            context: Current pass.

        Returns:
            Name of the folder, which becomes the final category name.
        """
        if not self.mirror.folder_exists(name):
            self.mirror.create_folder(name)
            logger.info(f"Created mirror folder for category '{name}'")
            return name

        if not context.imported and name not in context.claimed_names:
            return name

        suffix = 1
        candidate = f"{name} {suffix}"
        while self.mirror.folder_exists(candidate):
            suffix += 1
            candidate = f"{name} {suffix}"

        self.mirror.create_folder(candidate)
        context.record(
            InconsistencyKind.IMPORT_NAME_COLLISION,
            subject=candidate,
            message=f"Folder '{name}' already exists, category renamed to '{candidate}'",
            category=name,
        )
        logger.info(f"Category '{name}' collides with an existing folder, using '{candidate}'")
        return candidate

    def export_missing_images(
        self,
        folder: str,
        shapes: list[GalleryShape],
        images: set[str],
        context: ReconciliationContext,
    ) -> list[str]:
        """Export every shape that has no image in ``folder``.

        Returns:
            Names of the shapes exported.
        """
        exported = []
        for shape in shapes:
            if shape.name in images:
                continue

            self.document.export_shape(shape, self.mirror.image_path(folder, shape.name))
            exported.append(shape.name)
            context.record(
                InconsistencyKind.MISSING_IMAGE,
                subject=shape.name,
                message=f"Image of shape '{shape.name}' was missing and has been re-exported",
                category=folder,
            )
            self._log(context, f"Category '{folder}': exported missing image '{shape.name}'")

        return exported

    def delete_orphan_images(
        self,
        folder: str,
        shapes: list[GalleryShape],
        images: set[str],
        context: ReconciliationContext,
    ) -> list[str]:
        """Delete every image in ``folder`` that no shape is named after.

        Returns:
            Names (file stems) of the images deleted.
        """
        shape_names = {shape.name for shape in shapes}
        folder_path = self.mirror.category_path(folder)
        deleted = []

        for image in sorted(images):
            if image in shape_names:
                continue

            # Stems come from disk, so they bypass shape-name validation
            self.mirror.delete_file(folder_path / f"{image}{IMAGE_SUFFIX}")
            deleted.append(image)
            context.record(
                InconsistencyKind.ORPHAN_IMAGE,
                subject=image,
                message=f"Image '{image}' had no matching shape and has been deleted",
                category=folder,
            )
            self._log(context, f"Category '{folder}': deleted orphan image '{image}'")

        return deleted

    def _log(self, context: ReconciliationContext, message: str) -> None:
        # Imported galleries are expected to diverge
        logger.log(logging.INFO if context.imported else logging.WARNING, message)
