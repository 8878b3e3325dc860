"""
checker.py — Gallery-wide consistency check.

Drives one full pass over every category of a gallery document:

1. Duplicate recovery on every category, so later steps only see unique
   shape names.
2. Per category, in container order: name-box resolution, then mirror
   reconciliation (folder, shape -> image, image -> shape).
3. Detection of category folders that no category claims. These are only
   reported, never deleted.

All repairs are saved whatever the verdict. The pass never stops early:
every category is checked even after a flag has been raised.
"""

import logging

from shapegallery.consistency.context import ReconciliationContext
from shapegallery.consistency.duplicates import DuplicateResolver
from shapegallery.consistency.mirror import MirrorStore, validate_name
from shapegallery.consistency.name_box import NameBoxResolver
from shapegallery.consistency.reconciler import MirrorReconciler
from shapegallery.document.base import GalleryDocument
from shapegallery.errors import InvalidNameError
from shapegallery.models import ConsistencyReport, InconsistencyKind

logger = logging.getLogger(__name__)

DEFAULT_PROTECT_REPEAT = 20


class ConsistencyChecker:
    """Checks and repairs a gallery document against its on-disk mirror."""

    def __init__(
        self,
        document: GalleryDocument,
        mirror: MirrorStore,
        protect_repeat: int = DEFAULT_PROTECT_REPEAT,
    ) -> None:
        """Initialize the checker.

        Args:
            document: Gallery document to check.
            mirror: Mirror store rooted at the gallery folder.
            protect_repeat: Repeat count of the post-mutation protection.
        """
        self.document = document
        self.mirror = mirror
        self.protect_repeat = protect_repeat

        self.name_boxes = NameBoxResolver()
        self.duplicates = DuplicateResolver(document, mirror)
        self.reconciler = MirrorReconciler(document, mirror, self.name_boxes)

    def run(self, context: ReconciliationContext | None = None) -> ConsistencyReport:
        """Run a full consistency pass.

        Args:
            context: Pass state; a fresh non-imported context when omitted.
                The caller can read the name-box registry from it afterwards.

        Returns:
            ConsistencyReport. ``report.passed`` tells whether the gallery
            may be opened.
        """
        if context is None:
            context = ReconciliationContext()

        categories = self.document.categories

        # A gallery without categories is always consistent
        if not categories:
            logger.info("Gallery has no categories, nothing to check")
            return ConsistencyReport(imported=context.imported)

        duplicate_found = False
        image_lost = False
        shape_lost = False

        for category in categories:
            folder = self._duplicate_folder(category.name, context)
            resolution = self.duplicates.resolve(category, folder, context)
            # OR with itself last so that no category is skipped
            duplicate_found = resolution.found or duplicate_found
            image_lost = resolution.image_lost or image_lost

        names: list[str] = []
        for category in categories:
            name_box = self.name_boxes.resolve(category, context)
            result = self.reconciler.reconcile(category, name_box, context)

            image_lost = result.image_lost or image_lost
            shape_lost = result.shape_lost or shape_lost
            names.append(result.category)

        orphan_folders = self.find_orphan_folders(names, context)

        self.document.save()
        self.document.protect_last_actions(self.protect_repeat)

        report = ConsistencyReport(
            imported=context.imported,
            categories=names,
            default_category=names[0],
            duplicate_found=duplicate_found,
            image_lost=image_lost,
            shape_lost=shape_lost,
            orphan_category_found=bool(orphan_folders),
            issues=list(context.issues),
        )

        if not report.passed:
            logger.error(f"Gallery {self.document.path.name} failed the consistency check")
        elif not report.is_consistent:
            logger.info(f"Imported gallery {self.document.path.name} reconciled")
        else:
            logger.info(f"Gallery {self.document.path.name} is consistent ({len(names)} categories)")

        return report

    def find_orphan_folders(
        self,
        category_names: list[str],
        context: ReconciliationContext,
    ) -> list[str]:
        """Report category folders with no matching category.

        The folders are left on disk: removing one could lose a library
        the document no longer knows about.

        Returns:
            Names of the orphan folders.
        """
        known = set(category_names)
        orphans = [name for name in self.mirror.list_category_folders() if name not in known]

        for name in orphans:
            context.record(
                InconsistencyKind.ORPHAN_CATEGORY_FOLDER,
                subject=name,
                message=f"Folder '{name}' does not belong to any category",
                repaired=False,
            )
            logger.log(
                logging.INFO if context.imported else logging.WARNING,
                f"Orphan category folder '{name}' left in place",
            )

        return orphans

    def _duplicate_folder(self, name: str, context: ReconciliationContext) -> str | None:
        """Folder that receives recovered-duplicate images, if any.

        Imported galleries and categories without a folder yet get their
        images from the mirror reconciliation instead, so an existing
        folder of a foreign library is never written to.
        """
        if context.imported:
            return None
        try:
            validate_name(name)
        except InvalidNameError:
            return None
        if not self.mirror.folder_exists(name):
            return None
        return name
