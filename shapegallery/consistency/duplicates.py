"""Recovery of shapes whose names cannot be mirrored as they are.

Two cases are repaired here, before anything is mirrored: names holding
characters a file name cannot hold, and names shared by several shapes of
the same category.
"""

import logging
from dataclasses import dataclass, field

from shapegallery.consistency.context import ReconciliationContext
from shapegallery.consistency.mirror import UNSAFE_NAME_PATTERN, MirrorStore
from shapegallery.document.base import CategorySlide, GalleryDocument, GalleryShape
from shapegallery.models import InconsistencyKind

logger = logging.getLogger(__name__)

RECOVERED_SHAPE_FORMAT = "{0} (recovered shape {1})"
FALLBACK_SHAPE_FORMAT = "Shape {0}"


def recovered_name(name: str, index: int) -> str:
    """Name given to the ``index``-th shape (1-based) sharing ``name``."""
    return RECOVERED_SHAPE_FORMAT.format(name, index)


def safe_shape_name(name: str, shape_id: int) -> str:
    """``name`` with unsafe characters stripped.

    PowerPoint's own default names (``"Arrow: Right 3"``) contain a colon,
    so this is routine rather than exceptional. A name left empty falls
    back to ``"Shape <id>"``.
    """
    cleaned = UNSAFE_NAME_PATTERN.sub("", name or "").strip()
    if cleaned in ("", ".", ".."):
        return FALLBACK_SHAPE_FORMAT.format(shape_id)
    return cleaned


@dataclass
class DuplicateResolution:
    """Outcome of duplicate recovery for one category."""
    category: str
    # Original name -> recovered names, in container order
    recovered: dict[str, list[str]] = field(default_factory=dict)
    # Original names whose image was already missing before recovery
    missing_images: list[str] = field(default_factory=list)
    # Unsafe original name -> safe name
    sanitized: dict[str, str] = field(default_factory=dict)

    @property
    def found(self) -> bool:
        """Whether any duplicate was found."""
        return bool(self.recovered)

    @property
    def image_lost(self) -> bool:
        return bool(self.missing_images)


class DuplicateResolver:
    """Gives every shape of a category a unique, file-safe name.

    Unsafe names are cleaned first, since cleaning can itself produce
    duplicates. Then every group of N shapes sharing a name X becomes
    ``"X (recovered shape 1)"`` .. ``"X (recovered shape N)"`` in container
    order, skipping any index whose name another shape already carries.
    The image at the bare name is removed, so no shape keeps the ambiguous
    original name.
    """

    def __init__(self, document: GalleryDocument, mirror: MirrorStore) -> None:
        self.document = document
        self.mirror = mirror

    def resolve(
        self,
        category: CategorySlide,
        folder: str | None,
        context: ReconciliationContext,
    ) -> DuplicateResolution:
        """Recover unsafe and duplicated shape names in one category.

        Args:
            category: Category container.
            folder: Mirror folder receiving the recovered images, or None
                to rename only and leave exporting to the mirror
                reconciliation.
            context: Current pass; receives one issue per renamed shape.

        Returns:
            DuplicateResolution describing what was renamed.
        """
        result = DuplicateResolution(category=category.name)
        self.sanitize(category, folder, context, result)

        groups: dict[str, list[GalleryShape]] = {}
        for shape in category.shapes:
            groups.setdefault(shape.name, []).append(shape)
        taken = set(groups)

        for name, shapes in groups.items():
            if len(shapes) < 2:
                continue

            if folder is not None:
                if not self.mirror.image_exists(folder, name):
                    result.missing_images.append(name)
                    context.record(
                        InconsistencyKind.MISSING_IMAGE,
                        subject=name,
                        message=f"Image of shape '{name}' was missing",
                        category=category.name,
                    )
                self.mirror.delete_image(folder, name)

            names = []
            index = 1
            for shape in shapes:
                while recovered_name(name, index) in taken:
                    index += 1
                new_name = recovered_name(name, index)
                self._rename_and_export(shape, new_name, folder)
                taken.add(new_name)
                names.append(new_name)
                index += 1

            result.recovered[name] = names
            for recovered in names:
                context.record(
                    InconsistencyKind.STRUCTURAL_DUPLICATE,
                    subject=recovered,
                    message=f"Duplicate shape '{name}' renamed to '{recovered}'",
                    category=category.name,
                )
            logger.warning(
                f"Category '{category.name}': {len(names)} shapes named '{name}' recovered"
            )

        return result

    def sanitize(
        self,
        category: CategorySlide,
        folder: str | None,
        context: ReconciliationContext,
        result: DuplicateResolution,
    ) -> None:
        """Strip characters a file name cannot hold from every shape name.

        An image already stored under the unsafe name follows the shape when
        ``folder`` is given and the safe name is still free on disk.
        """
        for shape in category.shapes:
            name = shape.name
            safe = safe_shape_name(name, shape.shape_id)
            if safe == name:
                continue

            shape.name = safe
            result.sanitized[name] = safe
            if folder is not None:
                self.mirror.adopt_image(folder, name, safe)

            context.record(
                InconsistencyKind.UNSAFE_SHAPE_NAME,
                subject=safe,
                message=f"Shape '{name}' renamed to '{safe}'",
                category=category.name,
            )
            logger.info(f"Category '{category.name}': shape '{name}' renamed to '{safe}'")

    def _rename_and_export(self, shape: GalleryShape, new_name: str, folder: str | None) -> None:
        shape.name = new_name
        if folder is not None:
            self.document.export_shape(shape, self.mirror.image_path(folder, new_name))
