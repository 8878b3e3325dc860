"""Category name boxes: the text box holding a category's display name."""

import logging
import re

from shapegallery.consistency.context import ReconciliationContext
from shapegallery.consistency.mirror import UNSAFE_NAME_PATTERN
from shapegallery.document.base import CategorySlide, GalleryShape

logger = logging.getLogger(__name__)

CATEGORY_NAME_FORMAT = "Category: {0}"
UNTITLED_CATEGORY_FORMAT = "Untitled Category {0}"

NAME_BOX_PATTERN = re.compile(r'[Cc]ategory: ([^<>:"/\\|?*]+)')
DEFAULT_SLIDE_NAME_PATTERN = re.compile(r"[Ss]lide ?\d+")


def format_text(name: str) -> str:
    """Name-box text for a category name."""
    return CATEGORY_NAME_FORMAT.format(name)


def parse_text(text: str | None) -> str | None:
    """Category name held by a name-box text, or None if it is not one."""
    if not text:
        return None
    match = NAME_BOX_PATTERN.fullmatch(text.strip())
    if match is None:
        return None
    name = match.group(1).strip()
    if name in ("", ".", ".."):
        return None
    return name


class NameBoxResolver:
    """Finds, creates and synchronizes category name boxes."""

    def find(self, category: CategorySlide) -> GalleryShape | None:
        """Locate a category's name box.

        Args:
            category: Category container.

        Returns:
            The first text box whose text matches ``Category: <name>``,
            or None.
        """
        for shape in category.shapes:
            if shape.is_text_box and parse_text(shape.text) is not None:
                return shape
        return None

    def resolve(self, category: CategorySlide, context: ReconciliationContext) -> GalleryShape:
        """Make sure a category has exactly one name box and adopt its name.

        An existing name box is authoritative: its name becomes the
        container name. Without one, a name box is created from the
        container name, or from the next untitled name when the container
        still carries a default slide name.

        Args:
            category: Category container.
            context: Current pass; receives the name-box registration.

        Returns:
            The category's name box.
        """
        name_box = self.find(category)

        if name_box is not None:
            category.name = parse_text(name_box.text)
        else:
            name = self._intended_name(category.name, context)
            name_box = category.add_text_box(format_text(name))
            category.name = name
            logger.info(f"Created name box for category '{name}'")

        context.name_boxes[category.position] = name_box
        return name_box

    def sync(self, category: CategorySlide, name_box: GalleryShape, name: str) -> None:
        """Write a final category name into both the container and its name box."""
        category.name = name
        name_box.text = format_text(name)

    def _intended_name(self, raw_name: str, context: ReconciliationContext) -> str:
        """Display name for a category that has no name box yet."""
        cleaned = UNSAFE_NAME_PATTERN.sub("", raw_name or "").strip()

        if cleaned and cleaned not in (".", "..") and not DEFAULT_SLIDE_NAME_PATTERN.fullmatch(cleaned):
            return cleaned

        return UNTITLED_CATEGORY_FORMAT.format(context.next_untitled())
