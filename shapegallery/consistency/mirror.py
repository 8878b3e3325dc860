"""On-disk mirror of the gallery: one folder per category, one PNG per shape."""

import logging
import re
import shutil
from pathlib import Path

from shapegallery.errors import InvalidNameError

logger = logging.getLogger(__name__)

IMAGE_SUFFIX = ".png"

# Characters that may not appear in a category or shape name
UNSAFE_NAME_PATTERN = re.compile(r'[<>:"/\\|?*]')


def validate_name(name: str) -> str:
    """Check that ``name`` can be used as a file or folder name.

    Args:
        name: Category or shape name.

    Returns:
        The name, unchanged.

    Raises:
        InvalidNameError: If the name is empty, "." or "..", or contains
            any of < > : " / \\ | ? *.
    """
    if not name or not name.strip() or name in (".", ".."):
        raise InvalidNameError(f"Invalid name: {name!r}")
    if UNSAFE_NAME_PATTERN.search(name):
        raise InvalidNameError(f"Name {name!r} contains one of < > : \" / \\ | ? *")
    return name


class MirrorStore:
    """Filesystem operations scoped to the gallery's mirror root.

    No business logic lives here; callers decide when folders and images
    are created or removed.
    """

    def __init__(self, root: Path | str) -> None:
        """Initialize the mirror store.

        Args:
            root: Directory holding one sub-folder per category.
        """
        self.root = Path(root)

    def category_path(self, category: str) -> Path:
        """Folder of a category."""
        return self.root / validate_name(category)

    def image_path(self, category: str, shape: str) -> Path:
        """Image file of a shape."""
        return self.category_path(category) / f"{validate_name(shape)}{IMAGE_SUFFIX}"

    def folder_exists(self, category: str) -> bool:
        return self.category_path(category).is_dir()

    def image_exists(self, category: str, shape: str) -> bool:
        return self.image_path(category, shape).is_file()

    def list_category_folders(self) -> list[str]:
        """Names of all category folders under the root, sorted."""
        if not self.root.is_dir():
            return []
        return sorted(entry.name for entry in self.root.iterdir() if entry.is_dir())

    def list_images(self, category: str) -> list[str]:
        """Shape names (file stems) of all images in a category folder, sorted."""
        folder = self.category_path(category)
        if not folder.is_dir():
            return []
        return sorted(
            entry.stem
            for entry in folder.iterdir()
            if entry.is_file() and entry.suffix == IMAGE_SUFFIX
        )

    def create_folder(self, category: str) -> Path:
        """Create a category folder (and the root) if missing."""
        folder = self.category_path(category)
        folder.mkdir(parents=True, exist_ok=True)
        return folder

    def delete_file(self, path: Path) -> bool:
        """Delete a file.

        Returns:
            True if deleted, False if it did not exist.
        """
        if not path.is_file():
            return False
        path.unlink()
        logger.debug(f"Deleted {path}")
        return True

    def delete_image(self, category: str, shape: str) -> bool:
        return self.delete_file(self.image_path(category, shape))

    def delete_folder(self, category: str) -> bool:
        """Delete a category folder and everything in it.

        Returns:
            True if deleted, False if it did not exist.
        """
        folder = self.category_path(category)
        if not folder.is_dir():
            return False
        shutil.rmtree(folder)
        logger.debug(f"Deleted folder {folder}")
        return True

    def rename_folder(self, old: str, new: str) -> Path:
        """Rename a category folder, creating the target if the source is gone."""
        source = self.category_path(old)
        target = self.category_path(new)
        if source.is_dir():
            source.rename(target)
        else:
            target.mkdir(parents=True, exist_ok=True)
        return target

    def rename_image(self, category: str, old: str, new: str) -> bool:
        """Rename a shape image inside its folder.

        Returns:
            True if the image existed and was renamed.
        """
        source = self.image_path(category, old)
        if not source.is_file():
            return False
        source.replace(self.image_path(category, new))
        return True

    def adopt_image(self, category: str, raw_name: str, shape: str) -> bool:
        """Rename an image stored under a name that fails validation.

        Only plain file names are looked up (no path separators), and an
        existing image at the target is never overwritten.

        Returns:
            True if an image was renamed.
        """
        if "/" in raw_name or "\\" in raw_name:
            return False
        source = self.category_path(category) / f"{raw_name}{IMAGE_SUFFIX}"
        target = self.image_path(category, shape)
        if not source.is_file() or target.exists():
            return False
        source.replace(target)
        logger.debug(f"Renamed image {source.name} to {target.name}")
        return True

    def move_image(self, shape: str, source: str, dest: str) -> bool:
        """Move a shape image between category folders."""
        source_path = self.image_path(source, shape)
        if not source_path.is_file():
            return False
        self.create_folder(dest)
        source_path.replace(self.image_path(dest, shape))
        return True

    def copy_image(self, shape: str, source: str, dest: str) -> bool:
        """Copy a shape image between category folders."""
        source_path = self.image_path(source, shape)
        if not source_path.is_file():
            return False
        self.create_folder(dest)
        shutil.copy2(source_path, self.image_path(dest, shape))
        return True
