"""Switches the gallery file between its working and closed forms.

While a gallery is open its document lives at ``<name>.pptx`` and is
hidden, so the host application's own file picker does not offer it.
When closed, it is renamed to ``<name><closed extension>`` and made
read-only and visible. Only one of the two forms exists at a time.
"""

import logging
import os
import stat
import sys
from pathlib import Path

logger = logging.getLogger(__name__)

FILE_ATTRIBUTE_READONLY = 0x01
FILE_ATTRIBUTE_HIDDEN = 0x02
FILE_ATTRIBUTE_NORMAL = 0x80

WRITE_BITS = stat.S_IWUSR | stat.S_IWGRP | stat.S_IWOTH


class FileIdentityGuard:
    """Moves a gallery file between its working and closed forms."""

    def __init__(self, working_path: Path | str, closed_extension: str = ".shapegallery") -> None:
        """Initialize the guard.

        Args:
            working_path: Path of the working (.pptx) form.
            closed_extension: Extension of the closed form.
        """
        self.working_path = Path(working_path)
        self.closed_path = self.working_path.with_suffix(closed_extension)

    def retrieve_working_file(self) -> bool:
        """Turn the closed form into the working form.

        When both forms exist, the more recently written one wins and
        replaces the other.

        Returns:
            True if a closed file was turned into the working file.
        """
        if not self.closed_path.exists():
            if self.working_path.exists():
                _set_hidden(self.working_path, True)
            return False

        _clear_attributes(self.closed_path)

        if self.working_path.exists():
            _clear_attributes(self.working_path)
            if self.working_path.stat().st_mtime >= self.closed_path.stat().st_mtime:
                logger.warning(
                    f"Both {self.working_path.name} and {self.closed_path.name} exist, "
                    f"keeping the newer working file"
                )
                self.closed_path.unlink()
                _set_hidden(self.working_path, True)
                return False
            logger.warning(
                f"Both {self.working_path.name} and {self.closed_path.name} exist, "
                f"keeping the newer closed file"
            )

        os.replace(self.closed_path, self.working_path)
        _set_hidden(self.working_path, True)
        logger.debug(f"Retrieved {self.working_path} from {self.closed_path.name}")
        return True

    def store_closed_file(self) -> bool:
        """Turn the working form into the read-only, visible closed form.

        Returns:
            True if a working file was stored, False if there was none.
        """
        if not self.working_path.exists():
            return False

        _clear_attributes(self.working_path)
        if self.closed_path.exists():
            _clear_attributes(self.closed_path)

        os.replace(self.working_path, self.closed_path)
        _set_read_only(self.closed_path)
        logger.debug(f"Stored {self.working_path.name} as {self.closed_path}")
        return True


def _clear_attributes(path: Path) -> None:
    """Make a file writable and visible."""
    if sys.platform == "win32":
        _set_windows_attributes(path, FILE_ATTRIBUTE_NORMAL)
    mode = path.stat().st_mode
    os.chmod(path, mode | stat.S_IWUSR)


def _set_read_only(path: Path) -> None:
    if sys.platform == "win32":
        _set_windows_attributes(path, FILE_ATTRIBUTE_READONLY)
    mode = path.stat().st_mode
    os.chmod(path, mode & ~WRITE_BITS)


def _set_hidden(path: Path, hidden: bool) -> None:
    if sys.platform != "win32":
        # POSIX has no hidden attribute short of renaming to a dotfile
        logger.debug(f"Hidden attribute not supported on {sys.platform}, {path.name} stays visible")
        return
    _set_windows_attributes(path, FILE_ATTRIBUTE_HIDDEN if hidden else FILE_ATTRIBUTE_NORMAL)


def _set_windows_attributes(path: Path, attributes: int) -> None:
    import ctypes

    if not ctypes.windll.kernel32.SetFileAttributesW(str(path), attributes):
        raise ctypes.WinError()
