"""
config.py — Environment configuration for the shape gallery.

Settings are read from environment variables. A ``shapegallery.env`` file
in the working directory, or the file named by ``SHAPE_GALLERY_ENV_FILE``,
fills in anything the environment does not already set.
"""

import os
from functools import lru_cache
from pathlib import Path

ENV_FILE_VARIABLE = "SHAPE_GALLERY_ENV_FILE"
DEFAULT_ENV_FILE = "shapegallery.env"


def read_env_file(path: Path) -> dict[str, str]:
    """Parse ``KEY=value`` lines, skipping blanks, comments and empty values."""
    values: dict[str, str] = {}
    with open(path, encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            key, value = (part.strip() for part in line.split("=", 1))
            if key and value:
                values[key] = value.strip("\"'")
    return values


def _apply_env_file() -> None:
    env_path = Path(os.environ.get(ENV_FILE_VARIABLE, Path.cwd() / DEFAULT_ENV_FILE))
    if not env_path.is_file():
        return
    for key, value in read_env_file(env_path).items():
        os.environ.setdefault(key, value)


_apply_env_file()


class Settings:
    """Gallery settings loaded from environment variables."""

    def __init__(self):
        # Gallery location
        self.gallery_dir: Path = Path(
            os.environ.get("SHAPE_GALLERY_DIR", str(Path.home() / ".shapegallery"))
        ).expanduser()
        self.gallery_name: str = os.environ.get("SHAPE_GALLERY_NAME", "ShapeGallery")

        # Extension of the protected, closed form of the gallery file
        self.closed_extension: str = os.environ.get(
            "SHAPE_GALLERY_CLOSED_EXTENSION", ".shapegallery"
        )

        # Number of times the post-mutation protection is repeated
        self.protect_repeat: int = int(os.environ.get("SHAPE_GALLERY_PROTECT_REPEAT", "20"))

        # Image export
        self.export_dpi: int = int(os.environ.get("SHAPE_GALLERY_EXPORT_DPI", "96"))

        # Logging
        self.log_level: str = os.environ.get("SHAPE_GALLERY_LOG_LEVEL", "INFO").upper()

    @property
    def gallery_file(self) -> Path:
        """Working-form path of the configured gallery file."""
        return self.gallery_dir / f"{self.gallery_name}.pptx"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
