"""Pytest configuration and fixtures."""

from pathlib import Path
from typing import Sequence

import pytest
from pptx import Presentation
from pptx.enum.shapes import MSO_SHAPE
from pptx.util import Emu

from shapegallery.config import Settings
from shapegallery.consistency import MirrorStore
from shapegallery.document import PptxGalleryDocument

EMU_PER_INCH = 914400

# (slide name or None for an unnamed slide, shape names)
CategorySpec = tuple[str | None, Sequence[str]]


def add_named_rectangle(slide, name: str, index: int = 0):
    """Add a rectangle named ``name`` to a python-pptx slide."""
    shape = slide.shapes.add_shape(
        MSO_SHAPE.RECTANGLE,
        Emu(index * EMU_PER_INCH // 2),
        Emu(EMU_PER_INCH),
        Emu(EMU_PER_INCH),
        Emu(EMU_PER_INCH // 2),
    )
    shape._element._nvXxPr.cNvPr.name = name
    return shape


def build_presentation(categories: Sequence[CategorySpec], name_boxes: bool = True):
    """Build a presentation with one slide per category."""
    prs = Presentation()
    layout = prs.slide_layouts[6]  # Blank layout

    for slide_name, shape_names in categories:
        slide = prs.slides.add_slide(layout)
        if slide_name is not None:
            slide._element.cSld.set("name", slide_name)
        if name_boxes and slide_name is not None:
            name_box = slide.shapes.add_textbox(0, 0, 0, 0)
            name_box.text_frame.text = f"Category: {slide_name}"
        for index, shape_name in enumerate(shape_names):
            add_named_rectangle(slide, shape_name, index)

    return prs


def build_gallery_file(
    path: Path,
    categories: Sequence[CategorySpec],
    name_boxes: bool = True,
) -> Path:
    """Write a gallery presentation to ``path``."""
    path.parent.mkdir(parents=True, exist_ok=True)
    build_presentation(categories, name_boxes=name_boxes).save(str(path))
    return path


def write_images(root: Path, category: str, names: Sequence[str]) -> Path:
    """Create stub PNG files for ``names`` in a category folder."""
    folder = root / category
    folder.mkdir(parents=True, exist_ok=True)
    for name in names:
        (folder / f"{name}.png").write_bytes(b"\x89PNG\r\n\x1a\n")
    return folder


def image_names(root: Path, category: str) -> list[str]:
    """Sorted PNG stems in a category folder."""
    return sorted(p.stem for p in (root / category).glob("*.png"))


def shape_names(document: PptxGalleryDocument, position: int) -> list[str]:
    """Shape names of a slide, text boxes excluded."""
    category = document.categories[position]
    return [shape.name for shape in category.shapes if not shape.is_text_box]


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings pointing at a temporary gallery folder."""
    settings = Settings()
    settings.gallery_dir = tmp_path / "gallery"
    settings.gallery_name = "ShapeGallery"
    settings.closed_extension = ".shapegallery"
    settings.protect_repeat = 20
    settings.export_dpi = 24
    return settings


@pytest.fixture
def gallery_root(settings: Settings) -> Path:
    """Mirror root of the test gallery."""
    settings.gallery_dir.mkdir(parents=True, exist_ok=True)
    return settings.gallery_dir


@pytest.fixture
def mirror(gallery_root: Path) -> MirrorStore:
    return MirrorStore(gallery_root)


@pytest.fixture
def empty_document(gallery_root: Path) -> PptxGalleryDocument:
    """An in-memory gallery document without slides."""
    return PptxGalleryDocument(Presentation(), gallery_root / "ShapeGallery.pptx", export_dpi=24)
