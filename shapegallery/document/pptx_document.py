"""python-pptx backend for the gallery document.

One slide per category. The category's container name is stored in the
slide's ``p:cSld/@name`` attribute and shape names in ``p:cNvPr/@name``.
"""

import copy
import logging
import zipfile
from io import BytesIO
from pathlib import Path
from typing import Any, Sequence

from pptx import Presentation
from pptx.enum.shapes import MSO_SHAPE_TYPE
from pptx.exc import PackageNotFoundError
from pptx.oxml.ns import qn
from pptx.slide import Slide

from shapegallery.document.base import CategorySlide, GalleryDocument, GalleryShape
from shapegallery.document.rasterizer import ShapeRasterizer
from shapegallery.errors import GalleryOpenError

logger = logging.getLogger(__name__)

BLANK_LAYOUT_NAME = "Blank"


class PptxGalleryShape(GalleryShape):
    """Wraps a python-pptx shape."""

    def __init__(self, shape: Any, category: "PptxCategorySlide") -> None:
        self._shape = shape
        self._category = category

    @property
    def native(self) -> Any:
        """The wrapped python-pptx shape."""
        return self._shape

    @property
    def category(self) -> "PptxCategorySlide":
        """The slide holding this shape."""
        return self._category

    @property
    def name(self) -> str:
        return self._shape.name

    @name.setter
    def name(self, value: str) -> None:
        self._shape._element._nvXxPr.cNvPr.name = value

    @property
    def shape_id(self) -> int:
        return self._shape.shape_id

    @property
    def is_text_box(self) -> bool:
        try:
            return self._shape.shape_type == MSO_SHAPE_TYPE.TEXT_BOX
        except NotImplementedError:
            return False

    @property
    def text(self) -> str | None:
        if not self._shape.has_text_frame:
            return None
        return self._shape.text_frame.text

    @text.setter
    def text(self, value: str) -> None:
        if not self._shape.has_text_frame:
            raise ValueError(f"Shape '{self.name}' cannot hold text")
        self._shape.text_frame.text = value


class PptxCategorySlide(CategorySlide):
    """Wraps a python-pptx slide used as a category container."""

    def __init__(self, slide: Slide, document: "PptxGalleryDocument") -> None:
        self._slide = slide
        self._document = document

    @property
    def slide(self) -> Slide:
        """The wrapped python-pptx slide."""
        return self._slide

    @property
    def name(self) -> str:
        # PowerPoint shows unnamed slides as "Slide <n>"
        return self._slide.name or f"Slide {self.position + 1}"

    @name.setter
    def name(self, value: str) -> None:
        self._slide._element.cSld.set("name", value)

    @property
    def position(self) -> int:
        return self._document.presentation.slides.index(self._slide)

    @property
    def shapes(self) -> list[GalleryShape]:
        return [PptxGalleryShape(shape, self) for shape in self._slide.shapes]

    def add_text_box(self, text: str) -> GalleryShape:
        text_box = self._slide.shapes.add_textbox(0, 0, 0, 0)
        text_box.text_frame.text = text
        return PptxGalleryShape(text_box, self)

    def paste(self, sources: Sequence[GalleryShape]) -> list[GalleryShape]:
        """Copy shapes into this slide.

        Sources may live on another slide or in another presentation.
        Picture data is re-embedded in this slide's part and every copied
        element gets a fresh shape id.
        """
        pasted_ids = [self._copy_element(source) for source in sources]
        by_id = {shape.shape_id: shape for shape in self.shapes}
        return [by_id[shape_id] for shape_id in pasted_ids]

    def group(self, shapes: Sequence[GalleryShape]) -> GalleryShape:
        members = [self._native(shape) for shape in shapes]
        group_shape = self._slide.shapes.add_group_shape(members)
        return PptxGalleryShape(group_shape, self)

    def delete_shape(self, shape: GalleryShape) -> None:
        element = self._native(shape)._element
        element.getparent().remove(element)

    def _copy_element(self, source: GalleryShape) -> int:
        """Deep-copy one shape element into this slide.

        Returns:
            Shape id of the copy.
        """
        if not isinstance(source, PptxGalleryShape):
            raise TypeError(f"Cannot paste {type(source).__name__} into a pptx slide")

        element = copy.deepcopy(source.native._element)
        source_part = source.category.slide.part

        # Re-embed images referenced by the copied element
        for blip in element.iter(qn("a:blip")):
            r_id = blip.get(qn("r:embed"))
            if not r_id:
                continue
            image_part = source_part.related_part(r_id)
            _, new_r_id = self._slide.part.get_or_add_image_part(BytesIO(image_part.blob))
            blip.set(qn("r:embed"), new_r_id)

        next_id = self._slide.shapes._next_shape_id
        for offset, c_nv_pr in enumerate(element.iter(qn("p:cNvPr"))):
            c_nv_pr.set("id", str(next_id + offset))

        self._slide.shapes._spTree.insert_element_before(element, "p:extLst")
        return next_id

    def _native(self, shape: GalleryShape) -> Any:
        if not isinstance(shape, PptxGalleryShape):
            raise TypeError(f"Expected a pptx shape, got {type(shape).__name__}")
        return shape.native


class PptxGalleryDocument(GalleryDocument):
    """A gallery stored as a .pptx presentation."""

    def __init__(self, presentation: Any, path: Path, export_dpi: int = 96) -> None:
        """Wrap an already loaded presentation.

        Args:
            presentation: python-pptx Presentation object.
            path: Where :meth:`save` writes the presentation.
            export_dpi: Resolution of exported shape images.
        """
        self._prs = presentation
        self._path = Path(path)
        self._rasterizer = ShapeRasterizer(dpi=export_dpi)

    @classmethod
    def open(cls, path: Path | str, export_dpi: int = 96) -> "PptxGalleryDocument":
        """Load a presentation from disk.

        Raises:
            GalleryOpenError: If the file is missing or not a presentation.
        """
        path = Path(path)
        try:
            presentation = Presentation(str(path))
        except (PackageNotFoundError, zipfile.BadZipFile, KeyError, OSError) as e:
            raise GalleryOpenError(f"Cannot open gallery file {path}: {e}") from e
        return cls(presentation, path, export_dpi=export_dpi)

    @classmethod
    def create(cls, path: Path | str, export_dpi: int = 96) -> "PptxGalleryDocument":
        """Create an empty presentation and save it to ``path``."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        document = cls(Presentation(), path, export_dpi=export_dpi)
        document.save()
        logger.info(f"Created empty gallery file {path}")
        return document

    @property
    def presentation(self) -> Any:
        """The wrapped python-pptx Presentation."""
        if self._prs is None:
            raise ValueError(f"Document {self._path} is closed")
        return self._prs

    @property
    def path(self) -> Path:
        return self._path

    @property
    def categories(self) -> list[CategorySlide]:
        return [PptxCategorySlide(slide, self) for slide in self.presentation.slides]

    def add_category(self, name: str) -> CategorySlide:
        prs = self.presentation
        slide = prs.slides.add_slide(self._blank_layout())

        # Layouts other than "Blank" may still bring placeholders along
        for placeholder in list(slide.placeholders):
            element = placeholder._element
            element.getparent().remove(element)

        category = PptxCategorySlide(slide, self)
        category.name = name
        return category

    def remove_category(self, category: CategorySlide) -> None:
        if not isinstance(category, PptxCategorySlide):
            raise TypeError(f"Expected a pptx slide, got {type(category).__name__}")

        prs = self.presentation
        slide_ids = prs.slides._sldIdLst
        for slide_id in list(slide_ids):
            if prs.part.related_part(slide_id.rId) is category.slide.part:
                prs.part.drop_rel(slide_id.rId)
                slide_ids.remove(slide_id)
                return
        raise ValueError(f"Slide '{category.name}' is not part of {self._path}")

    def append_category(self, source: CategorySlide) -> CategorySlide:
        category = self.add_category(source.name)
        category.paste(source.shapes)
        return category

    def export_shape(self, shape: GalleryShape, path: Path) -> None:
        if not isinstance(shape, PptxGalleryShape):
            raise TypeError(f"Expected a pptx shape, got {type(shape).__name__}")
        self._rasterizer.export(shape.native, path)

    def save(self) -> None:
        self.presentation.save(str(self._path))

    def close(self) -> None:
        self._prs = None

    def protect_last_actions(self, repeat: int) -> None:
        # A file-backed python-pptx presentation has no undo history to pad,
        # so there is nothing for the repeated no-op mutation to push out.
        logger.debug(f"Action protection requested ({repeat}x) for {self._path.name}")

    def _blank_layout(self) -> Any:
        """Blank slide layout, or the layout with the fewest placeholders."""
        layouts = list(self.presentation.slide_layouts)
        for layout in layouts:
            if layout.name == BLANK_LAYOUT_NAME:
                return layout
        return min(layouts, key=lambda layout: len(layout.placeholders))
