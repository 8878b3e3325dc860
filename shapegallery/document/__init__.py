"""Gallery document module - the host document holding category slides.

Provides the abstract interface the consistency engine works against and
its python-pptx implementation, including a Pillow preview exporter.
"""

from shapegallery.document.base import CategorySlide, GalleryDocument, GalleryShape
from shapegallery.document.pptx_document import (
    PptxCategorySlide,
    PptxGalleryDocument,
    PptxGalleryShape,
)
from shapegallery.document.rasterizer import ShapeRasterizer

__all__ = [
    "CategorySlide",
    "GalleryDocument",
    "GalleryShape",
    "PptxCategorySlide",
    "PptxGalleryDocument",
    "PptxGalleryShape",
    "ShapeRasterizer",
]
