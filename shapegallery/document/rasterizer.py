"""Preview rasterization of python-pptx shapes to PNG with Pillow.

python-pptx cannot render slides, so gallery thumbnails are drawn from the
shape tree directly: filled boxes or ellipses for auto shapes, the embedded
bitmap for pictures, group children at their offsets, and the shape text.
The result is a recognizable preview, not a faithful rendering.
"""

import logging
from io import BytesIO
from pathlib import Path
from typing import Any

from PIL import Image, ImageDraw, ImageFont
from pptx.enum.dml import MSO_FILL_TYPE
from pptx.enum.shapes import MSO_SHAPE, MSO_SHAPE_TYPE

logger = logging.getLogger(__name__)

EMU_PER_INCH = 914400

DEFAULT_FILL = (217, 217, 217, 255)
DEFAULT_OUTLINE = (89, 89, 89, 255)
TEXT_COLOR = (0, 0, 0, 255)
TEXT_PADDING_PX = 4

ELLIPSE_SHAPES = frozenset({MSO_SHAPE.OVAL})


class ShapeRasterizer:
    """Draws a python-pptx shape into a transparent RGBA image."""

    def __init__(self, dpi: int = 96) -> None:
        """Initialize the rasterizer.

        Args:
            dpi: Output resolution in pixels per inch.
        """
        self.dpi = dpi
        self.font = ImageFont.load_default()

    def export(self, shape: Any, path: Path | str) -> None:
        """Render ``shape`` and save it as a PNG file.

        Args:
            shape: python-pptx shape (auto shape, picture, group, ...).
            path: Destination file path.
        """
        image = self.render(shape)
        image.save(str(path), format="PNG")

    def render(self, shape: Any) -> Image.Image:
        """Render ``shape`` at the configured resolution.

        Args:
            shape: python-pptx shape.

        Returns:
            RGBA image sized to the shape's extents (at least 1x1).
        """
        width = self._to_px(shape.width)
        height = self._to_px(shape.height)
        image = Image.new("RGBA", (width, height), (255, 255, 255, 0))
        draw = ImageDraw.Draw(image)

        origin_x = shape.left or 0
        origin_y = shape.top or 0
        self._draw_shape(image, draw, shape, origin_x, origin_y)
        return image

    def _to_px(self, emu: int | None) -> int:
        """Convert EMUs to pixels, never below one."""
        if not emu:
            return 1
        return max(1, round(emu / EMU_PER_INCH * self.dpi))

    def _draw_shape(
        self,
        image: Image.Image,
        draw: ImageDraw.ImageDraw,
        shape: Any,
        origin_x: int,
        origin_y: int,
    ) -> None:
        """Draw one shape relative to the image origin (in EMUs)."""
        left = self._offset_px((shape.left or 0) - origin_x)
        top = self._offset_px((shape.top or 0) - origin_y)
        right = left + self._to_px(shape.width) - 1
        bottom = top + self._to_px(shape.height) - 1
        box = (left, top, max(left, right), max(top, bottom))

        shape_type = self._shape_type(shape)

        if shape_type == MSO_SHAPE_TYPE.GROUP:
            for child in shape.shapes:
                self._draw_shape(image, draw, child, origin_x, origin_y)
            return

        if shape_type == MSO_SHAPE_TYPE.PICTURE:
            self._draw_picture(image, shape, box)
            return

        if shape_type != MSO_SHAPE_TYPE.TEXT_BOX:
            fill = self._fill_color(shape)
            if self._is_ellipse(shape):
                draw.ellipse(box, fill=fill, outline=DEFAULT_OUTLINE)
            else:
                draw.rectangle(box, fill=fill, outline=DEFAULT_OUTLINE)

        text = self._text(shape)
        if text:
            draw.multiline_text(
                (left + TEXT_PADDING_PX, top + TEXT_PADDING_PX),
                text,
                fill=TEXT_COLOR,
                font=self.font,
            )

    def _offset_px(self, emu: int) -> int:
        return round(emu / EMU_PER_INCH * self.dpi)

    def _draw_picture(self, image: Image.Image, shape: Any, box: tuple) -> None:
        """Paste the picture's bitmap scaled into ``box``."""
        try:
            picture = Image.open(BytesIO(shape.image.blob)).convert("RGBA")
        except (OSError, ValueError, AttributeError) as e:
            logger.warning(f"Could not decode picture '{shape.name}': {e}")
            ImageDraw.Draw(image).rectangle(box, fill=DEFAULT_FILL, outline=DEFAULT_OUTLINE)
            return

        size = (box[2] - box[0] + 1, box[3] - box[1] + 1)
        picture = picture.resize(size, Image.Resampling.LANCZOS)
        image.paste(picture, (box[0], box[1]), picture)

    def _shape_type(self, shape: Any) -> Any:
        """Shape type, or None for elements python-pptx cannot classify."""
        try:
            return shape.shape_type
        except NotImplementedError:
            return None

    def _is_ellipse(self, shape: Any) -> bool:
        try:
            return shape.auto_shape_type in ELLIPSE_SHAPES
        except (AttributeError, ValueError, NotImplementedError):
            return False

    def _fill_color(self, shape: Any) -> tuple[int, int, int, int] | None:
        """Solid RGB fill of the shape, a neutral grey otherwise."""
        try:
            fill = shape.fill
            if fill.type == MSO_FILL_TYPE.BACKGROUND:
                return None
            if fill.type == MSO_FILL_TYPE.SOLID:
                rgb = fill.fore_color.rgb
                return (rgb[0], rgb[1], rgb[2], 255)
        except (AttributeError, TypeError, ValueError, NotImplementedError):
            pass
        return DEFAULT_FILL

    def _text(self, shape: Any) -> str:
        if not getattr(shape, "has_text_frame", False):
            return ""
        return shape.text_frame.text
