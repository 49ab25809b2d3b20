from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Optional, Tuple, Union

from PIL import Image, ImageDraw, ImageFont

from domain.models import BACKGROUND_COLOR, DiagramPlan, FilledRect, FontWeight, Text
from domain.ports.repositories import DiagramRenderer

logger = logging.getLogger(__name__)

Font = Union[ImageFont.FreeTypeFont, ImageFont.ImageFont]

MONOSPACE_FONT_CANDIDATES: Dict[FontWeight, Tuple[str, ...]] = {
    FontWeight.NORMAL: (
        "/usr/share/fonts/truetype/dejavu/DejaVuSansMono.ttf",
        "/usr/share/fonts/truetype/liberation/LiberationMono-Regular.ttf",
        "/usr/share/fonts/truetype/noto/NotoSansMono-Regular.ttf",
        "/usr/share/fonts/truetype/freefont/FreeMono.ttf",
        "/System/Library/Fonts/Menlo.ttc",
        "C:/Windows/Fonts/consola.ttf",
    ),
    FontWeight.BOLD: (
        "/usr/share/fonts/truetype/dejavu/DejaVuSansMono-Bold.ttf",
        "/usr/share/fonts/truetype/liberation/LiberationMono-Bold.ttf",
        "/usr/share/fonts/truetype/noto/NotoSansMono-Bold.ttf",
        "/usr/share/fonts/truetype/freefont/FreeMonoBold.ttf",
        "C:/Windows/Fonts/consolab.ttf",
    ),
}


class PillowDiagramRenderer(DiagramRenderer):
    """Rasterizes a diagram plan to PNG, drawing primitives in sequence order."""

    def __init__(
        self, font_path: Optional[Path] = None, bold_font_path: Optional[Path] = None
    ) -> None:
        self.font_paths: Dict[FontWeight, Optional[Path]] = {
            FontWeight.NORMAL: font_path,
            FontWeight.BOLD: bold_font_path or font_path,
        }
        self._fonts: Dict[Tuple[FontWeight, int], Font] = {}

    def render(self, plan: DiagramPlan, path: Path) -> None:
        image = self.rasterize(plan)
        path.parent.mkdir(parents=True, exist_ok=True)
        image.save(path, format="PNG")

    def rasterize(self, plan: DiagramPlan) -> Image.Image:
        canvas = plan.canvas
        if canvas.width <= 0 or canvas.height <= 0:
            msg = f"Cannot rasterize an empty canvas ({canvas.width}x{canvas.height})"
            raise ValueError(msg)
        image = Image.new("RGB", (canvas.width, canvas.height), BACKGROUND_COLOR)
        draw = ImageDraw.Draw(image)
        for primitive in plan.primitives:
            if isinstance(primitive, FilledRect):
                draw.rectangle(
                    [
                        primitive.top_left.x,
                        primitive.top_left.y,
                        primitive.bottom_right.x,
                        primitive.bottom_right.y,
                    ],
                    fill=primitive.fill_color,
                )
            elif isinstance(primitive, Text):
                self._draw_text(draw, primitive)
        return image

    def _draw_text(self, draw: ImageDraw.ImageDraw, text: Text) -> None:
        font = self._font(text.font_weight, text.font_size)
        left, top, right, bottom = draw.textbbox((0, 0), text.content, font=font)
        x = float(text.anchor.x)
        y = float(text.anchor.y)
        if text.horizontal_center:
            x -= (right - left) / 2
        if text.vertical_center:
            y -= (bottom - top) / 2
        draw.text((x - left, y - top), text.content, fill=text.color, font=font)

    def _font(self, weight: FontWeight, size: int) -> Font:
        key = (weight, size)
        if key not in self._fonts:
            self._fonts[key] = self._load_font(weight, size)
        return self._fonts[key]

    def _load_font(self, weight: FontWeight, size: int) -> Font:
        explicit = self.font_paths.get(weight)
        candidates = [str(explicit)] if explicit else []
        candidates.extend(MONOSPACE_FONT_CANDIDATES[weight])
        for candidate in candidates:
            if Path(candidate).is_file():
                try:
                    return ImageFont.truetype(candidate, size)
                except OSError:
                    logger.warning("Could not load font %s", candidate)
        logger.warning("No monospace TrueType font found; using the Pillow default font")
        return ImageFont.load_default(size=size)
