from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Sequence, Tuple

import cv2
import numpy as np
from PIL import Image, ImageDraw, ImageFont  # type: ignore

from comicfuse.pipeline.adapter import Adapter
from comicfuse.pipeline.translate.base import Translation


def _load_font(font_path: Optional[Path], font_size: int) -> ImageFont.ImageFont:
    if font_path is not None:
        if not Path(font_path).exists():
            raise FileNotFoundError(f"Font not found: {font_path}")
        return ImageFont.truetype(str(font_path), font_size)
    return ImageFont.load_default(size=font_size)


def draw_translations(
    image_bgr: np.ndarray,
    translations: Sequence[Translation],
    font_path: Optional[Path] = None,
    font_size: int = 30,
) -> np.ndarray:
    """Paint each translation's box white and write its lines over it.

    ``box_2d`` is rescaled from 0-1000 space to the page's pixel size. Lines
    are centered horizontally and stacked from the top of the box.
    """
    if image_bgr.ndim == 2:
        image_bgr = cv2.cvtColor(image_bgr, cv2.COLOR_GRAY2BGR)
    canvas = Image.fromarray(cv2.cvtColor(image_bgr, cv2.COLOR_BGR2RGB))
    draw = ImageDraw.Draw(canvas)
    font = _load_font(font_path, font_size)
    width, height = canvas.size

    for tr in translations:
        x0, y0, x1, y1 = tr.to_pixel_rect(width, height)
        draw.rectangle([x0, y0, x1, y1], fill=(255, 255, 255))
        center_x = (x0 + x1) / 2.0
        for index, line in enumerate(tr.translated_text.split("\n")):
            top = y0 + index * font_size
            draw.text((center_x, top), line, fill=(0, 0, 0), font=font, anchor="mt")

    return cv2.cvtColor(np.asarray(canvas), cv2.COLOR_RGB2BGR)


class DrawTranslationsAdapter(Adapter[Tuple[np.ndarray, List[Translation]], np.ndarray]):
    def __init__(self, font_path: Optional[Path] = None, font_size: int = 30) -> None:
        self.font_path = font_path
        self.font_size = font_size

    def convert(self, src: Tuple[np.ndarray, List[Translation]]) -> np.ndarray:
        image, translations = src
        return draw_translations(image, translations, font_path=self.font_path, font_size=self.font_size)
