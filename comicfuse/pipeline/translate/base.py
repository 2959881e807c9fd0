from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from typing import Callable, List, Optional, Tuple

import numpy as np
from pydantic import BaseModel, field_validator

from comicfuse.pipeline.adapter import AsyncAdapter
from comicfuse.pipeline.utils.io import encode_png

NORMALIZED_EXTENT = 1000.0


class Translation(BaseModel):
    """One translated text region.

    ``box_2d`` is ``[y_min, x_min, y_max, x_max]`` in a 0-1000 normalized
    space, not the more common x-first order.
    """

    text: str
    translated_text: str
    box_2d: List[float]

    @field_validator("box_2d")
    @classmethod
    def _ordered(cls, v: List[float]) -> List[float]:
        if len(v) != 4:
            raise ValueError("box_2d must have exactly 4 values")
        y_min, x_min, y_max, x_max = v
        if y_max < y_min or x_max < x_min:
            raise ValueError("box_2d must be [y_min, x_min, y_max, x_max]")
        return v

    def to_pixel_rect(self, width: int, height: int) -> Tuple[int, int, int, int]:
        y_min, x_min, y_max, x_max = self.box_2d
        return (
            int(round(x_min / NORMALIZED_EXTENT * width)),
            int(round(y_min / NORMALIZED_EXTENT * height)),
            int(round(x_max / NORMALIZED_EXTENT * width)),
            int(round(y_max / NORMALIZED_EXTENT * height)),
        )


class Translator(ABC):
    @abstractmethod
    def translate_image(self, image_bytes: bytes, mime_type: str, target_language: str) -> List[Translation]:
        ...


class TranslateImageAdapter(AsyncAdapter[np.ndarray, Tuple[np.ndarray, List[Translation]]]):
    """Sends the page to a translator and passes the page along with the result."""

    def __init__(
        self,
        translator: Translator,
        target_language: str = "Vietnamese",
        on_result: Optional[Callable[[List[Translation]], None]] = None,
    ) -> None:
        self.translator = translator
        self.target_language = target_language
        self.on_result = on_result

    async def convert(self, src: np.ndarray) -> Tuple[np.ndarray, List[Translation]]:
        data = encode_png(src)
        translations = await asyncio.to_thread(
            self.translator.translate_image, data, "image/png", self.target_language
        )
        if self.on_result is not None:
            self.on_result(translations)
        return src, translations
