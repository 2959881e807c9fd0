from __future__ import annotations

from pathlib import Path
from typing import Callable, List, Optional, Union

import cv2  # type: ignore
import numpy as np

from comicfuse.pipeline.adapter import Adapter, AsyncAdapter
from comicfuse.pipeline.panels import PanelDetectionInput, PanelDetectionOutput
from comicfuse.pipeline.utils.io import data_url_to_image, image_to_data_url, read_image_bgr


class GrayColorizer(Adapter[PanelDetectionInput, PanelDetectionInput]):
    """Converts the input page to single-channel grayscale."""

    def convert(self, src: PanelDetectionInput) -> PanelDetectionInput:
        image = src.image
        if image.ndim == 3 and image.shape[2] == 4:
            gray = cv2.cvtColor(image, cv2.COLOR_BGRA2GRAY)
        elif image.ndim == 3:
            gray = cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)
        else:
            gray = image
        return PanelDetectionInput(
            image=gray,
            min_panel_area=src.min_panel_area,
            display_callback=src.display_callback,
        )


class ImageFileToPanelDetectionInputAdapter(Adapter[Union[str, Path], PanelDetectionInput]):
    def __init__(
        self,
        min_panel_area: Optional[float] = None,
        display_callback: Optional[Callable[[np.ndarray], None]] = None,
    ) -> None:
        self.min_panel_area = min_panel_area
        self.display_callback = display_callback

    def convert(self, src: Union[str, Path]) -> PanelDetectionInput:
        return PanelDetectionInput(
            image=read_image_bgr(Path(src)),
            min_panel_area=self.min_panel_area,
            display_callback=self.display_callback,
        )


class DataUrlToPanelDetectionInputAdapter(AsyncAdapter[str, PanelDetectionInput]):
    def __init__(
        self,
        min_panel_area: Optional[float] = None,
        display_callback: Optional[Callable[[np.ndarray], None]] = None,
    ) -> None:
        self.min_panel_area = min_panel_area
        self.display_callback = display_callback

    async def convert(self, src: str) -> PanelDetectionInput:
        return PanelDetectionInput(
            image=data_url_to_image(src),
            min_panel_area=self.min_panel_area,
            display_callback=self.display_callback,
        )


class PanelImagesAdapter(Adapter[PanelDetectionOutput, List[np.ndarray]]):
    def convert(self, src: PanelDetectionOutput) -> List[np.ndarray]:
        return src.images


class ImageToDataUrlAdapter(AsyncAdapter[np.ndarray, str]):
    async def convert(self, src: np.ndarray) -> str:
        return image_to_data_url(src)
