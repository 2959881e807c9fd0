from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Literal, Optional, Tuple

import cv2  # type: ignore
import numpy as np

from comicfuse.pipeline.adapter import Adapter
from comicfuse.pipeline.geometry import Box, rect_to_box, transform_panel

# adapted from https://gist.github.com/b10011/bf07887e67d0fb272f70948f23d66102

Polarity = Literal["auto", "inverted", "normal"]
PanelOrder = Literal["reading", "discovery"]

logger = logging.getLogger(__name__)


@dataclass
class PanelDetectionInput:
    image: np.ndarray
    min_panel_area: Optional[float] = None
    display_callback: Optional[Callable[[np.ndarray], None]] = None


@dataclass
class Panel:
    image: np.ndarray
    box: Box
    index: int = 0


@dataclass
class PanelDetectionOutput:
    panels: List[Panel] = field(default_factory=list)

    @property
    def images(self) -> List[np.ndarray]:
        return [p.image for p in self.panels]


def _binarize(gray: np.ndarray, polarity: Polarity) -> np.ndarray:
    """Otsu threshold with the page background mapped to 0.

    ``auto`` looks at the border of the normal-polarity mask: a mostly
    foreground border means light gutters, so the mask is inverted and the
    dark panel frames become foreground.
    """
    flags = cv2.THRESH_BINARY_INV if polarity == "inverted" else cv2.THRESH_BINARY
    _, mask = cv2.threshold(gray, 0, 255, flags | cv2.THRESH_OTSU)
    if polarity != "auto":
        return mask

    border = np.concatenate([mask[0, :], mask[-1, :], mask[:, 0], mask[:, -1]])
    if np.count_nonzero(border) * 2 > border.size:
        mask = cv2.bitwise_not(mask)
    return mask


def _extent(panel: Panel) -> Tuple[float, float, float]:
    xs = [p[0] for p in panel.box.points()]
    ys = [p[1] for p in panel.box.points()]
    return min(xs), min(ys), max(ys)


def _reading_order(panels: List[Panel], row_tolerance: int) -> List[Panel]:
    """Groups panels into rows by how close their tops are, then reads each row left to right.

    A panel opens a new row when its top is more than ``row_tolerance`` below
    the row's first top or it does not overlap the row vertically.
    """
    rows: List[List[Panel]] = []
    row_top = row_bottom = 0.0
    for panel in sorted(panels, key=lambda p: _extent(p)[1]):
        _, top, bottom = _extent(panel)
        if rows and top - row_top <= row_tolerance and top < row_bottom:
            rows[-1].append(panel)
            row_bottom = max(row_bottom, bottom)
        else:
            rows.append([panel])
            row_top, row_bottom = top, bottom
    return [panel for row in rows for panel in sorted(row, key=lambda p: _extent(p)[0])]


class PanelDetector(Adapter[PanelDetectionInput, PanelDetectionOutput]):
    """Splits a grayscale comic page into upright panel images.

    Otsu binarization, external contours only, an area filter, then a
    minimum-area rectangle per contour warped upright. Returns an empty list
    when nothing qualifies.
    """

    def __init__(
        self,
        min_panel_area: float = 10000,
        *,
        polarity: Polarity = "auto",
        order: PanelOrder = "reading",
        row_tolerance: int = 50,
    ) -> None:
        if row_tolerance < 1:
            raise ValueError("row_tolerance must be >= 1")
        self.min_panel_area = float(min_panel_area)
        self.polarity = polarity
        self.order = order
        self.row_tolerance = int(row_tolerance)

    def detect(self, gray: np.ndarray, min_panel_area: Optional[float] = None) -> List[Panel]:
        if gray is None or gray.size == 0:
            raise ValueError("panel detection requires a non-empty image")
        if gray.ndim != 2:
            raise ValueError("panel detection requires a single-channel image; run GrayColorizer first")
        min_area = self.min_panel_area if min_panel_area is None else float(min_panel_area)

        # No contrast means nothing to separate
        if int(gray.min()) == int(gray.max()):
            return []

        mask: Optional[np.ndarray] = None
        contours: tuple = ()
        try:
            mask = _binarize(gray, self.polarity)
            contours, _ = cv2.findContours(mask, cv2.RETR_EXTERNAL, cv2.CHAIN_APPROX_NONE)

            panels: List[Panel] = []
            for contour in contours:
                # Skip small contours like page numbers
                if cv2.contourArea(contour) <= min_area:
                    continue
                box = rect_to_box(cv2.minAreaRect(contour))
                panels.append(Panel(image=transform_panel(gray, box), box=box))
        finally:
            del mask, contours

        if self.order == "reading":
            panels = _reading_order(panels, self.row_tolerance)
        for index, panel in enumerate(panels):
            panel.index = index
        return panels

    def convert(self, src: PanelDetectionInput) -> PanelDetectionOutput:
        panels = self.detect(src.image, src.min_panel_area)
        logger.debug("panels_detected", extra={"num_panels": len(panels)})
        if src.display_callback is not None:
            from comicfuse.pipeline.utils.visualization import make_panel_overlay

            src.display_callback(make_panel_overlay(src.image, [p.box for p in panels]))
        return PanelDetectionOutput(panels=panels)
