from __future__ import annotations

from typing import List, Sequence, Tuple

import cv2  # type: ignore
import numpy as np

from comicfuse.pipeline.geometry import Box, draw_box


def generate_distinct_colors(num_colors: int, seed: int = 42) -> List[Tuple[int, int, int]]:
    rng = np.random.default_rng(seed)
    colors = []
    for _ in range(num_colors):
        color = tuple(int(c) for c in rng.integers(low=64, high=255, size=3))
        colors.append((color[2], color[1], color[0]))
    return colors


def make_panel_overlay(image: np.ndarray, boxes: Sequence[Box], thickness: int = 3) -> np.ndarray:
    """Outline and number each panel box on a BGR copy of ``image``."""
    overlay = cv2.cvtColor(image, cv2.COLOR_GRAY2BGR) if image.ndim == 2 else image.copy()
    for idx, (box, color) in enumerate(zip(boxes, generate_distinct_colors(len(boxes)))):
        draw_box(overlay, box, color, thickness)
        x, y = box.top_left
        label = str(idx)
        org = (int(x) + 8, int(y) + 28)
        cv2.putText(overlay, label, org, cv2.FONT_HERSHEY_SIMPLEX, 0.9, (0, 0, 0), 3)
        cv2.putText(overlay, label, org, cv2.FONT_HERSHEY_SIMPLEX, 0.9, (255, 255, 255), 1)
    return overlay
