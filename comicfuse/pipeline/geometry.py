from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence, Tuple

import cv2  # type: ignore
import numpy as np

Point = Tuple[float, float]


@dataclass(frozen=True)
class Box:
    """Four corners of a (possibly rotated) rectangular region in reading order."""

    top_left: Point
    top_right: Point
    bottom_right: Point
    bottom_left: Point

    @classmethod
    def from_points(cls, points: Sequence[Sequence[float]]) -> "Box":
        return cls(*order_corners(points))

    def points(self) -> Tuple[Point, Point, Point, Point]:
        return (self.top_left, self.top_right, self.bottom_right, self.bottom_left)

    def to_list(self) -> list[list[float]]:
        return [[float(x), float(y)] for x, y in self.points()]


def euclidean_distance(p1: Sequence[float], p2: Sequence[float]) -> float:
    return math.hypot(float(p2[0]) - float(p1[0]), float(p2[1]) - float(p1[1]))


def order_corners(points: Sequence[Sequence[float]]) -> Tuple[Point, Point, Point, Point]:
    """Order four points as (top_left, top_right, bottom_right, bottom_left).

    Points are sorted by y; the upper pair is sorted by x to give
    (top_left, top_right) and the lower pair to give (bottom_left, bottom_right).
    Sorting is stable, so exact ties keep their input order.
    """
    if len(points) != 4:
        raise ValueError(f"order_corners expects exactly 4 points, got {len(points)}")
    pts = [(float(p[0]), float(p[1])) for p in points]
    by_y = sorted(pts, key=lambda p: p[1])
    top = sorted(by_y[:2], key=lambda p: p[0])
    bottom = sorted(by_y[2:], key=lambda p: p[0])
    return top[0], top[1], bottom[1], bottom[0]


def rect_to_box(rotated_rect: Tuple[Point, Tuple[float, float], float]) -> Box:
    """Convert an OpenCV rotated rect ``((cx, cy), (w, h), angle)`` into an ordered Box."""
    corners = cv2.boxPoints(rotated_rect)
    return Box.from_points(corners.tolist())


def transform_panel(image: np.ndarray, box: Box) -> np.ndarray:
    """Warp the quadrilateral ``box`` of ``image`` into an upright rectangle.

    The output size is the measured top and left edge lengths of the box,
    rounded and at least one pixel in each direction.
    """
    width = max(1, int(round(euclidean_distance(box.top_left, box.top_right))))
    height = max(1, int(round(euclidean_distance(box.top_left, box.bottom_left))))

    src = np.array(box.points(), dtype=np.float32)
    dst = np.array(
        [[0, 0], [width - 1, 0], [width - 1, height - 1], [0, height - 1]],
        dtype=np.float32,
    )
    matrix = cv2.getPerspectiveTransform(src, dst)
    return cv2.warpPerspective(image, matrix, (width, height))


def draw_box(
    image: np.ndarray,
    box: Box,
    color: Tuple[int, ...] = (0, 0, 255),
    thickness: int = 2,
) -> None:
    """Draw the closed outline of ``box`` onto ``image`` in place."""
    pts = np.array([[int(round(x)), int(round(y))] for x, y in box.points()], dtype=np.int32)
    cv2.polylines(image, [pts.reshape(-1, 1, 2)], True, color, thickness)
