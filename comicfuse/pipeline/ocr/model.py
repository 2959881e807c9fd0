from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping


@dataclass(frozen=True)
class BBox:
    x0: float
    y0: float
    x1: float
    y1: float

    @property
    def width(self) -> float:
        return self.x1 - self.x0

    @property
    def height(self) -> float:
        return self.y1 - self.y0

    def to_dict(self) -> Dict[str, float]:
        return {"x0": self.x0, "y0": self.y0, "x1": self.x1, "y1": self.y1}


@dataclass(frozen=True)
class TextBlock:
    """An axis-aligned OCR box with its text; merged blocks use the same shape."""

    bbox: BBox
    text: str

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "TextBlock":
        bbox = data["bbox"]
        return cls(
            bbox=BBox(float(bbox["x0"]), float(bbox["y0"]), float(bbox["x1"]), float(bbox["y1"])),
            text=str(data.get("text") or ""),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"bbox": self.bbox.to_dict(), "text": self.text}


@dataclass(frozen=True)
class CanvasBox:
    top: float
    left: float
    width: float
    height: float


@dataclass(frozen=True)
class CanvasBlock:
    text: str
    box: CanvasBox

    def to_dict(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "box": {
                "top": self.box.top,
                "left": self.box.left,
                "width": self.box.width,
                "height": self.box.height,
            },
        }
