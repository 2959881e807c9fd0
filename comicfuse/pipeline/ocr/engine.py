from __future__ import annotations

from typing import Dict, List, Tuple

import cv2
import numpy as np

from comicfuse.pipeline.adapter import Adapter
from comicfuse.pipeline.ocr.model import BBox, TextBlock


class TesseractOcrEngine:
    """Thin wrapper around pytesseract with lazy initialization.

    Words are grouped by Tesseract's (block, paragraph, line) numbering into
    one TextBlock per line; the column merge then stitches lines together.
    """

    def __init__(self, lang: str = "eng", min_confidence: float = 0.0) -> None:
        self.lang = lang
        self.min_confidence = float(min_confidence)
        self._engine = None

    def _ensure(self) -> None:
        if self._engine is None:
            try:
                import pytesseract  # type: ignore
            except Exception as exc:  # noqa: BLE001
                raise RuntimeError("pytesseract is required for OCR. Install it with `pip install pytesseract`") from exc
            self._engine = pytesseract

    def run(self, image: np.ndarray) -> List[TextBlock]:
        from PIL import Image

        self._ensure()
        if image.ndim == 2:
            pil_img = Image.fromarray(image)
        else:
            pil_img = Image.fromarray(cv2.cvtColor(image, cv2.COLOR_BGR2RGB))
        data = self._engine.image_to_data(pil_img, lang=self.lang, output_type=self._engine.Output.DICT)
        return group_words_into_lines(data, self.min_confidence)


def group_words_into_lines(data: Dict[str, list], min_confidence: float = 0.0) -> List[TextBlock]:
    """Collapse pytesseract ``image_to_data`` word rows into line blocks."""
    lines: Dict[Tuple[int, int, int], List[int]] = {}
    for i, word in enumerate(data.get("text", [])):
        if not str(word).strip():
            continue
        if float(data["conf"][i]) < min_confidence:
            continue
        key = (int(data["block_num"][i]), int(data["par_num"][i]), int(data["line_num"][i]))
        lines.setdefault(key, []).append(i)

    blocks: List[TextBlock] = []
    for idxs in lines.values():
        x0 = min(int(data["left"][i]) for i in idxs)
        y0 = min(int(data["top"][i]) for i in idxs)
        x1 = max(int(data["left"][i]) + int(data["width"][i]) for i in idxs)
        y1 = max(int(data["top"][i]) + int(data["height"][i]) for i in idxs)
        text = " ".join(str(data["text"][i]).strip() for i in idxs)
        blocks.append(TextBlock(bbox=BBox(x0, y0, x1, y1), text=text))
    return blocks


class OcrAdapter(Adapter[np.ndarray, List[TextBlock]]):
    def __init__(self, engine: TesseractOcrEngine) -> None:
        self.engine = engine

    def convert(self, src: np.ndarray) -> List[TextBlock]:
        return self.engine.run(src)
