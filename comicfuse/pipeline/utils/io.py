from __future__ import annotations

import base64
import binascii
from pathlib import Path

import cv2
import numpy as np

_DATA_URL_PREFIX = "data:"


def ensure_dir(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)


def read_image_bgr(image_path: Path) -> np.ndarray:
    image = cv2.imread(str(image_path), cv2.IMREAD_COLOR)
    if image is None:
        raise FileNotFoundError(f"Failed to read image: {image_path}")
    return image


def save_png(path: Path, image: np.ndarray) -> None:
    ensure_dir(path.parent)
    ok = cv2.imwrite(str(path), image)
    if not ok:
        raise RuntimeError(f"Failed to write image: {path}")


def decode_image(data: bytes) -> np.ndarray:
    buf = np.frombuffer(data, dtype=np.uint8)
    image = cv2.imdecode(buf, cv2.IMREAD_COLOR) if buf.size else None
    if image is None:
        raise ValueError("Failed to decode image bytes")
    return image


def encode_png(image: np.ndarray) -> bytes:
    ok, buf = cv2.imencode(".png", image)
    if not ok:
        raise RuntimeError("Failed to encode image as PNG")
    return buf.tobytes()


def data_url_to_image(data_url: str) -> np.ndarray:
    """Decode a ``data:<mime>;base64,<payload>`` URL into a BGR image."""
    if not data_url.startswith(_DATA_URL_PREFIX) or "," not in data_url:
        raise ValueError("Not a data URL")
    header, payload = data_url.split(",", 1)
    if not header.endswith(";base64"):
        raise ValueError("Only base64 data URLs are supported")
    try:
        raw = base64.b64decode(payload, validate=True)
    except binascii.Error as exc:
        raise ValueError("Malformed base64 payload in data URL") from exc
    return decode_image(raw)


def image_to_data_url(image: np.ndarray) -> str:
    return "data:image/png;base64," + base64.b64encode(encode_png(image)).decode("ascii")
