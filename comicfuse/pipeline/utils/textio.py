from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict

from .io import ensure_dir


def read_text_json(json_path: Path) -> Dict[str, Any]:
    if not json_path.exists():
        raise FileNotFoundError(f"text.json not found at {json_path}. Run the page pipeline first.")
    with open(json_path, "r", encoding="utf-8") as f:
        data: Dict[str, Any] = json.load(f)
    # Normalize structure
    if not isinstance(data.get("panels"), list):
        data["panels"] = []
    if not isinstance(data.get("translations"), list):
        data["translations"] = []
    return data


def write_text_json(json_path: Path, payload: Dict[str, Any]) -> None:
    ensure_dir(json_path.parent)
    with open(json_path, "w", encoding="utf-8") as f:
        json.dump(payload, f, ensure_ascii=False, indent=2)
