from __future__ import annotations

import logging
from typing import List

from pydantic import BaseModel

from comicfuse.pipeline.translate.base import Translation, Translator

try:
    from google import genai
    from google.genai import types
except ImportError as exc:
    raise RuntimeError("google-genai is required. Install it via: pip install google-genai") from exc

logger = logging.getLogger(__name__)

PROMPT_TEMPLATE = (
    "Translate the texts in the comic page to {language}. Keep newlines. "
    "Take into account the gender and age of the speakers and their possible relationships. "
    "For each text region return the original text, the translated text in all caps, "
    "and its bounding box as box_2d in the format [y_min, x_min, y_max, x_max] normalized to 0-1000."
)


# Wrapper model: the SDK handles an object root more reliably than a bare list.
class TranslationList(BaseModel):
    translations: List[Translation]


class GeminiTranslator(Translator):
    def __init__(self, api_key: str, model: str = "gemini-2.5-flash") -> None:
        if not api_key:
            raise RuntimeError("GOOGLE_API_KEY is required for translation via Gemini")
        self._client = genai.Client(api_key=api_key)
        self._model_name = model
        self._generation_config = {
            "response_mime_type": "application/json",
            "response_schema": TranslationList,
        }

    def translate_image(self, image_bytes: bytes, mime_type: str, target_language: str) -> List[Translation]:
        if not image_bytes:
            return []

        response = self._client.models.generate_content(
            model=self._model_name,
            contents=[
                types.Part.from_bytes(data=image_bytes, mime_type=mime_type or "image/png"),
                PROMPT_TEMPLATE.format(language=target_language),
            ],
            config=self._generation_config,
        )

        parsed = response.parsed
        if parsed is None:
            parsed = TranslationList.model_validate_json(response.text or '{"translations": []}')
        if not parsed.translations:
            logger.warning("translate_empty_response", extra={"model": self._model_name})
        return list(parsed.translations)
