from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from dotenv import load_dotenv
from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Uses a local .env file in development for convenience.
    """

    log_level: Literal["debug", "info", "warning", "error", "critical"] = "info"

    # Translation collaborator
    google_api_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("GOOGLE_API_KEY", "GEMINI_API_KEY"),
        description="API key for the Gemini translation call",
    )
    gemini_model: str = "gemini-2.5-flash"
    target_language: str = "Vietnamese"

    # Panel detection
    min_panel_area: float = Field(
        default=10000.0,
        gt=0,
        description="Contours whose area does not exceed this (px^2) are discarded",
    )
    panel_polarity: Literal["auto", "inverted", "normal"] = "auto"
    panel_order: Literal["reading", "discovery"] = "reading"
    panel_row_tolerance: int = Field(
        default=50,
        ge=1,
        description="Max gap (px) between panel tops that still counts as one reading row",
    )

    # Column merge
    merge_vertical_distance: float = 20.0
    merge_overlap_ratio: float = Field(default=0.3, ge=0.0, le=1.0)
    merge_preserve_column_width: bool = True
    canvas_scale: float = Field(default=1.4, gt=0)

    # OCR and drawing
    ocr_lang: str = "eng"
    font_path: Optional[Path] = None
    draw_font_size: int = Field(default=30, ge=1)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Lazily load and cache settings to avoid re-parsing .env on each import."""
    # Load nearest .env discovered from CWD upward without overriding existing vars
    load_dotenv(override=False)
    return Settings()
