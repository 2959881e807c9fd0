from __future__ import annotations

import asyncio
import logging
import time
from pathlib import Path
from typing import Any, Dict, List, Optional

import numpy as np

from comicfuse.core.config import Settings, get_settings
from comicfuse.pipeline.convert import ImageFileToPanelDetectionInputAdapter
from comicfuse.pipeline.ocr.engine import OcrAdapter, TesseractOcrEngine
from comicfuse.pipeline.ocr.merge import ColumnMergeAdapter
from comicfuse.pipeline.panels import Panel, PanelDetector
from comicfuse.pipeline.runner import AsyncPipeline, Pipeline
from comicfuse.pipeline.translate.base import Translation, TranslateImageAdapter, Translator
from comicfuse.pipeline.typeset.draw import DrawTranslationsAdapter

logger = logging.getLogger(__name__)


class PageOrchestrator:
    """
    Runs the page stages for a single image and writes their artifacts.

    Panels are always detected; OCR/merge and translate/draw are opt-in since
    they need external engines.
    """

    def __init__(
        self,
        job_id: str,
        image_path: str | Path,
        *,
        settings: Optional[Settings] = None,
        ocr_engine: Optional[TesseractOcrEngine] = None,
        translator: Optional[Translator] = None,
        include_ocr: bool = False,
        include_translate: bool = False,
        debug: bool = False,
        job_dir_override: Optional[str | Path] = None,
    ):
        self.job_id = job_id
        self.input_image_path = Path(image_path)
        self.settings = settings or get_settings()
        self.ocr_engine = ocr_engine
        self.translator = translator
        self.include_ocr = include_ocr
        self.include_translate = include_translate
        self.debug = debug

        # State
        self.image_bgr: Optional[np.ndarray] = None
        self.height: Optional[int] = None
        self.width: Optional[int] = None
        self.panels: List[Panel] = []
        self.panel_records: List[Dict[str, Any]] = []
        self.translations: List[Translation] = []
        self.stage_completed: List[str] = []

        if job_dir_override:
            self.job_dir = Path(job_dir_override)
        else:
            from comicfuse.core.paths import get_job_dir

            self.job_dir = get_job_dir(self.job_id)

        self.panels_dir = self.job_dir / "panels"
        self.overlay_path = self.job_dir / "panels_overlay.png"
        self.json_path = self.job_dir / "text.json"
        self.final_path = self.job_dir / "final.png"

    def _log_timing(self, stage: str, t0: float, **fields: Any) -> None:
        logger.info(
            "stage_timing",
            extra={"job_id": self.job_id, "stage": stage, "ms": int((time.perf_counter() - t0) * 1000), **fields},
        )

    def _run_panels(self) -> None:
        """Stage 1: loads the page and splits it into panels."""
        from comicfuse.pipeline.utils.io import ensure_dir, read_image_bgr, save_png

        if not self.input_image_path.exists():
            raise FileNotFoundError(f"Input image not found: {self.input_image_path}")
        ensure_dir(self.job_dir)

        t0 = time.perf_counter()
        self.image_bgr = read_image_bgr(self.input_image_path)
        self.height, self.width = self.image_bgr.shape[:2]

        overlays: List[np.ndarray] = []
        detector = PanelDetector(
            self.settings.min_panel_area,
            polarity=self.settings.panel_polarity,
            order=self.settings.panel_order,
            row_tolerance=self.settings.panel_row_tolerance,
        )
        pipeline: Pipeline[Path, Any] = (
            Pipeline.builder(name="panels")
            .add(ImageFileToPanelDetectionInputAdapter(display_callback=overlays.append if self.debug else None))
            .splitter(detector)
            .build()
        )
        self.panels = pipeline.run(self.input_image_path).panels

        for panel in self.panels:
            save_png(self.panels_dir / f"{panel.index}.png", panel.image)
            self.panel_records.append({"id": panel.index, "box": panel.box.to_list(), "blocks": []})
        if overlays:
            save_png(self.overlay_path, overlays[-1])

        self.stage_completed.append("panels")
        self._log_timing("panels", t0, num_panels=len(self.panels))

    def _run_ocr(self) -> None:
        """Stage 2: OCR each panel and merge the line boxes into column blocks."""
        if not self.include_ocr or not self.panels:
            return

        t0 = time.perf_counter()
        engine = self.ocr_engine or TesseractOcrEngine(lang=self.settings.ocr_lang)
        pipeline: Pipeline[np.ndarray, Any] = (
            Pipeline.builder(name="ocr")
            .add(OcrAdapter(engine))
            .add(
                ColumnMergeAdapter(
                    vertical_distance_threshold=self.settings.merge_vertical_distance,
                    overlap_threshold=self.settings.merge_overlap_ratio,
                    preserve_column_width=self.settings.merge_preserve_column_width,
                    scale=self.settings.canvas_scale,
                )
            )
            .build()
        )
        num_blocks = 0
        for panel, record in zip(self.panels, self.panel_records):
            blocks = pipeline.run(panel.image)
            record["blocks"] = [b.to_dict() for b in blocks]
            num_blocks += len(blocks)

        self.stage_completed.append("ocr")
        self._log_timing("ocr", t0, num_blocks=num_blocks)

    def _run_translation(self) -> None:
        """Stage 3: translates the page through the external service and draws the result."""
        if not self.include_translate:
            return

        from comicfuse.pipeline.utils.io import save_png

        t0 = time.perf_counter()
        captured: List[Translation] = []
        translator = self.translator
        if translator is None:
            from comicfuse.pipeline.translate.gemini import GeminiTranslator

            translator = GeminiTranslator(api_key=self.settings.google_api_key or "", model=self.settings.gemini_model)

        pipeline: AsyncPipeline[np.ndarray, np.ndarray] = (
            AsyncPipeline.builder(name="translate")
            .add(
                TranslateImageAdapter(
                    translator,
                    target_language=self.settings.target_language,
                    on_result=captured.extend,
                )
            )
            .add(DrawTranslationsAdapter(font_path=self.settings.font_path, font_size=self.settings.draw_font_size))
            .build()
        )
        try:
            final_bgr = asyncio.run(pipeline.run(self.image_bgr))
        except Exception:
            logger.exception("translate_failed", extra={"job_id": self.job_id})
            raise
        self.translations = captured
        save_png(self.final_path, final_bgr)

        self.stage_completed.append("translate")
        self._log_timing("translate", t0, num_translated=len(self.translations))

    def _build_final_payload(self) -> Dict[str, Any]:
        return {
            "job_id": self.job_id,
            "stage_completed": self.stage_completed,
            "width": int(self.width or 0),
            "height": int(self.height or 0),
            "num_panels": len(self.panels),
            "paths": {
                "json": str(self.json_path),
                "panels": str(self.panels_dir),
                "overlay": str(self.overlay_path) if self.overlay_path.exists() else None,
                "final": str(self.final_path) if self.final_path.exists() else None,
            },
        }

    def run(self) -> Dict[str, Any]:
        """Executes the page stages in order."""
        from comicfuse.pipeline.utils.textio import write_text_json

        self._run_panels()
        self._run_ocr()
        self._run_translation()

        write_text_json(
            self.json_path,
            {
                "width": self.width,
                "height": self.height,
                "panels": self.panel_records,
                "translations": [t.model_dump() for t in self.translations],
            },
        )
        return self._build_final_payload()


def run_pipeline(job_id: str, image_path: str | Path, **kwargs: Any) -> Dict[str, Any]:
    """
    High-level wrapper to execute the page run via the orchestrator class.
    """
    orchestrator = PageOrchestrator(job_id, image_path, **kwargs)
    return orchestrator.run()
