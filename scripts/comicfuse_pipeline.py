from __future__ import annotations

import argparse
import logging
import time
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from comicfuse.core.config import get_settings
from comicfuse.core.logging import configure_logging
from comicfuse.pipeline.orchestrator import run_pipeline
from comicfuse.pipeline.utils.io import ensure_dir

# Usage:
#
#   python scripts/comicfuse_pipeline.py --input ./samples --out-dir ./test_output
#
# Add --ocr to OCR and column-merge every panel (needs the tesseract binary),
# and --translate to translate and redraw the page (needs GOOGLE_API_KEY).

SUPPORTED_EXTENSIONS = [".png", ".jpg", ".jpeg", ".webp"]

logger = logging.getLogger("comicfuse.scripts.pipeline")


@dataclass
class ScriptConfig:
    """A centralized configuration object for the command-line script."""
    image_path: Path
    out_dir: Path
    include_ocr: bool
    include_translate: bool
    debug: bool


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="ComicFuse page pipeline runner",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--input", type=str, required=True, help="Path to input image or a folder of images")
    parser.add_argument("--out-dir", type=str, required=True, help="Directory to write artifacts")
    parser.add_argument("--ocr", action="store_true", help="OCR each panel and merge text into column blocks")
    parser.add_argument("--translate", action="store_true", help="Translate the page and draw the result")
    parser.add_argument("--debug", action="store_true", help="Save a panel overlay image")
    return parser.parse_args()


def process_image(config: ScriptConfig) -> None:
    job_id = config.out_dir.name
    try:
        result = run_pipeline(
            job_id,
            config.image_path,
            include_ocr=config.include_ocr,
            include_translate=config.include_translate,
            debug=config.debug,
            job_dir_override=config.out_dir,
        )
    except Exception:
        logger.exception("page_failed", extra={"image": str(config.image_path)})
        return
    logger.info(
        "page_done",
        extra={
            "image": str(config.image_path),
            "stage_completed": result["stage_completed"],
            "num_panels": result["num_panels"],
        },
    )


def main() -> None:
    overall_start = time.time()
    args = parse_args()

    load_dotenv(override=False)
    configure_logging(get_settings().log_level)

    input_path = Path(args.input)
    if not input_path.exists():
        raise FileNotFoundError(f"Input path not found: {input_path}")

    if input_path.is_file():
        image_paths = [input_path]
    else:
        image_paths = sorted(p for p in input_path.glob("*") if p.suffix.lower() in SUPPORTED_EXTENSIONS)

    if not image_paths:
        logger.warning("no_images_found", extra={"input": str(input_path)})
        return

    for image_path in image_paths:
        image_out_dir = Path(args.out_dir) / image_path.stem
        ensure_dir(image_out_dir)
        process_image(
            ScriptConfig(
                image_path=image_path,
                out_dir=image_out_dir,
                include_ocr=args.ocr,
                include_translate=args.translate,
                debug=args.debug,
            )
        )

    logger.info(
        "run_done",
        extra={"num_images": len(image_paths), "seconds": round(time.time() - overall_start, 2)},
    )


if __name__ == "__main__":
    main()
