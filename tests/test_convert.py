from __future__ import annotations

import asyncio
import tempfile
import unittest
from pathlib import Path

import numpy as np

from comicfuse.pipeline.convert import (
    DataUrlToPanelDetectionInputAdapter,
    GrayColorizer,
    ImageFileToPanelDetectionInputAdapter,
    ImageToDataUrlAdapter,
    PanelImagesAdapter,
)
from comicfuse.pipeline.panels import PanelDetectionInput, PanelDetector
from comicfuse.pipeline.runner import AsyncPipeline
from comicfuse.pipeline.utils.io import data_url_to_image, decode_image, read_image_bgr, save_png


def _page() -> np.ndarray:
    page = np.zeros((300, 500, 3), dtype=np.uint8)
    page[20:180, 20:200] = (240, 240, 240)
    page[20:180, 260:460] = (200, 220, 255)
    return page


class TestGrayColorizer(unittest.TestCase):
    def test_bgr_becomes_single_channel(self) -> None:
        callback = print
        out = GrayColorizer().convert(PanelDetectionInput(image=_page(), min_panel_area=5, display_callback=callback))
        self.assertEqual(out.image.shape, (300, 500))
        self.assertEqual(out.min_panel_area, 5)
        self.assertIs(out.display_callback, callback)

    def test_bgra_and_gray_inputs(self) -> None:
        bgra = np.zeros((10, 10, 4), dtype=np.uint8)
        self.assertEqual(GrayColorizer().convert(PanelDetectionInput(image=bgra)).image.shape, (10, 10))
        gray = np.zeros((10, 10), dtype=np.uint8)
        self.assertIs(GrayColorizer().convert(PanelDetectionInput(image=gray)).image, gray)


class TestImageIO(unittest.TestCase):
    def test_data_url_pipeline_detects_panels(self) -> None:
        data_url = asyncio.run(ImageToDataUrlAdapter().convert(_page()))
        self.assertTrue(data_url.startswith("data:image/png;base64,"))

        pipeline = (
            AsyncPipeline.builder()
            .add(DataUrlToPanelDetectionInputAdapter())
            .splitter(PanelDetector())
            .add(PanelImagesAdapter())
            .build()
        )
        images = asyncio.run(pipeline.run(data_url))

        self.assertEqual(len(images), 2)
        self.assertTrue(all(img.ndim == 2 for img in images))

    def test_png_data_url_is_lossless(self) -> None:
        page = _page()
        url = asyncio.run(ImageToDataUrlAdapter().convert(page))
        np.testing.assert_array_equal(data_url_to_image(url), page)

    def test_bad_data_urls(self) -> None:
        with self.assertRaises(ValueError):
            data_url_to_image("http://example.com/a.png")
        with self.assertRaises(ValueError):
            data_url_to_image("data:image/png,rawbytes")
        with self.assertRaises(ValueError):
            data_url_to_image("data:image/png;base64,@@@")
        with self.assertRaises(ValueError):
            decode_image(b"not an image")

    def test_file_adapter_reads_saved_page(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "nested" / "page.png"
            save_png(path, _page())
            out = ImageFileToPanelDetectionInputAdapter(min_panel_area=123).convert(path)
            self.assertEqual(out.image.shape, (300, 500, 3))
            self.assertEqual(out.min_panel_area, 123)

    def test_missing_file(self) -> None:
        with self.assertRaises(FileNotFoundError):
            read_image_bgr(Path("/nonexistent/page.png"))


if __name__ == "__main__":
    unittest.main()
