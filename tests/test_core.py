from __future__ import annotations

import json
import logging
import unittest
from unittest import mock

from comicfuse.core.config import Settings
from comicfuse.core.logging import JsonLogFormatter
from comicfuse.core.paths import get_job_dir


class TestJsonLogFormatter(unittest.TestCase):
    def test_includes_extra_fields(self) -> None:
        record = logging.LogRecord("comicfuse.test", logging.INFO, __file__, 1, "stage_timing", (), None)
        record.stage = "panels"
        record.ms = 12

        payload = json.loads(JsonLogFormatter().format(record))

        self.assertEqual(payload["level"], "info")
        self.assertEqual(payload["message"], "stage_timing")
        self.assertEqual(payload["stage"], "panels")
        self.assertEqual(payload["ms"], 12)
        self.assertNotIn("args", payload)


class TestSettings(unittest.TestCase):
    def test_defaults(self) -> None:
        with mock.patch.dict("os.environ", {}, clear=True):
            settings = Settings(_env_file=None)
        self.assertEqual(settings.min_panel_area, 10000)
        self.assertEqual(settings.merge_vertical_distance, 20)
        self.assertEqual(settings.merge_overlap_ratio, 0.3)
        self.assertTrue(settings.merge_preserve_column_width)
        self.assertEqual(settings.canvas_scale, 1.4)
        self.assertEqual(settings.target_language, "Vietnamese")
        self.assertIsNone(settings.google_api_key)

    def test_unknown_environment_is_ignored(self) -> None:
        with mock.patch.dict("os.environ", {"APP_ENV": "production"}, clear=True):
            settings = Settings(_env_file=None)
        self.assertNotIn("app_env", Settings.model_fields)
        self.assertFalse(hasattr(settings, "app_env"))

    def test_environment_overrides(self) -> None:
        env = {"MIN_PANEL_AREA": "5000", "GEMINI_API_KEY": "k", "PANEL_ORDER": "discovery"}
        with mock.patch.dict("os.environ", env, clear=True):
            settings = Settings(_env_file=None)
        self.assertEqual(settings.min_panel_area, 5000)
        self.assertEqual(settings.google_api_key, "k")
        self.assertEqual(settings.panel_order, "discovery")


class TestPaths(unittest.TestCase):
    def test_job_dir_under_artifacts_root(self) -> None:
        self.assertEqual(get_job_dir("abc").parts[-2:], ("jobs", "abc"))


if __name__ == "__main__":
    unittest.main()
