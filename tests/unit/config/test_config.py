"""Tests for config persistence and input sanitization.

Ensures malformed config data is safely normalized on load.
"""

from __future__ import annotations

import tempfile
import unittest
from pathlib import Path
from unittest import mock

from projecttree import config
from projecttree.file_tree_model import DEFAULT_MAX_SCAN_DEPTH
from projecttree.watch import DEFAULT_DEBOUNCE_SECONDS


class ConfigBehaviorTests(unittest.TestCase):
    def test_missing_config_uses_defaults(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            config_path = Path(tmp) / "missing" / "config.json"
            with mock.patch("projecttree.config.CONFIG_PATH", config_path):
                self.assertEqual(config.load_config(), {})
                self.assertEqual(config.load_debounce_seconds(), DEFAULT_DEBOUNCE_SECONDS)
                self.assertEqual(config.load_max_scan_depth(), DEFAULT_MAX_SCAN_DEPTH)
                self.assertEqual(config.load_log_level(), "WARNING")

    def test_debounce_seconds_round_trip(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            config_path = Path(tmp) / "nested" / "config.json"
            with mock.patch("projecttree.config.CONFIG_PATH", config_path):
                config.save_debounce_seconds(0.75)
                config.save_debounce_seconds(-1)

                self.assertEqual(config.load_debounce_seconds(), 0.75)
                self.assertTrue(config_path.exists())

    def test_malformed_values_fall_back(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            config_path = Path(tmp) / "config.json"
            with mock.patch("projecttree.config.CONFIG_PATH", config_path):
                config.save_config({"debounce_seconds": True, "max_scan_depth": 0, "log_level": "chatty"})

                self.assertEqual(config.load_debounce_seconds(), DEFAULT_DEBOUNCE_SECONDS)
                self.assertEqual(config.load_max_scan_depth(), DEFAULT_MAX_SCAN_DEPTH)
                self.assertEqual(config.load_log_level(), "WARNING")

    def test_valid_values_are_loaded(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            config_path = Path(tmp) / "config.json"
            with mock.patch("projecttree.config.CONFIG_PATH", config_path):
                config.save_config({"max_scan_depth": 8, "log_level": " debug "})

                self.assertEqual(config.load_max_scan_depth(), 8)
                self.assertEqual(config.load_log_level(), "DEBUG")

    def test_non_object_json_is_ignored(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            config_path = Path(tmp) / "config.json"
            config_path.write_text("[1, 2, 3]\n", encoding="utf-8")
            with mock.patch("projecttree.config.CONFIG_PATH", config_path):
                self.assertEqual(config.load_config(), {})


if __name__ == "__main__":
    unittest.main()
