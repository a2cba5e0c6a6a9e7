"""Tests for startup config resolution helpers."""

import logging
import os
import unittest
from unittest import mock

from core.startup_config import (
    ConfigValidationError,
    load_startup_settings,
    resolve_log_level,
    resolve_max_workers,
    resolve_strict_config_validation,
    resolve_strict_mode,
)


class TestStartupConfig(unittest.TestCase):
    def test_defaults_without_env(self) -> None:
        with mock.patch.dict(os.environ, {}, clear=True):
            settings = load_startup_settings()
        self.assertTrue(settings.strict)
        self.assertEqual(settings.log_level, logging.INFO)
        self.assertEqual(settings.max_workers, 1)

    def test_env_values(self) -> None:
        env = {"GENZ_STRICT": "false", "GENZ_LOG_LEVEL": "debug", "GENZ_MAX_WORKERS": "8"}
        with mock.patch.dict(os.environ, env, clear=True):
            settings = load_startup_settings()
        self.assertFalse(settings.strict)
        self.assertEqual(settings.log_level, logging.DEBUG)
        self.assertEqual(settings.max_workers, 8)

    def test_strict_flags(self) -> None:
        with mock.patch.dict(os.environ, {"GENZ_STRICT": "yes", "GENZ_STRICT_CONFIG": "1"}, clear=True):
            self.assertTrue(resolve_strict_mode(default=False))
            self.assertTrue(resolve_strict_config_validation())

    def test_invalid_log_level_non_strict_falls_back(self) -> None:
        with mock.patch.dict(os.environ, {"GENZ_LOG_LEVEL": "chatty"}, clear=True):
            with self.assertLogs("core.startup_config", level="WARNING"):
                level = resolve_log_level(default=logging.WARNING, strict=False)
        self.assertEqual(level, logging.WARNING)

    def test_invalid_log_level_strict_raises(self) -> None:
        with mock.patch.dict(os.environ, {"GENZ_LOG_LEVEL": "chatty"}, clear=True):
            with self.assertRaises(ConfigValidationError):
                resolve_log_level(strict=True)

    def test_invalid_max_workers(self) -> None:
        for raw in ("zero", "0", "-2"):
            with self.subTest(raw=raw):
                with mock.patch.dict(os.environ, {"GENZ_MAX_WORKERS": raw}, clear=True):
                    with self.assertRaises(ConfigValidationError):
                        resolve_max_workers(strict=True)
                    with self.assertLogs("core.startup_config", level="WARNING"):
                        self.assertEqual(resolve_max_workers(default=2, strict=False), 2)

    def test_load_strict_invalid_env_raises(self) -> None:
        with mock.patch.dict(os.environ, {"GENZ_MAX_WORKERS": "many"}, clear=True):
            with self.assertRaises(ConfigValidationError):
                load_startup_settings(strict=True)


if __name__ == "__main__":
    unittest.main()
