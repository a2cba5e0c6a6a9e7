"""Startup configuration helpers.

Resolves runtime settings for extraction runs from environment variables,
with strict/non-strict handling of invalid values: strict mode raises
``ConfigValidationError``, non-strict mode logs a warning and falls back to
the default.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)

STRICT_ENV = "GENZ_STRICT"
STRICT_CONFIG_ENV = "GENZ_STRICT_CONFIG"
LOG_LEVEL_ENV = "GENZ_LOG_LEVEL"
MAX_WORKERS_ENV = "GENZ_MAX_WORKERS"

_LOG_LEVELS = {
    "CRITICAL": logging.CRITICAL,
    "ERROR": logging.ERROR,
    "WARNING": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
}


class ConfigValidationError(RuntimeError):
    """Raised when strict startup validation fails."""


@dataclass(frozen=True)
class StartupSettings:
    """Resolved runtime settings for an extraction run."""

    strict: bool
    log_level: int
    max_workers: int


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def resolve_strict_config_validation(default: bool = False) -> bool:
    """Resolve strict config validation from ``GENZ_STRICT_CONFIG`` env."""
    return _env_flag(STRICT_CONFIG_ENV, default=default)


def resolve_strict_mode(default: bool = True) -> bool:
    """Resolve whether a failing declaration aborts the run (``GENZ_STRICT``)."""
    return _env_flag(STRICT_ENV, default=default)


def resolve_log_level(default: int = logging.INFO, strict: bool = False) -> int:
    """Resolve the root log level from ``GENZ_LOG_LEVEL``."""
    raw = os.getenv(LOG_LEVEL_ENV)
    if raw is None or not raw.strip():
        return default

    level = _LOG_LEVELS.get(raw.strip().upper())
    if level is None:
        msg = f"{LOG_LEVEL_ENV} has unknown level '{raw}'"
        if strict:
            raise ConfigValidationError(msg)
        logger.warning("%s; using %s", msg, logging.getLevelName(default))
        return default
    return level


def resolve_max_workers(default: int = 1, strict: bool = False) -> int:
    """Resolve the extraction thread count from ``GENZ_MAX_WORKERS``."""
    raw = os.getenv(MAX_WORKERS_ENV)
    if raw is None or not raw.strip():
        return default

    try:
        value = int(raw.strip())
    except ValueError:
        value = 0
    if value < 1:
        msg = f"{MAX_WORKERS_ENV} must be a positive integer, got '{raw}'"
        if strict:
            raise ConfigValidationError(msg)
        logger.warning("%s; using default %d", msg, default)
        return default
    return value


def load_startup_settings(strict: Optional[bool] = None) -> StartupSettings:
    """Resolve all startup settings from the environment.

    Args:
        strict: Force strict validation on/off; None reads
            ``GENZ_STRICT_CONFIG``.
    """
    if strict is None:
        strict = resolve_strict_config_validation()
    return StartupSettings(
        strict=resolve_strict_mode(),
        log_level=resolve_log_level(strict=strict),
        max_workers=resolve_max_workers(strict=strict),
    )
