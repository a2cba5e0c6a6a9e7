"""Core shared contracts and utilities."""

from core.structured_logging import (
    configure_structured_logging,
    declaration_scope,
    get_declaration,
    get_run_id,
    phase_scope,
    set_run_id,
)
from core.startup_config import (
    ConfigValidationError,
    StartupSettings,
    load_startup_settings,
    resolve_log_level,
    resolve_max_workers,
    resolve_strict_config_validation,
    resolve_strict_mode,
)
from core.run_artifacts import write_jsonl, write_run_report
from core.extraction_manifest import (
    ExtractionManifest,
    PackageSpec,
    load_extraction_manifest,
    resolve_source_dir,
)

__all__ = [
    "configure_structured_logging",
    "declaration_scope",
    "get_declaration",
    "get_run_id",
    "phase_scope",
    "set_run_id",
    "ConfigValidationError",
    "StartupSettings",
    "load_startup_settings",
    "resolve_log_level",
    "resolve_max_workers",
    "resolve_strict_config_validation",
    "resolve_strict_mode",
    "write_jsonl",
    "write_run_report",
    "ExtractionManifest",
    "PackageSpec",
    "load_extraction_manifest",
    "resolve_source_dir",
]
