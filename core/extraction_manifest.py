"""Manifest contract for batch extraction runs.

A manifest lists the Go package directories to extract and, per package,
which type declarations to extract (all structs and interfaces when
omitted).

Example (YAML)::

    output_file: output/elements.jsonl
    packages:
      - source_dir: ./internal/models
        types: [User, Store]
      - source_dir: ./internal/api
        include_tests: true
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml


@dataclass(frozen=True)
class PackageSpec:
    """One package directory to extract."""

    source_dir: str
    types: list[str] = field(default_factory=list)
    include_tests: bool = False
    enabled: bool = True


@dataclass(frozen=True)
class ExtractionManifest:
    """Top-level manifest payload."""

    packages: list[PackageSpec]
    output_file: str = "output/elements.jsonl"
    report_dir: str = "output/run_reports"
    continue_on_error: bool = False
    max_workers: int = 1


def _expect_dict(payload: Any, ctx: str) -> dict[str, Any]:
    if not isinstance(payload, dict):
        raise ValueError(f"{ctx} must be an object")
    return payload


def _load_manifest_payload(path: str) -> dict[str, Any]:
    manifest_path = Path(path)
    if not manifest_path.is_file():
        raise FileNotFoundError(f"Manifest file not found: {manifest_path}")

    text = manifest_path.read_text(encoding="utf-8")
    suffix = manifest_path.suffix.lower()
    if suffix == ".json":
        payload = json.loads(text)
    else:
        payload = yaml.safe_load(text)
    return _expect_dict(payload, "manifest")


def _parse_package_spec(package_payload: dict[str, Any], base_dir: Path) -> PackageSpec:
    source_dir = str(package_payload.get("source_dir", "")).strip()
    if not source_dir:
        raise ValueError("package.source_dir is required")

    types_raw = package_payload.get("types", [])
    if types_raw is None:
        types_raw = []
    if not isinstance(types_raw, list):
        raise ValueError(f"package '{source_dir}': types must be a list")

    types: list[str] = []
    for item in types_raw:
        name = str(item).strip()
        if not name:
            raise ValueError(f"package '{source_dir}': types contains an empty name")
        if name in types:
            raise ValueError(f"package '{source_dir}': duplicate type '{name}'")
        types.append(name)

    return PackageSpec(
        source_dir=os.path.normpath(str(resolve_source_dir(base_dir, source_dir))),
        types=types,
        include_tests=bool(package_payload.get("include_tests", False)),
        enabled=bool(package_payload.get("enabled", True)),
    )


def load_extraction_manifest(path: str) -> ExtractionManifest:
    """Load and validate an extraction manifest from a YAML/JSON file.

    Relative ``source_dir`` entries are resolved against the manifest's
    directory.
    """
    payload = _load_manifest_payload(path)
    base_dir = Path(path).resolve().parent

    packages_raw = payload.get("packages")
    if not isinstance(packages_raw, list) or len(packages_raw) == 0:
        raise ValueError("packages must be a non-empty list")

    packages: list[PackageSpec] = []
    seen: set[str] = set()
    for raw in packages_raw:
        spec = _parse_package_spec(_expect_dict(raw, "package entry"), base_dir)
        if spec.source_dir in seen:
            raise ValueError(f"Duplicate source_dir in manifest: {spec.source_dir}")
        seen.add(spec.source_dir)
        packages.append(spec)

    max_workers = payload.get("max_workers", 1)
    if not isinstance(max_workers, int) or isinstance(max_workers, bool) or max_workers < 1:
        raise ValueError("max_workers must be a positive integer")

    return ExtractionManifest(
        packages=packages,
        output_file=str(payload.get("output_file", "output/elements.jsonl")),
        report_dir=str(payload.get("report_dir", "output/run_reports")),
        continue_on_error=bool(payload.get("continue_on_error", False)),
        max_workers=max_workers,
    )


def resolve_source_dir(base_dir: Path, source_dir: str) -> Path:
    """Resolve a package directory relative to the manifest if needed."""
    raw = Path(source_dir)
    return raw if raw.is_absolute() else (base_dir / raw)
