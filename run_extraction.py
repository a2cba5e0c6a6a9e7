#!/usr/bin/env python3
"""
Extract the type model of Go packages into a JSONL file.

Each output line is one element (struct or interface) with its resolved
type, attributes, methods, comments and tags. A JSON run report is written
next to the output.

Usage:
    python run_extraction.py --source-dir ./internal/models
    python run_extraction.py --source-dir ./internal/models --type User --type Store
    python run_extraction.py --source-dir ./pkg --recursive --continue-on-error
    python run_extraction.py --manifest extraction.yaml
"""

from __future__ import annotations

import argparse
import itertools
import logging
import os
import sys
import time
from typing import Any, Iterator, Optional

from core.extraction_manifest import ExtractionManifest, PackageSpec, load_extraction_manifest
from core.run_artifacts import write_jsonl, write_run_report
from core.startup_config import (
    ConfigValidationError,
    StartupSettings,
    load_startup_settings,
    resolve_strict_config_validation,
)
from core.structured_logging import configure_structured_logging, phase_scope, set_run_id
from extraction.errors import ExtractionError
from extraction.extractor import ExtractionStats, iter_extract_to_dict_list

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Returns:
        Parsed argument namespace.
    """
    parser = argparse.ArgumentParser(
        description="Go type-model extraction",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  python run_extraction.py --source-dir ./internal/models --type User\n"
            "  python run_extraction.py --manifest extraction.yaml\n"
        ),
    )

    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "--source-dir",
        help="Go package directory to extract from.",
    )
    source.add_argument(
        "--manifest",
        help="Path to an extraction manifest (YAML/JSON).",
    )
    parser.add_argument(
        "--type",
        dest="types",
        action="append",
        default=[],
        help="Type name to extract (repeatable). Default: every struct and interface.",
    )
    parser.add_argument(
        "--recursive",
        action="store_true",
        default=False,
        help="Extract every package under --source-dir.",
    )
    parser.add_argument(
        "--output-file",
        default=None,
        help="Path for the JSONL output. Default: output/elements.jsonl",
    )
    parser.add_argument(
        "--report-dir",
        default=None,
        help="Directory for the run report. Default: output/run_reports",
    )
    parser.add_argument(
        "--include-tests",
        action="store_true",
        default=False,
        help="Also load _test.go files.",
    )
    parser.add_argument(
        "--continue-on-error",
        action="store_true",
        default=None,
        help="Skip failing declarations instead of aborting (default: GENZ_STRICT).",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Threads per package (default: GENZ_MAX_WORKERS or 1).",
    )
    parser.add_argument(
        "--strict-config",
        action="store_true",
        default=resolve_strict_config_validation(default=False),
        help="Fail on invalid GENZ_* environment values instead of using defaults.",
    )

    args = parser.parse_args(argv)
    if args.manifest and (args.types or args.recursive):
        parser.error("--type and --recursive cannot be combined with --manifest")
    if args.recursive and args.types:
        parser.error("--type selects declarations of a single package; drop --recursive")
    if args.workers is not None and args.workers < 1:
        parser.error("--workers must be a positive integer")
    return args


def build_manifest(args: argparse.Namespace, settings: StartupSettings) -> ExtractionManifest:
    """Build the run manifest from a manifest file or the direct CLI flags.

    CLI flags override manifest values; environment settings fill the rest.
    """
    if args.manifest:
        manifest = load_extraction_manifest(args.manifest)
    else:
        manifest = ExtractionManifest(
            packages=[
                PackageSpec(
                    source_dir=os.path.abspath(args.source_dir),
                    types=list(args.types),
                    include_tests=args.include_tests,
                )
            ],
            continue_on_error=not settings.strict,
            max_workers=settings.max_workers,
        )

    return ExtractionManifest(
        packages=manifest.packages,
        output_file=args.output_file or manifest.output_file,
        report_dir=args.report_dir or manifest.report_dir,
        continue_on_error=(
            args.continue_on_error if args.continue_on_error is not None else manifest.continue_on_error
        ),
        max_workers=args.workers or manifest.max_workers,
    )


def iter_manifest_elements(
    manifest: ExtractionManifest,
    stats: ExtractionStats,
    recursive: bool = False,
) -> Iterator[dict[str, Any]]:
    """Stream element payloads for every enabled package of the manifest."""
    streams = []
    for spec in manifest.packages:
        if not spec.enabled:
            logger.info(f"Skipping disabled package {spec.source_dir}")
            continue
        streams.append(
            iter_extract_to_dict_list(
                spec.source_dir,
                names=spec.types or None,
                recursive=recursive,
                include_tests=spec.include_tests,
                continue_on_error=manifest.continue_on_error,
                max_workers=manifest.max_workers,
                stats=stats,
            )
        )
    return itertools.chain.from_iterable(streams)


def run(args: argparse.Namespace, settings: StartupSettings, run_id: str) -> int:
    """Run one extraction and return the process exit code."""
    manifest = build_manifest(args, settings)
    stats = ExtractionStats()
    status = "failed"

    logger.info(f"Packages         : {len(manifest.packages)}")
    logger.info(f"Output file      : {os.path.abspath(manifest.output_file)}")
    logger.info(f"Continue on error: {manifest.continue_on_error}")
    logger.info(f"Workers          : {manifest.max_workers}")

    t0 = time.time()
    try:
        with phase_scope("extract"):
            lines = write_jsonl(
                iter_manifest_elements(manifest, stats, recursive=args.recursive),
                manifest.output_file,
            )
        logger.info("Extraction completed in %.2fs, %d elements written", time.time() - t0, lines)
        if lines == 0:
            logger.warning("No elements extracted.")
        status = "partial_success" if stats.declarations_failed or stats.packages_failed else "success"
    except FileNotFoundError as e:
        logger.error(f"File error: {e}")
    except ExtractionError as e:
        logger.error(f"Extraction failed: {e}")
    finally:
        report = write_run_report(
            status=status,
            run_id=run_id,
            stats=stats.to_dict(),
            output_dir=manifest.report_dir,
            output_file=os.path.abspath(manifest.output_file),
            failures=stats.failures,
        )
        logger.info(f"Run report: {report}")

    return 0 if status != "failed" else 1


def main(argv: Optional[list[str]] = None) -> None:
    """Main entry point for the extraction CLI."""
    args = parse_args(argv)
    configure_structured_logging()
    run_id = set_run_id()

    try:
        settings = load_startup_settings(strict=args.strict_config)
    except ConfigValidationError as e:
        logger.error(f"Configuration error: {e}")
        sys.exit(1)
    logging.getLogger().setLevel(settings.log_level)

    logger.info("*" * 80)
    logger.info(" Go Type-Model Extraction")
    logger.info("*" * 80)

    try:
        code = run(args, settings, run_id)
    except (FileNotFoundError, ValueError) as e:
        logger.error(f"Invalid manifest: {e}")
        sys.exit(1)
    except Exception as e:
        logger.error(f"Extraction run failed: {e}", exc_info=True)
        sys.exit(1)

    sys.exit(code)


if __name__ == "__main__":
    main()
