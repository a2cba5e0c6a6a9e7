"""
High-level orchestrator for Go type-model extraction.

This module provides the main entry points for extracting elements from a
loaded package, a package directory, or an entire directory tree. The error
policy (abort the run or skip a failing declaration) is chosen here by the
caller; the engine itself always raises.
"""

import contextvars
import logging
import os
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

from extraction.builder import build_element, build_elements
from extraction.config import (
    DEFAULT_CONTINUE_ON_ERROR,
    DEFAULT_INCLUDE_TESTS,
    GO_EXTENSION,
    GO_TEST_SUFFIX,
    SKIPPED_DIRECTORIES,
)
from extraction.errors import ExtractionError
from extraction.models import Element
from extraction.package import GoPackage, load_package
from extraction.syntax import InterfaceType, StructType

logger = logging.getLogger(__name__)


class ExtractionStats:
    """Statistics for an extraction operation."""

    def __init__(self):
        self.packages_processed = 0
        self.packages_failed = 0
        self.declarations_requested = 0
        self.elements_extracted = 0
        self.declarations_failed = 0
        self.parse_errors = 0
        self.failures: List[Dict[str, str]] = []

    def record_failure(self, package: str, name: str, error: Exception) -> None:
        self.declarations_failed += 1
        self.failures.append({"package": package, "name": name, "error": str(error)})

    def merge(self, other: "ExtractionStats") -> None:
        self.packages_processed += other.packages_processed
        self.packages_failed += other.packages_failed
        self.declarations_requested += other.declarations_requested
        self.elements_extracted += other.elements_extracted
        self.declarations_failed += other.declarations_failed
        self.parse_errors += other.parse_errors
        self.failures.extend(other.failures)

    def to_dict(self) -> Dict[str, int]:
        """Convert stats to dictionary."""
        return {
            "packages_processed": self.packages_processed,
            "packages_failed": self.packages_failed,
            "declarations_requested": self.declarations_requested,
            "elements_extracted": self.elements_extracted,
            "declarations_failed": self.declarations_failed,
            "parse_errors": self.parse_errors,
        }

    def __str__(self) -> str:
        """String representation of stats."""
        return (
            f"ExtractionStats(packages={self.packages_processed}, "
            f"requested={self.declarations_requested}, "
            f"extracted={self.elements_extracted}, "
            f"failed={self.declarations_failed}, parse_errors={self.parse_errors})"
        )


def select_type_names(package: GoPackage) -> List[str]:
    """Names of all struct and interface declarations, in source order."""
    return [
        name
        for name, spec in package.type_specs.items()
        if not spec.is_alias and isinstance(spec.type, (StructType, InterfaceType))
    ]


def discover_go_files(directory: str, include_tests: bool = DEFAULT_INCLUDE_TESTS) -> List[str]:
    """Recursively discover all Go source files in a directory.

    Args:
        directory: Root directory to search.
        include_tests: Whether ``_test.go`` files are included.

    Returns:
        Sorted list of absolute paths to Go files.
    """
    go_files = []
    directory = os.path.abspath(directory)

    logger.info(f"Discovering Go files in {directory}")

    for root, dirs, files in os.walk(directory):
        # Skip hidden directories, vendored code and test data
        dirs[:] = [d for d in dirs if not d.startswith(('.', '_')) and d not in SKIPPED_DIRECTORIES]

        for file in files:
            if not file.endswith(GO_EXTENSION):
                continue
            if file.endswith(GO_TEST_SUFFIX) and not include_tests:
                continue
            go_files.append(os.path.join(root, file))

    logger.info(f"Found {len(go_files)} Go files")
    return sorted(go_files)


def discover_package_dirs(directory: str, include_tests: bool = DEFAULT_INCLUDE_TESTS) -> List[str]:
    """Directories under ``directory`` that contain Go files, sorted."""
    return sorted({os.path.dirname(path) for path in discover_go_files(directory, include_tests)})


def _try_build(package: GoPackage, name: str) -> Tuple[Optional[Element], Optional[ExtractionError]]:
    try:
        return build_element(package, name), None
    except ExtractionError as e:
        return None, e


def extract_package(
    package: GoPackage,
    names: Optional[Sequence[str]] = None,
    continue_on_error: bool = DEFAULT_CONTINUE_ON_ERROR,
    max_workers: Optional[int] = None,
) -> Tuple[List[Element], ExtractionStats]:
    """Extract elements from a loaded package.

    Args:
        package: The loaded package.
        names: Type names to extract; None extracts every struct and
            interface.
        continue_on_error: If True, a failing declaration is logged, counted
            and skipped. If False, the first error is raised.
        max_workers: Thread count for independent declarations.

    Returns:
        A tuple of (elements, stats) with elements in the order of ``names``.

    Raises:
        ExtractionError: On the first failure when not continuing on error.
    """
    stats = ExtractionStats()
    stats.packages_processed = 1
    stats.parse_errors = package.parse_error_count

    if names is None:
        names = select_type_names(package)
    names = list(names)
    stats.declarations_requested = len(names)

    if not continue_on_error:
        elements = build_elements(package, names, max_workers=max_workers)
        stats.elements_extracted = len(elements)
        logger.info(f"Extraction complete for package {package.name}: {stats}")
        return elements, stats

    if max_workers and max_workers > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            futures = [
                pool.submit(contextvars.copy_context().run, _try_build, package, name)
                for name in names
            ]
            outcomes = [future.result() for future in futures]
    else:
        outcomes = [_try_build(package, name) for name in names]

    elements = []
    for name, (element, error) in zip(names, outcomes):
        if error is not None:
            logger.error(f"Skipping {package.name}.{name}: {error}")
            stats.record_failure(package.name, name, error)
            continue
        elements.append(element)
    stats.elements_extracted = len(elements)

    logger.info(f"Extraction complete for package {package.name}: {stats}")
    return elements, stats


def extract_directory(
    directory: str,
    names: Optional[Sequence[str]] = None,
    include_tests: bool = DEFAULT_INCLUDE_TESTS,
    continue_on_error: bool = DEFAULT_CONTINUE_ON_ERROR,
    max_workers: Optional[int] = None,
) -> Tuple[List[Element], ExtractionStats]:
    """Load the package in ``directory`` and extract its elements.

    Raises:
        FileNotFoundError: If the directory does not exist.
        PackageLoadError: If the directory is not a single Go package.
    """
    package = load_package(directory, include_tests=include_tests)
    return extract_package(
        package,
        names=names,
        continue_on_error=continue_on_error,
        max_workers=max_workers,
    )


def extract_tree(
    directory: str,
    include_tests: bool = DEFAULT_INCLUDE_TESTS,
    continue_on_error: bool = DEFAULT_CONTINUE_ON_ERROR,
    max_workers: Optional[int] = None,
) -> Tuple[List[Element], ExtractionStats]:
    """Extract every struct and interface of every package under ``directory``.

    Raises:
        FileNotFoundError: If directory does not exist.
    """
    directory = os.path.abspath(directory)
    if not os.path.isdir(directory):
        raise FileNotFoundError(f"Directory not found: {directory}")

    stats = ExtractionStats()
    all_elements: List[Element] = []

    package_dirs = discover_package_dirs(directory, include_tests=include_tests)
    if not package_dirs:
        logger.warning(f"No Go packages found in {directory}")
        return all_elements, stats

    logger.info(f"Processing {len(package_dirs)} Go packages from {directory}")

    for package_dir in package_dirs:
        try:
            elements, package_stats = extract_directory(
                package_dir,
                include_tests=include_tests,
                continue_on_error=continue_on_error,
                max_workers=max_workers,
            )
        except ExtractionError as e:
            logger.error(f"Failed to extract package in {package_dir}: {e}")
            stats.packages_failed += 1
            if not continue_on_error:
                raise
            continue

        all_elements.extend(elements)
        stats.merge(package_stats)

    logger.info(f"Extraction complete: {stats}")
    return all_elements, stats


def iter_extract_to_dict_list(
    source: str,
    names: Optional[Sequence[str]] = None,
    recursive: bool = False,
    include_tests: bool = DEFAULT_INCLUDE_TESTS,
    continue_on_error: bool = DEFAULT_CONTINUE_ON_ERROR,
    max_workers: Optional[int] = None,
    stats: Optional[ExtractionStats] = None,
) -> Iterator[Dict[str, Any]]:
    """Extract elements and yield them as dictionaries, one package at a time.

    Args:
        source: Package directory, or root directory when ``recursive``.
        names: Type names to extract (single package only).
        recursive: Walk every package under ``source``.
        include_tests: Whether ``_test.go`` files are loaded.
        continue_on_error: Skip failing declarations instead of raising.
        max_workers: Thread count per package.
        stats: Optional stats object to accumulate counters into.

    Yields:
        ``Element.to_dict()`` payloads ready for JSON serialization.

    Example:
        >>> for payload in iter_extract_to_dict_list("internal/models"):
        ...     print(payload["type"]["name"])
    """
    source = os.path.abspath(source)
    if not os.path.isdir(source):
        raise FileNotFoundError(f"Source not found: {source}")
    if recursive and names:
        raise ValueError("Type names can only be selected for a single package")

    package_dirs = discover_package_dirs(source, include_tests) if recursive else [source]
    for package_dir in package_dirs:
        try:
            elements, package_stats = extract_directory(
                package_dir,
                names=names,
                include_tests=include_tests,
                continue_on_error=continue_on_error,
                max_workers=max_workers,
            )
        except ExtractionError as e:
            if stats is not None:
                stats.packages_failed += 1
            if not (recursive and continue_on_error):
                raise
            logger.error(f"Failed to extract package in {package_dir}: {e}")
            continue

        if stats is not None:
            stats.merge(package_stats)
        for element in elements:
            yield element.to_dict()
