"""
Extraction Engine

Tree-sitter-based Go source parser and type-model extractor.
Produces language-neutral elements (attributes, methods, comments, tags)
for struct and interface declarations of a Go package.
"""

from extraction.models import Attribute, Element, Method, Type
from extraction.errors import (
    ExtractionError,
    MalformedTagError,
    NotFoundError,
    PackageLoadError,
    UnresolvedTypeError,
)
from extraction.parser import create_parser, parse_file, parse_bytes, count_error_nodes
from extraction.package import (
    GoPackage,
    load_package,
    load_package_from_source,
    load_package_from_sources,
)
from extraction.tags import parse_tags
from extraction.builder import build_element, build_elements
from extraction.extractor import (
    extract_package,
    extract_directory,
    extract_tree,
    iter_extract_to_dict_list,
    discover_go_files,
    ExtractionStats,
)

__all__ = [
    # Data models
    "Attribute",
    "Element",
    "Method",
    "Type",
    "ExtractionStats",
    # Errors
    "ExtractionError",
    "MalformedTagError",
    "NotFoundError",
    "PackageLoadError",
    "UnresolvedTypeError",
    # Low-level parsing
    "create_parser",
    "parse_file",
    "parse_bytes",
    "count_error_nodes",
    "parse_tags",
    # Package loading
    "GoPackage",
    "load_package",
    "load_package_from_source",
    "load_package_from_sources",
    # Mid-level extraction
    "build_element",
    "build_elements",
    # High-level orchestration
    "extract_package",
    "extract_directory",
    "extract_tree",
    "iter_extract_to_dict_list",
    "discover_go_files",
]
