"""
Configuration constants for Go type-model extraction.

Defines the tree-sitter-go node type strings used while lowering source
files into the syntax model, plus language-level constants.
"""

from typing import FrozenSet, Set

# Top-level declaration node types
PACKAGE_CLAUSE: str = "package_clause"
IMPORT_DECLARATION: str = "import_declaration"
TYPE_DECLARATION: str = "type_declaration"
METHOD_DECLARATION: str = "method_declaration"

# Type declaration children (`type A struct{}` and `type A = B`)
TYPE_SPEC_NODES: Set[str] = {
    "type_spec",
    "type_alias",
}

# Import declaration children
IMPORT_SPEC: str = "import_spec"
IMPORT_SPEC_LIST: str = "import_spec_list"

# Comment node type (includes // and /* */)
COMMENT_NODE: str = "comment"

# Struct body
STRUCT_TYPE: str = "struct_type"
FIELD_DECLARATION_LIST: str = "field_declaration_list"
FIELD_DECLARATION: str = "field_declaration"

# Interface body. Older grammars emit method_spec/constraint_elem.
INTERFACE_TYPE: str = "interface_type"
INTERFACE_METHOD_NODES: Set[str] = {
    "method_elem",
    "method_spec",
}
INTERFACE_TYPE_ELEM_NODES: Set[str] = {
    "type_elem",
    "constraint_elem",
}

# Parameter lists
PARAMETER_LIST: str = "parameter_list"
PARAMETER_DECLARATION: str = "parameter_declaration"
VARIADIC_PARAMETER_DECLARATION: str = "variadic_parameter_declaration"

# Type expression node types
TYPE_IDENTIFIER: str = "type_identifier"
QUALIFIED_TYPE: str = "qualified_type"
POINTER_TYPE: str = "pointer_type"
SLICE_TYPE: str = "slice_type"
ARRAY_TYPE: str = "array_type"
IMPLICIT_LENGTH_ARRAY_TYPE: str = "implicit_length_array_type"
MAP_TYPE: str = "map_type"
CHANNEL_TYPE: str = "channel_type"
FUNCTION_TYPE: str = "function_type"
GENERIC_TYPE: str = "generic_type"
PARENTHESIZED_TYPE: str = "parenthesized_type"
NEGATED_TYPE: str = "negated_type"

# Predeclared Go type identifiers, rendered without qualification
PREDECLARED_TYPES: FrozenSet[str] = frozenset({
    "any",
    "bool",
    "byte",
    "comparable",
    "complex64",
    "complex128",
    "error",
    "float32",
    "float64",
    "int",
    "int8",
    "int16",
    "int32",
    "int64",
    "rune",
    "string",
    "uint",
    "uint8",
    "uint16",
    "uint32",
    "uint64",
    "uintptr",
})

# Go source file extension and test file suffix
GO_EXTENSION: str = ".go"
GO_TEST_SUFFIX: str = "_test.go"

# Directories never scanned for Go sources
SKIPPED_DIRECTORIES: Set[str] = {
    "vendor",
    "testdata",
    "node_modules",
}

# Element kinds (type expression class -> Element.kind)
KIND_STRUCT: str = "struct"
KIND_INTERFACE: str = "interface"

# Extraction policy defaults
DEFAULT_INCLUDE_TESTS: bool = False
DEFAULT_CONTINUE_ON_ERROR: bool = False
