"""
Syntax model for Go declarations.

Tree-sitter nodes are lowered into these frozen dataclasses by
``extraction.package``. Type expressions form a closed family
(``TypeExpr``); consumers dispatch on the concrete class and treat anything
outside the family as a programming error.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple, Union


@dataclass(frozen=True)
class Position:
    """Source position of a declaration (0-indexed row/column)."""

    file_name: str
    row: int
    column: int

    def __str__(self) -> str:
        return f"{self.file_name}:{self.row + 1}:{self.column + 1}"


# ---------------------------------------------------------------------------
# Type expressions
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Ident:
    """Unqualified identifier: local type, predeclared type or type parameter."""

    name: str


@dataclass(frozen=True)
class QualifiedIdent:
    """Identifier from an imported package, ``alias.Name``."""

    package: str
    name: str


@dataclass(frozen=True)
class PointerType:
    elem: "TypeExpr"


@dataclass(frozen=True)
class SliceType:
    elem: "TypeExpr"


@dataclass(frozen=True)
class ArrayType:
    """Fixed-size array. ``length`` is the source text of the length expression."""

    length: str
    elem: "TypeExpr"


@dataclass(frozen=True)
class MapType:
    key: "TypeExpr"
    value: "TypeExpr"


@dataclass(frozen=True)
class ChanType:
    """Channel type. ``direction`` is one of ``both``, ``send``, ``recv``."""

    direction: str
    value: "TypeExpr"


@dataclass(frozen=True)
class VariadicType:
    """Variadic parameter type ``...T``."""

    elem: "TypeExpr"


@dataclass(frozen=True)
class GenericType:
    """Generic type application ``Base[Args]``. Never instantiated."""

    base: "TypeExpr"
    args: Tuple["TypeExpr", ...]


@dataclass(frozen=True)
class ParamSpec:
    """One parameter group: ``a, b int`` has two names, ``int`` has none."""

    names: Tuple[str, ...]
    type: "TypeExpr"


@dataclass(frozen=True)
class Signature:
    params: Tuple[ParamSpec, ...] = ()
    results: Tuple[ParamSpec, ...] = ()


@dataclass(frozen=True)
class FuncType:
    signature: Signature


@dataclass(frozen=True)
class FieldSpec:
    """A struct field declaration line.

    Embedded fields have no names and ``embedded`` set; ``tag`` holds the raw
    tag literal (backticks included) or an empty string.
    """

    names: Tuple[str, ...]
    type: "TypeExpr"
    tag: str
    embedded: bool
    pos: Position


@dataclass(frozen=True)
class StructType:
    fields: Tuple[FieldSpec, ...] = ()


@dataclass(frozen=True)
class MethodSpec:
    """Method signature inside an interface body."""

    name: str
    signature: Signature
    pos: Position


@dataclass(frozen=True)
class EmbeddedSpec:
    """Embedded type inside an interface body."""

    type: "TypeExpr"
    pos: Position


@dataclass(frozen=True)
class ConstraintSpec:
    """Type-set element such as ``~int | ~string``, kept as source text."""

    text: str
    pos: Position


@dataclass(frozen=True)
class UnsupportedType:
    """Syntax the lowering does not model, kept as source text."""

    text: str
    node_type: str


InterfaceMember = Union[MethodSpec, EmbeddedSpec, ConstraintSpec]


@dataclass(frozen=True)
class InterfaceType:
    members: Tuple[InterfaceMember, ...] = ()


TypeExpr = Union[
    Ident,
    QualifiedIdent,
    PointerType,
    SliceType,
    ArrayType,
    MapType,
    ChanType,
    VariadicType,
    GenericType,
    FuncType,
    StructType,
    InterfaceType,
    UnsupportedType,
]


# ---------------------------------------------------------------------------
# Top-level declarations
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TypeSpec:
    """A top-level ``type`` declaration."""

    name: str
    type: TypeExpr
    pos: Position
    type_params: Tuple[str, ...] = ()
    is_alias: bool = False


@dataclass(frozen=True)
class MethodDecl:
    """A top-level function declared with a receiver.

    ``receiver`` is the receiver's base type name (no ``*``, no type
    arguments). ``type_params`` are the receiver's type parameter names.
    """

    name: str
    receiver: str
    pointer_receiver: bool
    signature: Signature
    pos: Position
    type_params: Tuple[str, ...] = ()
