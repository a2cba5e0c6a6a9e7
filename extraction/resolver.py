"""
Type-name resolution.

Renders a type expression twice: once fully qualified (``Type.name``) and
once as written inside the declaring package (``Type.internal_name``). Both
renderings share the same structure; they only differ at identifier leaves.
"""

import logging
from dataclasses import dataclass
from typing import FrozenSet, List, Tuple

from extraction.config import PREDECLARED_TYPES
from extraction.errors import UnresolvedTypeError
from extraction.models import Type
from extraction.package import GoPackage
from extraction.syntax import (
    ArrayType,
    ChanType,
    ConstraintSpec,
    EmbeddedSpec,
    FuncType,
    GenericType,
    Ident,
    InterfaceType,
    MapType,
    MethodSpec,
    ParamSpec,
    PointerType,
    QualifiedIdent,
    Signature,
    SliceType,
    StructType,
    TypeExpr,
    UnsupportedType,
    VariadicType,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Scope:
    """Where a type expression appears.

    Attributes:
        package: The package being extracted.
        file_name: File holding the expression; import aliases are per file.
        type_params: Type parameter names of the enclosing declaration.
    """

    package: GoPackage
    file_name: str
    type_params: FrozenSet[str] = frozenset()


def _resolve_ident(expr: Ident, scope: Scope) -> Type:
    name = expr.name
    if name in scope.type_params:
        return Type(name=name, internal_name=name)
    if scope.package.lookup(name) is not None:
        return Type(name=f"{scope.package.name}.{name}", internal_name=name)
    if name in PREDECLARED_TYPES:
        return Type(name=name, internal_name=name)
    raise UnresolvedTypeError(name, f"not declared in package {scope.package.name}")


def _resolve_qualified(expr: QualifiedIdent, scope: Scope) -> Type:
    if expr.package not in scope.package.imports_for(scope.file_name):
        raise UnresolvedTypeError(
            f"{expr.package}.{expr.name}",
            f"package alias '{expr.package}' is not imported in {scope.file_name}",
        )
    # The alias is dropped from the internal name; generators rewrite imports.
    return Type(name=f"{expr.package}.{expr.name}", internal_name=expr.name)


def _join(types: List[Type], sep: str) -> Tuple[str, str]:
    return (
        sep.join(t.name for t in types),
        sep.join(t.internal_name for t in types),
    )


def _render_signature(signature: Signature, scope: Scope) -> Type:
    """Render ``(params) results`` as it follows ``func`` or a method name."""
    params = expand_param_types(signature.params, scope)
    results = expand_param_types(signature.results, scope)

    params_name, params_internal = _join(params, ", ")
    name = f"({params_name})"
    internal = f"({params_internal})"
    if len(results) == 1:
        name += f" {results[0].name}"
        internal += f" {results[0].internal_name}"
    elif results:
        results_name, results_internal = _join(results, ", ")
        name += f" ({results_name})"
        internal += f" ({results_internal})"
    return Type(name=name, internal_name=internal)


def _resolve_struct(expr: StructType, scope: Scope) -> Type:
    names: List[str] = []
    internals: List[str] = []
    for spec in expr.fields:
        field_type = resolve_type(spec.type, scope)
        if spec.embedded:
            names.append(field_type.name)
            internals.append(field_type.internal_name)
            continue
        for field_name in spec.names:
            names.append(f"{field_name} {field_type.name}")
            internals.append(f"{field_name} {field_type.internal_name}")
    return Type(
        name="struct{" + "; ".join(names) + "}",
        internal_name="struct{" + "; ".join(internals) + "}",
    )


def _resolve_interface(expr: InterfaceType, scope: Scope) -> Type:
    names: List[str] = []
    internals: List[str] = []
    for member in expr.members:
        if isinstance(member, MethodSpec):
            rendered = _render_signature(member.signature, scope)
            names.append(member.name + rendered.name)
            internals.append(member.name + rendered.internal_name)
        elif isinstance(member, EmbeddedSpec):
            embedded = resolve_type(member.type, scope)
            names.append(embedded.name)
            internals.append(embedded.internal_name)
        elif isinstance(member, ConstraintSpec):
            names.append(member.text)
            internals.append(member.text)
    return Type(
        name="interface{" + "; ".join(names) + "}",
        internal_name="interface{" + "; ".join(internals) + "}",
    )


def resolve_type(expr: TypeExpr, scope: Scope) -> Type:
    """Resolve a type expression into its qualified and internal names.

    Args:
        expr: A type expression from the syntax model.
        scope: Package, file and type parameters the expression appears in.

    Returns:
        The resolved Type.

    Raises:
        UnresolvedTypeError: If an identifier or import alias is not in scope.
        TypeError: If ``expr`` is not a type expression.

    Example:
        >>> resolve_type(SliceType(Ident("A")), scope)
        Type(name='[]main.A', internal_name='[]A')
    """
    if isinstance(expr, Ident):
        return _resolve_ident(expr, scope)
    if isinstance(expr, QualifiedIdent):
        return _resolve_qualified(expr, scope)
    if isinstance(expr, PointerType):
        elem = resolve_type(expr.elem, scope)
        return Type(name="*" + elem.name, internal_name="*" + elem.internal_name)
    if isinstance(expr, SliceType):
        elem = resolve_type(expr.elem, scope)
        return Type(name="[]" + elem.name, internal_name="[]" + elem.internal_name)
    if isinstance(expr, ArrayType):
        elem = resolve_type(expr.elem, scope)
        prefix = f"[{expr.length}]"
        return Type(name=prefix + elem.name, internal_name=prefix + elem.internal_name)
    if isinstance(expr, MapType):
        key = resolve_type(expr.key, scope)
        value = resolve_type(expr.value, scope)
        return Type(
            name=f"map[{key.name}]{value.name}",
            internal_name=f"map[{key.internal_name}]{value.internal_name}",
        )
    if isinstance(expr, ChanType):
        value = resolve_type(expr.value, scope)
        prefix = {"send": "chan<- ", "recv": "<-chan "}.get(expr.direction, "chan ")
        return Type(name=prefix + value.name, internal_name=prefix + value.internal_name)
    if isinstance(expr, VariadicType):
        elem = resolve_type(expr.elem, scope)
        return Type(name="..." + elem.name, internal_name="..." + elem.internal_name)
    if isinstance(expr, GenericType):
        base = resolve_type(expr.base, scope)
        args_name, args_internal = _join([resolve_type(a, scope) for a in expr.args], ", ")
        return Type(
            name=f"{base.name}[{args_name}]",
            internal_name=f"{base.internal_name}[{args_internal}]",
        )
    if isinstance(expr, FuncType):
        rendered = _render_signature(expr.signature, scope)
        return Type(name="func" + rendered.name, internal_name="func" + rendered.internal_name)
    if isinstance(expr, StructType):
        return _resolve_struct(expr, scope)
    if isinstance(expr, InterfaceType):
        return _resolve_interface(expr, scope)
    if isinstance(expr, UnsupportedType):
        raise UnresolvedTypeError(expr.text, f"unsupported type syntax '{expr.node_type}'")
    raise TypeError(f"Not a type expression: {type(expr).__name__}")


def expand_param_types(params: Tuple[ParamSpec, ...], scope: Scope) -> List[Type]:
    """Resolve a parameter list into one Type per declared name.

    ``(a, b string)`` yields two ``string`` entries; unnamed entries such as
    the results in ``(int, error)`` yield one each.
    """
    types: List[Type] = []
    for spec in params:
        resolved = resolve_type(spec.type, scope)
        types.extend([resolved] * max(len(spec.names), 1))
    return types
