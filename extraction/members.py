"""
Field and method extraction for struct and interface declarations.
"""

import logging
from dataclasses import replace
from typing import List, Tuple

from extraction.comments import doc_for
from extraction.errors import ExtractionError, UnresolvedTypeError
from extraction.models import Attribute, Method, Type
from extraction.package import GoPackage
from extraction.resolver import Scope, expand_param_types, resolve_type
from extraction.syntax import (
    ConstraintSpec,
    EmbeddedSpec,
    FieldSpec,
    GenericType,
    Ident,
    InterfaceType,
    MethodSpec,
    PointerType,
    QualifiedIdent,
    Signature,
    TypeExpr,
)
from extraction.tags import parse_tags

logger = logging.getLogger(__name__)

# Method set of the predeclared ``error`` interface
_ERROR_METHODS: Tuple[Method, ...] = (
    Method(
        name="Error",
        params=(),
        returns=(Type(name="string", internal_name="string"),),
        is_pointer_receiver=False,
        is_exported=True,
        comments=(),
    ),
)


def is_exported(name: str) -> bool:
    """Check if an identifier is exported (first character is upper-case).

    Example:
        >>> is_exported("Foo"), is_exported("foo"), is_exported("_Foo")
        (True, False, False)
    """
    return name[:1].isupper()


def _embedded_field_name(expr: TypeExpr) -> str:
    """Field name Go gives an embedded field: its type identifier."""
    if isinstance(expr, PointerType):
        return _embedded_field_name(expr.elem)
    if isinstance(expr, GenericType):
        return _embedded_field_name(expr.base)
    if isinstance(expr, (Ident, QualifiedIdent)):
        return expr.name
    raise ExtractionError(f"Unsupported embedded field type: {type(expr).__name__}")


def _field_attributes(spec: FieldSpec, scope: Scope) -> List[Attribute]:
    field_type = resolve_type(spec.type, scope)
    comments = doc_for(scope.package.comments, spec.pos, strip_space=True)
    names = spec.names if not spec.embedded else (_embedded_field_name(spec.type),)
    tags = parse_tags(spec.tag)

    attributes = []
    for name in names:
        attributes.append(
            Attribute(
                name=name,
                type=field_type,
                comments=comments,
                tags=dict(tags),
                is_exported=is_exported(name),
                is_embedded=spec.embedded,
            )
        )
    return attributes


def extract_attributes(fields: Tuple[FieldSpec, ...], scope: Scope) -> Tuple[Attribute, ...]:
    """Extract struct fields in source order.

    Args:
        fields: Field declarations of the struct.
        scope: Scope of the struct declaration.

    Returns:
        One Attribute per declared field name; an empty tuple for an empty
        struct.

    Raises:
        MalformedTagError: If any field tag is malformed.
        UnresolvedTypeError: If a field type cannot be resolved.
    """
    attributes: List[Attribute] = []
    for spec in fields:
        attributes.extend(_field_attributes(spec, scope))
    return tuple(attributes)


def _build_method(
    name: str,
    signature: Signature,
    scope: Scope,
    comments: Tuple[str, ...],
    pointer_receiver: bool = False,
) -> Method:
    return Method(
        name=name,
        params=tuple(expand_param_types(signature.params, scope)),
        returns=tuple(expand_param_types(signature.results, scope)),
        is_pointer_receiver=pointer_receiver,
        is_exported=is_exported(name),
        comments=comments,
    )


def extract_record_methods(package: GoPackage, type_name: str) -> Tuple[Method, ...]:
    """Extract the methods declared with ``type_name`` as receiver base type.

    Args:
        package: The loaded package.
        type_name: Struct name.

    Returns:
        Methods in source order (files in load order).
    """
    methods: List[Method] = []
    for decl in package.methods_of(type_name):
        scope = Scope(
            package=package,
            file_name=decl.pos.file_name,
            type_params=frozenset(decl.type_params),
        )
        methods.append(
            _build_method(
                decl.name,
                decl.signature,
                scope,
                comments=doc_for(package.comments, decl.pos, strip_space=True),
                pointer_receiver=decl.pointer_receiver,
            )
        )
        logger.debug(f"Extracted method {type_name}.{decl.name} at {decl.pos}")
    return tuple(methods)


def _expand_embedded(
    member: EmbeddedSpec,
    scope: Scope,
    chain: Tuple[str, ...],
) -> List[Method]:
    """Expand an embedded interface into its (transitive) method list."""
    expr = member.type
    if isinstance(expr, QualifiedIdent):
        raise UnresolvedTypeError(
            f"{expr.package}.{expr.name}",
            "embedded interfaces from other packages cannot be expanded",
        )
    if not isinstance(expr, Ident):
        raise ExtractionError(f"Unsupported embedded interface at {member.pos}")

    name = expr.name
    spec = scope.package.lookup(name)
    if spec is None:
        if name == "error":
            return list(_ERROR_METHODS)
        raise UnresolvedTypeError(name, f"embedded at {member.pos} but not declared")
    if not isinstance(spec.type, InterfaceType):
        raise ExtractionError(f"{name} embedded at {member.pos} is not an interface")
    if name in chain:
        raise ExtractionError(f"Interface embedding cycle: {' -> '.join(chain + (name,))}")

    embedded_scope = Scope(
        package=scope.package,
        file_name=spec.pos.file_name,
        type_params=frozenset(spec.type_params),
    )
    return list(extract_contract_methods(spec.type, embedded_scope, chain + (name,)))


def extract_contract_methods(
    interface: InterfaceType,
    scope: Scope,
    chain: Tuple[str, ...] = (),
) -> Tuple[Method, ...]:
    """Extract interface members in source order, expanding embeddings.

    Embedded interfaces are replaced in place by their own members. The
    embedding line's doc comment is prepended to the doc of the first
    inherited member.

    Args:
        interface: The interface body.
        scope: Scope of the interface declaration.
        chain: Names of the interfaces currently being expanded.

    Returns:
        Methods in order; an empty tuple for an empty interface.

    Raises:
        UnresolvedTypeError: If an embedded interface cannot be found.
        ExtractionError: On embedding cycles or non-interface embeddings.
    """
    methods: List[Method] = []
    for member in interface.members:
        comments = doc_for(scope.package.comments, member.pos, strip_space=False)

        if isinstance(member, MethodSpec):
            methods.append(_build_method(member.name, member.signature, scope, comments))
        elif isinstance(member, EmbeddedSpec):
            inherited = _expand_embedded(member, scope, chain)
            if inherited and comments:
                first = inherited[0]
                inherited[0] = replace(first, comments=comments + first.comments)
            methods.extend(inherited)
        elif isinstance(member, ConstraintSpec):
            logger.debug(f"Skipping type-set element '{member.text}' at {member.pos}")
    return tuple(methods)
