"""
Go package loading.

Parses the ``.go`` files of one package with tree-sitter and lowers the
declarations the extraction engine needs (type specs, receiver methods,
imports) into the syntax model of ``extraction.syntax``. Leading doc comments
are collected into a side-table keyed by declaration position while lowering.

The resulting ``GoPackage`` is read-only and can be shared by concurrent
extraction calls.
"""

import logging
import os
import re
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Tuple, Union

from tree_sitter import Node, Tree

from extraction.comments import get_preceding_comments
from extraction.config import (
    ARRAY_TYPE,
    CHANNEL_TYPE,
    COMMENT_NODE,
    DEFAULT_INCLUDE_TESTS,
    FIELD_DECLARATION,
    FIELD_DECLARATION_LIST,
    FUNCTION_TYPE,
    GENERIC_TYPE,
    GO_EXTENSION,
    GO_TEST_SUFFIX,
    IMPLICIT_LENGTH_ARRAY_TYPE,
    IMPORT_DECLARATION,
    IMPORT_SPEC,
    IMPORT_SPEC_LIST,
    INTERFACE_METHOD_NODES,
    INTERFACE_TYPE,
    INTERFACE_TYPE_ELEM_NODES,
    MAP_TYPE,
    METHOD_DECLARATION,
    NEGATED_TYPE,
    PACKAGE_CLAUSE,
    PARAMETER_DECLARATION,
    PARAMETER_LIST,
    PARENTHESIZED_TYPE,
    POINTER_TYPE,
    QUALIFIED_TYPE,
    SLICE_TYPE,
    STRUCT_TYPE,
    TYPE_DECLARATION,
    TYPE_IDENTIFIER,
    TYPE_SPEC_NODES,
    VARIADIC_PARAMETER_DECLARATION,
)
from extraction.errors import PackageLoadError
from extraction.parser import count_error_nodes, parse_bytes, parse_file
from extraction.syntax import (
    ArrayType,
    ChanType,
    ConstraintSpec,
    EmbeddedSpec,
    FieldSpec,
    FuncType,
    GenericType,
    Ident,
    InterfaceMember,
    InterfaceType,
    MapType,
    MethodDecl,
    MethodSpec,
    ParamSpec,
    PointerType,
    Position,
    QualifiedIdent,
    Signature,
    SliceType,
    StructType,
    TypeExpr,
    TypeSpec,
    UnsupportedType,
    VariadicType,
)

logger = logging.getLogger(__name__)

_MAJOR_VERSION_SEGMENT_RE = re.compile(r"^v\d+$")
_GOPKG_VERSION_SUFFIX_RE = re.compile(r"\.v\d+$")


@dataclass(frozen=True)
class GoPackage:
    """Read-only view of one loaded Go package.

    Attributes:
        name: Package name from the ``package`` clause (e.g. ``main``).
        directory: Source directory, or None for in-memory packages.
        files: File names in load order.
        type_specs: Top-level type declarations by name, in source order.
        methods: Receiver methods in source order.
        imports: Per-file import alias -> import path.
        comments: Leading comment side-table keyed by declaration position.
        parse_error_count: ERROR/MISSING nodes across all files.
    """

    name: str
    directory: Optional[str]
    files: Tuple[str, ...]
    type_specs: Mapping[str, TypeSpec]
    methods: Tuple[MethodDecl, ...]
    imports: Mapping[str, Mapping[str, str]]
    comments: Mapping[Position, Tuple[str, ...]] = field(default_factory=dict)
    parse_error_count: int = 0

    def lookup(self, name: str) -> Optional[TypeSpec]:
        """Return the top-level type declaration called ``name``, if any."""
        return self.type_specs.get(name)

    def type_names(self) -> List[str]:
        """Names of all top-level type declarations in source order."""
        return list(self.type_specs)

    def imports_for(self, file_name: str) -> Mapping[str, str]:
        """Import aliases visible in ``file_name``."""
        return self.imports.get(file_name, {})

    def methods_of(self, type_name: str) -> Tuple[MethodDecl, ...]:
        """Methods whose receiver base type is ``type_name``, in source order."""
        return tuple(m for m in self.methods if m.receiver == type_name)


def default_import_alias(import_path: str) -> str:
    """Derive the alias an unnamed import is referenced by.

    Uses the last path element, skipping a ``/vN`` major version element and
    dropping a gopkg.in style ``.vN`` suffix.

    Example:
        >>> default_import_alias("github.com/google/uuid")
        'uuid'
        >>> default_import_alias("github.com/jackc/pgx/v5")
        'pgx'
        >>> default_import_alias("gopkg.in/yaml.v3")
        'yaml'
    """
    segments = [s for s in import_path.split("/") if s]
    if not segments:
        return import_path
    last = segments[-1]
    if _MAJOR_VERSION_SEGMENT_RE.match(last) and len(segments) > 1:
        last = segments[-2]
    return _GOPKG_VERSION_SUFFIX_RE.sub("", last)


def _node_text(node: Node) -> str:
    return node.text.decode("utf-8")


def _unquote(literal: str) -> str:
    if len(literal) >= 2 and literal[0] == literal[-1] and literal[0] in "\"`":
        return literal[1:-1]
    return literal


class _FileLowering:
    """Lowers one parsed file into syntax-model declarations."""

    def __init__(self, file_name: str, comments: Dict[Position, Tuple[str, ...]]):
        self.file_name = file_name
        self.comments = comments

    def position(self, node: Node) -> Position:
        return Position(self.file_name, node.start_point.row, node.start_point.column)

    def record_comments(self, node: Node) -> Position:
        pos = self.position(node)
        leading = get_preceding_comments(node)
        if leading:
            self.comments[pos] = leading
        return pos

    # -- imports -----------------------------------------------------------

    def imports(self, node: Node) -> Dict[str, str]:
        specs: List[Node] = []
        for child in node.named_children:
            if child.type == IMPORT_SPEC:
                specs.append(child)
            elif child.type == IMPORT_SPEC_LIST:
                specs.extend(c for c in child.named_children if c.type == IMPORT_SPEC)

        aliases: Dict[str, str] = {}
        for spec in specs:
            path_node = spec.child_by_field_name("path")
            if path_node is None:
                continue
            path = _unquote(_node_text(path_node))
            name_node = spec.child_by_field_name("name")
            alias = _node_text(name_node) if name_node is not None else default_import_alias(path)
            if alias in (".", "_"):
                logger.debug(f"Import {path} in {self.file_name} defines no alias")
                continue
            aliases[alias] = path
        return aliases

    # -- declarations ------------------------------------------------------

    def type_spec(self, node: Node) -> Optional[TypeSpec]:
        name_node = node.child_by_field_name("name")
        type_node = node.child_by_field_name("type")
        if name_node is None or type_node is None:
            logger.debug(f"Skipping incomplete type spec at {self.position(node)}")
            return None

        type_params: List[str] = []
        params_node = node.child_by_field_name("type_parameters")
        if params_node is not None:
            for decl in params_node.named_children:
                type_params.extend(_node_text(n) for n in decl.children_by_field_name("name"))

        return TypeSpec(
            name=_node_text(name_node),
            type=self.type_expr(type_node),
            pos=self.record_comments(node),
            type_params=tuple(type_params),
            is_alias=node.type == "type_alias",
        )

    def method_decl(self, node: Node) -> Optional[MethodDecl]:
        name_node = node.child_by_field_name("name")
        receiver = node.child_by_field_name("receiver")
        if name_node is None or receiver is None:
            return None

        receiver_params = [c for c in receiver.named_children if c.type == PARAMETER_DECLARATION]
        if not receiver_params:
            return None
        recv_type = receiver_params[0].child_by_field_name("type")
        if recv_type is None:
            return None

        while recv_type.type == PARENTHESIZED_TYPE:
            recv_type = recv_type.named_children[0]
        pointer_receiver = recv_type.type == POINTER_TYPE
        if pointer_receiver:
            recv_type = recv_type.named_children[0]

        type_params: Tuple[str, ...] = ()
        if recv_type.type == GENERIC_TYPE:
            args_node = recv_type.child_by_field_name("type_arguments")
            if args_node is not None:
                type_params = tuple(_node_text(a) for a in args_node.named_children)
            recv_type = recv_type.child_by_field_name("type")

        return MethodDecl(
            name=_node_text(name_node),
            receiver=_node_text(recv_type),
            pointer_receiver=pointer_receiver,
            signature=self.signature(node),
            pos=self.record_comments(node),
            type_params=type_params,
        )

    # -- signatures --------------------------------------------------------

    def signature(self, node: Node) -> Signature:
        params_node = node.child_by_field_name("parameters")
        params = self.parameter_list(params_node) if params_node is not None else ()

        result = node.child_by_field_name("result")
        if result is None:
            results: Tuple[ParamSpec, ...] = ()
        elif result.type == PARAMETER_LIST:
            results = self.parameter_list(result)
        else:
            results = (ParamSpec(names=(), type=self.type_expr(result)),)
        return Signature(params=params, results=results)

    def parameter_list(self, node: Node) -> Tuple[ParamSpec, ...]:
        specs: List[ParamSpec] = []
        for child in node.named_children:
            type_node = child.child_by_field_name("type")
            if type_node is None:
                continue
            names = tuple(_node_text(n) for n in child.children_by_field_name("name"))
            if child.type == PARAMETER_DECLARATION:
                specs.append(ParamSpec(names=names, type=self.type_expr(type_node)))
            elif child.type == VARIADIC_PARAMETER_DECLARATION:
                specs.append(ParamSpec(names=names, type=VariadicType(self.type_expr(type_node))))
        return tuple(specs)

    # -- type expressions --------------------------------------------------

    def type_expr(self, node: Node) -> TypeExpr:
        kind = node.type

        if kind == TYPE_IDENTIFIER:
            return Ident(_node_text(node))
        if kind == QUALIFIED_TYPE:
            return QualifiedIdent(
                package=_node_text(node.child_by_field_name("package")),
                name=_node_text(node.child_by_field_name("name")),
            )
        if kind == POINTER_TYPE:
            return PointerType(self.type_expr(node.named_children[0]))
        if kind == SLICE_TYPE:
            return SliceType(self.type_expr(node.child_by_field_name("element")))
        if kind == ARRAY_TYPE:
            return ArrayType(
                length=_node_text(node.child_by_field_name("length")),
                elem=self.type_expr(node.child_by_field_name("element")),
            )
        if kind == IMPLICIT_LENGTH_ARRAY_TYPE:
            return ArrayType(length="...", elem=self.type_expr(node.child_by_field_name("element")))
        if kind == MAP_TYPE:
            return MapType(
                key=self.type_expr(node.child_by_field_name("key")),
                value=self.type_expr(node.child_by_field_name("value")),
            )
        if kind == CHANNEL_TYPE:
            return self.channel_type(node)
        if kind == FUNCTION_TYPE:
            return FuncType(self.signature(node))
        if kind == STRUCT_TYPE:
            return self.struct_type(node)
        if kind == INTERFACE_TYPE:
            return self.interface_type(node)
        if kind == GENERIC_TYPE:
            args_node = node.child_by_field_name("type_arguments")
            args = tuple(self.type_expr(a) for a in args_node.named_children) if args_node else ()
            return GenericType(base=self.type_expr(node.child_by_field_name("type")), args=args)
        if kind == PARENTHESIZED_TYPE or (kind in INTERFACE_TYPE_ELEM_NODES and node.named_child_count == 1):
            return self.type_expr(node.named_children[0])

        logger.debug(f"Unsupported type syntax '{kind}' at {self.position(node)}")
        return UnsupportedType(text=_node_text(node), node_type=kind)

    def channel_type(self, node: Node) -> ChanType:
        tokens = [c.type for c in node.children if not c.is_named]
        if tokens[:1] == ["<-"]:
            direction = "recv"
        elif tokens[:2] == ["chan", "<-"]:
            direction = "send"
        else:
            direction = "both"
        return ChanType(direction=direction, value=self.type_expr(node.child_by_field_name("value")))

    def struct_type(self, node: Node) -> StructType:
        body = next((c for c in node.named_children if c.type == FIELD_DECLARATION_LIST), None)
        if body is None:
            return StructType()

        fields: List[FieldSpec] = []
        for child in body.named_children:
            if child.type != FIELD_DECLARATION:
                continue
            type_node = child.child_by_field_name("type")
            if type_node is None:
                continue
            names = tuple(_node_text(n) for n in child.children_by_field_name("name"))
            field_type = self.type_expr(type_node)
            embedded = not names
            if embedded and any(c.type == "*" for c in child.children):
                field_type = PointerType(field_type)
            tag_node = child.child_by_field_name("tag")
            fields.append(
                FieldSpec(
                    names=names,
                    type=field_type,
                    tag=_node_text(tag_node) if tag_node is not None else "",
                    embedded=embedded,
                    pos=self.record_comments(child),
                )
            )
        return StructType(fields=tuple(fields))

    def interface_type(self, node: Node) -> InterfaceType:
        elements: List[Node] = []
        for child in node.named_children:
            # Older grammars wrap the body in a method_spec_list
            if child.type == "method_spec_list":
                elements.extend(child.named_children)
            else:
                elements.append(child)

        members: List[InterfaceMember] = []
        for child in elements:
            if child.type == COMMENT_NODE:
                continue
            if child.type in INTERFACE_METHOD_NODES:
                members.append(
                    MethodSpec(
                        name=_node_text(child.child_by_field_name("name")),
                        signature=self.signature(child),
                        pos=self.record_comments(child),
                    )
                )
            elif child.type in INTERFACE_TYPE_ELEM_NODES:
                terms = [c for c in child.named_children if c.type != COMMENT_NODE]
                if len(terms) == 1 and terms[0].type != NEGATED_TYPE:
                    members.append(EmbeddedSpec(type=self.type_expr(terms[0]), pos=self.record_comments(child)))
                else:
                    members.append(ConstraintSpec(text=_node_text(child), pos=self.record_comments(child)))
            elif child.type in (TYPE_IDENTIFIER, QUALIFIED_TYPE):
                members.append(EmbeddedSpec(type=self.type_expr(child), pos=self.record_comments(child)))
            else:
                logger.debug(f"Skipping interface element '{child.type}' at {self.position(child)}")
        return InterfaceType(members=tuple(members))


def _package_clause_name(root: Node) -> Optional[str]:
    for child in root.named_children:
        if child.type == PACKAGE_CLAUSE:
            for sub in child.named_children:
                return _node_text(sub)
    return None


def _assemble_package(parsed_files: List[Tuple[str, Tree]], directory: Optional[str]) -> GoPackage:
    """Lower parsed files into one GoPackage.

    The package name comes from the first clause that is not an external
    test package; files of ``<name>_test`` are skipped.
    """
    files: List[str] = []
    type_specs: Dict[str, TypeSpec] = {}
    methods: List[MethodDecl] = []
    imports: Dict[str, Dict[str, str]] = {}
    comments: Dict[Position, Tuple[str, ...]] = {}
    parse_errors = 0

    clauses: List[Tuple[str, Node, str]] = []
    for file_name, tree in parsed_files:
        error_count = count_error_nodes(tree)
        if error_count:
            logger.debug(f"File {file_name} has {error_count} error nodes")
        parse_errors += error_count

        clause_name = _package_clause_name(tree.root_node)
        if clause_name is None:
            raise PackageLoadError(f"File {file_name} has no package clause")
        clauses.append((file_name, tree.root_node, clause_name))

    clause_names = [clause for _, _, clause in clauses]
    package_name = next((c for c in clause_names if not c.endswith("_test")), clause_names[0])

    for file_name, root, clause_name in clauses:
        if clause_name == f"{package_name}_test":
            logger.debug(f"Skipping external test file {file_name}")
            continue
        if clause_name != package_name:
            raise PackageLoadError(
                f"Found packages {package_name} and {clause_name} in {directory or 'sources'}"
            )

        files.append(file_name)
        lowering = _FileLowering(file_name, comments)
        file_imports: Dict[str, str] = {}

        for child in root.named_children:
            if child.type == IMPORT_DECLARATION:
                file_imports.update(lowering.imports(child))
            elif child.type == TYPE_DECLARATION:
                for spec_node in child.named_children:
                    if spec_node.type not in TYPE_SPEC_NODES:
                        continue
                    spec = lowering.type_spec(spec_node)
                    if spec is None:
                        continue
                    if spec.name in type_specs:
                        raise PackageLoadError(
                            f"Type {spec.name} redeclared at {spec.pos} "
                            f"(first declared at {type_specs[spec.name].pos})"
                        )
                    type_specs[spec.name] = spec
            elif child.type == METHOD_DECLARATION:
                method = lowering.method_decl(child)
                if method is not None:
                    methods.append(method)

        imports[file_name] = file_imports

    logger.info(
        f"Loaded package {package_name}: {len(files)} files, "
        f"{len(type_specs)} types, {len(methods)} methods"
    )
    return GoPackage(
        name=package_name,
        directory=directory,
        files=tuple(files),
        type_specs=type_specs,
        methods=tuple(methods),
        imports=imports,
        comments=comments,
        parse_error_count=parse_errors,
    )


def load_package_from_sources(
    sources: Mapping[str, Union[str, bytes]],
    directory: Optional[str] = None,
) -> GoPackage:
    """Build a package from in-memory Go sources.

    Args:
        sources: File name -> Go source text (str or UTF-8 bytes).
        directory: Directory the files came from, if any.

    Returns:
        The loaded GoPackage.

    Raises:
        PackageLoadError: If there are no sources, a file has no package
            clause, files disagree on the package name, or a type is
            declared twice.

    Example:
        >>> pkg = load_package_from_sources({"a.go": "package main\\ntype A struct{}"})
        >>> pkg.lookup("A").name
        'A'
    """
    if not sources:
        raise PackageLoadError("No Go source files to load")

    parsed_files: List[Tuple[str, Tree]] = []
    for file_name in sorted(sources):
        source = sources[file_name]
        source_bytes = source.encode("utf-8") if isinstance(source, str) else source
        tree = parse_bytes(source_bytes)
        if tree.root_node.has_error:
            logger.warning(f"Source {file_name} contains syntax errors")
        parsed_files.append((file_name, tree))

    return _assemble_package(parsed_files, directory)


def load_package_from_source(source: Union[str, bytes], file_name: str = "main.go") -> GoPackage:
    """Build a package from a single in-memory Go source file."""
    return load_package_from_sources({file_name: source})


def list_go_files(directory: str, include_tests: bool = DEFAULT_INCLUDE_TESTS) -> List[str]:
    """List the Go source files of one package directory (not recursive)."""
    names = []
    for entry in sorted(os.listdir(directory)):
        if not entry.endswith(GO_EXTENSION):
            continue
        if entry.endswith(GO_TEST_SUFFIX) and not include_tests:
            continue
        if os.path.isfile(os.path.join(directory, entry)):
            names.append(entry)
    return names


def load_package(directory: str, include_tests: bool = DEFAULT_INCLUDE_TESTS) -> GoPackage:
    """Load the Go package in ``directory``.

    Args:
        directory: Package directory.
        include_tests: Whether ``_test.go`` files are loaded too.

    Returns:
        The loaded GoPackage.

    Raises:
        FileNotFoundError: If the directory does not exist.
        PackageLoadError: If the directory holds no Go files or mixes packages.
    """
    directory = os.path.abspath(directory)
    if not os.path.isdir(directory):
        raise FileNotFoundError(f"Directory not found: {directory}")

    file_names = list_go_files(directory, include_tests=include_tests)
    if not file_names:
        raise PackageLoadError(f"No Go files found in {directory}")

    logger.info(f"Loading {len(file_names)} Go files from {directory}")
    parsed_files: List[Tuple[str, Tree]] = []
    for file_name in file_names:
        tree, _ = parse_file(os.path.join(directory, file_name))
        parsed_files.append((file_name, tree))

    return _assemble_package(parsed_files, directory)
