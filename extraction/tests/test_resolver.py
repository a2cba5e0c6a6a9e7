"""
Unit tests for resolver.py

Tests qualified/internal name rendering for every type expression form.
"""

import unittest

from extraction.errors import UnresolvedTypeError
from extraction.models import Type
from extraction.package import load_package_from_sources
from extraction.resolver import Scope, expand_param_types, resolve_type
from extraction.syntax import (
    ArrayType,
    ChanType,
    EmbeddedSpec,
    FuncType,
    GenericType,
    Ident,
    InterfaceType,
    MapType,
    MethodSpec,
    ParamSpec,
    PointerType,
    Position,
    QualifiedIdent,
    Signature,
    SliceType,
    UnsupportedType,
    VariadicType,
)

SOURCES = {
    "models.go": (
        "package store\n"
        "\n"
        "import (\n"
        "\tid \"github.com/google/uuid\"\n"
        "\t\"github.com/jackc/pgx/v5\"\n"
        ")\n"
        "\n"
        "type User struct {\n"
        "\tID id.UUID\n"
        "}\n"
        "\n"
        "type List[T any] struct{}\n"
    ),
    "other.go": "package store\n\ntype Other struct{}\n",
}


class TestResolveType(unittest.TestCase):
    """Test resolve_type on syntax-model expressions."""

    @classmethod
    def setUpClass(cls):
        cls.package = load_package_from_sources(SOURCES)

    def setUp(self):
        self.scope = Scope(package=self.package, file_name="models.go")

    def resolve(self, expr):
        return resolve_type(expr, self.scope)

    def test_local_identifier_is_qualified(self):
        self.assertEqual(self.resolve(Ident("User")), Type("store.User", "User"))

    def test_identifier_from_other_file_is_visible(self):
        self.assertEqual(self.resolve(Ident("Other")), Type("store.Other", "Other"))

    def test_predeclared_identifier(self):
        for name in ("string", "error", "any", "byte", "rune"):
            with self.subTest(name=name):
                self.assertEqual(self.resolve(Ident(name)), Type(name, name))

    def test_type_parameter(self):
        scope = Scope(package=self.package, file_name="models.go", type_params=frozenset({"T"}))
        self.assertEqual(resolve_type(SliceType(Ident("T")), scope), Type("[]T", "[]T"))

    def test_pointer_to_local_type(self):
        self.assertEqual(self.resolve(PointerType(Ident("User"))), Type("*store.User", "*User"))

    def test_explicit_import_alias(self):
        self.assertEqual(self.resolve(QualifiedIdent("id", "UUID")), Type("id.UUID", "UUID"))

    def test_versioned_import_alias(self):
        self.assertEqual(self.resolve(QualifiedIdent("pgx", "Conn")), Type("pgx.Conn", "Conn"))

    def test_import_alias_is_per_file(self):
        scope = Scope(package=self.package, file_name="other.go")
        with self.assertRaises(UnresolvedTypeError):
            resolve_type(QualifiedIdent("id", "UUID"), scope)

    def test_unknown_identifier(self):
        with self.assertRaises(UnresolvedTypeError) as ctx:
            self.resolve(Ident("Missing"))
        self.assertEqual(ctx.exception.identifier, "Missing")

    def test_nested_composites(self):
        expr = MapType(
            key=Ident("string"),
            value=SliceType(PointerType(QualifiedIdent("id", "UUID"))),
        )
        self.assertEqual(
            self.resolve(expr),
            Type("map[string][]*id.UUID", "map[string][]*UUID"),
        )

    def test_array_and_channels(self):
        self.assertEqual(self.resolve(ArrayType("8", Ident("byte"))), Type("[8]byte", "[8]byte"))
        self.assertEqual(
            self.resolve(ChanType("both", Ident("User"))),
            Type("chan store.User", "chan User"),
        )
        self.assertEqual(
            self.resolve(ChanType("recv", Ident("int"))),
            Type("<-chan int", "<-chan int"),
        )

    def test_generic_instantiation(self):
        expr = GenericType(base=Ident("List"), args=(Ident("User"), Ident("int")))
        self.assertEqual(self.resolve(expr), Type("store.List[store.User, int]", "List[User, int]"))

    def test_func_type(self):
        expr = FuncType(Signature(
            params=(ParamSpec(("a", "b"), Ident("int")), ParamSpec(("rest",), VariadicType(Ident("User")))),
            results=(ParamSpec((), Ident("error")),),
        ))
        self.assertEqual(
            self.resolve(expr),
            Type("func(int, int, ...store.User) error", "func(int, int, ...User) error"),
        )

    def test_func_type_without_results(self):
        self.assertEqual(self.resolve(FuncType(Signature())), Type("func()", "func()"))

    def test_empty_interface(self):
        self.assertEqual(self.resolve(InterfaceType()), Type("interface{}", "interface{}"))

    def test_interface_with_method_and_embedding(self):
        pos = Position("models.go", 1, 1)
        expr = InterfaceType(members=(
            MethodSpec(
                name="Get",
                signature=Signature(
                    params=(ParamSpec(("a", "b"), Ident("User")),),
                    results=(ParamSpec((), Ident("error")),),
                ),
                pos=pos,
            ),
            EmbeddedSpec(type=Ident("Other"), pos=pos),
        ))
        self.assertEqual(
            self.resolve(expr),
            Type(
                "interface{Get(store.User, store.User) error; store.Other}",
                "interface{Get(User, User) error; Other}",
            ),
        )

    def test_unsupported_syntax(self):
        with self.assertRaises(UnresolvedTypeError):
            self.resolve(UnsupportedType(text="?", node_type="weird"))

    def test_non_expression_raises_type_error(self):
        with self.assertRaises(TypeError):
            self.resolve("User")

    def test_name_and_internal_name_differ_only_at_leaves(self):
        expr = MapType(QualifiedIdent("id", "UUID"), Ident("User"))
        resolved = self.resolve(expr)
        self.assertEqual(resolved.name.replace("id.", "").replace("store.", ""), resolved.internal_name)


class TestExpandParamTypes(unittest.TestCase):

    def test_one_type_per_name(self):
        package = load_package_from_sources(SOURCES)
        scope = Scope(package=package, file_name="models.go")
        params = (ParamSpec(("a", "b"), Ident("int")), ParamSpec((), Ident("string")))

        self.assertEqual(
            expand_param_types(params, scope),
            [Type("int", "int"), Type("int", "int"), Type("string", "string")],
        )


if __name__ == "__main__":
    unittest.main()
