"""
Unit tests for interface element extraction.

Covers members, member doc comments and expansion of embedded interfaces.
"""

import textwrap
import unittest

from extraction.builder import build_element
from extraction.errors import ExtractionError, UnresolvedTypeError
from extraction.models import Element, Method, Type
from extraction.package import load_package_from_source


def _build(code: str, name: str) -> Element:
    return build_element(load_package_from_source(textwrap.dedent(code)), name)


INT = Type(name="int", internal_name="int")
STRING = Type(name="string", internal_name="string")


class TestInterfaceMembers(unittest.TestCase):
    """Test extraction of interface members."""

    def test_empty_interface(self):
        element = _build("""
            package main

            type A interface {}
        """, "A")

        self.assertEqual(element, Element(
            type=Type(name="main.A", internal_name="A"),
            kind="interface",
            attributes=None,
            methods=(),
        ))

    def test_one_method(self):
        element = _build("""
            package main

            type A interface {
                Foo()
            }
        """, "A")

        self.assertEqual(element.methods, (Method(name="Foo", is_exported=True),))

    def test_two_methods_in_source_order(self):
        element = _build("""
            package main

            type A interface {
                Foo()
                Bar()
            }
        """, "A")

        self.assertEqual([m.name for m in element.methods], ["Foo", "Bar"])

    def test_unexported_method(self):
        element = _build("""
            package main

            type A interface {
                foo()
            }
        """, "A")

        self.assertFalse(element.methods[0].is_exported)
        self.assertFalse(element.methods[0].is_pointer_receiver)

    def test_params(self):
        element = _build("""
            package main

            type A interface {
                Foo(a int, b string)
            }
        """, "A")

        self.assertEqual(element.methods[0].params, (INT, STRING))
        self.assertEqual(element.methods[0].returns, ())

    def test_grouped_params_expand_per_name(self):
        element = _build("""
            package main

            type A interface {
                Foo(a, b int) (x, y string)
            }
        """, "A")

        self.assertEqual(element.methods[0].params, (INT, INT))
        self.assertEqual(element.methods[0].returns, (STRING, STRING))

    def test_returns(self):
        element = _build("""
            package main

            type A interface {
                Foo() (int, string)
            }
        """, "A")

        self.assertEqual(element.methods[0].returns, (INT, STRING))

    def test_imported_param_type(self):
        element = _build("""
            package main

            import "github.com/google/uuid"

            type A interface {
                Foo(a uuid.UUID)
            }
        """, "A")

        self.assertEqual(element.methods[0].params, (Type(name="uuid.UUID", internal_name="UUID"),))

    def test_variadic_param(self):
        element = _build("""
            package main

            type A interface {
                Log(format string, args ...any)
            }
        """, "A")

        self.assertEqual(
            element.methods[0].params,
            (STRING, Type(name="...any", internal_name="...any")),
        )


class TestInterfaceComments(unittest.TestCase):
    """Test that interface member docs keep the text after the marker verbatim."""

    def test_comment_without_space(self):
        element = _build("""
            package main

            type A interface {
                //Foo does something
                Foo()
            }
        """, "A")

        self.assertEqual(element.methods[0].comments, ("Foo does something",))

    def test_multi_line_comments_keep_leading_space(self):
        element = _build("""
            package main

            type A interface {
                // Foo does something
                // Foo does something else
                Foo()
            }
        """, "A")

        self.assertEqual(
            element.methods[0].comments,
            (" Foo does something", " Foo does something else"),
        )

    def test_trailing_comment_is_not_documentation(self):
        element = _build("""
            package main

            type A interface {
                Foo() // not a doc
                Bar()
            }
        """, "A")

        self.assertEqual(element.methods[0].comments, ())
        self.assertEqual(element.methods[1].comments, ())


class TestEmbeddedInterfaces(unittest.TestCase):
    """Test expansion of embedded interfaces."""

    def test_sub_interface(self):
        """Test that the embedding doc moves to the first inherited method."""
        element = _build("""
            package main

            type A interface {
                Foo() (int, string)
            }

            type B interface {
                // A is a sub interface
                A
                Bar()
            }
        """, "B")

        self.assertEqual(element.methods, (
            Method(
                name="Foo",
                returns=(INT, STRING),
                is_exported=True,
                comments=(" A is a sub interface",),
            ),
            Method(name="Bar", is_exported=True),
        ))

    def test_transitive_embedding_order(self):
        element = _build("""
            package main

            type C interface {
                B
                CMethod()
            }

            type B interface {
                A
                BMethod()
            }

            type A interface {
                AMethod()
            }
        """, "C")

        self.assertEqual([m.name for m in element.methods], ["AMethod", "BMethod", "CMethod"])

    def test_embedded_error(self):
        element = _build("""
            package main

            type Failure interface {
                error
                Code() int
            }
        """, "Failure")

        self.assertEqual(element.methods[0], Method(name="Error", returns=(STRING,), is_exported=True))
        self.assertEqual(element.methods[1].name, "Code")

    def test_embedding_cycle_raises(self):
        with self.assertRaises(ExtractionError):
            _build("""
                package main

                type A interface {
                    B
                }

                type B interface {
                    A
                }
            """, "A")

    def test_embedding_a_struct_raises(self):
        with self.assertRaises(ExtractionError):
            _build("""
                package main

                type S struct {}

                type A interface {
                    S
                }
            """, "A")

    def test_embedded_interface_from_other_package_raises(self):
        with self.assertRaises(UnresolvedTypeError):
            _build("""
                package main

                import "io"

                type A interface {
                    io.Reader
                }
            """, "A")

    def test_type_set_constraint_is_skipped(self):
        element = _build("""
            package main

            type Number interface {
                ~int | ~float64
                String() string
            }
        """, "Number")

        self.assertEqual([m.name for m in element.methods], ["String"])


if __name__ == "__main__":
    unittest.main()
