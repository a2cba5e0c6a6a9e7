"""
Unit tests for parser.py

Tests tree-sitter parser initialization, byte parsing, and file parsing.
"""

import os
import tempfile
import unittest

from extraction.parser import count_error_nodes, create_parser, parse_bytes, parse_file


class TestParserInitialization(unittest.TestCase):
    """Test parser creation and initialization."""

    def test_create_parser(self):
        """Test that create_parser returns a parser with a language set."""
        parser = create_parser()
        self.assertIsNotNone(parser)
        self.assertIsNotNone(parser.language)


class TestParseBytes(unittest.TestCase):
    """Test parsing raw bytes of Go code."""

    def test_parse_struct(self):
        source = b"package main\n\ntype A struct {\n\tfoo string\n}\n"
        tree = parse_bytes(source)

        self.assertEqual(tree.root_node.type, "source_file")
        self.assertFalse(tree.root_node.has_error)

    def test_parse_with_comments(self):
        source = b"""
        package main

        // A does things
        /* Multi-line
           comment */
        type A interface {
            Foo()
        }
        """
        tree = parse_bytes(source)

        self.assertEqual(tree.root_node.type, "source_file")
        self.assertFalse(tree.root_node.has_error)

    def test_parse_invalid_type(self):
        """Test that parse_bytes raises TypeError for non-bytes input."""
        with self.assertRaises(TypeError):
            parse_bytes("package main")

    def test_parse_with_errors(self):
        # Missing closing brace
        tree = parse_bytes(b"package main\n\ntype A struct {\n\tfoo string\n")

        self.assertEqual(tree.root_node.type, "source_file")
        self.assertTrue(tree.root_node.has_error)


class TestCountErrorNodes(unittest.TestCase):
    """Test counting of ERROR/MISSING nodes."""

    def test_clean_tree(self):
        tree = parse_bytes(b"package main\n\ntype A struct{}\n")
        self.assertEqual(count_error_nodes(tree), 0)

    def test_broken_tree(self):
        tree = parse_bytes(b"package main\n\ntype A struct {\n\tfoo string\n")
        self.assertGreater(count_error_nodes(tree), 0)


class TestParseFile(unittest.TestCase):
    """Test parsing Go files from disk."""

    def test_parse_file(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "main.go")
            with open(path, "wb") as f:
                f.write(b"package main\n\ntype A struct{}\n")

            tree, source_bytes = parse_file(path)

        self.assertEqual(tree.root_node.type, "source_file")
        self.assertEqual(source_bytes, b"package main\n\ntype A struct{}\n")

    def test_parse_nonexistent_file(self):
        with self.assertRaises(FileNotFoundError):
            parse_file("/nonexistent/file.go")


if __name__ == "__main__":
    unittest.main()
