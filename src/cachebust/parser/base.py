"""Tree-sitter parser setup and node helpers."""

from __future__ import annotations

from tree_sitter import Language, Node, Parser, Tree

from cachebust.errors import ParseError
from cachebust.logging import get_logger
from cachebust.parser.models import ImportEdge

_language: Language | None = None


def _get_language() -> Language:
    """Get or create the Tree-sitter JavaScript language instance."""
    global _language
    if _language is None:
        import tree_sitter_javascript as tsjavascript

        _language = Language(tsjavascript.language())
    return _language


def parse_source(source: bytes, file_path: str) -> Tree:
    """Parse JavaScript source into a syntax tree.

    Raises:
        ParseError: If the tree contains syntax errors. Offsets from an
            error-recovered tree are not trusted for rewriting.
    """
    parser = Parser(_get_language())
    tree = parser.parse(source)

    if tree.root_node.has_error:
        error_node = find_error_node(tree.root_node)
        line = error_node.start_point[0] + 1 if error_node else None
        raise ParseError(f"Syntax error in {file_path}", file_path=file_path, line=line)

    return tree


def extract_imports(source: bytes, file_path: str) -> list[ImportEdge]:
    """Parse a module and return its import edges in source order."""
    from cachebust.parser.javascript_extractor import JavaScriptExtractor

    tree = parse_source(source, file_path)
    edges = JavaScriptExtractor().extract(tree.root_node, source, file_path)
    get_logger().debug(f"{file_path}: {len(edges)} import reference(s)")
    return edges


def get_node_text(node: Node, source: bytes) -> str:
    """Extract text content of a node."""
    return source[node.start_byte : node.end_byte].decode("utf-8", errors="replace")


def find_child_by_type(node: Node, type_name: str) -> Node | None:
    """Find first direct child with a specific type."""
    for child in node.children:
        if child.type == type_name:
            return child
    return None


def find_error_node(node: Node) -> Node | None:
    """Find the first ERROR or MISSING node in a subtree."""
    if node.type == "ERROR" or node.is_missing:
        return node
    for child in node.children:
        if child.has_error:
            found = find_error_node(child)
            if found:
                return found
    return None
