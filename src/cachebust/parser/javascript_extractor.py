"""JavaScript module reference extractor using Tree-sitter."""

from __future__ import annotations

from urllib.parse import parse_qs, urlsplit

from tree_sitter import Node

from cachebust.logging import get_logger
from cachebust.parser.base import find_child_by_type, get_node_text
from cachebust.parser.models import ImportEdge, ImportForm, SpecifierKind


def classify_specifier(specifier: str) -> SpecifierKind:
    """Classify a specifier by its leading characters."""
    if specifier.startswith(("./", "../")):
        return SpecifierKind.RELATIVE
    if specifier.startswith("/") and not specifier.startswith("//"):
        # '//host/x.js' is a protocol-relative URL, not a path
        return SpecifierKind.ABSOLUTE
    return SpecifierKind.BARE


class JavaScriptExtractor:
    """Extract import/export references from a JavaScript syntax tree."""

    def extract(self, root: Node, source: bytes, file_path: str) -> list[ImportEdge]:
        """Extract edges from the AST, ordered by position in the source."""
        edges: list[ImportEdge] = []
        self._walk(root, source, file_path, edges)
        edges.sort(key=lambda edge: edge.start)
        return edges

    def _walk(self, node: Node, source: bytes, file_path: str, edges: list[ImportEdge]) -> None:
        if node.type == "import_statement":
            string_node = self._source_string(node)
            if string_node:
                form = (
                    ImportForm.STATIC
                    if find_child_by_type(node, "import_clause")
                    else ImportForm.SIDE_EFFECT
                )
                self._add_edge(string_node, form, source, file_path, edges)
            return

        if node.type == "export_statement":
            string_node = self._source_string(node)
            if string_node:
                self._add_edge(string_node, ImportForm.REEXPORT, source, file_path, edges)
                return

        if node.type == "call_expression":
            string_node = self._dynamic_import_string(node)
            if string_node:
                self._add_edge(string_node, ImportForm.DYNAMIC, source, file_path, edges)
                return

        for child in node.children:
            self._walk(child, source, file_path, edges)

    def _source_string(self, node: Node) -> Node | None:
        """Find the module string of an import/export statement."""
        return node.child_by_field_name("source")

    def _dynamic_import_string(self, node: Node) -> Node | None:
        """Return the string argument of import('X'), or None.

        Template literals and expressions are not static references.
        """
        func_node = node.child_by_field_name("function")
        if func_node is None or func_node.type != "import":
            return None

        args_node = node.child_by_field_name("arguments")
        if args_node is None or not args_node.named_children:
            return None

        first_arg = args_node.named_children[0]
        if first_arg.type != "string":
            return None
        return first_arg

    def _add_edge(
        self,
        string_node: Node,
        form: ImportForm,
        source: bytes,
        file_path: str,
        edges: list[ImportEdge],
    ) -> None:
        """Create an edge for a string literal node, skipping bad specifiers."""
        # Span excludes the surrounding quotes
        start = string_node.start_byte + 1
        end = string_node.end_byte - 1
        specifier = source[start:end].decode("utf-8", errors="replace")
        line = string_node.start_point[0] + 1
        kind = classify_specifier(specifier)

        if not kind.actionable:
            edges.append(
                ImportEdge(
                    specifier=specifier,
                    kind=kind,
                    form=form,
                    path=specifier,
                    start=start,
                    end=end,
                    line=line,
                )
            )
            return

        try:
            parts = urlsplit(specifier)
        except ValueError as e:
            get_logger().warning(
                f"{file_path}:{line}: cannot parse import "
                f"{get_node_text(string_node, source)} ({e}), skipping"
            )
            return

        if not parts.path:
            get_logger().warning(
                f"{file_path}:{line}: import {specifier!r} has no path, skipping"
            )
            return

        versions = parse_qs(parts.query, keep_blank_values=True).get("v")

        edges.append(
            ImportEdge(
                specifier=specifier,
                kind=kind,
                form=form,
                path=parts.path,
                start=start,
                end=end,
                version=versions[0] if versions else None,
                query=parts.query,
                fragment=parts.fragment,
                line=line,
            )
        )
