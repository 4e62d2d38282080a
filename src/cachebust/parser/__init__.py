"""cachebust parser - Tree-sitter based import extraction."""

from cachebust.parser.base import extract_imports, parse_source
from cachebust.parser.models import EdgeStatus, ImportEdge, ImportForm, SpecifierKind

__all__ = [
    "extract_imports",
    "parse_source",
    "EdgeStatus",
    "ImportEdge",
    "ImportForm",
    "SpecifierKind",
]
