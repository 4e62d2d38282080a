"""Shared fixtures for cachebust tests."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from cachebust.graph.builder import GraphBuilder
from cachebust.graph.models import ModuleDescriptor, ModuleGraph
from cachebust.parser import extract_imports


def write_tree(root: Path, files: dict[str, str]) -> Path:
    """Create files (POSIX relative path -> text) under root."""
    for name, text in files.items():
        path = root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(text.encode("utf-8"))
    return root


def load_graph(root: Path, excludes: list[str] | None = None) -> ModuleGraph:
    """Build a linked module graph from every .js file under root."""
    graph = ModuleGraph()
    for index, path in enumerate(sorted(root.rglob("*.js"))):
        module = graph.add(ModuleDescriptor(path, root, index=index))
        module.imports = extract_imports(module.content, module.name)
    return GraphBuilder(root, excludes).build(graph)


@pytest.fixture
def make_tree(tmp_path: Path) -> Callable[..., Path]:
    """Create a source tree under tmp_path (in src/ by default)."""

    def _make(files: dict[str, str], name: str = "src") -> Path:
        return write_tree(tmp_path / name, files)

    return _make


@pytest.fixture
def graph_loader() -> Callable[..., ModuleGraph]:
    """Return the load_graph helper."""
    return load_graph
