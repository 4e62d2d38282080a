"""Dependency graph builder.

Resolves every actionable import edge to an absolute path and links the
importer into the target's reverse edges.
"""

from __future__ import annotations

import os
from pathlib import Path

from cachebust.graph.models import ModuleDescriptor, ModuleGraph
from cachebust.logging import get_logger
from cachebust.parser.models import EdgeStatus, ImportEdge, SpecifierKind
from cachebust.scanner import is_excluded


class GraphBuilder:
    """Links module descriptors by resolved absolute path."""

    def __init__(self, source_root: Path, excludes: list[str] | None = None) -> None:
        self.source_root = source_root.resolve()
        self.excludes = excludes or []

    def build(self, graph: ModuleGraph) -> ModuleGraph:
        """Resolve edges of every module in the graph, in discovery order."""
        logger = get_logger()
        resolved = 0

        for module in graph:
            for edge in module.imports:
                if not edge.actionable:
                    continue
                self._link(module, edge, graph)
                if edge.status is EdgeStatus.RESOLVED:
                    resolved += 1

        logger.debug(f"Resolved {resolved} import edge(s) across {len(graph)} module(s)")
        return graph

    def resolve_target(self, module: ModuleDescriptor, edge: ImportEdge) -> Path:
        """Compute the absolute target path of an edge.

        Absolute specifiers are rooted at the source root.
        """
        if edge.kind is SpecifierKind.ABSOLUTE:
            joined = os.path.join(self.source_root, edge.path.lstrip("/"))
        else:
            joined = os.path.join(module.path.parent, edge.path)
        return Path(os.path.normpath(joined))

    def _link(self, module: ModuleDescriptor, edge: ImportEdge, graph: ModuleGraph) -> None:
        logger = get_logger()
        target = self.resolve_target(module, edge)
        edge.target = target

        try:
            relative = target.relative_to(self.source_root).as_posix()
        except ValueError:
            relative = None

        if relative is not None and is_excluded(relative, self.excludes):
            edge.status = EdgeStatus.EXCLUDED
            logger.info(f"exclude: {relative}")
            return

        target_module = graph.get(target)
        if target_module is None:
            edge.status = EdgeStatus.UNRESOLVED
            logger.info(f"{module.name}:{edge.line}: {edge.specifier} not found in source tree")
            return

        edge.status = EdgeStatus.RESOLVED
        target_module.add_importer(module.path)
