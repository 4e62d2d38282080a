"""Reference level resolution.

Every imported module ends up at a level strictly greater than each module
importing it, so that processing by descending level settles importees
before their importers read their hash.
"""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

from cachebust.graph.models import ModuleDescriptor, ModuleGraph
from cachebust.logging import get_logger
from cachebust.parser.models import ImportEdge


class ReferenceLevelResolver:
    """Assigns reference levels by depth-first propagation over import edges."""

    def __init__(self, graph: ModuleGraph) -> None:
        self.graph = graph

    def resolve(self) -> ModuleGraph:
        """Propagate levels from every module that imports something."""
        for module in self.graph:
            if module.resolved_imports:
                self._propagate(module)
        return self.graph

    def processing_order(self) -> list[ModuleDescriptor]:
        """Modules sorted by descending level, ties in discovery order."""
        return sorted(self.graph, key=lambda m: (-m.level, m.index))

    def _propagate(self, start: ModuleDescriptor) -> None:
        """Push level + 1 depth-first into everything start reaches.

        A target is only entered when its level strictly increases and it is
        not already on the current path, so cycles terminate. The path is an
        explicit stack of (module, remaining edges) frames rather than
        recursion, so import chains of any length are handled.
        """
        frames: list[tuple[ModuleDescriptor, Iterator[ImportEdge]]] = [
            (start, iter(start.resolved_imports))
        ]
        on_path: set[Path] = {start.path}

        while frames:
            module, edges = frames[-1]
            edge = next(edges, None)
            if edge is None:
                frames.pop()
                on_path.discard(module.path)
                continue

            target = self.graph.target_of(edge)
            if target.path in on_path:
                get_logger().debug(f"Import cycle: {module.name} -> {target.name}")
                continue
            if module.level + 1 > target.level:
                target.level = module.level + 1
                on_path.add(target.path)
                frames.append((target, iter(target.resolved_imports)))
