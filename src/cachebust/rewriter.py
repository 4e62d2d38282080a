"""Rewrite engine.

Patches import specifiers in place so each one carries the content hash of
the module it refers to. Modules are finalized in reference-level order;
a target that is needed before its turn is finalized on demand, so every
hash handed to an importer is computed over the target's rewritten content.
"""

from __future__ import annotations

from cachebust.graph.models import ModuleDescriptor, ModuleGraph, ModuleState
from cachebust.hasher import content_hash
from cachebust.logging import get_logger
from cachebust.parser.models import ImportEdge


def versioned_specifier(edge: ImportEdge, version: str) -> str:
    """Build '<path>?v=<version>', keeping other query params and any fragment."""
    params = [p for p in edge.query.split("&") if p and p.split("=", 1)[0] != "v"]
    params.append(f"v={version}")
    specifier = f"{edge.path}?{'&'.join(params)}"
    if edge.fragment:
        specifier += f"#{edge.fragment}"
    return specifier


class RewriteEngine:
    """Rewrites resolved import edges with their target's content hash."""

    def __init__(self, graph: ModuleGraph) -> None:
        self.graph = graph

    def run(self, order: list[ModuleDescriptor]) -> None:
        """Finalize every module, in the given order."""
        for module in order:
            self.finalize(module)

    def hash_for(self, module: ModuleDescriptor) -> str:
        """Return the hash of a module's final content, computing it once.

        A module that is itself mid-rewrite (reached through an import
        cycle) gets a provisional digest of its current content, which is
        not cached.
        """
        if module.hash is not None:
            return module.hash

        if module.state is ModuleState.REWRITING:
            get_logger().debug(f"{module.name} is part of an import cycle, using current content")
            return content_hash(module.content)

        self.finalize(module)
        module.hash = content_hash(module.content)
        return module.hash

    def finalize(self, module: ModuleDescriptor) -> None:
        """Apply all rewrites of a module, finalizing its targets first."""
        if module.state is not ModuleState.PENDING:
            return

        module.state = ModuleState.REWRITING
        edges = module.resolved_imports
        if edges:
            self._rewrite(module, edges)
        module.state = ModuleState.FINAL

    def _rewrite(self, module: ModuleDescriptor, edges: list[ImportEdge]) -> None:
        logger = get_logger()
        logger.info(f"Found imports in {module.name}, adding new version hash..")

        content = module.content
        delta = 0

        # Spans refer to the original content; shift each by earlier edits
        for edge in sorted(edges, key=lambda e: e.start):
            version = self.hash_for(self.graph.target_of(edge))

            start = edge.start + delta
            end = edge.end + delta
            old = content[start:end]
            new = versioned_specifier(edge, version).encode("utf-8")

            content = content[:start] + new + content[end:]
            delta += len(new) - len(old)

            if edge.version != version:
                logger.debug(f"  {edge.specifier} -> {new.decode('utf-8')}")

        module.content = content
