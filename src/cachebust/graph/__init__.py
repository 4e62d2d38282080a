"""cachebust graph - Module descriptors, edge resolution and reference levels."""

from cachebust.graph.builder import GraphBuilder
from cachebust.graph.levels import ReferenceLevelResolver
from cachebust.graph.models import ModuleDescriptor, ModuleGraph, ModuleState

__all__ = [
    "GraphBuilder",
    "ReferenceLevelResolver",
    "ModuleDescriptor",
    "ModuleGraph",
    "ModuleState",
]
