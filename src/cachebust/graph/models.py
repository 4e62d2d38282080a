"""Module descriptors and the owned path -> descriptor graph."""

from __future__ import annotations

import os
from collections.abc import Iterator
from enum import Enum
from pathlib import Path
from typing import Any

from cachebust.errors import EmitError
from cachebust.parser.models import EdgeStatus, ImportEdge


class ModuleState(Enum):
    """Rewrite progress of a module."""

    PENDING = "pending"
    REWRITING = "rewriting"
    FINAL = "final"


class ModuleDescriptor:
    """One source module participating in the import graph.

    Created once per discovered file and mutated in place while the build
    extracts, levels, hashes and rewrites it.
    """

    def __init__(
        self,
        path: Path,
        source_root: Path,
        output_root: Path | None = None,
        index: int = 0,
    ) -> None:
        # Absolute but not symlink-resolved: a linked file keeps its place
        # in the tree even when it points outside of it
        root = source_root.resolve()
        absolute = Path(os.path.abspath(path))
        try:
            self.relative_path = absolute.relative_to(root)
        except ValueError:
            self.relative_path = absolute.relative_to(os.path.abspath(source_root))
        self.path = root / self.relative_path
        self.output_path = (
            output_root.resolve() / self.relative_path if output_root else self.path
        )
        self.index = index

        self.imports: list[ImportEdge] = []
        self.importers: dict[Path, None] = {}  # Ordered set of importer paths
        self.level = 0
        self.hash: str | None = None
        self.parse_error: str | None = None
        self.state = ModuleState.PENDING

        self._content: bytes | None = None
        self._original: bytes | None = None

    def __repr__(self) -> str:
        return f"ModuleDescriptor({self.relative_path.as_posix()!r}, level={self.level})"

    @property
    def name(self) -> str:
        """POSIX path relative to the source root."""
        return self.relative_path.as_posix()

    @property
    def content(self) -> bytes:
        """Current content, read from disk on first access."""
        if self._content is None:
            try:
                self._content = self.path.read_bytes()
            except OSError as e:
                raise EmitError(f"Failed to read {self.path}: {e}", file_path=str(self.path)) from e
            self._original = self._content
        return self._content

    @content.setter
    def content(self, value: bytes) -> None:
        if self._original is None:
            self._original = self.content
        self._content = value

    @property
    def modified(self) -> bool:
        """True once the content differs from what was read."""
        return self._content is not None and self._content != self._original

    @property
    def resolved_imports(self) -> list[ImportEdge]:
        return [edge for edge in self.imports if edge.status is EdgeStatus.RESOLVED]

    def add_importer(self, importer: Path) -> None:
        """Record a module importing this one (deduplicated)."""
        self.importers.setdefault(importer, None)

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": self.name,
            "level": self.level,
            "hash": self.hash,
            "modified": self.modified,
            "imports": [edge.to_dict() for edge in self.imports],
            "importers": [str(p) for p in self.importers],
            "parse_error": self.parse_error,
        }


class ModuleGraph:
    """Mapping from absolute path to module descriptor, in discovery order."""

    def __init__(self) -> None:
        self._modules: dict[Path, ModuleDescriptor] = {}

    def add(self, module: ModuleDescriptor) -> ModuleDescriptor:
        self._modules[module.path] = module
        return module

    def get(self, path: Path) -> ModuleDescriptor | None:
        return self._modules.get(path)

    def __getitem__(self, path: Path) -> ModuleDescriptor:
        return self._modules[path]

    def target_of(self, edge: ImportEdge) -> ModuleDescriptor:
        """Descriptor a resolved edge points at."""
        module = self._modules.get(edge.target) if edge.target is not None else None
        if module is None:
            raise KeyError(f"Import {edge.specifier!r} is not resolved to a module")
        return module

    def __iter__(self) -> Iterator[ModuleDescriptor]:
        return iter(sorted(self._modules.values(), key=lambda m: m.index))

    def __len__(self) -> int:
        return len(self._modules)
