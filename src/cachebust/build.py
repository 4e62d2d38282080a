"""Build driver: walk, extract, link, level, rewrite and emit a source tree."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from cachebust.config import DEFAULT_EXTENSIONS, BuildConfig
from cachebust.emit import Emitter
from cachebust.errors import CacheBustError, ConfigError, ExitCode, ParseError
from cachebust.graph.builder import GraphBuilder
from cachebust.graph.levels import ReferenceLevelResolver
from cachebust.graph.models import ModuleDescriptor, ModuleGraph
from cachebust.logging import get_logger
from cachebust.parser import extract_imports
from cachebust.rewriter import RewriteEngine
from cachebust.scanner import is_excluded, walk_tree


@dataclass
class BuildEntry:
    """Outcome for one file in the source tree."""

    path: str
    modified: bool

    def to_dict(self) -> dict[str, Any]:
        return {"path": self.path, "modified": self.modified}


class BuildResult:
    """Result of building a source tree."""

    def __init__(self) -> None:
        self.entries: list[BuildEntry] = []
        self.skipped: list[dict[str, Any]] = []
        self.errors: list[CacheBustError] = []

    @property
    def modified(self) -> list[BuildEntry]:
        return [entry for entry in self.entries if entry.modified]

    @property
    def exit_code(self) -> ExitCode:
        """Determine exit code based on results."""
        if not self.errors:
            return ExitCode.SUCCESS
        if any(e.exit_code == ExitCode.FATAL_ERROR for e in self.errors):
            return ExitCode.FATAL_ERROR
        return ExitCode.PARTIAL_SUCCESS

    def add_entry(self, path: str, modified: bool) -> None:
        self.entries.append(BuildEntry(path=path, modified=modified))

    def add_skipped(self, file_path: str, reason: str) -> None:
        """Mark a file as copied without import processing."""
        self.skipped.append({"path": file_path, "reason": reason})

    def add_error(self, error: CacheBustError) -> None:
        self.errors.append(error)

    def to_dict(self) -> dict[str, Any]:
        return {
            "exit_code": self.exit_code,
            "files": [e.to_dict() for e in self.entries],
            "modified": len(self.modified),
            "skipped": self.skipped,
            "errors": [e.to_dict() for e in self.errors],
        }


class TreeBuild:
    """One build run over a source tree.

    Owns the module graph for the duration of the run and hands it to the
    graph builder, level resolver and rewrite engine in turn.
    """

    def __init__(
        self,
        source_root: Path,
        output_root: Path | None = None,
        excludes: Sequence[str] = (),
        extensions: Sequence[str] = DEFAULT_EXTENSIONS,
        clean: bool = False,
    ) -> None:
        self.source_root = source_root.resolve()
        self.output_root = output_root.resolve() if output_root else None
        self.excludes = list(excludes)
        self.extensions = {ext.lower() for ext in extensions}
        self.clean = clean
        self.graph = ModuleGraph()

    @classmethod
    def from_config(cls, config: BuildConfig, clean: bool = False) -> TreeBuild:
        return cls(
            source_root=config.sourcedir,
            output_root=config.outputdir,
            excludes=config.excludes,
            extensions=config.extensions,
            clean=clean or config.clean_output,
        )

    def run(self) -> BuildResult:
        """Run the build.

        Raises:
            ConfigError: If the source root does not exist (before any write).
            EmitError: If a file cannot be read or written.
        """
        logger = get_logger()

        if not self.source_root.is_dir():
            raise ConfigError(
                f"Source directory not found: {self.source_root}",
                source_root=str(self.source_root),
            )

        emitter = Emitter(self.source_root, self.output_root)
        if self.clean:
            emitter.clean()

        logger.info(f"Start processing files from {self.source_root}")
        result = BuildResult()
        discovered = self._discover(result)

        GraphBuilder(self.source_root, self.excludes).build(self.graph)
        resolver = ReferenceLevelResolver(self.graph)
        resolver.resolve()
        RewriteEngine(self.graph).run(resolver.processing_order())

        for path, module in discovered:
            relative = path.relative_to(self.source_root).as_posix()
            if module is not None and module.modified:
                emitter.write(module)
                result.add_entry(relative, True)
            else:
                emitter.copy(path)
                result.add_entry(relative, False)

        if self.output_root:
            logger.info(f"Finished outputting all files to {self.output_root}")

        return result

    def _discover(self, result: BuildResult) -> list[tuple[Path, ModuleDescriptor | None]]:
        """Walk the tree and create a descriptor per source module."""
        logger = get_logger()
        discovered: list[tuple[Path, ModuleDescriptor | None]] = []

        for path in walk_tree(self.source_root):
            if self._in_output(path):
                continue

            relative = path.relative_to(self.source_root).as_posix()
            if path.suffix.lower() not in self.extensions or is_excluded(relative, self.excludes):
                discovered.append((path, None))
                continue

            module = self.graph.add(
                ModuleDescriptor(path, self.source_root, self.output_root, index=len(self.graph))
            )
            try:
                module.imports = extract_imports(module.content, module.name)
            except ParseError as e:
                module.parse_error = e.message
                logger.warning(f"{e.message} (line {e.line}), copying unmodified")
                result.add_skipped(module.name, e.message)
                result.add_error(e)

            discovered.append((path, module))

        return discovered

    def _in_output(self, path: Path) -> bool:
        """True for files inside an output root nested in the source root."""
        return self.output_root is not None and self.output_root in path.parents


def build_tree(
    source_root: Path,
    output_root: Path | None = None,
    exclude_patterns: Sequence[str] = (),
    extensions: Sequence[str] = DEFAULT_EXTENSIONS,
) -> list[BuildEntry]:
    """Build a source tree and return one entry per file."""
    return TreeBuild(source_root, output_root, exclude_patterns, extensions).run().entries
