"""Emit stage: writes rewritten modules and copies everything else."""

from __future__ import annotations

import shutil
from pathlib import Path

from cachebust.errors import ConfigError, EmitError
from cachebust.graph.models import ModuleDescriptor
from cachebust.logging import get_logger


class Emitter:
    """Writes build output, mirroring the source directory structure.

    Without an output root, modules are rewritten in place and unmodified
    files are left alone.
    """

    def __init__(self, source_root: Path, output_root: Path | None = None) -> None:
        self.source_root = source_root.resolve()
        self.output_root = output_root.resolve() if output_root else None

    def output_path_for(self, path: Path) -> Path:
        if self.output_root is None:
            return path
        return self.output_root / path.relative_to(self.source_root)

    def clean(self) -> None:
        """Remove the output directory.

        Raises:
            ConfigError: If the output root would remove the source tree.
        """
        if self.output_root is None:
            return

        if self.output_root == self.source_root or self.output_root in self.source_root.parents:
            raise ConfigError(
                f"Refusing to clean {self.output_root}: it contains the source directory",
                output_root=str(self.output_root),
            )

        if self.output_root.exists():
            get_logger().info(f"Remove existing files from {self.output_root}")
            try:
                shutil.rmtree(self.output_root)
            except OSError as e:
                raise EmitError(
                    f"Failed to clean {self.output_root}: {e}", file_path=str(self.output_root)
                ) from e

    def write(self, module: ModuleDescriptor) -> Path:
        """Write a module's final content to its output path."""
        target = module.output_path
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(module.content)
        except OSError as e:
            raise EmitError(f"Failed to write {target}: {e}", file_path=str(target)) from e

        get_logger().info(f"{self._display(target)} written modified")
        return target

    def copy(self, path: Path) -> Path | None:
        """Copy a file unchanged into the output tree (no-op in place)."""
        if self.output_root is None:
            return None

        target = self.output_path_for(path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(path, target)
        except OSError as e:
            raise EmitError(f"Failed to copy {path} to {target}: {e}", file_path=str(path)) from e

        get_logger().debug(f"{self._display(target)} copied unmodified")
        return target

    def _display(self, path: Path) -> str:
        root = self.output_root or self.source_root
        try:
            return path.relative_to(root).as_posix()
        except ValueError:
            return str(path)
