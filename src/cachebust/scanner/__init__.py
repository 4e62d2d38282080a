"""cachebust scanner - Source tree walking and exclude matching."""

from __future__ import annotations

import os
from fnmatch import fnmatch
from pathlib import Path

from cachebust.logging import get_logger


def is_excluded(relative_path: str, patterns: list[str]) -> bool:
    """Check a POSIX path (relative to the source root) against exclude globs.

    Patterns ending with '/' match a directory name anywhere in the path.
    A leading '**/' also matches at the root.
    """
    for pattern in patterns:
        if pattern.endswith("/"):
            dir_pattern = pattern.rstrip("/")
            if any(fnmatch(part, dir_pattern) for part in relative_path.split("/")[:-1]):
                return True
        elif fnmatch(relative_path, pattern):
            return True
        elif pattern.startswith("**/") and fnmatch(relative_path, pattern[3:]):
            return True
    return False


def walk_tree(root: Path) -> list[Path]:
    """Return all files under root as absolute paths, in sorted walk order."""
    root = root.resolve()
    files: list[Path] = []

    for dirpath, dirnames, filenames in os.walk(root):
        dirnames.sort()
        current_dir = Path(dirpath)
        for filename in sorted(filenames):
            files.append(current_dir / filename)

    get_logger().debug(f"Found {len(files)} files under {root}")
    return files


__all__ = ["is_excluded", "walk_tree"]
