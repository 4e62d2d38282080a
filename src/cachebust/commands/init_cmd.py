"""cachebust init command - Create a default buildconfig.json."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import TYPE_CHECKING

import click

if TYPE_CHECKING:
    from cachebust.cli import CacheBustContext


@click.command()
@click.argument("path", type=click.Path(file_okay=False, path_type=Path), default=".")
@click.option("--force", "-f", is_flag=True, help="Overwrite existing buildconfig.json")
@click.pass_obj
def init(ctx: CacheBustContext, path: Path, force: bool) -> None:
    """Create a buildconfig.json with sensible defaults in PATH."""
    from cachebust.config import DEFAULT_CONFIG_FILE, get_default_config_json
    from cachebust.errors import ExitCode
    from cachebust.logging import print_error, print_info, print_success, print_warning

    config_path = path / DEFAULT_CONFIG_FILE

    if config_path.exists() and not force:
        print_warning(f"Configuration file already exists: {config_path}")
        print_info("Use --force to overwrite")
        sys.exit(ExitCode.CONFIG_ERROR)

    try:
        path.mkdir(parents=True, exist_ok=True)
        config_path.write_text(get_default_config_json(), encoding="utf-8")
    except PermissionError:
        print_error(f"Permission denied: {config_path}")
        sys.exit(ExitCode.CONFIG_ERROR)
    except OSError as e:
        print_error(f"Failed to create config file: {e}")
        sys.exit(ExitCode.FATAL_ERROR)

    print_success(f"Created {config_path}")
    print_info("\nNext steps:")
    print_info(f"  1. Edit {DEFAULT_CONFIG_FILE} to point at your source directory")
    print_info("  2. Run 'cachebust build' to version your imports")


__all__ = ["init"]
