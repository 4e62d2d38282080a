"""cachebust build command - Rewrite imports and emit the source tree."""

from __future__ import annotations

import sys
import time
from pathlib import Path
from typing import TYPE_CHECKING

import click

if TYPE_CHECKING:
    from cachebust.cli import CacheBustContext


@click.command("build")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Path to the config file (default: ./buildconfig.json)",
)
@click.option("--clean", "-d", is_flag=True, help="Remove all existing files in output folder")
@click.option(
    "--source",
    "-s",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Source directory (overrides sourcedir)",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Output directory (overrides outputdir)",
)
@click.option(
    "--exclude",
    "-e",
    multiple=True,
    help="Additional exclude glob (repeatable)",
)
@click.option("--json", "as_json", is_flag=True, help="Print the build summary as JSON")
@click.pass_obj
def build(
    ctx: CacheBustContext,
    config_path: Path | None,
    clean: bool,
    source: Path | None,
    output: Path | None,
    exclude: tuple[str, ...],
    as_json: bool,
) -> None:
    """Version relative and absolute imports with content hashes.

    Every import of a module in the source tree is rewritten to
    '<path>?v=<md5 of the module>'. Imported modules are rewritten before
    the modules importing them, so hashes cover the final content.
    """
    import json

    from cachebust.build import TreeBuild
    from cachebust.config import BuildConfig
    from cachebust.errors import CacheBustError
    from cachebust.logging import print_build_summary, print_error

    start_time = time.perf_counter()

    try:
        config = BuildConfig.load(
            config_path,
            sourcedir=source.resolve() if source else None,
            outputdir=output.resolve() if output else None,
        )
        config.excludes.extend(exclude)
        result = TreeBuild.from_config(config, clean=clean).run()
    except CacheBustError as e:
        print_error(e.message)
        if ctx.debug:
            import traceback

            traceback.print_exc()
        sys.exit(e.exit_code)

    elapsed_ms = round((time.perf_counter() - start_time) * 1000)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(result.exit_code)

    if ctx.verbosity != "quiet":
        print_build_summary(result, elapsed_ms)

    sys.exit(result.exit_code)


__all__ = ["build"]
