"""Console output and log setup for cachebust.

Log records (per-file progress, excludes, cycles) go to stderr through a
RichHandler. Command results go to stdout through ``console``.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Literal

from rich.console import Console
from rich.logging import RichHandler

if TYPE_CHECKING:
    from cachebust.build import BuildResult

Verbosity = Literal["quiet", "normal", "verbose"]

console = Console()
err_console = Console(stderr=True)

LOGGER_NAME = "cachebust"

LOG_LEVELS: dict[str, int] = {
    "quiet": logging.ERROR,
    "normal": logging.INFO,
    "verbose": logging.DEBUG,
}


def setup_logging(verbosity: Verbosity = "normal") -> logging.Logger:
    """Route the cachebust logger to stderr at the level for verbosity.

    Calling it again replaces the previous handler, so the CLI can be
    invoked repeatedly in one process.
    """
    verbose = verbosity == "verbose"
    logger = get_logger()
    logger.handlers.clear()
    logger.setLevel(LOG_LEVELS[verbosity])
    logger.propagate = False

    handler = RichHandler(
        console=err_console,
        show_time=verbose,
        show_path=verbose,
        show_level=verbose,
        markup=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    return logger


def get_logger() -> logging.Logger:
    return logging.getLogger(LOGGER_NAME)


def print_error(message: str) -> None:
    """Print an error message to stderr."""
    err_console.print(f"[red]Error:[/red] {message}")


def print_warning(message: str) -> None:
    err_console.print(f"[yellow]Warning:[/yellow] {message}")


def print_success(message: str) -> None:
    console.print(f"[green]{message}[/green]")


def print_info(message: str) -> None:
    console.print(message)


def print_build_summary(result: BuildResult, elapsed_ms: int) -> None:
    """Report a finished build: changed and skipped files, then totals.

    The totals line is green for a clean build and yellow when some files
    were copied without import processing.
    """
    if result.modified or result.skipped:
        console.rule("cachebust", style="dim")
    for entry in result.modified:
        console.print(f"  [cyan]{entry.path}[/cyan] modified")
    for skipped in result.skipped:
        console.print(f"  [yellow]{skipped['path']}[/yellow] skipped: {skipped['reason']}")

    style = "yellow" if result.errors else "green"
    console.print(
        f"[{style}]Built {len(result.entries)} files "
        f"({len(result.modified)} modified) in {elapsed_ms}ms.[/{style}]"
    )
