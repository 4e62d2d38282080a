"""cachebust CLI - Content-hash versioning for ES module imports."""

from __future__ import annotations

from typing import Literal

from dotenv import load_dotenv

# Load .env file before any other imports that might use env vars
load_dotenv()

import click  # noqa: E402

from cachebust import __version__  # noqa: E402
from cachebust.commands.build import build  # noqa: E402
from cachebust.commands.init_cmd import init  # noqa: E402

VerbosityLevel = Literal["quiet", "normal", "verbose"]


class CacheBustContext:
    """Shared context for CLI commands."""

    def __init__(self) -> None:
        self.verbosity: VerbosityLevel = "normal"
        self.debug: bool = False


pass_context = click.make_pass_decorator(CacheBustContext, ensure=True)


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
@click.option("-q", "--quiet", is_flag=True, help="Suppress non-error output")
@click.option("--debug", is_flag=True, help="Show full tracebacks on errors")
@click.version_option(version=__version__, prog_name="cachebust")
@pass_context
def cli(ctx: CacheBustContext, verbose: bool, quiet: bool, debug: bool) -> None:
    """cachebust - Version ES module imports with content hashes.

    \b
    Commands:
      build    Rewrite imports as <path>?v=<hash> and emit the tree
      init     Create a default buildconfig.json

    Use 'cachebust <command> --help' for details.
    """
    from cachebust.logging import setup_logging

    ctx.debug = debug

    if quiet:
        ctx.verbosity = "quiet"
    elif verbose:
        ctx.verbosity = "verbose"
    else:
        ctx.verbosity = "normal"

    setup_logging(ctx.verbosity)


cli.add_command(build)
cli.add_command(init)


def main() -> None:
    """Entry point for the CLI."""
    import sys

    debug_mode = "--debug" in sys.argv

    try:
        cli()
    except click.ClickException:
        raise
    except KeyboardInterrupt:
        sys.exit(130)
    except Exception as e:
        from cachebust.errors import ExitCode
        from cachebust.logging import print_error, print_info

        print_error(f"Error: {e}")

        if debug_mode:
            print_info("")
            print_info("Full traceback (--debug mode):")
            import traceback

            traceback.print_exc()
        else:
            print_info("")
            print_info("Run with --debug for full traceback.")

        sys.exit(ExitCode.FATAL_ERROR)


if __name__ == "__main__":
    main()
