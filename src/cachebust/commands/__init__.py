"""cachebust CLI commands - Subcommand implementations."""

from cachebust.commands.build import build
from cachebust.commands.init_cmd import init

__all__ = ["build", "init"]
