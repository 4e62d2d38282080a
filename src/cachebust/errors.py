"""Error handling framework for cachebust."""

from __future__ import annotations

from enum import IntEnum
from typing import Any


class ExitCode(IntEnum):
    """cachebust CLI exit codes."""

    SUCCESS = 0
    CONFIG_ERROR = 1  # Missing config or source root (user fixable)
    PARTIAL_SUCCESS = 2  # Some files copied without import processing
    FATAL_ERROR = 3  # I/O failure or unexpected crash


class CacheBustError(Exception):
    """Base exception for cachebust errors."""

    exit_code: ExitCode = ExitCode.FATAL_ERROR

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context = context

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for JSON output."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "exit_code": self.exit_code,
            **self.context,
        }


class ConfigError(CacheBustError):
    """Configuration-related errors."""

    exit_code = ExitCode.CONFIG_ERROR


class ParseError(CacheBustError):
    """Import syntax could not be parsed in a single file."""

    exit_code = ExitCode.PARTIAL_SUCCESS

    def __init__(self, message: str, file_path: str, line: int | None = None, **context: Any):
        super().__init__(message, file_path=file_path, line=line, **context)
        self.file_path = file_path
        self.line = line


class EmitError(CacheBustError):
    """Reading or writing a file failed; aborts the build."""

    exit_code = ExitCode.FATAL_ERROR

    def __init__(self, message: str, file_path: str, **context: Any):
        super().__init__(message, file_path=file_path, **context)
        self.file_path = file_path
