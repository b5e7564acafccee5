"""Exception hierarchy shared by the CLI, the API and the worker pool."""

from __future__ import annotations

from collections.abc import Sequence


class ConversionError(Exception):
    """Base error for anything that stops a file or a whole run from converting."""

    exit_code: int = 1


class TemplateError(ConversionError):
    """Raised when an output path template cannot be compiled."""


class ToolNotFoundError(ConversionError):
    """Raised when an external converter is missing from ``PATH``."""

    def __init__(self, tool: str) -> None:
        super().__init__(f'executable "{tool}" not found in $PATH')
        self.tool = tool


class WalkError(ConversionError):
    """Raised when the directory walk hits a filesystem error."""


class TagFormatError(ConversionError):
    """Raised when tag-export output contains a line without ``=``."""


class ProcessError(ConversionError):
    """Raised when an external process exits with a non-zero status."""

    def __init__(self, argv: Sequence[str], returncode: int) -> None:
        self.argv = tuple(argv)
        self.returncode = returncode
        if returncode < 0:
            detail = f"killed by signal {-returncode}"
        else:
            detail = f"exit status {returncode}"
        super().__init__(f"{self.argv[0]}: {detail}")


class CancelledError(ConversionError):
    """Raised when work is interrupted by a cancelled token."""

    exit_code = 130

    def __init__(self, message: str = "operation cancelled") -> None:
        super().__init__(message)


class QueueClosedError(ConversionError):
    """Raised by a closed work queue."""


class PluginError(Exception):
    """Raised for plugin registration, lookup and loading problems."""
