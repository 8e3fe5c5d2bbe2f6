"""CLI error handling for assetter-cli.

Translates assetter-core exceptions and pydantic validation errors into
user-facing messages and exit codes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, NoReturn

import click
from pydantic import ValidationError as PydanticValidationError

from assetter_cli.output import error

if TYPE_CHECKING:
    from pydantic_core import ErrorDetails

    from assetter_core.errors import AssetterError


# Exit codes following sysexits.h convention
EXIT_SUCCESS = 0
EXIT_USER_ERROR = 1  # Compile failure, invalid config, nothing to do with --strict
EXIT_SYSTEM_ERROR = 2  # Missing file, permissions


class CLIError(click.ClickException):
    """CLI-specific exception with exit code support.

    Attributes:
        message: User-facing error message.
        exit_code: Exit code for the CLI (default: 1).
    """

    def __init__(self, message: str, exit_code: int = EXIT_USER_ERROR) -> None:
        super().__init__(message)
        self.exit_code = exit_code

    def show(self, file: object = None) -> None:
        """Display the error message using Rich formatting.

        Args:
            file: Output file (unused, for Click compatibility).
        """
        error(self.format_message())


def format_pydantic_error(err: PydanticValidationError) -> str:
    """Format a pydantic ValidationError as one line per failing field.

    Example:
        >>> format_pydantic_error(err)
        "Validation failed:\\n  - maps: Input tag 'external' found using 'kind' ..."
    """
    errors: list[ErrorDetails] = err.errors()
    lines = ["Validation failed:"]
    for e in errors:
        loc = ".".join(str(x) for x in e["loc"]) or "(root)"
        lines.append(f"  - {loc}: {e['msg']}")
    return "\n".join(lines)


def handle_assetter_error(err: AssetterError) -> NoReturn:
    """Raise a CLIError for an assetter-core exception.

    For a failed compile the backend message follows the safe message.

    Raises:
        CLIError: Always, with exit code 1.
    """
    from assetter_core.errors import CompilationError

    message = err.user_message
    if isinstance(err, CompilationError) and err.__cause__ is not None:
        message = f"{message}\n{err.__cause__}"
    raise CLIError(message) from err


def handle_validation_error(err: PydanticValidationError) -> NoReturn:
    """Raise a CLIError listing every invalid option.

    Raises:
        CLIError: Always, with exit code 1.
    """
    raise CLIError(f"Invalid options:\n{format_pydantic_error(err)}") from err


def handle_file_not_found(file_path: str) -> NoReturn:
    """Raise a CLIError for a missing input or config file.

    Raises:
        CLIError: Always, with exit code 2.
    """
    raise CLIError(f"File not found: {file_path}", exit_code=EXIT_SYSTEM_ERROR)


def handle_permission_error(path: str, operation: str = "access") -> NoReturn:
    """Raise a CLIError for a permission failure.

    Raises:
        CLIError: Always, with exit code 2.
    """
    raise CLIError(
        f"Permission denied: Cannot {operation} {path}",
        exit_code=EXIT_SYSTEM_ERROR,
    )
