"""Exception hierarchy for assetter-core.

This module defines the exception classes used throughout the pipeline:
- AssetterError: Base exception for all assetter errors
- ConfigurationError: Raised when options or assetter.yaml are invalid
- RegistryError: Raised when a compiler registration cannot be completed
- CompilationError: Raised when a compiler backend fails on an input
- CacheError: Raised when a cached artifact cannot be deserialized

Skipped inputs (unsupported extension, already minified, output equal to
input, pattern mismatch) are not errors and never raise.

User-facing messages are safe to display; technical details are logged
through structlog and never become part of the message.
"""

from __future__ import annotations

from pathlib import Path

import structlog

logger = structlog.get_logger(__name__)


class AssetterError(Exception):
    """Base exception for assetter.

    Args:
        user_message: Safe message to display to the user.
        internal_details: Optional technical details for logging. This is
            logged internally but never exposed in the message.

    Example:
        >>> raise AssetterError(
        ...     "Compilation failed",
        ...     internal_details="libsass: Invalid CSS after 'a {': expected '}'"
        ... )
    """

    def __init__(
        self,
        user_message: str,
        *,
        internal_details: str | None = None,
    ) -> None:
        """Initialize AssetterError with user message and optional internal details.

        Args:
            user_message: Safe message to display to the user.
            internal_details: Technical details for internal logging only.
        """
        super().__init__(user_message)
        self.user_message = user_message
        self.internal_details = internal_details

        if internal_details:
            logger.error(
                "assetter_error",
                error_type=self.__class__.__name__,
                user_message=user_message,
                internal_details=internal_details,
            )


class ConfigurationError(AssetterError):
    """Raised when transpile options or an assetter.yaml file are invalid.

    Attributes:
        file_path: Path to the configuration file (if known).
        field_path: Dot-separated path to the invalid field (e.g., "maps.aliases").

    Example:
        >>> raise ConfigurationError(
        ...     "Invalid map policy",
        ...     file_path="assetter.yaml",
        ...     field_path="maps",
        ... )
    """

    def __init__(
        self,
        user_message: str,
        *,
        file_path: str | None = None,
        field_path: str | None = None,
        internal_details: str | None = None,
    ) -> None:
        """Initialize ConfigurationError with context.

        Args:
            user_message: Safe message to display to the user.
            file_path: Path to the configuration file (optional).
            field_path: Dot-separated path to the field (optional).
            internal_details: Technical details for internal logging only.
        """
        context_parts: list[str] = []
        if file_path:
            context_parts.append(f"in {file_path}")
        if field_path:
            context_parts.append(f"field '{field_path}'")

        if context_parts:
            full_message = f"{user_message} ({', '.join(context_parts)})"
        else:
            full_message = user_message

        super().__init__(full_message, internal_details=internal_details)

        self.file_path = file_path
        self.field_path = field_path


class RegistryError(AssetterError):
    """Raised when the compiler registry rejects a registration.

    Use this exception when:
    - A partial descriptor has no existing entry to inherit from
    - The registry has been frozen by a running pipeline
    """

    pass


class CompilationError(AssetterError):
    """Raised when a compiler backend fails on an input file.

    The backend exception is chained as ``__cause__``. A single
    failing input fails the whole combine operation.

    Attributes:
        input_path: The alt file that failed to compile.
        duration_ms: Wall-clock time spent before the failure.
    """

    def __init__(
        self,
        input_path: Path | str,
        *,
        duration_ms: int = 0,
        internal_details: str | None = None,
    ) -> None:
        """Initialize CompilationError.

        Args:
            input_path: The alt file that failed to compile.
            duration_ms: Elapsed time in milliseconds.
            internal_details: Backend error text for internal logging only.
        """
        super().__init__(
            f"Failed to compile {Path(input_path).name}",
            internal_details=internal_details,
        )
        self.input_path = Path(input_path)
        self.duration_ms = duration_ms


class CacheError(AssetterError):
    """Raised when a cached artifact exists but cannot be deserialized.

    Only raised by ``CacheStore.load(strict=True)``; the pipeline itself
    treats a corrupt cache file as a cache miss.

    Attributes:
        cache_path: Path of the unreadable cache file.
    """

    def __init__(
        self,
        cache_path: Path | str,
        *,
        internal_details: str | None = None,
    ) -> None:
        super().__init__(
            f"Corrupt cache entry {Path(cache_path).name}",
            internal_details=internal_details,
        )
        self.cache_path = Path(cache_path)
