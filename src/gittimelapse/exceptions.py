"""gittimelapse exceptions."""

from pathlib import Path
from typing import Any


class TimelapseError(Exception):
    """Base exception for gittimelapse errors."""


# =============================================================================
# Repository Exceptions
# =============================================================================


class RepositoryError(TimelapseError):
    """Base exception for repository access errors."""


class RepositoryNotFoundError(RepositoryError):
    """Raised when no git repository encloses the starting directory.

    Attributes:
        path: The directory the search started from.
    """

    def __init__(self, message: str, *, path: Path | None = None) -> None:
        """Initialize with error message and search start.

        Args:
            message: Human-readable error message.
            path: The directory the search started from.
        """
        super().__init__(message)
        self.path: Path | None = path


class NoSuchRevisionError(RepositoryError, KeyError):
    """Raised when a revision name or commit id cannot be resolved.

    Attributes:
        revision: The revision name or id that failed to resolve.
    """

    def __init__(self, message: str, *, revision: str) -> None:
        """Initialize with error message and revision context."""
        super().__init__(message)
        self.revision: str = revision

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the message readable.
        return str(self.args[0]) if self.args else ""


class PathOutsideRepositoryError(RepositoryError, ValueError):
    """Raised when a path does not lie inside the repository root.

    Attributes:
        path: The offending path.
        root: The repository root the path was checked against.
    """

    def __init__(
        self,
        message: str,
        *,
        path: Path | str,
        root: Path | None = None,
    ) -> None:
        """Initialize with error message and path context."""
        super().__init__(message)
        self.path: Path | str = path
        self.root: Path | None = root


class PathNotFoundInCommitError(RepositoryError):
    """Raised when a path does not name a file in a commit's tree.

    Attributes:
        path: The repository-relative path.
        commit: The commit id whose tree was searched.
    """

    def __init__(self, message: str, *, path: str, commit: str) -> None:
        """Initialize with error message, path and commit."""
        super().__init__(message)
        self.path: str = path
        self.commit: str = commit


# =============================================================================
# Patch Exceptions
# =============================================================================


class PatchError(TimelapseError):
    """Base exception for diff parsing and patch application errors."""


class InvalidPatchShapeError(PatchError):
    """Raised when a diff does not describe exactly one file.

    Attributes:
        file_count: Number of file sections found in the diff.
    """

    def __init__(self, message: str, *, file_count: int) -> None:
        """Initialize with error message and file count."""
        super().__init__(message)
        self.file_count: int = file_count


class MalformedHunkError(PatchError):
    """Raised when a hunk header or body is invalid or out of range.

    Attributes:
        header: The hunk header line, when known.
        line_number: Line number within the diff text or buffer, when known.
    """

    def __init__(
        self,
        message: str,
        *,
        header: str | None = None,
        line_number: int | None = None,
    ) -> None:
        """Initialize with error message and hunk context."""
        super().__init__(message)
        self.header: str | None = header
        self.line_number: int | None = line_number


class HunkApplyMismatchError(PatchError):
    """Raised when a hunk's context or removed line differs from the buffer.

    Attributes:
        line_number: Zero-based buffer row where the mismatch was found.
        expected: Line text the hunk expected.
        actual: Line text present in the buffer.
    """

    def __init__(
        self,
        message: str,
        *,
        line_number: int,
        expected: str,
        actual: str,
    ) -> None:
        """Initialize with error message and mismatch details."""
        super().__init__(message)
        self.line_number: int = line_number
        self.expected: str = expected
        self.actual: str = actual


# =============================================================================
# Configuration Exceptions
# =============================================================================


class ConfigError(TimelapseError):
    """Base exception for configuration errors."""


class ConfigLoadError(ConfigError):
    """Raised when configuration cannot be loaded or parsed."""

    def __init__(
        self,
        message: str,
        *,
        path: Path | None = None,
        line: int | None = None,
        column: int | None = None,
    ) -> None:
        """Initialize with error message and optional location context."""
        super().__init__(message)
        self.path: Path | None = path
        self.line: int | None = line
        self.column: int | None = column


class ConfigValidationError(ConfigError):
    """Raised when configuration fails validation."""

    def __init__(
        self,
        message: str,
        *,
        key: str,
        value: Any,  # pyright: ignore[reportAny,reportExplicitAny]
        expected: str,
        source: str | None = None,
    ) -> None:
        """Initialize with error message and validation context."""
        super().__init__(message)
        self.key: str = key
        self.value: Any = value  # pyright: ignore[reportExplicitAny]
        self.expected: str = expected
        self.source: str | None = source
