"""Error codes and error handling utilities for ghostty-styles."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum, auto
from pathlib import Path
from typing import Any


class ErrorCode(Enum):
    """Standardized error codes for ghostty-styles operations."""

    # Input errors
    INVALID_INPUT = auto()

    # Precondition errors
    EMPTY_COLLECTION = auto()
    NO_ACTIVE_COLLECTION = auto()
    COLLECTION_NOT_FOUND = auto()
    COLLECTION_EXISTS = auto()
    NO_INTERVAL = auto()

    # Daemon lifecycle errors
    ALREADY_RUNNING = auto()
    NOT_RUNNING = auto()
    STALE_LOCK = auto()
    CORRUPT_PID_FILE = auto()

    # Storage errors
    IO_ERROR = auto()
    SERIALIZATION_ERROR = auto()
    APPLY_FAILED = auto()


ERROR_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.INVALID_INPUT: "The value could not be parsed.",

    ErrorCode.EMPTY_COLLECTION: "The collection has no themes.",
    ErrorCode.NO_ACTIVE_COLLECTION: "No active collection. Run: ghostty-styles collection use <name>",
    ErrorCode.COLLECTION_NOT_FOUND: "The collection does not exist.",
    ErrorCode.COLLECTION_EXISTS: "A collection with that name already exists.",
    ErrorCode.NO_INTERVAL: "The collection has no interval set. Set one before starting the daemon.",

    ErrorCode.ALREADY_RUNNING: "The daemon is already running. Stop it first with: ghostty-styles cycle stop",
    ErrorCode.NOT_RUNNING: "No daemon is running.",
    ErrorCode.STALE_LOCK: "A stale PID file was found and removed.",
    ErrorCode.CORRUPT_PID_FILE: "The PID file is corrupt. Delete it and try again.",

    ErrorCode.IO_ERROR: "A file could not be read or written. Check permissions.",
    ErrorCode.SERIALIZATION_ERROR: "A stored file is not valid JSON.",
    ErrorCode.APPLY_FAILED: "The theme could not be written to the Ghostty config.",
}


@dataclass
class GhosttyStylesError(Exception):
    """Base exception for ghostty-styles with error code and context."""

    code: ErrorCode
    message: str = ""
    path: Path | None = None
    details: dict[str, Any] = field(default_factory=dict)
    suggestion: str = ""

    def __post_init__(self) -> None:
        if not self.message:
            self.message = ERROR_MESSAGES.get(self.code, "An unexpected error occurred.")
        if not self.suggestion and self.code in ERROR_MESSAGES:
            self.suggestion = ERROR_MESSAGES[self.code]

    def __str__(self) -> str:
        parts = [self.message]
        if self.path:
            parts.append(f"\nFile: {self.path}")
        if self.details:
            details_str = " | ".join(f"{k}={v}" for k, v in self.details.items())
            parts.append(f"\nDetails: {details_str}")
        return "".join(parts)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        return {
            "code": self.code.name,
            "message": self.message,
            "path": str(self.path) if self.path else None,
            "details": self.details,
            "suggestion": self.suggestion,
        }


def classify_exception(exc: Exception, path: Path | None = None) -> GhosttyStylesError:
    """Classify a generic exception into a GhosttyStylesError with appropriate code."""
    if isinstance(exc, GhosttyStylesError):
        return exc
    exc_name = type(exc).__name__
    exc_str = str(exc)

    if isinstance(exc, (json.JSONDecodeError, UnicodeDecodeError)):
        return GhosttyStylesError(
            ErrorCode.SERIALIZATION_ERROR,
            message=f"Could not parse stored data: {exc_str}",
            path=path,
            details={"original": exc_name},
        )
    if isinstance(exc, OSError):
        return GhosttyStylesError(
            ErrorCode.IO_ERROR,
            message=f"{exc_name}: {exc.strerror or exc_str}",
            path=path,
            details={"original": exc_str},
        )
    if isinstance(exc, ValueError):
        return GhosttyStylesError(
            ErrorCode.INVALID_INPUT,
            message=exc_str or ERROR_MESSAGES[ErrorCode.INVALID_INPUT],
            path=path,
        )

    return GhosttyStylesError(
        ErrorCode.IO_ERROR,
        message=f"{exc_name}: {exc}",
        path=path,
        details={"original": exc_str},
    )


def format_error_for_user(error: GhosttyStylesError | Exception) -> str:
    """Format an error for display on the command line."""
    if isinstance(error, GhosttyStylesError):
        parts = [error.message]
        if error.suggestion and error.suggestion != error.message:
            parts.append(f"\n  hint: {error.suggestion}")
        if error.path:
            parts.append(f"\n  file: {error.path}")
        return "".join(parts)

    classified = classify_exception(error)
    return format_error_for_user(classified)
