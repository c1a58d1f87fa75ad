"""
Custom exception hierarchy for BuildID.

All exceptions inherit from BuildIdError to enable consistent error handling.
Each exception type includes context for debugging and logging.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class BuildIdError(Exception):
    """Base exception for all BuildID errors."""

    message: str
    context: dict[str, Any] = field(default_factory=dict)
    cause: Exception | None = None

    def __str__(self) -> str:
        ctx = f" | context: {self.context}" if self.context else ""
        cause = f" | caused by: {self.cause}" if self.cause else ""
        return f"{self.message}{ctx}{cause}"


@dataclass
class ValidationError(BuildIdError):
    """Raised when an argument is unusable."""

    field_name: str | None = None
    actual_value: Any = None

    def __str__(self) -> str:
        base = super().__str__()
        if self.field_name:
            return f"Validation failed for '{self.field_name}': {base}"
        return f"Validation failed: {base}"


@dataclass
class ArchiveError(BuildIdError):
    """Raised when a package archive or its manifest cannot be read.

    ``reason`` holds the ExtractionFailure value describing which step failed.
    """

    archive_path: str = ""
    reason: str = ""

    def __str__(self) -> str:
        base = super().__str__()
        return f"[{self.reason}] {self.archive_path}: {base}"


@dataclass
class ResolutionError(BuildIdError):
    """Raised when an application identifier maps to no archive."""

    app_id: str = ""
    search_paths: list[str] = field(default_factory=list)

    def __str__(self) -> str:
        roots = ", ".join(self.search_paths) or "<none>"
        return f"No archive for '{self.app_id}' under {roots}: {self.message}"
