"""Core infrastructure components for BuildID."""

from .config import Config, get_config
from .exceptions import (
    ArchiveError,
    BuildIdError,
    ResolutionError,
    ValidationError,
)
from .logging import get_logger, setup_logging
from .types import ServiceResult

__all__ = [
    "Config",
    "get_config",
    "ArchiveError",
    "BuildIdError",
    "ResolutionError",
    "ValidationError",
    "get_logger",
    "setup_logging",
    "ServiceResult",
]
