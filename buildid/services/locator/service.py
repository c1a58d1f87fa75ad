"""
Package Locator Service.

Maps an application identifier to the archive files installed for it.
"""

from __future__ import annotations

import glob
from pathlib import Path
from typing import Protocol, runtime_checkable

from ...core.config import LocatorConfig
from ...core.exceptions import ResolutionError, ValidationError
from ...core.logging import get_logger

logger = get_logger(__name__)


@runtime_checkable
class ArchiveSource(Protocol):
    """Anything that can list candidate archives for an application."""

    def find_archives(self, app_id: str) -> list[Path]: ...


class PackageLocator:
    """Finds installed package archives under a set of search roots.

    For each root the following layouts are recognised, in this order:

    - ``<root>/<app_id>-<suffix>/<archive_name>`` (Android install directories)
    - ``<root>/<app_id>/<archive_name>``
    - ``<root>/<app_id>.apk``
    """

    def __init__(self, config: LocatorConfig | None = None) -> None:
        """Initialize the locator.

        Args:
            config: Search roots and archive file name
        """
        self.config = config or LocatorConfig()

    @property
    def search_paths(self) -> list[Path]:
        return list(self.config.search_paths)

    def find_archives(self, app_id: str) -> list[Path]:
        """List archive files for an application.

        Args:
            app_id: Application identifier, e.g. ``com.example.app``

        Returns:
            Candidate paths, roots in configured order, without duplicates

        Raises:
            ValidationError: If ``app_id`` is empty or contains a path separator
        """
        self._validate(app_id)
        name = self.config.archive_name

        found: list[Path] = []
        for root in self.config.search_paths:
            if not root.is_dir():
                logger.debug("Skipping missing search path", root=str(root))
                continue

            candidates = sorted(root.glob(f"{glob.escape(app_id)}-*/{glob.escape(name)}"))
            candidates.append(root / app_id / name)
            candidates.append(root / f"{app_id}.apk")
            for candidate in candidates:
                if candidate.is_file() and candidate not in found:
                    found.append(candidate)

        return found

    def require_archives(self, app_id: str) -> list[Path]:
        """Like find_archives, but an empty result is an error.

        Raises:
            ResolutionError: If no archive exists for ``app_id``
        """
        candidates = self.find_archives(app_id)
        if not candidates:
            raise ResolutionError(
                message="no matching archive",
                app_id=app_id,
                search_paths=[str(p) for p in self.config.search_paths],
            )
        return candidates

    def resolve(self, app_id: str) -> Path | None:
        """Pick the archive to read for an application, see resolve_first."""
        return resolve_first(self, app_id)

    @staticmethod
    def _validate(app_id: str) -> None:
        if not app_id:
            raise ValidationError(message="must not be empty", field_name="app_id", actual_value=app_id)
        if "/" in app_id or "\\" in app_id or app_id in (".", ".."):
            raise ValidationError(
                message="must not contain path separators",
                field_name="app_id",
                actual_value=app_id,
            )


def resolve_first(source: ArchiveSource, app_id: str) -> Path | None:
    """Pick the archive to read for an application from any ArchiveSource.

    No candidate is an error and yields None. Several candidates log a
    warning and the first one is used.
    """
    candidates = source.find_archives(app_id)
    if not candidates:
        logger.error("Package archive not found", app_id=app_id)
        return None

    if len(candidates) > 1:
        logger.warning("Too many package archives", app_id=app_id, count=len(candidates))

    return Path(candidates[0])
