"""Package archive lookup."""

from .service import ArchiveSource, PackageLocator, resolve_first

__all__ = ["ArchiveSource", "PackageLocator", "resolve_first"]
