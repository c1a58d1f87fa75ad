"""Services package for BuildID."""

from .digest import DigestExtractor, extract_digest
from .locator import ArchiveSource, PackageLocator

__all__ = [
    "DigestExtractor",
    "extract_digest",
    "ArchiveSource",
    "PackageLocator",
]
