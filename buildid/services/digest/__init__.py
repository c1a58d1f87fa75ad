"""Manifest digest extraction."""

from .scan import ScanStep, advance, scan_manifest
from .service import DigestExtractor, extract_digest

__all__ = ["DigestExtractor", "extract_digest", "ScanStep", "advance", "scan_manifest"]
