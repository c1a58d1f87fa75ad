"""Data models for BuildID."""

from .manifest import DigestRecord, ExtractionFailure, ScanState

__all__ = ["DigestRecord", "ExtractionFailure", "ScanState"]
