"""
Manifest-related data models.

A signed package archive carries a textual manifest listing one section per
packaged file. Each section names the file and records its digest on the
following line, for example::

    Name: classes.dex
    SHA1-Digest: AbCdEf123==
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class ScanState(str, Enum):
    """Position of the manifest scan."""

    SEEKING = "seeking"
    FOUND_MARKER = "found_marker"


class ExtractionFailure(str, Enum):
    """Why no digest was produced."""

    NOT_RESOLVED = "not_resolved"
    ARCHIVE_UNREADABLE = "archive_unreadable"
    ENTRY_MISSING = "entry_missing"
    READ_FAILED = "read_failed"
    MARKER_NOT_FOUND = "marker_not_found"
    DIGEST_NOT_FOLLOWING = "digest_not_following"


class DigestRecord(BaseModel):
    """A target marker and the digest recorded directly after it."""

    target_marker: str = Field(description="Marker found in the section name line")
    digest: str = Field(description="Digest value with the header prefix removed")
    archive_path: str | None = Field(default=None, description="Archive the record was read from")
    manifest_entry: str | None = Field(default=None, description="Manifest member the record was read from")
