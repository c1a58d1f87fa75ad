"""
Configuration management for BuildID.

Provides centralized, type-safe configuration with environment variable overrides
and sensible defaults for the extractor, the package locator and the task runner.
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv
from pydantic import BaseModel, Field

# Load .env file if it exists (looks in cwd and parent directories)
load_dotenv()

MANIFEST_ENTRY = "META-INF/MANIFEST.MF"
DEX_MARKER = "classes.dex"
SHA1_DIGEST_PREFIX = "SHA1-Digest: "


class ExtractorConfig(BaseModel):
    """Manifest digest extraction settings."""

    manifest_entry: str = Field(default=MANIFEST_ENTRY, min_length=1, description="Manifest member name")
    target_marker: str = Field(default=DEX_MARKER, min_length=1, description="Marker of the section to read")
    digest_prefix: str = Field(
        default=SHA1_DIGEST_PREFIX, min_length=1, description="Header that introduces the digest line"
    )
    encoding: str = Field(default="utf-8", description="Manifest text encoding")


class LocatorConfig(BaseModel):
    """Package archive lookup settings."""

    search_paths: list[Path] = Field(
        default_factory=lambda: [Path("/data/app")],
        description="Directories holding installed package archives",
    )
    archive_name: str = Field(default="base.apk", description="Archive file name inside a package directory")


class TaskConfig(BaseModel):
    """Background extraction settings."""

    max_workers: int = Field(default=1, ge=1, description="Worker threads for extraction tasks")
    notify_absence: bool = Field(
        default=False, description="Report failed extractions to callbacks that accept them"
    )


class Config(BaseModel):
    """Root configuration for BuildID."""

    project_name: str = Field(default="BuildID", description="Project identifier")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", description="Logging level"
    )
    extractor: ExtractorConfig = Field(default_factory=ExtractorConfig)
    locator: LocatorConfig = Field(default_factory=LocatorConfig)
    task: TaskConfig = Field(default_factory=TaskConfig)

    model_config = {"extra": "ignore"}

    @classmethod
    def from_env(cls) -> Config:
        """Create configuration from environment variables."""
        search_paths = os.environ.get("BUILDID_SEARCH_PATHS")
        locator = LocatorConfig()
        if search_paths:
            locator = LocatorConfig(
                search_paths=[Path(p).expanduser() for p in search_paths.split(os.pathsep) if p],
            )

        return cls(
            log_level=os.environ.get("BUILDID_LOG_LEVEL", "INFO"),  # type: ignore
            extractor=ExtractorConfig(
                manifest_entry=os.environ.get("BUILDID_MANIFEST_ENTRY", MANIFEST_ENTRY),
                target_marker=os.environ.get("BUILDID_TARGET_MARKER", DEX_MARKER),
                digest_prefix=os.environ.get("BUILDID_DIGEST_PREFIX", SHA1_DIGEST_PREFIX),
            ),
            locator=locator,
            task=TaskConfig(
                max_workers=os.environ.get("BUILDID_MAX_WORKERS", "1"),  # type: ignore
                notify_absence=os.environ.get("BUILDID_NOTIFY_ABSENCE", "false").lower() == "true",
            ),
        )


@lru_cache(maxsize=1)
def get_config() -> Config:
    """Get cached configuration instance."""
    return Config.from_env()
