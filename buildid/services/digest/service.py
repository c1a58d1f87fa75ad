"""
Digest Extraction Service.

Opens a package archive, reads its manifest member and returns the digest
recorded for the target marker. Every failure is absorbed into an absent result.
"""

from __future__ import annotations

import io
import os
import time
import zipfile
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import IO, Any, Protocol

from ...core.config import DEX_MARKER, MANIFEST_ENTRY, SHA1_DIGEST_PREFIX, ExtractorConfig
from ...core.exceptions import ArchiveError, ValidationError
from ...core.logging import get_logger
from ...core.types import ServiceResult
from ...models.manifest import DigestRecord, ExtractionFailure
from .scan import ScanStep, scan_manifest

logger = get_logger(__name__)

PathLike = str | os.PathLike[str]


class Archive(Protocol):
    """The part of ``zipfile.ZipFile`` the extractor relies on."""

    def open(self, name: str) -> IO[bytes]: ...

    def close(self) -> None: ...


ArchiveOpener = Callable[[Path], Archive]


@contextmanager
def _closing_quietly(resource: Any, kind: str) -> Iterator[Any]:
    """Close ``resource`` once on exit, suppressing errors raised by close."""
    try:
        yield resource
    finally:
        try:
            resource.close()
        except Exception as e:
            logger.debug("Ignoring close failure", resource=kind, error=str(e))


def _require(value: str, field_name: str) -> str:
    if not value:
        raise ValidationError(
            message="must be a non-empty string",
            field_name=field_name,
            actual_value=value,
        )
    return value


class DigestExtractor:
    """Reads the digest of one packaged file from an archive manifest.

    Each call owns its archive handle and manifest stream; nothing is shared
    between calls, so one extractor may serve several threads.
    """

    def __init__(
        self,
        config: ExtractorConfig | None = None,
        opener: ArchiveOpener | None = None,
    ) -> None:
        """Initialize the extractor.

        Args:
            config: Default manifest entry, marker, prefix and encoding
            opener: Callable returning an open archive for a path
        """
        self.config = config or ExtractorConfig()
        self._opener: ArchiveOpener = opener or zipfile.ZipFile

    def extract(
        self,
        archive_path: PathLike,
        manifest_entry: str | None = None,
        target_marker: str | None = None,
        digest_prefix: str | None = None,
    ) -> ServiceResult[DigestRecord]:
        """Extract the digest record from an archive.

        Args:
            archive_path: Path to a zip-format archive
            manifest_entry: Manifest member name, defaults to config
            target_marker: Section marker, defaults to config
            digest_prefix: Digest header prefix, defaults to config

        Returns:
            ServiceResult with the DigestRecord, or a failed result whose
            ``metadata["reason"]`` is an ExtractionFailure
        """
        entry = _require(self._pick(manifest_entry, self.config.manifest_entry), "manifest_entry")
        marker = _require(self._pick(target_marker, self.config.target_marker), "target_marker")
        prefix = _require(self._pick(digest_prefix, self.config.digest_prefix), "digest_prefix")
        path = Path(archive_path)

        start_time = time.perf_counter()
        try:
            step = self._read(path, entry, marker, prefix)
        except ArchiveError as e:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.error(
                e.message,
                archive=str(path),
                entry=entry,
                reason=e.reason,
                error=str(e.cause) if e.cause else None,
            )
            return ServiceResult.fail(
                str(e),
                reason=ExtractionFailure(e.reason),
                duration_ms=duration_ms,
            )

        duration_ms = (time.perf_counter() - start_time) * 1000
        if step.digest is None:
            reason = step.failure
            logger.debug("No digest record in manifest", archive=str(path), marker=marker, reason=reason.value)
            return ServiceResult.fail(
                f"No '{prefix.strip()}' line after '{marker}' in {entry}",
                reason=reason,
                duration_ms=duration_ms,
            )

        record = DigestRecord(
            target_marker=marker,
            digest=step.digest,
            archive_path=str(path),
            manifest_entry=entry,
        )
        logger.debug("Extracted digest", archive=str(path), marker=marker, duration_ms=duration_ms)
        return ServiceResult.ok(record, duration_ms=duration_ms)

    def extract_digest(
        self,
        archive_path: PathLike,
        manifest_entry: str | None = None,
        target_marker: str | None = None,
        digest_prefix: str | None = None,
    ) -> str | None:
        """Extract the digest value, or None when it cannot be found."""
        result = self.extract(archive_path, manifest_entry, target_marker, digest_prefix)
        return result.data.digest if result.success and result.data else None

    @staticmethod
    def _pick(value: str | None, default: str) -> str:
        return default if value is None else value

    def _read(self, path: Path, entry: str, marker: str, prefix: str) -> ScanStep:
        """Open the archive and manifest and run the scan.

        Raises:
            ArchiveError: If the archive, the entry or the stream cannot be read
        """
        try:
            archive = self._opener(path)
        except Exception as e:
            raise ArchiveError(
                message="Failed opening archive",
                archive_path=str(path),
                reason=ExtractionFailure.ARCHIVE_UNREADABLE.value,
                cause=e,
            )

        with _closing_quietly(archive, "archive"):
            try:
                stream = archive.open(entry)
            except KeyError as e:
                raise ArchiveError(
                    message="Manifest entry not found",
                    archive_path=str(path),
                    reason=ExtractionFailure.ENTRY_MISSING.value,
                    cause=e,
                )
            except Exception as e:
                raise ArchiveError(
                    message="Failed opening manifest",
                    archive_path=str(path),
                    reason=ExtractionFailure.READ_FAILED.value,
                    cause=e,
                )

            with _closing_quietly(stream, "manifest"):
                try:
                    return self._scan(stream, marker, prefix)
                except Exception as e:
                    raise ArchiveError(
                        message="Failed reading manifest",
                        archive_path=str(path),
                        reason=ExtractionFailure.READ_FAILED.value,
                        cause=e,
                    )

    def _scan(self, stream: IO[bytes], marker: str, prefix: str) -> ScanStep:
        """Scan the manifest as text.

        Lines end at CR, LF or CRLF and undecodable bytes become U+FFFD. The
        wrapper is detached afterwards so only the caller closes ``stream``.
        """
        text = io.TextIOWrapper(stream, encoding=self.config.encoding, errors="replace", newline=None)
        try:
            return scan_manifest((line.rstrip("\n") for line in text), marker, prefix)
        finally:
            text.detach()


def extract_digest(
    archive_path: PathLike,
    manifest_entry_name: str = MANIFEST_ENTRY,
    target_marker: str = DEX_MARKER,
    digest_header_prefix: str = SHA1_DIGEST_PREFIX,
) -> str | None:
    """Return the digest recorded after ``target_marker`` in an archive manifest.

    Never raises for unreadable archives or malformed manifests; those yield None.

    Args:
        archive_path: Path to a zip-format archive
        manifest_entry_name: Manifest member inside the archive
        target_marker: Substring of the line that opens the wanted section
        digest_header_prefix: Prefix of the digest line directly after it

    Returns:
        The digest string, or None
    """
    return DigestExtractor().extract_digest(
        archive_path,
        manifest_entry=manifest_entry_name,
        target_marker=target_marker,
        digest_prefix=digest_header_prefix,
    )
