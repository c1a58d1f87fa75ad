"""
Two-state scan over manifest lines.

The scan looks for the first line containing the target marker. The line right
after it decides the outcome: it either carries the digest header or the scan
gives up. Later sections are never consulted.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from ...models.manifest import ExtractionFailure, ScanState


@dataclass(frozen=True)
class ScanStep:
    """Result of feeding one line (or end of input) to the scan."""

    state: ScanState
    finished: bool = False
    digest: str | None = None

    @property
    def failure(self) -> ExtractionFailure | None:
        """Reason for a finished scan without a digest."""
        if self.digest is not None:
            return None
        if self.state is ScanState.SEEKING:
            return ExtractionFailure.MARKER_NOT_FOUND
        return ExtractionFailure.DIGEST_NOT_FOLLOWING


def advance(state: ScanState, line: str, target_marker: str, digest_prefix: str) -> ScanStep:
    """Apply one manifest line to the scan.

    Args:
        state: Current scan state
        line: Manifest line without its terminator
        target_marker: Substring identifying the section of interest
        digest_prefix: Header that must open the line after the marker

    Returns:
        The next step. A step from FOUND_MARKER is always finished.
    """
    if state is ScanState.SEEKING:
        if target_marker in line:
            return ScanStep(state=ScanState.FOUND_MARKER)
        return ScanStep(state=ScanState.SEEKING)

    if line.startswith(digest_prefix):
        return ScanStep(state=state, finished=True, digest=line[len(digest_prefix):])
    return ScanStep(state=state, finished=True)


def scan_manifest(lines: Iterable[str], target_marker: str, digest_prefix: str) -> ScanStep:
    """Run the scan over a line sequence.

    Lines are consumed lazily and consumption stops at the first finished step,
    so a reader behind ``lines`` is never read past the digest line.

    Args:
        lines: Manifest lines without terminators
        target_marker: Substring identifying the section of interest
        digest_prefix: Header that must open the line after the marker

    Returns:
        A finished ScanStep. ``digest`` is None when no record was found.
    """
    step = ScanStep(state=ScanState.SEEKING)
    for line in lines:
        step = advance(step.state, line, target_marker, digest_prefix)
        if step.finished:
            return step
    return ScanStep(state=step.state, finished=True)
