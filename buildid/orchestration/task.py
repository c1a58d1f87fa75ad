"""
Background signature extraction.

A SignatureTask resolves an application's archive and reads its digest on a
worker thread, then reports the result to a callback on the caller's
completion context.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol

from ..core.config import Config, get_config
from ..core.logging import bind_context, clear_context, get_logger
from ..models.manifest import ExtractionFailure
from ..services.digest import DigestExtractor
from ..services.locator import ArchiveSource, PackageLocator, resolve_first

logger = get_logger(__name__)

Dispatch = Callable[..., Any]


class SignatureCallback(Protocol):
    """Receives the digest of a successful extraction.

    A callback may also define ``on_absent(reason)``; it is only called when
    the task is created with ``notify_absence=True``.
    """

    def on_signature(self, signature: str) -> None: ...


@dataclass(frozen=True)
class TaskOutcome:
    """What one extraction attempt produced."""

    app_id: str
    digest: str | None = None
    reason: ExtractionFailure | None = None
    archive_path: Path | None = None

    @property
    def success(self) -> bool:
        return self.digest is not None


class SignatureTask:
    """One-shot locate-and-extract job for an application.

    The task keeps no state between runs; each run makes a single attempt.
    """

    def __init__(
        self,
        callback: SignatureCallback,
        locator: ArchiveSource | None = None,
        extractor: DigestExtractor | None = None,
        executor: Executor | None = None,
        notify_absence: bool | None = None,
        config: Config | None = None,
    ) -> None:
        """Initialize the task.

        Args:
            callback: Receiver of the digest
            locator: Source of candidate archives, defaults to a PackageLocator
            extractor: Digest extractor, defaults to one built from config
            executor: Executor for the blocking work; ``run`` falls back to the
                loop's default executor and ``execute`` to a private pool
            notify_absence: Report failures to ``callback.on_absent``
            config: Configuration, defaults to the cached environment config
        """
        cfg = config or get_config()
        self.callback = callback
        self.locator: ArchiveSource = locator or PackageLocator(cfg.locator)
        self.extractor = extractor or DigestExtractor(cfg.extractor)
        self.notify_absence = cfg.task.notify_absence if notify_absence is None else notify_absence
        self._executor = executor
        self._max_workers = cfg.task.max_workers

    def work(self, app_id: str) -> TaskOutcome:
        """Resolve and extract synchronously. Never raises."""
        bind_context(app_id=app_id)
        try:
            return self._work(app_id)
        finally:
            clear_context()

    def _work(self, app_id: str) -> TaskOutcome:
        try:
            archive = resolve_first(self.locator, app_id)
        except Exception as e:
            logger.error("Package lookup failed", app_id=app_id, error=str(e))
            archive = None

        if archive is None:
            return TaskOutcome(app_id=app_id, reason=ExtractionFailure.NOT_RESOLVED)

        result = self.extractor.extract(archive)
        if result.success and result.data:
            return TaskOutcome(app_id=app_id, digest=result.data.digest, archive_path=archive)
        return TaskOutcome(app_id=app_id, reason=result.metadata.get("reason"), archive_path=archive)

    async def run(self, app_id: str) -> str | None:
        """Extract on a worker thread and deliver on the awaiting event loop.

        Returns:
            The digest, or None
        """
        loop = asyncio.get_running_loop()
        outcome = await loop.run_in_executor(self._executor, self.work, app_id)
        self.deliver(outcome)
        return outcome.digest

    def execute(self, app_id: str, dispatch: Dispatch | None = None) -> Future[str | None]:
        """Submit the extraction to a thread pool.

        Args:
            app_id: Application identifier
            dispatch: Schedules the callback on the completion context, called
                as ``dispatch(fn, outcome)``; ``loop.call_soon_threadsafe`` fits.
                Without it the callback runs on the worker thread.

        Returns:
            Future resolving to the digest or None
        """

        def job() -> str | None:
            outcome = self.work(app_id)
            if dispatch is None:
                self.deliver(outcome)
            else:
                dispatch(self.deliver, outcome)
            return outcome.digest

        if self._executor is not None:
            return self._executor.submit(job)

        pool = ThreadPoolExecutor(max_workers=self._max_workers, thread_name_prefix="buildid")
        try:
            return pool.submit(job)
        finally:
            # Already submitted work still runs to completion.
            pool.shutdown(wait=False)

    def deliver(self, outcome: TaskOutcome) -> None:
        """Hand an outcome to the callback. Callback errors are logged only."""
        try:
            if outcome.digest is not None:
                self.callback.on_signature(outcome.digest)
            elif self.notify_absence:
                on_absent = getattr(self.callback, "on_absent", None)
                if on_absent is not None:
                    on_absent(outcome.reason)
        except Exception as e:
            logger.error("Signature callback failed", app_id=outcome.app_id, error=str(e))
