"""Application-level holder for the build signature."""

from __future__ import annotations

from concurrent.futures import Executor, Future

from ..core.config import Config
from ..services.digest import DigestExtractor
from ..services.locator import ArchiveSource
from .task import Dispatch, SignatureTask

UNKNOWN_SIGNATURE = "unknown"


class BuildIdentity:
    """Keeps the signature of the running build.

    Starts out as ``"unknown"`` and is replaced once an extraction succeeds.
    A failed extraction leaves the current value untouched.
    """

    def __init__(
        self,
        locator: ArchiveSource | None = None,
        extractor: DigestExtractor | None = None,
        executor: Executor | None = None,
        config: Config | None = None,
    ) -> None:
        self._signature = UNKNOWN_SIGNATURE
        self._task = SignatureTask(
            self,
            locator=locator,
            extractor=extractor,
            executor=executor,
            notify_absence=False,
            config=config,
        )

    @property
    def signature(self) -> str:
        return self._signature

    @property
    def is_known(self) -> bool:
        return self._signature != UNKNOWN_SIGNATURE

    def on_signature(self, signature: str) -> None:
        self._signature = signature

    def start(self, app_id: str, dispatch: Dispatch | None = None) -> Future[str | None]:
        """Launch the extraction in the background."""
        return self._task.execute(app_id, dispatch=dispatch)

    async def load(self, app_id: str) -> str:
        """Run the extraction and return the resulting signature."""
        await self._task.run(app_id)
        return self.signature
