"""Engine lifecycle manager — owns the single codec engine handle.

The manager loads the engine lazily and at most once at a time.  It is
responsible for:

* Memoising a successful load.
* Collapsing concurrent :meth:`EngineLifecycleManager.ensure_ready`
  calls onto the single in-flight load.
* Registering the diagnostic log and progress sinks.
* Translating load failures into
  :class:`~vidshrink.exceptions.EngineLoadError`.

Guarantees
----------
* No retry on failure; the next ``ensure_ready()`` call starts a fresh
  attempt.
* Never reports ready after a failed load.
"""

from __future__ import annotations

import asyncio
import logging

from vidshrink.core.models import EngineStatus
from vidshrink.core.protocols import CodecEngine
from vidshrink.exceptions import EngineLoadError

logger = logging.getLogger(__name__)


class EngineLifecycleManager:
    """Process-wide owner of one :class:`CodecEngine`.

    Parameters
    ----------
    engine:
        Any object satisfying the :class:`CodecEngine` protocol.  It must
        not have been loaded yet.
    """

    def __init__(self, engine: CodecEngine) -> None:
        self._engine: CodecEngine = engine
        self._status: EngineStatus = EngineStatus.UNINITIALIZED
        self._load_task: asyncio.Task[None] | None = None

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def status(self) -> EngineStatus:
        return self._status

    @property
    def is_ready(self) -> bool:
        return self._status is EngineStatus.READY

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def ensure_ready(self) -> CodecEngine:
        """Return the loaded engine, loading it first when necessary.

        Cancelling one caller does not cancel the shared load; the other
        callers still see its outcome.

        Raises
        ------
        EngineLoadError
            When the load awaited by this call fails.
        """
        if self._status is EngineStatus.READY:
            return self._engine

        if self._load_task is None or self._load_task.done():
            self._status = EngineStatus.LOADING
            self._load_task = asyncio.ensure_future(self._load())
            self._load_task.add_done_callback(self._consume_outcome)

        task = self._load_task
        try:
            await asyncio.shield(task)
        finally:
            if task.done() and self._load_task is task:
                self._load_task = None
        return self._engine

    async def dispose(self) -> None:
        """Terminate a loaded engine and return to ``UNINITIALIZED``."""
        if self._status is not EngineStatus.READY:
            return
        self._remove_sinks()
        await self._engine.terminate()
        self._status = EngineStatus.UNINITIALIZED
        logger.debug("Codec engine disposed")

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _load(self) -> None:
        logger.info("Loading codec engine")

        self._engine.on("log", self._log_sink)
        self._engine.on("progress", self._progress_sink)
        try:
            await self._engine.load()
        except asyncio.CancelledError:
            self._remove_sinks()
            self._status = EngineStatus.UNINITIALIZED
            logger.info("Codec engine load cancelled")
            raise
        except Exception as exc:
            self._remove_sinks()
            self._status = EngineStatus.FAILED
            logger.warning("Codec engine failed to load: %s", exc)
            if isinstance(exc, EngineLoadError):
                raise
            raise EngineLoadError(
                f"Failed to load the codec engine: {exc}",
                hint="Check the ffmpeg installation, then try again.",
            ) from exc

        self._status = EngineStatus.READY
        logger.info("Codec engine ready")

    def _remove_sinks(self) -> None:
        self._engine.off("log", self._log_sink)
        self._engine.off("progress", self._progress_sink)

    @staticmethod
    def _consume_outcome(task: asyncio.Task[None]) -> None:
        # Mark the error retrieved when every caller was cancelled.
        if not task.cancelled():
            task.exception()

    @staticmethod
    def _log_sink(line: str) -> None:
        logger.debug("[engine] %s", line)

    @staticmethod
    def _progress_sink(fraction: float) -> None:
        logger.debug("[engine] progress %.3f", fraction)
