"""Core session controller — drives one compression run.

This service owns the session state machine and the lifetime of every
resource a run creates.  It is responsible for:

* Rejecting a run while another one is active.
* Staging the source bytes, running the engine job with the fixed
  argument template, and reading back the output.
* Publishing :data:`~vidshrink.core.models.SessionState` snapshots to
  subscribers.
* Releasing engine files, the progress observer and stale result
  handles on every exit path.
* Ensuring only :class:`~vidshrink.exceptions.VidshrinkError`
  subclasses escape.

Guarantees
----------
* No ``print()``, no direct filesystem access — bytes move through the
  engine and the resource store only.
* One engine job at a time.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable
from pathlib import Path

from vidshrink.core.engine_manager import EngineLifecycleManager
from vidshrink.core.models import (
    Completed,
    Encoding,
    Failed,
    Idle,
    QualityPreset,
    SessionState,
    SourceAsset,
    Staging,
    TranscodeResult,
)
from vidshrink.core.protocols import CodecEngine, ResourceStore
from vidshrink.exceptions import EncodingError, EngineLoadError, InvalidInputError

logger = logging.getLogger(__name__)

INPUT_NAME: str = "input.mp4"
OUTPUT_NAME: str = "output.mp4"
OUTPUT_MIME_TYPE: str = "video/mp4"

StateListener = Callable[[SessionState], None]


class TranscodeSessionController:
    """Runs compression sessions against a shared engine.

    Parameters
    ----------
    manager:
        Lifecycle manager owning the codec engine.
    resources:
        Store that turns result bytes into downloadable handles.
    """

    def __init__(
        self,
        manager: EngineLifecycleManager,
        resources: ResourceStore,
    ) -> None:
        self._manager = manager
        self._resources = resources
        self._state: SessionState = Idle()
        self._progress: int | None = None
        self._active: bool = False
        self._asset: SourceAsset | None = None
        self._result: TranscodeResult | None = None
        self._listeners: list[StateListener] = []

    # ------------------------------------------------------------------
    # Pure helpers
    # ------------------------------------------------------------------

    @staticmethod
    def build_exec_args(preset: QualityPreset) -> list[str]:
        """Return the engine argument list for *preset*."""
        return [
            "-i", INPUT_NAME,
            "-vcodec", "libx264",
            "-crf", str(preset.crf),
            "-preset", "fast",
            "-movflags", "+faststart",
            OUTPUT_NAME,
        ]

    @staticmethod
    def download_filename(source_name: str) -> str:
        return f"compressed_{source_name}"

    @staticmethod
    def to_percent(fraction: float) -> int:
        """Convert an engine fraction to a whole percentage (half-up, 0–100)."""
        return max(0, min(100, math.floor(fraction * 100 + 0.5)))

    # ------------------------------------------------------------------
    # Observable state
    # ------------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def progress(self) -> int | None:
        """Latest published percentage; ``None`` before any report."""
        return self._progress

    @property
    def is_active(self) -> bool:
        return self._active

    @property
    def asset(self) -> SourceAsset | None:
        return self._asset

    @property
    def result(self) -> TranscodeResult | None:
        return self._result

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register *listener* for state snapshots; returns an unsubscriber."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ------------------------------------------------------------------
    # Selection / result lifetime
    # ------------------------------------------------------------------

    def select_asset(self, asset: SourceAsset) -> None:
        """Replace the current selection, releasing any previous result.

        Raises
        ------
        InvalidInputError
            When a session is active.
        """
        if self._active:
            raise InvalidInputError("Cannot change the file while compressing.")
        self._release_result()
        self._asset = asset
        self._progress = None
        self._publish(Idle())

    def export(self, destination_dir: Path) -> Path:
        """Write the current result to ``destination_dir/compressed_<name>``.

        Raises
        ------
        InvalidInputError
            When there is no result to export.
        """
        if self._result is None:
            raise InvalidInputError(
                "Nothing to save yet.",
                hint="Run a compression first.",
            )
        target = destination_dir / self._result.download_name
        return self._resources.save(self._result.handle, target)

    def dispose(self) -> None:
        """Release the current result handle."""
        self._release_result()

    def _release_result(self) -> None:
        if self._result is not None:
            logger.debug("Revoking result handle %s", self._result.handle)
            self._resources.revoke(self._result.handle)
            self._result = None

    # ------------------------------------------------------------------
    # Session
    # ------------------------------------------------------------------

    async def run_session(
        self,
        asset: SourceAsset | None,
        preset: QualityPreset,
    ) -> TranscodeResult:
        """Compress *asset* with *preset* and return the result.

        Raises
        ------
        InvalidInputError
            Session already active, no asset, or an empty asset.  State is
            left untouched.
        EngineLoadError
            The engine could not be loaded.  State becomes ``Failed``.
        EncodingError
            Staging, the job, or reading the output failed.  State becomes
            ``Failed`` and progress reads 0.
        """
        if self._active:
            raise InvalidInputError("A compression is already running.")
        if asset is None:
            raise InvalidInputError(
                "No file selected.",
                hint="Choose a video file first.",
            )
        if asset.size <= 0:
            raise InvalidInputError(f"'{asset.name}' is empty.")

        self._active = True
        try:
            self._asset = asset
            return await self._run(asset, preset)
        finally:
            self._active = False

    async def _run(self, asset: SourceAsset, preset: QualityPreset) -> TranscodeResult:
        self._release_result()
        self._progress = None

        try:
            engine = await self._manager.ensure_ready()
        except EngineLoadError as exc:
            self._publish(Failed(exc))
            raise

        logger.info("Compressing %s (%d bytes) with preset %s", asset.name, asset.size, preset.label)
        try:
            result = await self._transcode(engine, asset, preset)
        except Exception as exc:
            if isinstance(exc, EncodingError):
                error = exc
            else:
                error = EncodingError(
                    f"Compression failed: {exc}",
                    hint="Check that the file is a valid video, then try again.",
                )
                error.__cause__ = exc
            self._progress = 0
            self._publish(Failed(error))
            logger.warning("Compression of %s failed: %s", asset.name, exc)
            if error is exc:
                raise
            raise error from exc

        self._result = result
        self._progress = 100
        self._publish(Completed(result))
        logger.info("Compressed %s to %d bytes", asset.name, result.size)
        return result

    async def _transcode(
        self,
        engine: CodecEngine,
        asset: SourceAsset,
        preset: QualityPreset,
    ) -> TranscodeResult:
        def observe(fraction: float) -> None:
            if isinstance(self._state, Encoding):
                self._progress = self.to_percent(fraction)
                self._publish(Encoding(self._progress))

        self._publish(Staging())
        engine.on("progress", observe)
        try:
            await engine.write_file(INPUT_NAME, asset.data)

            self._publish(Encoding())
            exit_code = await engine.exec(self.build_exec_args(preset))
            if exit_code != 0:
                raise EncodingError(
                    f"ffmpeg exited with code {exit_code}",
                    hint="Run with -v to see the ffmpeg log.",
                )

            data = await engine.read_file(OUTPUT_NAME)
            handle = self._resources.create(data, mime_type=OUTPUT_MIME_TYPE)
            return TranscodeResult(
                data=data,
                size=len(data),
                handle=handle,
                download_name=self.download_filename(asset.name),
                mime_type=OUTPUT_MIME_TYPE,
            )
        finally:
            engine.off("progress", observe)
            await self._delete_quietly(engine, INPUT_NAME)
            await self._delete_quietly(engine, OUTPUT_NAME)

    @staticmethod
    async def _delete_quietly(engine: CodecEngine, name: str) -> None:
        try:
            await engine.delete_file(name)
        except Exception as exc:  # noqa: BLE001
            logger.debug("Could not delete engine file %s: %s", name, exc)

    # ------------------------------------------------------------------
    # Publishing
    # ------------------------------------------------------------------

    def _publish(self, state: SessionState) -> None:
        self._state = state
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:  # noqa: BLE001
                logger.exception("Session state listener failed")
