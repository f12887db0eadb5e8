"""ffmpeg-backed implementation of :class:`~vidshrink.core.protocols.CodecEngine`.

This module is the **only** place in the codebase that spawns ffmpeg.
The engine's private file namespace is a temporary directory created on
:meth:`FfmpegProcessEngine.load` and removed on
:meth:`FfmpegProcessEngine.terminate`; engine file names never leave
that directory.

Progress is read from ffmpeg's machine-readable ``-progress pipe:1``
stream on stdout.  The total duration comes from the ``Duration:`` line
that ffmpeg prints on stderr while probing the input.  Every stderr
line is also forwarded to ``log`` subscribers.
"""

from __future__ import annotations

import asyncio
import logging
import re
import shutil
import tempfile
from collections.abc import Sequence
from pathlib import Path

from vidshrink.core.protocols import EngineCallback, EngineEvent
from vidshrink.exceptions import EngineError
from vidshrink.infra.ffmpeg_detector import require_ffmpeg

logger = logging.getLogger(__name__)

_DURATION_RE = re.compile(r"Duration:\s*(\d+):(\d{2}):(\d{2}(?:\.\d+)?)")

# Flags prepended to every job: quiet banner, never read the terminal,
# overwrite the output name, and report progress as key=value lines.
_BASE_FLAGS: tuple[str, ...] = (
    "-hide_banner",
    "-nostdin",
    "-y",
    "-nostats",
    "-progress",
    "pipe:1",
)


def parse_duration(line: str) -> float | None:
    """Return the input duration in seconds from an ffmpeg stderr line."""
    match = _DURATION_RE.search(line)
    if match is None:
        return None
    hours, minutes, seconds = match.groups()
    return int(hours) * 3600 + int(minutes) * 60 + float(seconds)


def parse_progress_line(line: str, duration: float | None) -> float | None:
    """Convert one ``-progress`` key=value line into a fraction.

    Returns ``None`` for lines that carry no position, or when the
    duration is still unknown.  ``progress=end`` always maps to ``1.0``.
    """
    key, sep, value = line.strip().partition("=")
    if not sep:
        return None
    if key == "progress":
        return 1.0 if value == "end" else None
    # out_time_ms is in microseconds too (long-standing ffmpeg quirk).
    if key not in ("out_time_us", "out_time_ms"):
        return None
    if not duration or duration <= 0:
        return None
    try:
        micros = int(value)
    except ValueError:
        return None
    return max(0.0, min(1.0, micros / 1_000_000 / duration))


class FfmpegProcessEngine:
    """Concrete :class:`CodecEngine` driving a local ffmpeg binary.

    This class satisfies the :class:`~vidshrink.core.protocols.CodecEngine`
    protocol structurally — no explicit inheritance required.

    Parameters
    ----------
    executable:
        ffmpeg command name or path.  Resolved on :meth:`load`.
    work_root:
        Parent directory for the private working directory.  Defaults
        to the system temporary directory.
    """

    def __init__(
        self,
        executable: str | Path = "ffmpeg",
        *,
        work_root: Path | None = None,
    ) -> None:
        self._executable = executable
        self._work_root = work_root
        self._binary: Path | None = None
        self._version: str | None = None
        self._workdir: Path | None = None
        self._listeners: dict[str, list[EngineCallback]] = {"progress": [], "log": []}

    @property
    def workdir(self) -> Path | None:
        return self._workdir

    @property
    def version(self) -> str | None:
        """ffmpeg version reported on load; ``None`` until loaded."""
        return self._version

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def on(self, event: EngineEvent, callback: EngineCallback) -> None:
        self._listeners[event].append(callback)

    def off(self, event: EngineEvent, callback: EngineCallback) -> None:
        callbacks = self._listeners[event]
        if callback in callbacks:
            callbacks.remove(callback)

    def _emit(self, event: EngineEvent, payload: object) -> None:
        for callback in list(self._listeners[event]):
            try:
                callback(payload)
            except Exception as exc:  # noqa: BLE001
                logger.warning("%s callback error: %s", event, exc)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def load(self) -> None:
        """Resolve and verify the binary, then create the working directory.

        Raises
        ------
        FfmpegNotFoundError
            When the binary cannot be located.
        EngineLoadError
            When the binary does not run.
        """
        status = await asyncio.to_thread(require_ffmpeg, self._executable)
        self._binary = status.path
        self._version = status.version
        if self._workdir is None:
            self._workdir = Path(tempfile.mkdtemp(prefix="vidshrink-", dir=self._work_root))
        logger.debug("ffmpeg %s ready, working directory %s", self._binary, self._workdir)

    async def terminate(self) -> None:
        if self._workdir is not None:
            await asyncio.to_thread(shutil.rmtree, self._workdir, ignore_errors=True)
            self._workdir = None
        self._binary = None
        self._version = None

    # ------------------------------------------------------------------
    # File namespace
    # ------------------------------------------------------------------

    def _resolve(self, name: str) -> Path:
        if self._workdir is None:
            raise EngineError("ffmpeg engine is not loaded.")
        if not name or name in (".", "..") or "/" in name or "\\" in name:
            raise EngineError(f"Invalid engine file name: {name!r}")
        return self._workdir / name

    async def write_file(self, name: str, data: bytes) -> None:
        path = self._resolve(name)
        await asyncio.to_thread(path.write_bytes, data)

    async def read_file(self, name: str) -> bytes:
        path = self._resolve(name)
        try:
            return await asyncio.to_thread(path.read_bytes)
        except FileNotFoundError as exc:
            raise EngineError(f"No such engine file: {name}") from exc

    async def delete_file(self, name: str) -> None:
        path = self._resolve(name)
        try:
            await asyncio.to_thread(path.unlink)
        except FileNotFoundError as exc:
            raise EngineError(f"No such engine file: {name}") from exc

    # ------------------------------------------------------------------
    # Jobs
    # ------------------------------------------------------------------

    async def exec(self, args: Sequence[str]) -> int:
        """Run ffmpeg with *args* inside the working directory.

        Returns
        -------
        int
            ffmpeg's exit code.

        Raises
        ------
        EngineError
            When the engine is not loaded or ffmpeg cannot be started.
        """
        if self._binary is None or self._workdir is None:
            raise EngineError("ffmpeg engine is not loaded.")

        cmd = [str(self._binary), *_BASE_FLAGS, *args]
        logger.debug("Running: %s", " ".join(cmd))
        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                cwd=str(self._workdir),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            raise EngineError(f"Failed to start ffmpeg: {exc}") from exc

        duration: float | None = None

        async def read_stderr() -> None:
            nonlocal duration
            assert process.stderr is not None
            while True:
                raw = await process.stderr.readline()
                if not raw:
                    break
                line = raw.decode("utf-8", errors="replace").rstrip()
                if duration is None:
                    duration = parse_duration(line)
                self._emit("log", line)

        async def read_stdout() -> None:
            assert process.stdout is not None
            while True:
                raw = await process.stdout.readline()
                if not raw:
                    break
                fraction = parse_progress_line(raw.decode("utf-8", errors="replace"), duration)
                if fraction is not None:
                    self._emit("progress", fraction)

        try:
            await asyncio.gather(read_stderr(), read_stdout())
            return_code = await process.wait()
        except asyncio.CancelledError:
            process.kill()
            raise
        logger.debug("ffmpeg exited with code %d", return_code)
        return return_code
