"""Infrastructure: find the ffmpeg binary and read its version.

Two callers with different needs:

* ``vidshrink doctor`` wants a report and never an exception, so it uses
  :func:`detect_ffmpeg`.
* :meth:`FfmpegProcessEngine.load` must not start without a runnable
  binary, so it uses :func:`require_ffmpeg`, which raises typed load
  errors carrying an install hint.

Both run ``ffmpeg -version`` synchronously; the engine calls this from a
worker thread.
"""

from __future__ import annotations

import logging
import platform
import re
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path

from vidshrink.exceptions import EngineLoadError, FfmpegNotFoundError

logger = logging.getLogger(__name__)

_VERSION_RE = re.compile(r"^ffmpeg version (\S+)")
_VERSION_TIMEOUT_SECONDS = 15.0

_INSTALL_COMMANDS: dict[str, str] = {
    "Darwin": "brew install ffmpeg",
    "Windows": "winget install Gyan.FFmpeg",
    "Linux": "sudo apt install ffmpeg",
}
_DOWNLOAD_URL = "https://ffmpeg.org/download.html"


@dataclass(frozen=True, slots=True)
class FfmpegStatus:
    """What a probe learned about one ffmpeg executable."""

    executable: str
    """The command name or path that was probed."""

    path: Path | None = None
    """Resolved binary, or ``None`` when nothing was found."""

    version: str | None = None
    """Version token from ``ffmpeg -version``; ``None`` if it did not run."""

    error: str | None = None

    @property
    def found(self) -> bool:
        return self.path is not None

    @property
    def usable(self) -> bool:
        return self.path is not None and self.version is not None


def install_hint() -> str:
    """One line telling the user how to get ffmpeg on this OS."""
    command = _INSTALL_COMMANDS.get(platform.system())
    if command is None:
        return f"Download ffmpeg from {_DOWNLOAD_URL}"
    return f"Install ffmpeg with: {command}"


def read_ffmpeg_version(binary: Path) -> str:
    """Run ``<binary> -version`` and return the version token.

    Raises
    ------
    EngineLoadError
        When the binary cannot be started, hangs, or exits non-zero.
    """
    try:
        result = subprocess.run(
            [str(binary), "-version"],
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            timeout=_VERSION_TIMEOUT_SECONDS,
            check=False,
        )
    except (OSError, subprocess.TimeoutExpired) as exc:
        raise EngineLoadError(f"Failed to run {binary} -version: {exc}") from exc

    if result.returncode != 0:
        raise EngineLoadError(
            f"ffmpeg -version exited with code {result.returncode}",
            hint=result.stderr.strip() or None,
        )

    first_line = next(iter(result.stdout.splitlines()), "").strip()
    match = _VERSION_RE.match(first_line)
    if match is not None:
        return match.group(1)
    return first_line or "unknown"


def _locate(executable: str) -> Path | None:
    located = shutil.which(executable)
    return Path(located).resolve() if located is not None else None


def detect_ffmpeg(executable: str | Path = "ffmpeg") -> FfmpegStatus:
    """Probe *executable* (PATH name or explicit path).  Never raises."""
    name = str(executable)
    path = _locate(name)
    if path is None:
        return FfmpegStatus(executable=name, error="not found")
    try:
        version = read_ffmpeg_version(path)
    except EngineLoadError as exc:
        return FfmpegStatus(executable=name, path=path, error=str(exc))
    return FfmpegStatus(executable=name, path=path, version=version)


def require_ffmpeg(executable: str | Path = "ffmpeg") -> FfmpegStatus:
    """Return the status of a runnable ffmpeg.

    Raises
    ------
    FfmpegNotFoundError
        When *executable* cannot be located.
    EngineLoadError
        When it was located but ``-version`` fails.
    """
    name = str(executable)
    path = _locate(name)
    if path is None:
        raise FfmpegNotFoundError(
            f"ffmpeg is not installed or not on PATH ({name}).",
            hint=install_hint(),
        )
    version = read_ffmpeg_version(path)
    logger.info("Using ffmpeg %s at %s", version, path)
    return FfmpegStatus(executable=name, path=path, version=version)
