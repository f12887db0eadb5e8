"""Infrastructure layer — external system integration.

This layer wraps all interaction with ffmpeg and the local filesystem.
Adapters here satisfy the protocols in :mod:`vidshrink.core.protocols`.

Rules
-----
* No imports from ``cli``.
* No user-facing output (no ``print()``, no Rich rendering).
* Must expose clean, typed interfaces consumed by the core layer.
"""

from vidshrink.infra.ffmpeg_detector import FfmpegStatus, detect_ffmpeg, require_ffmpeg
from vidshrink.infra.ffmpeg_engine import FfmpegProcessEngine
from vidshrink.infra.resource_store import TempFileResourceStore
from vidshrink.infra.source_loader import load_source_asset

__all__: list[str] = [
    "FfmpegProcessEngine",
    "FfmpegStatus",
    "TempFileResourceStore",
    "detect_ffmpeg",
    "load_source_asset",
    "require_ffmpeg",
]
