"""Infrastructure: read a user-selected video into a :class:`SourceAsset`.

Only files whose extension maps to a ``video/*`` MIME type are
accepted, mirroring a file picker restricted to video types.
"""

from __future__ import annotations

import mimetypes
from pathlib import Path

from vidshrink.core.models import SourceAsset
from vidshrink.exceptions import InvalidInputError


# Containers some platforms leave out of their MIME tables.
_EXTRA_VIDEO_TYPES: dict[str, str] = {
    ".mkv": "video/x-matroska",
    ".webm": "video/webm",
    ".m4v": "video/x-m4v",
    ".flv": "video/x-flv",
}


def is_video_file(path: Path) -> bool:
    mime_type, _ = mimetypes.guess_type(path.name)
    if mime_type is None:
        mime_type = _EXTRA_VIDEO_TYPES.get(path.suffix.lower())
    return mime_type is not None and mime_type.startswith("video/")


def load_source_asset(path: Path) -> SourceAsset:
    """Read *path* into memory.

    Raises
    ------
    InvalidInputError
        When the path is missing, not a regular file, not a video, or
        cannot be read.
    """
    if not path.exists():
        raise InvalidInputError(f"File not found: {path}")
    if not path.is_file():
        raise InvalidInputError(f"Not a regular file: {path}")
    if not is_video_file(path):
        raise InvalidInputError(
            f"Not a video file: {path.name}",
            hint="Supports MP4, MOV, AVI, MKV and more.",
        )
    try:
        data = path.read_bytes()
    except OSError as exc:
        raise InvalidInputError(f"Cannot read {path}: {exc}") from exc
    return SourceAsset.from_bytes(path.name, data)
