"""vidshrink — on-device video compression.

Wraps a local ffmpeg behind a small async orchestration core with a
strict layered architecture.
"""

from vidshrink.version import __version__

__all__: list[str] = ["__version__"]
