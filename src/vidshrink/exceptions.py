"""Custom exception hierarchy for vidshrink.

All exceptions that cross layer boundaries must inherit from
:class:`VidshrinkError`.  Raw engine exceptions (subprocess, filesystem)
must NEVER reach the CLI layer — the session controller catches them
and re-raises one of the typed subclasses defined here.

Hierarchy
---------
VidshrinkError
├── InvalidInputError
├── EngineLoadError
│   └── FfmpegNotFoundError
├── EncodingError
├── EngineError
└── EnvironmentError
"""

from __future__ import annotations


class VidshrinkError(Exception):
    """Base exception for all vidshrink errors.

    Every user-visible error condition must map to a subclass of this
    exception so that the CLI error boundary can render a clean message
    without leaking internal stack traces.
    """

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint: str | None = hint
        """Optional actionable guidance shown below the error message."""


# --- Input validation ------------------------------------------------------

class InvalidInputError(VidshrinkError):
    """Raised when no usable file is selected or a session is already active."""


# --- Engine lifecycle ------------------------------------------------------

class EngineLoadError(VidshrinkError):
    """Raised when the codec engine fails to initialise."""


class FfmpegNotFoundError(EngineLoadError):
    """Raised when ffmpeg cannot be located on the system PATH."""


# --- Encoding --------------------------------------------------------------

class EncodingError(VidshrinkError):
    """Raised when staging, running or reading back an encoding job fails."""


class EngineError(VidshrinkError):
    """Raised by engine adapters for a failed engine-boundary operation.

    Only the core sees this type; the session controller translates it
    into :class:`EncodingError`.
    """


# --- Environment / tooling -------------------------------------------------

class EnvironmentError(VidshrinkError):
    """Raised when a required runtime dependency is not available."""
