"""Domain models for vidshrink.

Value objects are **frozen** dataclasses with no behaviour beyond data
access.  They carry zero I/O and no dependencies on external packages.

The session state is a tagged variant: one small dataclass per state,
joined by the :data:`SessionState` union.  Consumers dispatch with
``isinstance`` (or ``match``) instead of inspecting flags.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field


# ---------------------------------------------------------------------------
# Engine lifecycle
# ---------------------------------------------------------------------------

class EngineStatus(enum.Enum):
    """Lifecycle of the process-wide codec engine handle."""

    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"


# ---------------------------------------------------------------------------
# Source asset
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class SourceAsset:
    """The user-selected input video."""

    name: str
    """Original file name (no directory part)."""

    size: int
    """Byte length of :attr:`data`."""

    data: bytes = field(repr=False)
    """Raw file contents."""

    @classmethod
    def from_bytes(cls, name: str, data: bytes) -> SourceAsset:
        return cls(name=name, size=len(data), data=data)


# ---------------------------------------------------------------------------
# Quality presets
# ---------------------------------------------------------------------------

class QualityPreset(enum.Enum):
    """Named quality/size tradeoffs mapped to an x264 CRF value.

    Lower values keep more quality and produce larger output.
    """

    LIGHT = 24
    MEDIUM = 28
    STRONG = 32

    @property
    def crf(self) -> int:
        return self.value

    @property
    def label(self) -> str:
        return self.name.capitalize()

    @property
    def description(self) -> str:
        return _PRESET_DESCRIPTIONS[self]

    @classmethod
    def default(cls) -> QualityPreset:
        return cls.MEDIUM

    @classmethod
    def parse(cls, value: str | int) -> QualityPreset:
        """Resolve a preset from its name (any case) or its CRF value.

        Raises
        ------
        ValueError
            When *value* names no preset.
        """
        if isinstance(value, int):
            return cls(value)
        text = value.strip()
        if text.isdigit():
            return cls(int(text))
        try:
            return cls[text.upper()]
        except KeyError:
            raise ValueError(f"Unknown preset: {value!r}") from None


_PRESET_DESCRIPTIONS: dict[QualityPreset, str] = {
    QualityPreset.LIGHT: "Slight compression, best quality",
    QualityPreset.MEDIUM: "Balanced size vs. quality",
    QualityPreset.STRONG: "Maximum compression, smaller file",
}


# ---------------------------------------------------------------------------
# Transcode result
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class TranscodeResult:
    """Output of one successful session.

    :attr:`handle` is only valid until the controller releases it (new
    asset selected, new run started, or controller disposed).
    """

    data: bytes = field(repr=False)
    size: int
    handle: str
    """Resource-store handle for the downloadable copy of :attr:`data`."""

    download_name: str
    mime_type: str = "video/mp4"


# ---------------------------------------------------------------------------
# Session state variants
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Idle:
    """No session running; a new one may start."""


@dataclass(frozen=True, slots=True)
class Staging:
    """Source bytes are being written into the engine."""


@dataclass(frozen=True, slots=True)
class Encoding:
    """The engine job is running.

    ``progress`` is ``None`` until the engine reports anything, which is
    not the same as having reported 0%.
    """

    progress: int | None = None


@dataclass(frozen=True, slots=True)
class Completed:
    result: TranscodeResult


@dataclass(frozen=True, slots=True)
class Failed:
    error: Exception


SessionState = Idle | Staging | Encoding | Completed | Failed
"""Union of every snapshot the session controller can publish."""
