"""Core / service layer — orchestration and domain models.

Rules
-----
* No ``print()`` calls.
* No direct filesystem or subprocess I/O; engines and stores are
  injected through :mod:`vidshrink.core.protocols`.
* No imports from ``cli`` or ``infra``.
"""

from vidshrink.core.engine_manager import EngineLifecycleManager
from vidshrink.core.models import (
    Completed,
    Encoding,
    EngineStatus,
    Failed,
    Idle,
    QualityPreset,
    SessionState,
    SourceAsset,
    Staging,
    TranscodeResult,
)
from vidshrink.core.protocols import CodecEngine, ResourceStore
from vidshrink.core.session_controller import TranscodeSessionController

__all__: list[str] = [
    "CodecEngine",
    "Completed",
    "Encoding",
    "EngineLifecycleManager",
    "EngineStatus",
    "Failed",
    "Idle",
    "QualityPreset",
    "ResourceStore",
    "SessionState",
    "SourceAsset",
    "Staging",
    "TranscodeResult",
    "TranscodeSessionController",
]
