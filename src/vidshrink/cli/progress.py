"""Rich-based progress display driven by session state snapshots.

This module bridges the session controller's state subscription with a
Rich :class:`~rich.progress.Progress` bar.  The core never renders;
it only publishes :data:`~vidshrink.core.models.SessionState` values
that :class:`SessionProgressDisplay` turns into bar updates.

Design
------
* :meth:`SessionProgressDisplay.__call__` is the listener passed to
  :meth:`TranscodeSessionController.subscribe`.
* The bar is percentage based (total = 100).
* Shutdown-safe: if the display is already stopped, calls are
  silently ignored.
"""

from __future__ import annotations

from typing import Any

from vidshrink.cli.console import get_rich_console
from vidshrink.core.models import (
    Completed,
    Encoding,
    Failed,
    Idle,
    QualityPreset,
    SessionState,
    Staging,
)
from vidshrink.exceptions import EngineLoadError, EnvironmentError


def describe_state(state: SessionState) -> str:
    """Return the status line shown next to the bar for *state*.

    ``Encoding`` without a reported percentage shows no number, which
    keeps "nothing reported yet" distinct from "0% done".
    """
    if isinstance(state, Idle):
        return "Ready to compress"
    if isinstance(state, Staging):
        return "Starting compression..."
    if isinstance(state, Encoding):
        if state.progress is None:
            return "Processing video..."
        return f"Processing video... {state.progress}%"
    if isinstance(state, Completed):
        return "Compression completed!"
    if isinstance(state, Failed):
        if isinstance(state.error, EngineLoadError):
            return "Failed to load FFmpeg. Please try again."
        return "Compression failed. Please try again."
    return ""


class SessionProgressDisplay:
    """Callable session-state listener rendering a Rich progress bar.

    Usage::

        with SessionProgressDisplay(preset) as display:
            unsubscribe = controller.subscribe(display)
            await controller.run_session(asset, preset)
            unsubscribe()
    """

    def __init__(self, preset: QualityPreset) -> None:
        try:
            from rich.progress import (
                BarColumn,
                Progress,
                SpinnerColumn,
                TaskProgressColumn,
                TextColumn,
                TimeElapsedColumn,
            )
        except ModuleNotFoundError as exc:
            raise EnvironmentError(
                "rich is not installed. Install with: pip install rich",
            ) from exc

        self._preset = preset
        self._progress: Any = Progress(
            SpinnerColumn(),
            TextColumn("[bold blue]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            TimeElapsedColumn(),
            console=get_rich_console(),
            transient=False,
        )
        self._task_id: Any = None
        self._started: bool = False

    # ------------------------------------------------------------------
    # Context manager
    # ------------------------------------------------------------------

    def __enter__(self) -> SessionProgressDisplay:
        self.start()
        return self

    def __exit__(self, *_args: object) -> None:
        self.stop()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Start the display and show the engine-loading line."""
        if not self._started:
            self._progress.start()
            self._task_id = self._progress.add_task("Loading FFmpeg...", total=100)
            self._started = True

    def stop(self) -> None:
        """Stop the Rich progress display (idempotent)."""
        if self._started:
            self._progress.stop()
            self._started = False

    # ------------------------------------------------------------------
    # Listener callback
    # ------------------------------------------------------------------

    def __call__(self, state: SessionState) -> None:
        if not self._started or self._task_id is None:
            return

        description = describe_state(state)
        if isinstance(state, Encoding):
            if state.progress is not None:
                description = (
                    f"{description} ({self._preset.label.lower()} compression)"
                )
            self._progress.update(
                self._task_id,
                description=description,
                completed=state.progress or 0,
            )
        elif isinstance(state, Completed):
            self._progress.update(self._task_id, description=description, completed=100)
        elif isinstance(state, Failed):
            self._progress.update(self._task_id, description=description, completed=0)
        else:
            self._progress.update(self._task_id, description=description)
