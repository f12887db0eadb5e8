"""CLI console helpers with optional Rich support.

This module intentionally avoids module-level imports of optional UI
dependencies so bootstrap paths (``--help``, ``--version``, ``doctor``)
remain functional even when Rich is not installed.

One Rich console is shared per process so that progress bars, log
records and plain messages all render on the same stderr stream.
"""

from __future__ import annotations

import re
import sys
from typing import Any

from vidshrink.exceptions import EnvironmentError, VidshrinkError

_MARKUP_RE = re.compile(r"\[/?[a-z][a-z0-9 _#-]*\]")

_shared_console: Any = None


def _load_rich_console_class() -> type[Any]:
    """Return ``rich.console.Console`` class or raise ``EnvironmentError``."""
    try:
        from rich.console import Console
    except ModuleNotFoundError as exc:
        raise EnvironmentError(
            "rich is not installed. Install with: pip install rich",
        ) from exc
    return Console


def get_rich_console() -> Any:
    """Return the shared Rich console targeting stderr."""
    global _shared_console
    console_class = _load_rich_console_class()
    if _shared_console is None or not isinstance(_shared_console, console_class):
        _shared_console = console_class(stderr=True)
    return _shared_console


def strip_markup(text: str) -> str:
    """Remove Rich style tags such as ``[bold red]`` for plain output."""
    return _MARKUP_RE.sub("", text)


class _ConsoleProxy:
    """Minimal ``print``-compatible proxy with Rich fallback."""

    def print(self, *objects: object) -> None:
        """Render with Rich when available, else plain stderr print."""
        try:
            rich_console = get_rich_console()
        except EnvironmentError:
            plain = [strip_markup(obj) if isinstance(obj, str) else obj for obj in objects]
            print(*plain, file=sys.stderr)
            return
        rich_console.print(*objects)

    def error(self, exc: VidshrinkError) -> None:
        """Render a known error with its optional hint."""
        self.print(f"[bold red]Error:[/bold red] {exc}")
        if exc.hint:
            self.print(f"[yellow]Hint:[/yellow] {exc.hint}")


console = _ConsoleProxy()
