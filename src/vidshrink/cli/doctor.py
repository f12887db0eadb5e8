"""``vidshrink doctor`` — environment diagnostics command.

Gathers system information and renders a Rich table summarising
whether the runtime environment can compress videos.

This module lives in the CLI layer — it may import from ``infra``
and ``core``, and it renders via Rich.  No business logic resides
here; it purely collects and displays diagnostic data.
"""

from __future__ import annotations

import platform
import sys
from importlib import metadata

from vidshrink.cli import exit_codes
from vidshrink.cli.console import console
from vidshrink.infra.ffmpeg_detector import FfmpegStatus, detect_ffmpeg, install_hint
from vidshrink.version import __version__

Check = tuple[str, str, str]


# ---------------------------------------------------------------------------
# Diagnostic collectors
# ---------------------------------------------------------------------------

def _python_version_check() -> Check:
    """Return (label, value, status) for the Python version row."""
    version = platform.python_version()
    ok = sys.version_info[:2] >= (3, 10)
    status = "[green]OK[/green]" if ok else "[red]FAIL (>=3.10 required)[/red]"
    return "Python", version, status


def _package_check(distribution: str) -> Check:
    """Return the row for an optional UI package.

    Missing UI packages only degrade the display, so they warn.
    """
    try:
        version = metadata.version(distribution)
    except metadata.PackageNotFoundError:
        return distribution, "NOT INSTALLED", "[yellow]WARN[/yellow]"
    return distribution, version, "[green]OK[/green]"


def _ffmpeg_check(status: FfmpegStatus) -> Check:
    """Return (label, value, status) for the ffmpeg row.

    ffmpeg is the codec engine, so a missing or broken binary fails.
    """
    if status.usable:
        return "ffmpeg", f"{status.version} ({status.path})", "[green]OK[/green]"
    if status.found:
        return "ffmpeg", f"{status.path} does not run", "[red]FAIL[/red]"
    return "ffmpeg", f"{status.executable} not found", "[red]FAIL[/red]"


def _os_check() -> Check:
    """Return (label, value, status) for the OS row."""
    system_raw = platform.system()
    system_display = {
        "Windows": "Windows",
        "Linux": "Linux",
        "Darwin": "macOS",
    }.get(system_raw, system_raw)
    value = f"{system_display} {platform.release()} ({platform.machine()})"
    return "OS", value, "[green]OK[/green]"


def _vidshrink_version_check() -> Check:
    return "vidshrink", __version__, "[green]OK[/green]"


def collect_checks(ffmpeg_status: FfmpegStatus) -> list[Check]:
    return [
        _vidshrink_version_check(),
        _python_version_check(),
        _package_check("rich"),
        _package_check("questionary"),
        _ffmpeg_check(ffmpeg_status),
        _os_check(),
    ]


def _status_plain(status: str) -> str:
    """Convert rich-markup status to plain text."""
    for word in ("FAIL", "WARN", "OK"):
        if word in status:
            return word
    return status


def _print_plain_doctor_table(checks: list[Check]) -> None:
    """Render doctor output without Rich."""
    print("\nvidshrink doctor", file=sys.stderr)
    print("=" * 56, file=sys.stderr)
    print(f"{'Component':<12} {'Value':<32} {'Status':<8}", file=sys.stderr)
    print("-" * 56, file=sys.stderr)
    for label, value, status in checks:
        print(f"{label:<12} {value:<32} {_status_plain(status):<8}", file=sys.stderr)
    print(file=sys.stderr)


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------

def run_doctor(executable: str = "ffmpeg") -> int:
    """Execute all diagnostic checks and render a summary table.

    Returns
    -------
    int
        :data:`exit_codes.SUCCESS` when all critical checks pass,
        :data:`exit_codes.GENERAL_ERROR` if a critical check fails.
    """
    ffmpeg_status = detect_ffmpeg(executable)
    checks = collect_checks(ffmpeg_status)
    has_failure = any("FAIL" in status for _, _, status in checks)

    try:
        from rich.table import Table
    except ModuleNotFoundError:
        _print_plain_doctor_table(checks)
    else:
        table = Table(
            title="vidshrink doctor",
            show_header=True,
            header_style="bold cyan",
            border_style="dim",
        )
        table.add_column("Component", style="bold", min_width=12)
        table.add_column("Value", min_width=20)
        table.add_column("Status", justify="center", min_width=8)
        for label, value, status in checks:
            table.add_row(label, value, status)

        console.print()
        console.print(table)
        console.print()

    if not ffmpeg_status.usable:
        if ffmpeg_status.found:
            console.print(f"[yellow]ffmpeg failed to run:[/yellow] {ffmpeg_status.error}")
        console.print(f"{install_hint()}\n")

    if has_failure:
        console.print("[bold red]Some checks failed.[/bold red]")
        return exit_codes.GENERAL_ERROR

    console.print("[bold green]All checks passed.[/bold green]")
    return exit_codes.SUCCESS
