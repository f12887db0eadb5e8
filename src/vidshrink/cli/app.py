"""CLI application entry point and command routing for vidshrink.

This module is the **sole error boundary** for the entire application.
It catches :class:`~vidshrink.exceptions.VidshrinkError`,
``KeyboardInterrupt``, and any unexpected ``Exception``, rendering
user-friendly messages via Rich and returning well-defined exit codes.

Architecture notes
------------------
* No business logic lives here — all work is delegated to the core
  session controller and the infrastructure adapters.
* ``print()`` is forbidden outside the CLI layer; Rich console is used
  exclusively.
* This module is the only place that translates between the domain world
  and the OS process exit code.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

from vidshrink.cli import exit_codes
from vidshrink.cli.console import console
from vidshrink.core.models import QualityPreset, SourceAsset, TranscodeResult
from vidshrink.exceptions import VidshrinkError
from vidshrink.version import __version__


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------

def _build_parser() -> argparse.ArgumentParser:
    """Construct the top-level argument parser.

    Sub-commands are not used; the CLI supports:
    * ``vidshrink <video>``   — compress a single file
    * ``vidshrink doctor``    — environment diagnostics
    * ``vidshrink --version``
    """
    parser = argparse.ArgumentParser(
        prog="vidshrink",
        description="Compress a video locally with ffmpeg. Nothing is uploaded.",
    )
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "target",
        nargs="?",
        default=None,
        help="Video file to compress, or 'doctor' to run diagnostics.",
    )
    parser.add_argument(
        "-p",
        "--preset",
        choices=[preset.name.lower() for preset in QualityPreset],
        default=None,
        help="Compression level (default: prompt on a terminal, else medium).",
    )
    parser.add_argument(
        "-o",
        "--output-dir",
        type=Path,
        default=None,
        help="Directory for compressed_<name> (default: current directory).",
    )
    parser.add_argument(
        "--ffmpeg",
        default="ffmpeg",
        help="ffmpeg command or path (default: ffmpeg on PATH).",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show debug logging, including ffmpeg output.",
    )
    return parser


# ---------------------------------------------------------------------------
# Command dispatch
# ---------------------------------------------------------------------------

def _resolve_preset(name: str | None, asset: SourceAsset) -> QualityPreset:
    """Pick the preset from the flag, an interactive prompt, or the default."""
    if name is not None:
        return QualityPreset.parse(name)
    if sys.stdin.isatty():
        from vidshrink.cli.preset_prompt import prompt_preset_selection

        return prompt_preset_selection(asset)
    return QualityPreset.default()


def _display_summary(original_size: int, result: TranscodeResult, output: Path) -> None:
    """Render the before/after sizes and where the file went."""
    from vidshrink.utils.formatting import compression_ratio, format_size

    original = format_size(original_size)
    compressed = format_size(result.size)
    ratio = compression_ratio(original_size, result.size)

    try:
        from rich.table import Table
    except ModuleNotFoundError:
        console.print(f"Original size:   {original}")
        console.print(f"Compressed size: {compressed}")
        console.print(f"Space saved:     {ratio}")
    else:
        table = Table(
            title="Compression Complete!",
            show_header=True,
            header_style="bold cyan",
            border_style="dim",
        )
        table.add_column("Original Size", justify="right")
        table.add_column("Compressed Size", justify="right", style="green")
        table.add_column("Space Saved", justify="right", style="bold green")
        table.add_row(original, compressed, ratio)
        console.print()
        console.print(table)

    console.print(f"\n[bold green]Saved[/bold green]  {output}")


def _handle_compress(args: argparse.Namespace) -> int:
    """Dispatch a single-file compression.

    Flow:
    1. Load the source file and pick a preset.
    2. Wire the ffmpeg engine, lifecycle manager, resource store and
       session controller.
    3. Run one session with a Rich progress display subscribed.
    4. Export ``compressed_<name>`` and show the size summary.
    """
    from vidshrink.cli.progress import SessionProgressDisplay
    from vidshrink.core.engine_manager import EngineLifecycleManager
    from vidshrink.core.session_controller import TranscodeSessionController
    from vidshrink.infra.ffmpeg_engine import FfmpegProcessEngine
    from vidshrink.infra.resource_store import TempFileResourceStore
    from vidshrink.infra.source_loader import load_source_asset
    from vidshrink.utils.formatting import format_size

    asset = load_source_asset(Path(args.target))
    preset = _resolve_preset(args.preset, asset)
    output_dir: Path = args.output_dir if args.output_dir is not None else Path.cwd()

    console.print(
        f"\n[bold]Compressing[/bold]  {asset.name} ({format_size(asset.size)})  "
        f"preset={preset.label}\n"
    )

    manager = EngineLifecycleManager(FfmpegProcessEngine(args.ffmpeg))

    async def run(controller: TranscodeSessionController) -> TranscodeResult:
        try:
            return await controller.run_session(asset, preset)
        finally:
            await manager.dispose()

    with TempFileResourceStore() as store:
        controller = TranscodeSessionController(manager, store)
        controller.select_asset(asset)

        with SessionProgressDisplay(preset) as display:
            unsubscribe = controller.subscribe(display)
            try:
                result = asyncio.run(run(controller))
            finally:
                unsubscribe()

        output = controller.export(output_dir)
        _display_summary(asset.size, result, output)
        controller.dispose()

    return exit_codes.SUCCESS


def _handle_doctor(args: argparse.Namespace) -> int:
    """Dispatch the ``doctor`` diagnostics command."""
    from vidshrink.cli.doctor import run_doctor

    return run_doctor(args.ffmpeg)


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------

def main(argv: list[str] | None = None) -> int:
    """Run the vidshrink CLI.

    Parameters
    ----------
    argv:
        Explicit argument list.  When ``None`` (default), ``sys.argv[1:]``
        is used.  Accepting *argv* enables deterministic testing without
        monkeypatching.

    Returns
    -------
    int
        OS process exit code.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.target is None:
        parser.print_help()
        return exit_codes.SUCCESS

    from vidshrink.cli.logging_setup import configure_logging

    configure_logging(args.verbose)

    if args.target.lower() == "doctor":
        return _handle_doctor(args)

    return _handle_compress(args)


# ---------------------------------------------------------------------------
# Script-level error boundary
# ---------------------------------------------------------------------------

def cli() -> None:
    """Top-level error boundary invoked by the console-script entry point.

    This function wraps :func:`main` and guarantees the process never
    exits with a raw stack trace during normal usage.
    """
    try:
        code = main()
        sys.exit(code)
    except VidshrinkError as exc:
        console.error(exc)
        sys.exit(exit_codes.GENERAL_ERROR)
    except KeyboardInterrupt:
        console.print("\n[yellow]Aborted by user.[/yellow]")
        sys.exit(exit_codes.KEYBOARD_INTERRUPT)
    except Exception as exc:  # noqa: BLE001
        console.print(
            "[bold red]Unexpected error.[/bold red] "
            "Please report this issue.\n"
            f"  {type(exc).__name__}: {exc}"
        )
        sys.exit(exit_codes.UNEXPECTED_ERROR)
