"""Interactive preset selection UI for the CLI layer.

This module is responsible for:

* Rendering a Rich table describing the selected file and the presets.
* Prompting the user to pick a preset via questionary arrow keys.
* Returning the chosen :class:`~vidshrink.core.models.QualityPreset`.

All display-related logic lives here — no business logic, no encoding.
"""

from __future__ import annotations

from typing import Any

from vidshrink.cli.console import console
from vidshrink.core.models import QualityPreset, SourceAsset
from vidshrink.exceptions import EnvironmentError, InvalidInputError
from vidshrink.utils.formatting import format_size


def _import_questionary() -> Any:
    """Import questionary lazily for interactive selection."""
    try:
        import questionary
    except ModuleNotFoundError as exc:
        raise EnvironmentError(
            "questionary is not installed. Install with: pip install questionary",
        ) from exc
    return questionary


def _import_rich_table() -> type[Any]:
    """Import rich table lazily for preset rendering."""
    try:
        from rich.table import Table
    except ModuleNotFoundError as exc:
        raise EnvironmentError(
            "rich is not installed. Install with: pip install rich",
        ) from exc
    return Table


# ---------------------------------------------------------------------------
# Presentation helpers
# ---------------------------------------------------------------------------

def _build_choice_label(preset: QualityPreset) -> str:
    """Build the single-line label shown in the questionary selector.

    Format: ``"Medium   (CRF 28)  Balanced size vs. quality"``
    """
    return f"{preset.label:<8} (CRF {preset.crf})  {preset.description}"


def _display_preset_table(asset: SourceAsset) -> None:
    table_class = _import_rich_table()

    console.print()
    console.print(f"[bold cyan]File:[/bold cyan]  {asset.name}")
    console.print(f"[bold cyan]Size:[/bold cyan]  {format_size(asset.size)}")
    console.print()

    table = table_class(
        title="Choose Your Compression Level",
        show_header=True,
        header_style="bold magenta",
        border_style="dim",
    )
    table.add_column("Preset", justify="left", min_width=8)
    table.add_column("CRF", justify="right", min_width=4)
    table.add_column("Effect", justify="left")

    for preset in QualityPreset:
        table.add_row(preset.label, str(preset.crf), preset.description)

    console.print(table)
    console.print()


# ---------------------------------------------------------------------------
# Public prompt function
# ---------------------------------------------------------------------------

def prompt_preset_selection(asset: SourceAsset) -> QualityPreset:
    """Display the presets and prompt the user for a choice.

    The default preset is pre-selected.

    Raises
    ------
    InvalidInputError
        If the user cancels the prompt (Esc / None return).
    """
    questionary = _import_questionary()

    _display_preset_table(asset)

    choices = [
        questionary.Choice(title=_build_choice_label(preset), value=preset)
        for preset in QualityPreset
    ]
    default = next(c for c in choices if c.value is QualityPreset.default())

    selected: QualityPreset | None = questionary.select(
        "Select compression level:",
        choices=choices,
        default=default,
        use_arrow_keys=True,
        use_shortcuts=False,
    ).ask()

    if selected is None:
        raise InvalidInputError(
            "No compression level selected.",
            hint="Use arrow keys to pick a preset, then press Enter, or pass --preset.",
        )
    return selected
