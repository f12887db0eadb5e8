"""Tests for the interactive preset selection UI (cli/preset_prompt.py).

``questionary`` and the Rich table are mocked to avoid terminal
interaction.  We test the logical mapping between the user's selection
and the returned :class:`QualityPreset`.
"""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from vidshrink.cli.preset_prompt import _build_choice_label, prompt_preset_selection
from vidshrink.core.models import QualityPreset, SourceAsset
from vidshrink.exceptions import InvalidInputError


def _asset() -> SourceAsset:
    return SourceAsset.from_bytes("holiday.mov", b"\x00" * 3_500_000)


# ---------------------------------------------------------------------------
# Presentation helpers
# ---------------------------------------------------------------------------

class TestBuildChoiceLabel:
    def test_contains_all_fields(self) -> None:
        label = _build_choice_label(QualityPreset.MEDIUM)
        assert label.startswith("Medium")
        assert "(CRF 28)" in label
        assert "Balanced size vs. quality" in label

    def test_labels_are_aligned(self) -> None:
        offsets = {_build_choice_label(p).index("(CRF") for p in QualityPreset}
        assert len(offsets) == 1


# ---------------------------------------------------------------------------
# prompt_preset_selection — selection mapping
# ---------------------------------------------------------------------------

class TestPromptPresetSelection:
    """``questionary.select().ask()`` is mocked to return a known value."""

    def _questionary(self, answer: QualityPreset | None) -> MagicMock:
        questionary_mod = MagicMock()
        questionary_mod.Choice = _real_choice_class()
        questionary_mod.select.return_value.ask.return_value = answer
        return questionary_mod

    @patch("vidshrink.cli.preset_prompt._import_rich_table")
    @patch("vidshrink.cli.preset_prompt._import_questionary")
    def test_returns_selected_preset(
        self, mock_q: MagicMock, mock_table: MagicMock,
    ) -> None:
        mock_q.return_value = self._questionary(QualityPreset.STRONG)
        mock_table.return_value = _real_table_class()

        assert prompt_preset_selection(_asset()) is QualityPreset.STRONG

    @patch("vidshrink.cli.preset_prompt._import_rich_table")
    @patch("vidshrink.cli.preset_prompt._import_questionary")
    def test_one_choice_per_preset_with_medium_default(
        self, mock_q: MagicMock, mock_table: MagicMock,
    ) -> None:
        questionary_mod = self._questionary(QualityPreset.MEDIUM)
        mock_q.return_value = questionary_mod
        mock_table.return_value = _real_table_class()

        prompt_preset_selection(_asset())

        kwargs = questionary_mod.select.call_args.kwargs
        assert [c.value for c in kwargs["choices"]] == list(QualityPreset)
        assert kwargs["default"].value is QualityPreset.MEDIUM

    @patch("vidshrink.cli.preset_prompt._import_rich_table")
    @patch("vidshrink.cli.preset_prompt._import_questionary")
    def test_cancel_raises_invalid_input(
        self, mock_q: MagicMock, mock_table: MagicMock,
    ) -> None:
        mock_q.return_value = self._questionary(None)
        mock_table.return_value = _real_table_class()

        with pytest.raises(InvalidInputError, match="No compression level selected") as exc_info:
            prompt_preset_selection(_asset())
        assert exc_info.value.hint is not None
        assert "--preset" in exc_info.value.hint


# ---------------------------------------------------------------------------
# Preset resolution in the CLI
# ---------------------------------------------------------------------------

class TestResolvePreset:
    def test_flag_wins(self) -> None:
        from vidshrink.cli.app import _resolve_preset

        assert _resolve_preset("light", _asset()) is QualityPreset.LIGHT

    @patch("vidshrink.cli.app.sys.stdin")
    def test_non_interactive_uses_default(self, mock_stdin: MagicMock) -> None:
        from vidshrink.cli.app import _resolve_preset

        mock_stdin.isatty.return_value = False
        assert _resolve_preset(None, _asset()) is QualityPreset.MEDIUM

    @patch(
        "vidshrink.cli.preset_prompt.prompt_preset_selection",
        return_value=QualityPreset.STRONG,
    )
    @patch("vidshrink.cli.app.sys.stdin")
    def test_terminal_prompts(self, mock_stdin: MagicMock, mock_prompt: MagicMock) -> None:
        from vidshrink.cli.app import _resolve_preset

        mock_stdin.isatty.return_value = True
        asset = _asset()
        assert _resolve_preset(None, asset) is QualityPreset.STRONG
        mock_prompt.assert_called_once_with(asset)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _real_choice_class() -> type:
    """Return a minimal Choice-like class for mocking questionary.Choice."""

    class FakeChoice:
        def __init__(self, title: str, value: QualityPreset) -> None:
            self.title = title
            self.value = value

    return FakeChoice


def _real_table_class() -> type:
    """Return a minimal Table-like class for tests without rich."""

    class FakeTable:
        def __init__(self, *args: object, **kwargs: object) -> None:
            self.args = args
            self.kwargs = kwargs

        def add_column(self, *args: object, **kwargs: object) -> None:
            _ = args, kwargs

        def add_row(self, *args: object, **kwargs: object) -> None:
            _ = args, kwargs

    return FakeTable
