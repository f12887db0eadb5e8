"""Tests for ffmpeg discovery (infra/ffmpeg_detector.py).

:func:`shutil.which` and :func:`subprocess.run` are mocked — no system
dependency.

Coverage:
* ``read_ffmpeg_version`` parsing and failure modes.
* ``detect_ffmpeg`` never raises: missing, broken and healthy binaries.
* ``require_ffmpeg`` raises typed load errors with an install hint.
* Per-OS install hint.
"""

from __future__ import annotations

import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from vidshrink.exceptions import EngineLoadError, FfmpegNotFoundError
from vidshrink.infra.ffmpeg_detector import (
    FfmpegStatus,
    detect_ffmpeg,
    install_hint,
    read_ffmpeg_version,
    require_ffmpeg,
)

BINARY = Path("/usr/bin/ffmpeg")
VERSION_OUTPUT = (
    "ffmpeg version 6.1.1-3ubuntu5 Copyright (c) 2000-2023 the FFmpeg developers\n"
    "built with gcc 13 (Ubuntu 13.2.0-23ubuntu3)\n"
)


def _completed(returncode: int = 0, stdout: str = VERSION_OUTPUT, stderr: str = "") -> MagicMock:
    result = MagicMock()
    result.returncode = returncode
    result.stdout = stdout
    result.stderr = stderr
    return result


# ---------------------------------------------------------------------------
# read_ffmpeg_version
# ---------------------------------------------------------------------------

class TestReadFfmpegVersion:
    @patch("vidshrink.infra.ffmpeg_detector.subprocess.run")
    def test_parses_version_token(self, mock_run: MagicMock) -> None:
        mock_run.return_value = _completed()
        assert read_ffmpeg_version(BINARY) == "6.1.1-3ubuntu5"
        assert mock_run.call_args.args[0] == [str(BINARY), "-version"]

    @patch("vidshrink.infra.ffmpeg_detector.subprocess.run")
    def test_unrecognised_banner_is_returned_verbatim(self, mock_run: MagicMock) -> None:
        mock_run.return_value = _completed(stdout="avconv 12\n")
        assert read_ffmpeg_version(BINARY) == "avconv 12"

    @patch("vidshrink.infra.ffmpeg_detector.subprocess.run")
    def test_empty_output(self, mock_run: MagicMock) -> None:
        mock_run.return_value = _completed(stdout="")
        assert read_ffmpeg_version(BINARY) == "unknown"

    @patch("vidshrink.infra.ffmpeg_detector.subprocess.run")
    def test_non_zero_exit(self, mock_run: MagicMock) -> None:
        mock_run.return_value = _completed(returncode=1, stdout="", stderr="bad build")
        with pytest.raises(EngineLoadError, match="exited with code 1") as exc_info:
            read_ffmpeg_version(BINARY)
        assert exc_info.value.hint == "bad build"

    @patch("vidshrink.infra.ffmpeg_detector.subprocess.run")
    def test_cannot_start(self, mock_run: MagicMock) -> None:
        mock_run.side_effect = PermissionError("denied")
        with pytest.raises(EngineLoadError, match="denied"):
            read_ffmpeg_version(BINARY)

    @patch("vidshrink.infra.ffmpeg_detector.subprocess.run")
    def test_hangs(self, mock_run: MagicMock) -> None:
        mock_run.side_effect = subprocess.TimeoutExpired(cmd="ffmpeg", timeout=15)
        with pytest.raises(EngineLoadError):
            read_ffmpeg_version(BINARY)


# ---------------------------------------------------------------------------
# detect_ffmpeg
# ---------------------------------------------------------------------------

class TestDetectFfmpeg:
    @patch("vidshrink.infra.ffmpeg_detector.subprocess.run")
    @patch("vidshrink.infra.ffmpeg_detector.shutil.which")
    def test_usable(self, mock_which: MagicMock, mock_run: MagicMock) -> None:
        mock_which.return_value = str(BINARY)
        mock_run.return_value = _completed()

        status = detect_ffmpeg()
        assert status.found is True
        assert status.usable is True
        assert status.version == "6.1.1-3ubuntu5"
        assert isinstance(status.path, Path)
        assert status.error is None

    @patch("vidshrink.infra.ffmpeg_detector.subprocess.run")
    @patch("vidshrink.infra.ffmpeg_detector.shutil.which")
    def test_not_found(self, mock_which: MagicMock, mock_run: MagicMock) -> None:
        mock_which.return_value = None

        status = detect_ffmpeg("ffmpeg6")
        assert status.executable == "ffmpeg6"
        assert status.found is False
        assert status.usable is False
        assert status.error == "not found"
        mock_run.assert_not_called()

    @patch("vidshrink.infra.ffmpeg_detector.subprocess.run")
    @patch("vidshrink.infra.ffmpeg_detector.shutil.which")
    def test_found_but_broken(self, mock_which: MagicMock, mock_run: MagicMock) -> None:
        mock_which.return_value = str(BINARY)
        mock_run.return_value = _completed(returncode=127, stdout="")

        status = detect_ffmpeg()
        assert status.found is True
        assert status.usable is False
        assert status.version is None
        assert status.error is not None and "127" in status.error

    @patch("vidshrink.infra.ffmpeg_detector.shutil.which")
    def test_explicit_path_is_looked_up(self, mock_which: MagicMock) -> None:
        mock_which.return_value = None
        detect_ffmpeg(Path("/opt/ffmpeg/bin/ffmpeg"))
        mock_which.assert_called_once_with(str(Path("/opt/ffmpeg/bin/ffmpeg")))


# ---------------------------------------------------------------------------
# require_ffmpeg
# ---------------------------------------------------------------------------

class TestRequireFfmpeg:
    @patch("vidshrink.infra.ffmpeg_detector.subprocess.run")
    @patch("vidshrink.infra.ffmpeg_detector.shutil.which")
    def test_returns_usable_status(self, mock_which: MagicMock, mock_run: MagicMock) -> None:
        mock_which.return_value = str(BINARY)
        mock_run.return_value = _completed()

        status = require_ffmpeg()
        assert status.usable is True
        assert status.version == "6.1.1-3ubuntu5"

    @patch("vidshrink.infra.ffmpeg_detector.shutil.which", return_value=None)
    def test_missing_raises_with_hint(self, _mock_which: MagicMock) -> None:
        with pytest.raises(FfmpegNotFoundError, match="not installed") as exc_info:
            require_ffmpeg()
        assert exc_info.value.hint is not None
        assert "ffmpeg" in exc_info.value.hint

    @patch("vidshrink.infra.ffmpeg_detector.subprocess.run")
    @patch("vidshrink.infra.ffmpeg_detector.shutil.which")
    def test_broken_binary_raises_load_error(
        self, mock_which: MagicMock, mock_run: MagicMock,
    ) -> None:
        mock_which.return_value = str(BINARY)
        mock_run.return_value = _completed(returncode=1, stdout="")

        with pytest.raises(EngineLoadError) as exc_info:
            require_ffmpeg()
        assert not isinstance(exc_info.value, FfmpegNotFoundError)


# ---------------------------------------------------------------------------
# Install hint
# ---------------------------------------------------------------------------

class TestInstallHint:
    @pytest.mark.parametrize(
        ("system", "expected"),
        [
            ("Darwin", "brew install ffmpeg"),
            ("Windows", "winget install Gyan.FFmpeg"),
            ("Linux", "apt install ffmpeg"),
        ],
    )
    def test_known_platforms(self, system: str, expected: str) -> None:
        with patch("vidshrink.infra.ffmpeg_detector.platform.system", return_value=system):
            assert expected in install_hint()

    @patch("vidshrink.infra.ffmpeg_detector.platform.system", return_value="Plan9")
    def test_unknown_platform_points_to_download_page(self, _mock_sys: MagicMock) -> None:
        assert "ffmpeg.org" in install_hint()


class TestFfmpegStatus:
    def test_frozen(self) -> None:
        status = FfmpegStatus(executable="ffmpeg")
        with pytest.raises(AttributeError):
            status.version = "7.0"  # type: ignore[misc]
