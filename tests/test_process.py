"""Unit tests for direnv_action.runtime.process module."""

from __future__ import annotations

import inspect
from unittest.mock import MagicMock, Mock, patch

import pytest

from direnv_action.runtime.models import CommandResult
from direnv_action.runtime.process import (
    EXIT_NOT_EXECUTABLE,
    EXIT_NOT_FOUND,
    _run_command_buffered,
    _run_command_streaming,
    format_command,
    os_error_exit_code,
    run_command,
    stream_pipe,
)


class TestRunCommandBuffered:
    """Tests for _run_command_buffered function."""

    def test_success_returns_command_result(self):
        """Test successful command execution returns CommandResult."""
        with patch("subprocess.run") as mock_run:
            mock_run.return_value = Mock(returncode=0, stdout='{"FOO": "bar"}', stderr="")
            result = _run_command_buffered(["direnv", "export", "json"])
            assert isinstance(result, CommandResult)
            assert result.returncode == 0
            assert result.stdout == '{"FOO": "bar"}'

    def test_failure_is_returned_not_raised(self):
        with patch("subprocess.run") as mock_run:
            mock_run.return_value = Mock(returncode=1, stdout="", stderr="error message")
            result = _run_command_buffered(["direnv", "allow"])
            assert result.returncode == 1
            assert result.stderr == "error message"
            assert mock_run.call_args[1]["check"] is False

    def test_inherits_environment_and_directory(self):
        with patch("subprocess.run") as mock_run:
            mock_run.return_value = Mock(returncode=0, stdout="", stderr="")
            _run_command_buffered(["direnv", "allow"])
            kwargs = mock_run.call_args[1]
            assert "env" not in kwargs
            assert "cwd" not in kwargs


class TestStreamPipe:
    """Tests for stream_pipe helper function."""

    def test_collects_and_forwards_lines(self):
        """Test that lines are collected and forwarded to target."""
        mock_pipe = MagicMock()
        mock_pipe.readline.side_effect = ["line1\n", "line2\n", ""]
        collector: list[str] = []
        target = MagicMock()

        stream_pipe(mock_pipe, collector, target)

        assert collector == ["line1\n", "line2\n"]
        assert target.write.call_count == 2
        target.flush.assert_called()
        mock_pipe.close.assert_called_once()

    def test_without_target_only_collects(self):
        mock_pipe = MagicMock()
        mock_pipe.readline.side_effect = ["only\n", ""]
        collector: list[str] = []

        stream_pipe(mock_pipe, collector)

        assert collector == ["only\n"]


class TestRunCommandStreaming:
    """Tests for _run_command_streaming function."""

    def test_success_streams_and_captures_output(self):
        """Test successful streaming command captures output."""
        with patch("subprocess.Popen") as mock_popen:
            mock_process = MagicMock()
            mock_process.stdout.readline.side_effect = ["installing direnv\n", ""]
            mock_process.stderr.readline.side_effect = ["copying path\n", ""]
            mock_process.wait.return_value = 0
            mock_popen.return_value.__enter__.return_value = mock_process

            result = _run_command_streaming(["nix-env", "-f", "<nixpkgs>", "-i", "direnv"])

            assert result.returncode == 0
            assert result.stdout == "installing direnv\n"
            assert result.stderr == "copying path\n"

    def test_failure_is_returned_with_output(self):
        with patch("subprocess.Popen") as mock_popen:
            mock_process = MagicMock()
            mock_process.stdout.readline.side_effect = [""]
            mock_process.stderr.readline.side_effect = ["error\n", ""]
            mock_process.wait.return_value = 1
            mock_popen.return_value.__enter__.return_value = mock_process

            result = _run_command_streaming(["direnv", "allow"])

            assert result.returncode == 1
            assert result.stderr == "error\n"

    def test_handles_none_pipes(self):
        """Test handles when stdout or stderr are None."""
        with patch("subprocess.Popen") as mock_popen:
            mock_process = MagicMock()
            mock_process.stdout = None
            mock_process.stderr = None
            mock_process.wait.return_value = 0
            mock_popen.return_value.__enter__.return_value = mock_process

            result = _run_command_streaming(["cmd"])

            assert result.returncode == 0
            assert result.stdout == ""
            assert result.stderr == ""


class TestRunCommand:
    """Tests for run_command public API."""

    def test_buffered_mode_by_default(self):
        """Test that buffered mode is used by default."""
        with patch("direnv_action.runtime.process._run_command_buffered") as mock_buffered:
            mock_buffered.return_value = CommandResult(0, "out", "err")
            result = run_command(["direnv", "export", "json"])
            assert result.stdout == "out"
            mock_buffered.assert_called_once()

    def test_streaming_mode_when_live_true(self):
        """Test that streaming mode is used when live=True."""
        with patch("direnv_action.runtime.process._run_command_streaming") as mock_streaming:
            mock_streaming.return_value = CommandResult(0, "out", "err")
            run_command(["direnv", "allow"], live=True)
            mock_streaming.assert_called_once()

    def test_only_live_is_configurable(self):
        params = inspect.signature(run_command).parameters
        assert list(params) == ["args", "live"]

    def test_converts_iterable_to_list(self):
        """Test that iterable args are converted to list."""
        with patch("direnv_action.runtime.process._run_command_buffered") as mock_buffered:
            mock_buffered.return_value = CommandResult(0, "", "")
            run_command(("direnv", "allow"))
            assert mock_buffered.call_args[0][0] == ["direnv", "allow"]

    def test_missing_executable_propagates(self):
        with patch("subprocess.run", side_effect=FileNotFoundError("direnv")):
            with pytest.raises(FileNotFoundError):
                run_command(["direnv", "allow"])

    def test_unexecutable_binary_propagates(self):
        with patch("subprocess.Popen", side_effect=PermissionError(13, "Permission denied", "direnv")):
            with pytest.raises(PermissionError):
                run_command(["direnv", "allow"], live=True)


class TestOsErrorExitCode:
    """Tests for os_error_exit_code."""

    def test_missing_binary_maps_to_127(self):
        assert os_error_exit_code(FileNotFoundError(2, "No such file", "nix")) == EXIT_NOT_FOUND == 127

    def test_permission_denied_maps_to_126(self):
        exc = PermissionError(13, "Permission denied", "direnv")
        assert os_error_exit_code(exc) == EXIT_NOT_EXECUTABLE == 126

    def test_other_launch_errors_map_to_1(self):
        assert os_error_exit_code(OSError(8, "Exec format error")) == 1


def test_format_command_joins_tokens():
    assert format_command(["nix", "profile", "install", "nixpkgs#direnv"]) == (
        "nix profile install nixpkgs#direnv"
    )
