"""Tests for reposeed.git.runner module."""

from unittest.mock import MagicMock

import pytest

from reposeed.env import add_env
from reposeed.exceptions import ExternalToolError
from reposeed.git.runner import exec_steps, run_command, run_git


def _surrogate_text(raw):
    return raw.decode("utf-8", "surrogateescape")


def _completed(returncode=0, stdout="", stderr=""):
    result = MagicMock()
    result.returncode = returncode
    result.stdout = stdout.encode()
    result.stderr = stderr.encode()
    return result


class TestRunCommand:
    """Tests for run_command function."""

    def test_returns_captured_output(self, mocker):
        """Test that stdout, stderr and status are captured."""
        mocker.patch("subprocess.run", return_value=_completed(stdout="out\n", stderr="warn"))

        result = run_command(["git", "status"])

        assert result.stdout == "out\n"
        assert result.stderr == "warn"
        assert result.returncode == 0
        assert result.args == ["git", "status"]

    def test_keeps_carriage_returns(self, mocker):
        """Test that CRLF and lone CR in output reach the caller unchanged."""
        mocker.patch("subprocess.run", return_value=_completed(stdout="one\r\ntwo\rthree\n"))

        result = run_command(["git", "show"])

        assert result.stdout == "one\r\ntwo\rthree\n"

    def test_undecodable_bytes_round_trip(self, mocker):
        """Test that invalid UTF-8 survives decoding and re-encoding."""
        completed = _completed()
        completed.stdout = b"caf\xe9\n"
        mock_run = mocker.patch("subprocess.run", return_value=completed)

        result = run_command(["git", "show"], input=_surrogate_text(b"\xff\r\n"))

        assert result.stdout.encode("utf-8", "surrogateescape") == b"caf\xe9\n"
        assert mock_run.call_args.kwargs["input"] == b"\xff\r\n"
        assert "text" not in mock_run.call_args.kwargs

    def test_non_zero_exit_raises(self, mocker):
        """Test that a failing command raises ExternalToolError with its result."""
        mocker.patch("subprocess.run", return_value=_completed(returncode=128, stderr="fatal: bad\n"))

        with pytest.raises(ExternalToolError) as exc_info:
            run_command(["git", "log"])

        assert "fatal: bad" in str(exc_info.value)
        assert exc_info.value.result.returncode == 128

    def test_missing_executable_raises(self, mocker):
        """Test that a missing program raises ExternalToolError."""
        mocker.patch("subprocess.run", side_effect=FileNotFoundError())

        with pytest.raises(ExternalToolError) as exc_info:
            run_command(["git", "status"])

        assert "not installed" in str(exc_info.value)

    def test_not_retried(self, mocker):
        """Test that a failure runs the command exactly once."""
        mock_run = mocker.patch("subprocess.run", return_value=_completed(returncode=1))

        with pytest.raises(ExternalToolError):
            run_command(["false"])

        assert mock_run.call_count == 1

    def test_passes_cwd_and_extra_env(self, mocker, temp_dir):
        """Test that the working directory and registered env are used."""
        mock_run = mocker.patch("subprocess.run", return_value=_completed())
        add_env("REPOSEED_TEST_VAR", "value")

        run_command(["git", "status"], cwd=temp_dir)

        kwargs = mock_run.call_args.kwargs
        assert kwargs["cwd"] == str(temp_dir)
        assert kwargs["env"]["REPOSEED_TEST_VAR"] == "value"

    def test_arguments_are_stringified(self, mocker, temp_dir):
        """Test that Path arguments are converted to str."""
        mock_run = mocker.patch("subprocess.run", return_value=_completed())

        run_command(["git", "add", temp_dir / "file.txt"])

        assert mock_run.call_args.args[0] == ["git", "add", str(temp_dir / "file.txt")]


class TestRunGit:
    """Tests for run_git function."""

    def test_strips_output(self, mocker, temp_dir):
        """Test that stdout is stripped."""
        mock_run = mocker.patch("subprocess.run", return_value=_completed(stdout="abc123\n"))

        assert run_git(temp_dir, ["rev-parse", "HEAD"]) == "abc123"
        assert mock_run.call_args.args[0] == ["git", "rev-parse", "HEAD"]


class TestExecSteps:
    """Tests for exec_steps function."""

    def test_runs_in_order(self, mocker, temp_dir):
        """Test that every step runs in order."""
        mock_run = mocker.patch("subprocess.run", return_value=_completed())

        exec_steps(temp_dir, [["git", "init"], ["git", "status"]])

        calls = [c.args[0] for c in mock_run.call_args_list]
        assert calls == [["git", "init"], ["git", "status"]]

    def test_stops_at_first_failure(self, mocker, temp_dir):
        """Test that later steps do not run after a failure."""
        mock_run = mocker.patch(
            "subprocess.run",
            side_effect=[_completed(returncode=1, stderr="nope"), _completed()],
        )

        with pytest.raises(ExternalToolError):
            exec_steps(temp_dir, [["git", "init"], ["git", "status"]])

        assert mock_run.call_count == 1
