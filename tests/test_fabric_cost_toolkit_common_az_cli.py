"""Tests for fabric_cost_toolkit/common/az_cli.py"""

from __future__ import annotations

import os
import subprocess
from unittest.mock import MagicMock, patch

from fabric_cost_toolkit.common.az_cli import (
    AzCliRunner,
    AzCommandResult,
    ensure_az_on_path,
    find_in_well_known_dirs,
)
from tests.assertions import assert_equal
from tests.conftest_test_values import TEST_COMMAND_FAILED_EXIT_CODE, TEST_TIMEOUT_SECONDS


def _make_executable(directory, name="az"):
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / name
    path.write_text("#!/bin/sh\n")
    path.chmod(0o755)
    return path


class TestAzCommandResult:
    """Tests for AzCommandResult helpers."""

    def test_ok_for_zero_exit(self):
        """Exit code 0 is success."""
        result = AzCommandResult(args=("account", "show"), returncode=0, stdout="{}", stderr="")
        assert result.ok

    def test_not_ok_when_timed_out(self):
        """A timed-out call is never ok."""
        result = AzCommandResult(args=(), returncode=0, stdout="", stderr="", timed_out=True)
        assert not result.ok
        assert_equal(result.error_text, "command timed out")

    def test_error_text_uses_last_stderr_line(self):
        """The last non-blank stderr line is the most useful one."""
        result = AzCommandResult(
            args=(),
            returncode=TEST_COMMAND_FAILED_EXIT_CODE,
            stdout="",
            stderr="WARNING: something\nERROR: Please run 'az login' to setup account.\n\n",
        )
        assert_equal(result.error_text, "ERROR: Please run 'az login' to setup account.")

    def test_error_text_falls_back_to_exit_code(self):
        """Without stderr the exit code is reported."""
        result = AzCommandResult(args=(), returncode=3, stdout="", stderr="")
        assert_equal(result.error_text, "exit code 3")


class TestLocateAz:
    """Tests for locating the az executable."""

    def test_find_in_well_known_dirs(self, tmp_path):
        """The first directory containing az wins."""
        empty = tmp_path / "empty"
        empty.mkdir()
        first = _make_executable(tmp_path / "first")
        _make_executable(tmp_path / "second")

        found = find_in_well_known_dirs([str(empty), str(first.parent), str(tmp_path / "second")])

        assert_equal(found, str(first))

    def test_find_in_well_known_dirs_none(self, tmp_path):
        """None when no directory has az."""
        assert find_in_well_known_dirs([str(tmp_path)]) is None

    def test_ensure_az_on_path_already_resolvable(self, monkeypatch):
        """PATH is untouched when az already resolves."""
        monkeypatch.setenv("PATH", "/bin")
        found = ensure_az_on_path(search_dirs=[], which=lambda _: "/usr/local/bin/az")
        assert_equal(found, "/usr/local/bin/az")
        assert_equal(os.environ["PATH"], "/bin")

    def test_ensure_az_on_path_prepends_directory(self, tmp_path, monkeypatch):
        """A well-known directory holding az is prepended to PATH."""
        monkeypatch.setenv("PATH", "/bin")
        executable = _make_executable(tmp_path / "azure-cli" / "bin")

        found = ensure_az_on_path(search_dirs=[str(executable.parent)], which=lambda _: None)

        assert_equal(found, str(executable))
        assert os.environ["PATH"].startswith(str(executable.parent) + os.pathsep)

    def test_ensure_az_on_path_not_found(self, tmp_path, monkeypatch):
        """None and unchanged PATH when az is nowhere."""
        monkeypatch.setenv("PATH", "/bin")
        assert ensure_az_on_path(search_dirs=[str(tmp_path)], which=lambda _: None) is None
        assert_equal(os.environ["PATH"], "/bin")


class TestAzCliRunner:
    """Tests for AzCliRunner.run."""

    def test_run_success(self):
        """Output and exit code are captured."""
        completed = MagicMock(returncode=0, stdout='{"id": "abc"}', stderr="")
        runner = AzCliRunner(timeout=TEST_TIMEOUT_SECONDS, executable="/usr/bin/az")

        with patch("fabric_cost_toolkit.common.az_cli.subprocess.run", return_value=completed) as mock_run:
            result = runner.run(["account", "show"])

        mock_run.assert_called_once_with(
            ["/usr/bin/az", "account", "show"],
            capture_output=True,
            text=True,
            timeout=TEST_TIMEOUT_SECONDS,
            check=False,
        )
        assert result.ok
        assert_equal(result.stdout, '{"id": "abc"}')
        assert_equal(result.args, ("account", "show"))

    def test_run_failure_is_returned_not_raised(self):
        """A non-zero exit is reported through the result."""
        completed = MagicMock(returncode=1, stdout="", stderr="ERROR: not logged in")
        runner = AzCliRunner(executable="az")

        with patch("fabric_cost_toolkit.common.az_cli.subprocess.run", return_value=completed):
            result = runner.run(["account", "show"])

        assert not result.ok
        assert_equal(result.error_text, "ERROR: not logged in")

    def test_run_timeout(self):
        """A timeout becomes a failed result."""
        runner = AzCliRunner(timeout=TEST_TIMEOUT_SECONDS, executable="az")

        with patch(
            "fabric_cost_toolkit.common.az_cli.subprocess.run",
            side_effect=subprocess.TimeoutExpired(cmd="az", timeout=TEST_TIMEOUT_SECONDS),
        ):
            result = runner.run(["fabric", "capacity", "list"])

        assert result.timed_out
        assert not result.ok
        assert "timed out" in result.error_text

    def test_run_missing_executable(self):
        """A vanished executable becomes exit code 127."""
        runner = AzCliRunner(executable="/nonexistent/az")

        with patch(
            "fabric_cost_toolkit.common.az_cli.subprocess.run",
            side_effect=FileNotFoundError("No such file or directory"),
        ):
            result = runner.run(["account", "show"])

        assert_equal(result.returncode, 127)
        assert not result.ok
