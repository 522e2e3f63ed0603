#!/usr/bin/env python3
"""
Azure CLI Runner Module
Locates the az binary and runs az commands as blocking subprocesses.
"""

import logging
import os
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, Optional, Sequence

AZ_EXECUTABLE = "az"
DEFAULT_TIMEOUT_SECONDS = 120
COMMAND_NOT_FOUND_EXIT_CODE = 127

# Checked in order when az is not on PATH
WELL_KNOWN_AZ_DIRS = (
    "/usr/bin",
    "/usr/local/bin",
    "/opt/homebrew/bin",
    "/home/linuxbrew/.linuxbrew/bin",
    "~/.local/bin",
    "/opt/az/bin",
    r"C:\Program Files\Microsoft SDKs\Azure\CLI2\wbin",
    r"C:\Program Files (x86)\Microsoft SDKs\Azure\CLI2\wbin",
)


@dataclass(frozen=True)
class AzCommandResult:
    """Outcome of a single az invocation."""

    args: tuple
    returncode: int
    stdout: str
    stderr: str
    timed_out: bool = False

    @property
    def ok(self) -> bool:
        """True when the command exited with status 0."""
        return self.returncode == 0 and not self.timed_out

    @property
    def error_text(self) -> str:
        """Short, single-line description of why the command failed."""
        if self.timed_out:
            return self.stderr or "command timed out"
        lines = [line.strip() for line in self.stderr.splitlines() if line.strip()]
        if not lines:
            return f"exit code {self.returncode}"
        return lines[-1]


def _executable_names() -> tuple[str, ...]:
    if os.name == "nt":
        return ("az.cmd", "az.exe", AZ_EXECUTABLE)
    return (AZ_EXECUTABLE,)


def find_in_well_known_dirs(search_dirs: Optional[Iterable[str]] = None) -> Optional[str]:
    """
    Look for the az executable in the usual installation directories.

    Args:
        search_dirs: Directories to check instead of WELL_KNOWN_AZ_DIRS

    Returns:
        Full path to the first executable found, or None
    """
    for directory in search_dirs if search_dirs is not None else WELL_KNOWN_AZ_DIRS:
        base = Path(directory).expanduser()
        for name in _executable_names():
            candidate = base / name
            if candidate.is_file() and os.access(candidate, os.X_OK):
                return str(candidate)
    return None


def ensure_az_on_path(
    search_dirs: Optional[Iterable[str]] = None,
    which: Callable[[str], Optional[str]] = shutil.which,
) -> Optional[str]:
    """
    Make sure az resolves on PATH for the rest of the process.

    When az is missing from PATH, the first well-known directory holding it is
    prepended to PATH.

    Returns:
        Path to the az executable, or None when it cannot be found anywhere
    """
    resolved = which(AZ_EXECUTABLE)
    if resolved:
        return resolved

    candidate = find_in_well_known_dirs(search_dirs)
    if candidate is None:
        return None

    directory = str(Path(candidate).parent)
    os.environ["PATH"] = directory + os.pathsep + os.environ.get("PATH", "")
    logging.info("Added %s to PATH for this run", directory)
    return candidate


class AzCliRunner:
    """Runs az commands with JSON output and a per-call timeout."""

    def __init__(self, timeout: float = DEFAULT_TIMEOUT_SECONDS, executable: Optional[str] = None):
        self.timeout = timeout
        self.executable = executable

    def _command(self, args: Sequence[str]) -> list[str]:
        executable = self.executable or shutil.which(AZ_EXECUTABLE) or AZ_EXECUTABLE
        return [executable, *args]

    def run(self, args: Sequence[str]) -> AzCommandResult:
        """Run `az <args>` once and capture its output. Never raises for command failures."""
        cmd = self._command(args)
        logging.debug("Running: az %s", " ".join(args))
        try:
            completed = subprocess.run(
                cmd, capture_output=True, text=True, timeout=self.timeout, check=False
            )
        except subprocess.TimeoutExpired:
            logging.debug("az %s timed out after %ss", " ".join(args[:3]), self.timeout)
            return AzCommandResult(
                args=tuple(args),
                returncode=-1,
                stdout="",
                stderr=f"timed out after {self.timeout}s",
                timed_out=True,
            )
        except FileNotFoundError as exc:
            return AzCommandResult(
                args=tuple(args),
                returncode=COMMAND_NOT_FOUND_EXIT_CODE,
                stdout="",
                stderr=str(exc),
            )

        if completed.returncode != 0:
            logging.debug("az %s failed: %s", " ".join(args[:3]), completed.stderr[:200])
        return AzCommandResult(
            args=tuple(args),
            returncode=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
        )
