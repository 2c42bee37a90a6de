"""Subprocess execution with Result-based error handling.

Every external tool of the release pipeline (git-cliff, cargo, gh, git) is
run through one of two helpers:

- `run` captures stdout/stderr, for commands whose output is parsed.
- `run_silent` lets the tool write straight to the terminal, for steps whose
  own output is the useful log (changelog generation, semver checks, publish).

Neither helper retries. A non-zero exit, a missing binary or a timeout all
come back as Err(ProcessError).
"""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from pathlib import Path

from relutil.core.result import Err, Ok, Result

__all__ = ["ProcessError", "run", "run_silent"]


@dataclass(frozen=True, slots=True)
class ProcessError:
    """Error from a failed subprocess execution.

    Attributes:
        command: The command that was executed.
        returncode: The exit code of the process (-1 if it never ran).
        stdout: Standard output (may be empty).
        stderr: Standard error (contains error details).
        not_found: True if the executable could not be found.
    """

    command: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str
    not_found: bool = False

    @property
    def program(self) -> str:
        return self.command[0] if self.command else ""

    def __str__(self) -> str:
        if self.not_found:
            return f"{self.program}: command not found"
        cmd_str = " ".join(self.command[:3])
        if len(self.command) > 3:
            cmd_str += " ..."
        return f"{cmd_str} failed (exit {self.returncode})"


def _launch_error(cmd: list[str], e: OSError) -> ProcessError:
    return ProcessError(
        command=tuple(cmd),
        returncode=-1,
        stdout="",
        stderr=str(e),
        not_found=isinstance(e, FileNotFoundError),
    )


def run(
    cmd: list[str],
    cwd: Path,
    env: dict[str, str] | None = None,
    *,
    timeout: float | None = None,
) -> Result[str, ProcessError]:
    """Execute a command and return its stdout.

    Args:
        cmd: Command and arguments to execute.
        cwd: Working directory for the command.
        env: Environment variables (uses current env if None).
        timeout: Maximum seconds to wait (None for no limit).

    Returns:
        Ok(stdout) on success, Err(ProcessError) on failure.
    """
    try:
        proc = subprocess.run(
            cmd,
            cwd=str(cwd),
            env=env,
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired as e:
        return Err(
            ProcessError(
                command=tuple(cmd),
                returncode=-1,
                stdout=e.stdout if isinstance(e.stdout, str) else "",
                stderr=f"Command timed out after {timeout}s",
            )
        )
    except OSError as e:
        return Err(_launch_error(cmd, e))

    if proc.returncode != 0:
        return Err(
            ProcessError(
                command=tuple(cmd),
                returncode=proc.returncode,
                stdout=proc.stdout,
                stderr=proc.stderr,
            )
        )

    return Ok(proc.stdout)


def run_silent(
    cmd: list[str],
    cwd: Path,
    env: dict[str, str] | None = None,
) -> Result[None, ProcessError]:
    """Execute a command with its output streaming to the terminal.

    Args:
        cmd: Command and arguments to execute.
        cwd: Working directory for the command.
        env: Environment variables (uses current env if None).

    Returns:
        Ok(None) on success, Err(ProcessError) on failure. The error carries
        no output since it was not captured.
    """
    try:
        proc = subprocess.run(
            cmd,
            cwd=str(cwd),
            env=env,
            check=False,
        )
    except OSError as e:
        return Err(_launch_error(cmd, e))

    if proc.returncode != 0:
        return Err(
            ProcessError(
                command=tuple(cmd),
                returncode=proc.returncode,
                stdout="",
                stderr="",
            )
        )

    return Ok(None)
