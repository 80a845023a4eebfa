"""Subprocess execution with Result-based error handling.

Every git call goes through ``run`` so that timeouts, missing executables
and non-zero exits all come back as a ``ProcessError`` value:

    match run(["git", "rev-parse", "v1.2.0^{commit}"], cwd=mirror):
        case Ok(stdout):
            sha = stdout.strip()
        case Err(error):
            console.warning(str(error))
"""

from __future__ import annotations

import os
import subprocess
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path

from relwatch.core.result import Err, Ok, Result

__all__ = ["NOT_RUN", "ProcessError", "run"]

# Exit status reported when the process never ran or was killed on timeout.
NOT_RUN = -1


@dataclass(frozen=True, slots=True)
class ProcessError:
    """A subprocess that could not run or exited non-zero.

    Attributes:
        command: The command that was executed.
        returncode: Exit status, NOT_RUN when there is none.
        stdout: Standard output (may be empty).
        stderr: Standard error, or the reason the process did not finish.
    """

    command: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str

    @property
    def short_command(self) -> str:
        head = " ".join(self.command[:3])
        return head + " ..." if len(self.command) > 3 else head

    def __str__(self) -> str:
        if self.returncode == NOT_RUN:
            return f"{self.short_command}: {self.stderr.strip() or 'did not run'}"
        return f"{self.short_command} exited with {self.returncode}"


def _environment(extra: Mapping[str, str] | None) -> dict[str, str] | None:
    if not extra:
        return None
    return {**os.environ, **extra}


def run(
    cmd: Sequence[str],
    cwd: Path,
    env: Mapping[str, str] | None = None,
    *,
    timeout: float | None = None,
) -> Result[str, ProcessError]:
    """Execute ``cmd`` in ``cwd`` and return its stdout.

    ``env`` holds variables layered over the current environment. Output is
    decoded as UTF-8 with replacement so commit messages in odd encodings
    never abort a run.
    """
    command = tuple(cmd)
    try:
        proc = subprocess.run(
            command,
            cwd=cwd,
            env=_environment(env),
            capture_output=True,
            encoding="utf-8",
            errors="replace",
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired:
        return Err(ProcessError(command, NOT_RUN, "", f"timed out after {timeout}s"))
    except OSError as e:
        return Err(ProcessError(command, NOT_RUN, "", str(e)))

    if proc.returncode != 0:
        return Err(ProcessError(command, proc.returncode, proc.stdout, proc.stderr))
    return Ok(proc.stdout)
