"""
Command Runner — Run delegated CLI commands and capture their result.

Every helm/git invocation goes through run_command(), which never raises
on a non-zero exit. Callers inspect the CommandResult, or call check()
to turn a failure into ExternalCommandFailure.
"""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence

from .errors import ExternalCommandFailure

logger = logging.getLogger(__name__)


@dataclass
class CommandResult:
    """Outcome of one delegated command."""

    args: List[str] = field(default_factory=list)
    returncode: int = 0
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    def check(self) -> "CommandResult":
        """Raise ExternalCommandFailure unless the command succeeded."""
        if not self.ok:
            raise ExternalCommandFailure(self.args, self.returncode, self.stderr or self.stdout)
        return self


def run_command(
    args: Sequence[str],
    cwd: Optional[Path] = None,
    timeout: Optional[float] = None,
) -> CommandResult:
    """
    Run a command and capture its output.

    A missing binary or a timeout is reported as ExternalCommandFailure,
    since neither leaves a meaningful exit code to inspect.

    The child runs in its own session: a terminal Ctrl-C signals only
    this process, and a running command is left to complete.
    """
    cmd = [str(a) for a in args]
    logger.debug(f"Running: {' '.join(cmd)}")

    try:
        proc = subprocess.run(
            cmd,
            cwd=str(cwd) if cwd else None,
            capture_output=True,
            text=True,
            timeout=timeout,
            start_new_session=True,
        )
    except FileNotFoundError as e:
        raise ExternalCommandFailure(cmd, None, f"executable not found: {e.filename}") from e
    except subprocess.TimeoutExpired as e:
        raise ExternalCommandFailure(cmd, None, f"timed out after {e.timeout}s") from e

    result = CommandResult(
        args=cmd,
        returncode=proc.returncode,
        stdout=proc.stdout or "",
        stderr=proc.stderr or "",
    )
    if not result.ok:
        logger.debug(f"Exit {result.returncode}: {' '.join(cmd)}")
    return result
