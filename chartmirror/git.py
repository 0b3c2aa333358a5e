"""
Git Client — Stage, commit and push the mirror working tree.

Wraps the four git operations a publish needs, plus rev-parse for
reporting. Commands run inside the mirror working directory.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from .commands import CommandResult, run_command
from .errors import ExternalCommandFailure

logger = logging.getLogger(__name__)


class GitClient:
    """Runs git commands in one working tree."""

    def __init__(self, repo: Path, binary: str = "git", timeout: Optional[float] = 120):
        self.repo = Path(repo)
        self.binary = binary
        self.timeout = timeout

    def _git(self, *args: str) -> CommandResult:
        return run_command([self.binary, *args], cwd=self.repo, timeout=self.timeout)

    def add_all(self) -> CommandResult:
        return self._git("add", ".").check()

    def has_changes(self) -> bool:
        """
        True when the index differs from HEAD.

        `git diff-index --quiet HEAD` exits 0 for no changes and 1 for
        changes. In a repository without commits there is no HEAD to
        compare against, so anything staged counts as a change. Any other
        exit code (not a repo, corrupt index) is a failure.
        """
        if self._git("rev-parse", "--verify", "--quiet", "HEAD").ok:
            result = self._git("diff-index", "--quiet", "HEAD")
        else:
            logger.debug("No commits yet, comparing staged files against an empty tree")
            result = self._git("diff", "--cached", "--quiet")

        if result.returncode == 0:
            return False
        if result.returncode == 1:
            return True
        raise ExternalCommandFailure(result.args, result.returncode, result.stderr)

    def commit(self, message: str) -> CommandResult:
        return self._git("commit", "-m", message).check()

    def push(self, remote: str = "origin", branch: str = "main") -> CommandResult:
        logger.info(f"Pushing to {remote}/{branch}")
        return self._git("push", remote, branch).check()

    def head(self) -> Optional[str]:
        """Short HEAD hash, or None if it cannot be resolved."""
        result = self._git("rev-parse", "HEAD")
        if not result.ok:
            return None
        return result.stdout.strip()[:12] or None
