"""
Index & Publish — Rebuild index.yaml, then commit and push if anything changed.

The index is always regenerated from every archive in the working
directory. Publishing stages everything, and only commits (and pushes)
when the staged tree differs from HEAD.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from .git import GitClient
from .helm import HelmClient
from .index import IndexDrift, check_index

logger = logging.getLogger(__name__)

COMMIT_PREFIX = "Update Helm charts"


@dataclass
class PublishResult:
    committed: bool = False
    pushed: bool = False
    commit: Optional[str] = None
    message: Optional[str] = None


def commit_message(now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    return f"{COMMIT_PREFIX} - {now.strftime('%a %b %d %H:%M:%S %Z %Y')}"


class Publisher:
    """Regenerates the repository index and publishes the working tree."""

    def __init__(
        self,
        helm: HelmClient,
        git: GitClient,
        workdir: Path,
        base_url: str,
        remote: str = "origin",
        branch: str = "main",
    ):
        self.helm = helm
        self.git = git
        self.workdir = Path(workdir)
        self.base_url = base_url
        self.remote = remote
        self.branch = branch

    def reindex(self) -> IndexDrift:
        """Rewrite index.yaml from the archives on disk and verify it."""
        logger.info(f"Re-indexing the repository with URL {self.base_url}")
        self.helm.repo_index(self.workdir, self.base_url)

        drift = check_index(self.workdir)
        if not drift.consistent:
            logger.warning(
                f"index.yaml does not match archives on disk: "
                f"{len(drift.unindexed)} unindexed, {len(drift.dangling)} dangling"
            )
        return drift

    def publish(self, push: bool = True) -> PublishResult:
        """Stage all changes; commit and push only if the tree changed."""
        self.git.add_all()

        if not self.git.has_changes():
            logger.info("No new chart versions to commit. Repository is up-to-date.")
            return PublishResult()

        message = commit_message()
        self.git.commit(message)
        result = PublishResult(committed=True, commit=self.git.head(), message=message)
        logger.info(f"Committed {result.commit or 'changes'}: {message}")

        if push:
            self.git.push(self.remote, self.branch)
            result.pushed = True
            logger.info("Pushed. It may take a minute for GitHub Pages to update.")
        else:
            logger.info("Push skipped (--no-push)")

        return result
