"""
Helm Client — Thin wrapper over the helm CLI.

All chart listing, downloading and indexing is delegated to helm:

    helm repo update <source>
    helm search repo <source>/ --max-col-width 200
    helm search repo <source>/<chart> --versions --max-col-width 200
    helm pull <source>/<chart> --version <v> --destination <dir>
    helm repo index <dir> --url <url>
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from .commands import CommandResult, run_command

logger = logging.getLogger(__name__)

MAX_COL_WIDTH = "200"
NO_RESULTS = "No results found"


def parse_search_column(output: str, column: int) -> List[str]:
    """
    Extract one whitespace-separated column from `helm search repo` output.

    The header row is dropped, blank lines and the "No results found"
    message yield nothing. Row order is preserved.
    """
    values = []
    lines = output.splitlines()
    for line in lines[1:]:
        if not line.strip() or line.strip().startswith(NO_RESULTS):
            continue
        parts = line.split()
        if len(parts) > column:
            values.append(parts[column])
    return values


class HelmClient:
    """Runs helm commands against one source repository alias."""

    def __init__(
        self,
        source_repo: str = "bitnami",
        binary: str = "helm",
        timeout: Optional[float] = 300,
    ):
        self.source_repo = source_repo
        self.binary = binary
        self.timeout = timeout

    def _run(self, *args: str, cwd: Optional[Path] = None) -> CommandResult:
        return run_command([self.binary, *args], cwd=cwd, timeout=self.timeout)

    def repo_update(self) -> CommandResult:
        logger.info(f"Updating the '{self.source_repo}' Helm repository...")
        return self._run("repo", "update", self.source_repo).check()

    def list_charts(self) -> List[str]:
        """All chart names in the source repo, as helm returns them."""
        prefix = f"{self.source_repo}/"
        result = self._run("search", "repo", prefix, "--max-col-width", MAX_COL_WIDTH).check()
        names = []
        for full_name in parse_search_column(result.stdout, 0):
            names.append(full_name[len(prefix):] if full_name.startswith(prefix) else full_name)
        return names

    def list_versions(self, chart: str) -> List[str]:
        """Every published version of a chart, newest first."""
        result = self._run(
            "search", "repo", f"{self.source_repo}/{chart}",
            "--versions", "--max-col-width", MAX_COL_WIDTH,
        ).check()
        prefix = f"{self.source_repo}/"
        # The search is a substring match, keep only rows of this exact chart
        rows = []
        for line in result.stdout.splitlines()[1:]:
            parts = line.split()
            if len(parts) >= 2 and parts[0] == f"{prefix}{chart}":
                rows.append(parts[1])
        return rows

    def pull(self, chart: str, version: str, destination: Path) -> CommandResult:
        return self._run(
            "pull", f"{self.source_repo}/{chart}",
            "--version", version,
            "--destination", str(destination),
        ).check()

    def repo_index(self, directory: Path, url: str) -> CommandResult:
        return self._run("repo", "index", str(directory), "--url", url).check()
