"""
Shared fixtures for mirror tests.

FakeHelm and FakeGit stand in for the helm and git CLIs: FakeHelm writes
archive files on pull and a deterministic index.yaml on repo_index,
FakeGit tracks committed file contents so has_changes() reflects what
actually happened in the working directory.
"""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Dict, Iterable, List, Optional

import pytest
import yaml

from chartmirror.commands import CommandResult
from chartmirror.config import MirrorSettings
from chartmirror.controller import MirrorSyncController
from chartmirror.errors import ExternalCommandFailure
from chartmirror.git import GitClient
from chartmirror.helm import HelmClient


class FakeHelm(HelmClient):
    """In-memory helm: charts and versions come from dicts."""

    def __init__(
        self,
        charts: Optional[Iterable[str]] = None,
        versions: Optional[Dict[str, List[str]]] = None,
        fail_pull: Optional[Iterable[tuple]] = None,
    ):
        super().__init__("bitnami", binary="helm-fake", timeout=None)
        self.charts = list(charts or [])
        self.versions = dict(versions or {})
        self.fail_pull = set(fail_pull or ())
        self.calls: List[tuple] = []
        self._lock = threading.Lock()

    def _record(self, *call) -> None:
        with self._lock:
            self.calls.append(call)

    @property
    def pulls(self) -> List[tuple]:
        return [c[1:] for c in self.calls if c[0] == "pull"]

    def repo_update(self) -> CommandResult:
        self._record("repo_update")
        return CommandResult(args=["helm", "repo", "update"])

    def list_charts(self) -> List[str]:
        self._record("list_charts")
        return list(self.charts)

    def list_versions(self, chart: str) -> List[str]:
        self._record("list_versions", chart)
        return list(self.versions.get(chart, []))

    def pull(self, chart: str, version: str, destination: Path) -> CommandResult:
        self._record("pull", chart, version)
        if (chart, version) in self.fail_pull:
            raise ExternalCommandFailure(["helm", "pull", f"bitnami/{chart}"], 1, "chart not found")
        (Path(destination) / f"{chart}-{version}.tgz").write_bytes(f"{chart}:{version}".encode())
        return CommandResult(args=["helm", "pull"])

    def repo_index(self, directory: Path, url: str) -> CommandResult:
        self._record("repo_index", str(directory), url)
        entries: Dict[str, list] = {}
        for archive in sorted(Path(directory).glob("*.tgz")):
            chart, _, version = archive.name[: -len(".tgz")].rpartition("-")
            entries.setdefault(chart, []).append(
                {"name": chart, "version": version, "urls": [f"{url}/{archive.name}"]}
            )
        index = {"apiVersion": "v1", "entries": entries}
        (Path(directory) / "index.yaml").write_text(yaml.safe_dump(index, sort_keys=True))
        return CommandResult(args=["helm", "repo", "index"])


class FakeGit(GitClient):
    """Tracks the committed snapshot of the working directory."""

    def __init__(self, repo: Path, fail_push: bool = False):
        super().__init__(repo, binary="git-fake")
        self.fail_push = fail_push
        self.committed = self._snapshot()
        self.staged = dict(self.committed)
        self.commits: List[str] = []
        self.pushes: List[tuple] = []

    def _snapshot(self) -> Dict[str, bytes]:
        return {
            p.name: p.read_bytes()
            for p in sorted(self.repo.iterdir())
            if p.is_file()
        }

    def add_all(self) -> CommandResult:
        self.staged = self._snapshot()
        return CommandResult(args=["git", "add", "."])

    def has_changes(self) -> bool:
        return self.staged != self.committed

    def commit(self, message: str) -> CommandResult:
        self.committed = dict(self.staged)
        self.commits.append(message)
        return CommandResult(args=["git", "commit"])

    def push(self, remote: str = "origin", branch: str = "main") -> CommandResult:
        if self.fail_push:
            raise ExternalCommandFailure(["git", "push", remote, branch], 1, "rejected")
        self.pushes.append((remote, branch))
        return CommandResult(args=["git", "push"])

    def head(self) -> Optional[str]:
        return f"c{len(self.commits):011d}" if self.commits else None


@pytest.fixture
def workdir(tmp_path: Path) -> Path:
    repo = tmp_path / "helm-repo"
    repo.mkdir()
    return repo


@pytest.fixture
def settings() -> MirrorSettings:
    return MirrorSettings(github_user="octo", github_repo="charts", num_versions=2)


@pytest.fixture
def helm() -> FakeHelm:
    return FakeHelm(
        charts=["wordpress", "redis"],
        versions={
            "wordpress": ["19.2.2", "19.2.1", "19.2.0"],
            "redis": ["18.0.1", "18.0.0"],
        },
    )


@pytest.fixture
def git(workdir: Path) -> FakeGit:
    return FakeGit(workdir)


@pytest.fixture
def make_controller(settings, workdir, helm, git):
    """Factory for a controller with fake collaborators and no PATH checks."""

    def _make(discovery=None, **overrides) -> MirrorSyncController:
        return MirrorSyncController(
            overrides.get("settings", settings),
            workdir,
            helm=overrides.get("helm", helm),
            git=overrides.get("git", git),
            discovery=discovery,
            cancel_event=overrides.get("cancel_event"),
            check_tools=False,
        )

    return _make
