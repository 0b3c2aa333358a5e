"""
Mirror Sync Controller — Orchestrates one mirror run.

    resolve mode -> preflight -> helm repo update -> enumerate targets
        -> fetch missing archives -> reindex -> commit/push

Every step either completes or raises a MirrorError; nothing is retried.
Re-running is the recovery path, and it is cheap because archives that
already exist are never downloaded again.

## Usage

    from chartmirror.config import MirrorSettings
    from chartmirror.controller import MirrorSyncController
    from chartmirror.modes import LatestCharts

    controller = MirrorSyncController.from_settings(MirrorSettings.from_env(), Path("."))
    report = controller.run(LatestCharts(5))
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Optional

from .config import MirrorSettings
from .discovery import DiscoveryClient
from .enumerator import enumerate_targets, require_discovery
from .errors import SyncCancelled
from .fetcher import IncrementalFetcher
from .git import GitClient
from .helm import HelmClient
from .modes import SyncMode
from .publisher import Publisher
from .report import SkippedChartEntry, SyncReport
from .tools import require_tools

logger = logging.getLogger(__name__)


class MirrorSyncController:
    """Runs the mirror state machine against explicit collaborators."""

    def __init__(
        self,
        settings: MirrorSettings,
        workdir: Path,
        helm: HelmClient,
        git: GitClient,
        discovery: Optional[DiscoveryClient] = None,
        cancel_event: Optional[threading.Event] = None,
        check_tools: bool = True,
    ):
        self.settings = settings
        self.workdir = Path(workdir)
        self.helm = helm
        self.git = git
        self.discovery = discovery
        self.cancel_event = cancel_event or threading.Event()
        self.check_tools = check_tools

    @classmethod
    def from_settings(
        cls,
        settings: MirrorSettings,
        workdir: Path,
        cancel_event: Optional[threading.Event] = None,
    ) -> "MirrorSyncController":
        """Build a controller with real helm/git/discovery clients."""
        discovery = None
        if settings.discovery_enabled:
            discovery = DiscoveryClient(
                settings.discovery_url,
                settings.discovery_org,
                timeout=settings.http_timeout,
            )
        return cls(
            settings,
            workdir,
            helm=HelmClient(settings.source_repo, timeout=settings.helm_timeout),
            git=GitClient(workdir),
            discovery=discovery,
            cancel_event=cancel_event,
        )

    def cancel(self) -> None:
        """Stop issuing downloads; in-flight ones finish."""
        if not self.cancel_event.is_set():
            logger.warning("Cancellation requested, finishing in-flight downloads...")
        self.cancel_event.set()

    def preflight(self, mode: SyncMode) -> None:
        """Fail before any external call if a required tool is missing."""
        if self.check_tools:
            require_tools()
        require_discovery(mode, self.discovery)

    def run(self, mode: SyncMode, dry_run: bool = False, push: bool = True) -> SyncReport:
        """
        Execute one run.

        Raises:
            DependencyMissingError: helm/git missing, or --latest without discovery.
            EmptyEnumerationError: upstream returned no charts.
            ExternalCommandFailure: any helm/git/discovery call failed.
            SyncCancelled: cancel() was called before all downloads started.
        """
        report = SyncReport(
            mode=mode.name,
            mode_detail=mode.describe(),
            base_url=self.settings.base_url,
            workdir=str(self.workdir),
            dry_run=dry_run,
        )
        logger.info(f"Mode: {mode.describe()}")
        logger.info(f"Helm Repo URL will be: {self.settings.base_url}")

        self.preflight(mode)
        self.helm.repo_update()

        enumeration = enumerate_targets(
            mode, self.helm, self.settings.num_versions, self.discovery
        )
        report.targets = len(enumeration.targets)
        report.skipped_charts = [
            SkippedChartEntry(chart=s.chart, reason=s.reason) for s in enumeration.skipped
        ]

        fetcher = IncrementalFetcher(
            self.helm,
            self.workdir,
            workers=self.settings.workers,
            cancel_event=self.cancel_event,
        )

        if dry_run:
            plan = fetcher.plan(enumeration.targets)
            report.fetched = [t.archive_name for t in plan.fetched]
            report.existing = [t.archive_name for t in plan.existing]
            logger.info(f"Dry run: {len(plan.fetched)} archive(s) would be fetched")
            return report

        fetched = fetcher.fetch_all(enumeration.targets)
        report.fetched = [t.archive_name for t in fetched.fetched]
        report.existing = [t.archive_name for t in fetched.existing]

        if self.cancel_event.is_set():
            raise SyncCancelled("Cancelled after downloads; index and publish skipped")

        publisher = Publisher(
            self.helm,
            self.git,
            self.workdir,
            self.settings.base_url,
            remote=self.settings.git_remote,
            branch=self.settings.git_branch,
        )
        drift = publisher.reindex()
        report.index_consistent = drift.consistent

        published = publisher.publish(push=push)
        report.committed = published.committed
        report.pushed = published.pushed
        report.commit = published.commit

        return report
