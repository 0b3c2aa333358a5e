"""
Incremental Fetcher — Download chart archives that are not on disk yet.

A chart version counts as synced when `<chart>-<version>.tgz` exists in
the working directory. Nothing is checksummed and nothing is retried:
the first failed `helm pull` aborts the run, and re-running is cheap
because already downloaded archives are skipped.

With workers > 1 downloads run on a thread pool. After a failure or a
cancellation no new downloads are started; in-flight ones are allowed
to finish before the error is raised.
"""

from __future__ import annotations

import logging
import threading
from collections import deque
from concurrent.futures import FIRST_COMPLETED, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from .enumerator import ChartTarget
from .errors import MirrorError, SyncCancelled
from .helm import HelmClient

logger = logging.getLogger(__name__)


@dataclass
class FetchResult:
    fetched: List[ChartTarget] = field(default_factory=list)
    existing: List[ChartTarget] = field(default_factory=list)


def archive_path(workdir: Path, target: ChartTarget) -> Path:
    return Path(workdir) / target.archive_name


def local_archives(workdir: Path) -> List[str]:
    """Sorted names of all chart archives in the working directory."""
    return sorted(p.name for p in Path(workdir).glob("*.tgz") if p.is_file())


class IncrementalFetcher:
    """Ensures a local archive exists for each target."""

    def __init__(
        self,
        helm: HelmClient,
        workdir: Path,
        workers: int = 1,
        cancel_event: Optional[threading.Event] = None,
    ):
        self.helm = helm
        self.workdir = Path(workdir)
        self.workers = max(1, workers)
        self.cancel_event = cancel_event or threading.Event()

    @property
    def cancelled(self) -> bool:
        return self.cancel_event.is_set()

    def plan(self, targets: Iterable[ChartTarget]) -> FetchResult:
        """Split targets into already-present and missing, without downloading."""
        plan = FetchResult()
        seen = set()
        for target in targets:
            if target in seen:
                continue
            seen.add(target)
            if archive_path(self.workdir, target).is_file():
                plan.existing.append(target)
            else:
                plan.fetched.append(target)
        return plan

    def fetch_all(self, targets: Iterable[ChartTarget]) -> FetchResult:
        """
        Download every missing target.

        Raises:
            ExternalCommandFailure: a helm pull failed.
            SyncCancelled: the cancel event was set with downloads left.
        """
        plan = self.plan(targets)
        result = FetchResult(existing=plan.existing)

        for target in plan.existing:
            logger.info(
                f"{target.chart} {target.version} already exists. Skipping.",
                extra={"chart": target.chart, "version": target.version},
            )

        if self.workers == 1:
            self._fetch_sequential(plan.fetched, result)
        else:
            self._fetch_parallel(plan.fetched, result)

        logger.info(f"Fetched {len(result.fetched)}, skipped {len(result.existing)} existing")
        return result

    def _pull(self, target: ChartTarget) -> ChartTarget:
        logger.info(
            f"Pulling {target.chart} version {target.version}...",
            extra={"chart": target.chart, "version": target.version},
        )
        self.helm.pull(target.chart, target.version, self.workdir)
        return target

    def _fetch_sequential(self, missing: List[ChartTarget], result: FetchResult) -> None:
        for index, target in enumerate(missing):
            if self.cancelled:
                raise SyncCancelled(f"Cancelled with {len(missing) - index} download(s) not started")
            result.fetched.append(self._pull(target))

    def _fetch_parallel(self, missing: List[ChartTarget], result: FetchResult) -> None:
        queue = deque(missing)
        running: Dict = {}
        failure: Optional[MirrorError] = None

        with ThreadPoolExecutor(max_workers=self.workers, thread_name_prefix="chart-pull") as pool:
            while queue or running:
                while queue and len(running) < self.workers and failure is None and not self.cancelled:
                    target = queue.popleft()
                    running[pool.submit(self._pull, target)] = target

                if not running:
                    break

                done, _ = wait(running, return_when=FIRST_COMPLETED)
                for future in done:
                    target = running.pop(future)
                    try:
                        result.fetched.append(future.result())
                    except MirrorError as e:
                        logger.error(
                            f"Pull of {target.chart} {target.version} failed",
                            extra={"chart": target.chart, "version": target.version},
                        )
                        if failure is None:
                            failure = e

        if failure is not None:
            raise failure
        if queue:
            raise SyncCancelled(f"Cancelled with {len(queue)} download(s) not started")
