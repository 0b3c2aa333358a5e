"""
Target Enumerator — Turn a SyncMode into (chart, version) pairs.

- SpecificChart: the one pair given on the command line
- AllCharts: every chart from `helm search repo`, newest N versions each
- LatestCharts: charts from the discovery API, newest N versions each

Versions are taken in the order helm returns them (newest first) and
are never re-sorted. A chart with no versions is skipped with a warning;
an empty chart list aborts the run.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from .discovery import DiscoveryClient
from .errors import DependencyMissingError, EmptyEnumerationError
from .helm import HelmClient
from .modes import AllCharts, LatestCharts, SpecificChart, SyncMode

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChartTarget:
    chart: str
    version: str

    @property
    def archive_name(self) -> str:
        """File name helm pull writes for this chart version."""
        return f"{self.chart}-{self.version}.tgz"


@dataclass
class SkippedChart:
    chart: str
    reason: str


@dataclass
class EnumerationResult:
    targets: List[ChartTarget] = field(default_factory=list)
    skipped: List[SkippedChart] = field(default_factory=list)


def require_discovery(mode: SyncMode, discovery: Optional[DiscoveryClient]) -> None:
    """Fail fast when --latest is requested without a discovery client."""
    if isinstance(mode, LatestCharts) and discovery is None:
        raise DependencyMissingError(
            "discovery API",
            "--latest needs a package search endpoint. "
            "Set MIRROR_DISCOVERY_URL (e.g. https://artifacthub.io/api/v1/packages/search) and try again.",
        )


def resolve_chart_names(
    mode: SyncMode,
    helm: HelmClient,
    discovery: Optional[DiscoveryClient] = None,
) -> List[str]:
    """Top-level chart list for AllCharts / LatestCharts."""
    if isinstance(mode, AllCharts):
        logger.info(f"Finding all charts in the '{helm.source_repo}' repository...")
        names = helm.list_charts()
    elif isinstance(mode, LatestCharts):
        require_discovery(mode, discovery)
        names = discovery.recently_updated(mode.count)
    else:
        raise TypeError(f"No chart enumeration for {mode!r}")

    if not names:
        raise EmptyEnumerationError("Could not find any charts to process.")
    return names


def enumerate_targets(
    mode: SyncMode,
    helm: HelmClient,
    num_versions: int,
    discovery: Optional[DiscoveryClient] = None,
) -> EnumerationResult:
    """
    Resolve a mode into the ordered list of chart versions to consider.

    Raises:
        DependencyMissingError: LatestCharts without a discovery client.
        EmptyEnumerationError: the top-level chart list came back empty.
        ExternalCommandFailure: helm or the discovery API failed.
    """
    if isinstance(mode, SpecificChart):
        return EnumerationResult(targets=[ChartTarget(mode.chart, mode.version)])

    result = EnumerationResult()
    names = resolve_chart_names(mode, helm, discovery)
    logger.info(f"Found {len(names)} chart(s). Selecting the latest {num_versions} versions of each...")

    for name in names:
        versions = helm.list_versions(name)[:num_versions]
        if not versions:
            logger.warning(f"Could not find versions for {name}. Skipping.", extra={"chart": name})
            result.skipped.append(SkippedChart(name, "no versions found"))
            continue
        result.targets.extend(ChartTarget(name, v) for v in versions)

    return result
