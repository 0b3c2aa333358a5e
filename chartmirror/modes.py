"""
Sync Modes — Resolve command-line options into exactly one SyncMode.

Three mutually exclusive modes:

- AllCharts: latest versions of every chart in the source repo (default)
- LatestCharts(count): latest versions of the `count` most recently updated charts
- SpecificChart(chart, version): one exact chart version

resolve_mode() is pure: it performs no external calls, so a usage error
is always reported before anything touches helm, git or the network.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Optional, Sequence, Union

from .errors import UsageError

logger = logging.getLogger(__name__)

_COUNT_RE = re.compile(r"^[0-9]+$")


@dataclass(frozen=True)
class AllCharts:
    name = "all"

    def describe(self) -> str:
        return "Full Sync (--all)"


@dataclass(frozen=True)
class LatestCharts:
    count: int
    name = "latest"

    def describe(self) -> str:
        return f"Latest {self.count} Charts"


@dataclass(frozen=True)
class SpecificChart:
    chart: str
    version: str
    name = "specific"

    def describe(self) -> str:
        return f"Specific Chart ({self.chart} {self.version})"


SyncMode = Union[AllCharts, LatestCharts, SpecificChart]


def _given_flags(
    all_charts: bool,
    latest: Optional[str],
    chart: Optional[str],
    version: Optional[str],
) -> list:
    flags = []
    if all_charts:
        flags.append("all")
    if latest is not None:
        flags.append("latest")
    if chart is not None:
        flags.append("chart")
    if version is not None:
        flags.append("version")
    return flags


def resolve_mode(
    all_charts: bool = False,
    latest: Optional[str] = None,
    chart: Optional[str] = None,
    version: Optional[str] = None,
    order: Optional[Sequence[str]] = None,
) -> SyncMode:
    """
    Turn raw option values into a SyncMode.

    Args:
        all_charts: --all was given.
        latest: raw --latest value (validated here, not by the parser).
        chart: --chart value.
        version: --version value.
        order: flag names ("all", "latest", "chart", "version") in the order
            they appeared on the command line. Derived from the values when
            omitted.

    Raises:
        UsageError: for any malformed or conflicting combination.
    """
    flags = list(order) if order is not None else _given_flags(all_charts, latest, chart, version)

    if not flags:
        logger.info("No options provided. Defaulting to '--all' mode.")
        return AllCharts()

    if "version" in flags:
        first_version = flags.index("version")
        if "chart" not in flags[:first_version]:
            raise UsageError("--version can only be used with --chart.")

    if latest is not None and not _COUNT_RE.match(latest):
        raise UsageError("--latest requires a number.")

    groups = {"specific" if f in ("chart", "version") else f for f in flags}
    if len(groups) > 1:
        raise UsageError("--all, --latest and --chart/--version cannot be combined.")

    if "latest" in groups:
        return LatestCharts(count=int(latest))

    if "specific" in groups:
        if not chart:
            raise UsageError("--chart requires a name.")
        if version is None:
            raise UsageError("--version is required when using --chart.")
        if not version:
            raise UsageError("--version requires a version number.")
        return SpecificChart(chart=chart, version=version)

    return AllCharts()
