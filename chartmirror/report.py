"""
Sync Report — What a mirror run did.

Returned by MirrorSyncController.run() and printed by `sync --json`.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Literal, Optional

from pydantic import BaseModel, Field


class SkippedChartEntry(BaseModel):
    chart: str
    reason: str


class SyncReport(BaseModel):
    """Outcome of one run. `fetched` holds planned downloads on a dry run."""

    mode: Literal["all", "latest", "specific"]
    mode_detail: str
    base_url: str
    workdir: str
    started_at_iso: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )
    dry_run: bool = False

    targets: int = 0
    fetched: List[str] = Field(default_factory=list)
    existing: List[str] = Field(default_factory=list)
    skipped_charts: List[SkippedChartEntry] = Field(default_factory=list)

    index_consistent: Optional[bool] = None
    committed: bool = False
    pushed: bool = False
    commit: Optional[str] = None
