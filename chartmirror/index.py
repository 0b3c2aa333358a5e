"""
Repository Index — Read index.yaml and compare it with the archives on disk.

`helm repo index` owns writing the index. This module only reads it back
to check that every archive is listed and every listed archive exists.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Set

import yaml

from .fetcher import local_archives

logger = logging.getLogger(__name__)

INDEX_FILE = "index.yaml"


@dataclass
class IndexDrift:
    """Differences between index.yaml and the archives on disk."""

    index_found: bool = True
    unindexed: List[str] = field(default_factory=list)  # archive on disk, not in index
    dangling: List[str] = field(default_factory=list)  # index entry, no archive

    @property
    def consistent(self) -> bool:
        return self.index_found and not self.unindexed and not self.dangling

    def to_dict(self) -> Dict[str, Any]:
        return {
            "index_found": self.index_found,
            "consistent": self.consistent,
            "unindexed": self.unindexed,
            "dangling": self.dangling,
        }


def load_index(path: Path) -> Dict[str, Any]:
    with Path(path).open("r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def archive_charts(index: Dict[str, Any]) -> Dict[str, str]:
    """
    Map each archive file name referenced by an index to its chart name.

    Each entry's first URL ends with the archive name, whatever base URL
    the index was stamped with.
    """
    charts: Dict[str, str] = {}
    for chart, versions in (index.get("entries") or {}).items():
        for entry in versions or []:
            urls = entry.get("urls") or []
            if urls:
                charts[str(urls[0]).rsplit("/", 1)[-1]] = chart
            else:
                charts[f"{chart}-{entry.get('version')}.tgz"] = chart
    return charts


def indexed_archives(index: Dict[str, Any]) -> Set[str]:
    """Archive file names referenced by an index."""
    return set(archive_charts(index))


def guess_chart(archive: str) -> str:
    """
    Chart name from "<chart>-<version>.tgz" when no index lists the archive.

    Chart names may contain dashes and versions start with a digit, so the
    split is at the first digit-led segment. A chart whose own name has one
    (e.g. "app-2fa") is misread; the index is authoritative for those.
    """
    parts = archive[: -len(".tgz")].split("-")
    for i in range(1, len(parts)):
        if parts[i][:1].isdigit():
            return "-".join(parts[:i])
    return "-".join(parts)


def check_index(workdir: Path) -> IndexDrift:
    """Compare workdir/index.yaml with the *.tgz files in workdir."""
    workdir = Path(workdir)
    index_path = workdir / INDEX_FILE
    archives = set(local_archives(workdir))

    if not index_path.exists():
        return IndexDrift(index_found=False, unindexed=sorted(archives))

    listed = indexed_archives(load_index(index_path))
    return IndexDrift(
        unindexed=sorted(archives - listed),
        dangling=sorted(listed - archives),
    )
