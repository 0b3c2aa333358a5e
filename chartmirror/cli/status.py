"""
CLI status command — local archives and index consistency.

Usage:
    chartmirror status [--workdir DIR] [--json]
"""

from __future__ import annotations

import json
from collections import Counter
from pathlib import Path

import click

from ..config import MirrorSettings
from ..fetcher import local_archives
from ..index import INDEX_FILE, archive_charts, check_index, guess_chart, load_index


@click.command("status")
@click.option("--workdir", type=click.Path(file_okay=False, path_type=Path), default=Path("."),
              show_default=True, help="Helm repository working tree")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def status(workdir: Path, as_json: bool) -> None:
    """Show mirrored archives and whether index.yaml matches them."""
    settings = MirrorSettings.from_env()
    archives = local_archives(workdir)
    drift = check_index(workdir)

    index_path = workdir / INDEX_FILE
    known = archive_charts(load_index(index_path)) if index_path.exists() else {}
    per_chart: Counter = Counter(known.get(name) or guess_chart(name) for name in archives)

    result = {
        "workdir": str(workdir.resolve()),
        "base_url": settings.base_url,
        "archives": len(archives),
        "charts": dict(sorted(per_chart.items())),
        "index": drift.to_dict(),
    }

    if as_json:
        click.echo(json.dumps(result, indent=2))
        return

    click.echo("\n📦 Mirror Status\n")
    click.echo(f"  Directory:  {result['workdir']}")
    click.echo(f"  Base URL:   {settings.base_url}")
    click.echo(f"  Archives:   {len(archives)} across {len(per_chart)} chart(s)")

    if not drift.index_found:
        click.secho(f"  Index:      {INDEX_FILE} not found", fg="yellow")
    elif drift.consistent:
        click.secho("  Index:      ✓ consistent", fg="green")
    else:
        click.secho(
            f"  Index:      ⚠️  {len(drift.unindexed)} unindexed, {len(drift.dangling)} dangling",
            fg="yellow",
        )
        for name in drift.unindexed:
            click.echo(f"    + {name} (not in index)")
        for name in drift.dangling:
            click.echo(f"    - {name} (no archive)")
    click.echo()
