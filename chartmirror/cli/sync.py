"""
CLI sync command — fetch chart versions, reindex, commit and push.

Usage:
    chartmirror sync                                   # same as --all
    chartmirror sync --all
    chartmirror sync --latest 5
    chartmirror sync --chart wordpress --version 19.2.2
"""

from __future__ import annotations

import contextlib
import logging
import signal
from pathlib import Path
from typing import Iterator, Optional

import click

from ..config import MirrorSettings
from ..controller import MirrorSyncController
from ..errors import MirrorError, SyncCancelled, UsageError
from ..modes import resolve_mode
from ..report import SyncReport

logger = logging.getLogger(__name__)

MODE_FLAGS_KEY = "chartmirror.mode_flags"
FLAG_NAMES = {
    "all_charts": "all",
    "latest": "latest",
    "chart": "chart",
    "version": "version",
}

EXAMPLES = """
\b
Examples:
  chartmirror sync
  chartmirror sync --all
  chartmirror sync --latest 5
  chartmirror sync --chart wordpress --version 19.2.2
"""


def _track_flag(ctx: click.Context, param: click.Parameter, value):
    """Record mode flags in command-line order (click runs callbacks in that order)."""
    if value is not None and value is not False:
        ctx.meta.setdefault(MODE_FLAGS_KEY, []).append(FLAG_NAMES[param.name])
    return value


@contextlib.contextmanager
def cancel_on_signals(controller: MirrorSyncController) -> Iterator[None]:
    """Route SIGINT/SIGTERM to controller.cancel() for the duration of a run."""

    def _handler(signum, frame):
        controller.cancel()

    previous = {}
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            previous[sig] = signal.signal(sig, _handler)
        except ValueError:
            # Not the main thread
            logger.debug(f"Cannot install handler for {sig!r}")
    try:
        yield
    finally:
        for sig, handler in previous.items():
            signal.signal(sig, handler)


def _print_report(report: SyncReport) -> None:
    click.echo("---")
    if report.skipped_charts:
        click.secho(f"Skipped {len(report.skipped_charts)} chart(s) without versions:", fg="yellow")
        for entry in report.skipped_charts:
            click.echo(f"  - {entry.chart}: {entry.reason}")

    if report.dry_run:
        click.echo(f"Dry run: {len(report.fetched)} to fetch, {len(report.existing)} already present")
        for name in report.fetched:
            click.echo(f"  + {name}")
        return

    click.echo(f"Fetched {len(report.fetched)}, already present {len(report.existing)}")
    if report.index_consistent is False:
        click.secho("⚠️  index.yaml does not match the archives on disk", fg="yellow")

    if not report.committed:
        click.echo("No new chart versions to commit. Repository is up-to-date.")
    elif report.pushed:
        click.secho(f"✓ Committed {report.commit or ''} and pushed", fg="green")
        click.echo("It may take a minute for GitHub Pages to update.")
    else:
        click.secho(f"✓ Committed {report.commit or ''} (not pushed)", fg="green")
    click.echo("All done!")


@click.command("sync", epilog=EXAMPLES)
@click.option("--all", "all_charts", is_flag=True, default=False, callback=_track_flag,
              help="Sync the latest versions of every chart. (Default behavior)")
@click.option("--latest", metavar="COUNT", default=None, callback=_track_flag,
              help="Sync the latest versions of the COUNT most recently updated charts.")
@click.option("--chart", metavar="NAME", default=None, callback=_track_flag,
              help="Sync only this chart (requires --version).")
@click.option("--version", metavar="VERSION", default=None, callback=_track_flag,
              help="Chart version to sync (requires --chart).")
@click.option("--workdir", type=click.Path(file_okay=False, path_type=Path), default=Path("."),
              show_default=True, help="Helm repository working tree")
@click.option("--workers", type=click.IntRange(min=1), default=None,
              help="Parallel downloads (default: MIRROR_WORKERS or 1)")
@click.option("--dry-run", is_flag=True, help="Only report what would be fetched")
@click.option("--no-push", is_flag=True, help="Commit but do not push")
@click.option("--json", "as_json", is_flag=True, help="Print the run report as JSON")
@click.pass_context
def sync(
    ctx: click.Context,
    all_charts: bool,
    latest: Optional[str],
    chart: Optional[str],
    version: Optional[str],
    workdir: Path,
    workers: Optional[int],
    dry_run: bool,
    no_push: bool,
    as_json: bool,
) -> None:
    """Sync Bitnami charts to a personal Helm repository."""
    try:
        mode = resolve_mode(
            all_charts=all_charts,
            latest=latest,
            chart=chart,
            version=version,
            order=ctx.meta.get(MODE_FLAGS_KEY, []),
        )
    except UsageError as e:
        click.secho(f"Error: {e}", fg="red", err=True)
        click.echo(ctx.get_help(), err=True)
        ctx.exit(1)

    settings = MirrorSettings.from_env()
    if workers is not None:
        settings.workers = workers

    workdir = workdir.resolve()
    if not as_json:
        click.echo(f"Helm Repo URL will be: {settings.base_url}")
        click.echo(f"Running from: {workdir}")
        click.echo(f"Mode: {mode.describe()}")
        click.echo("---")

    controller = MirrorSyncController.from_settings(settings, workdir)
    try:
        with cancel_on_signals(controller):
            report = controller.run(mode, dry_run=dry_run, push=not no_push)
    except SyncCancelled as e:
        click.secho(f"Cancelled: {e}", fg="yellow", err=True)
        raise SystemExit(1)
    except MirrorError as e:
        click.secho(f"Error: {e}", fg="red", err=True)
        raise SystemExit(1)

    if as_json:
        click.echo(report.model_dump_json(indent=2))
    else:
        _print_report(report)
