"""
CLI check-config command — settings and tool availability.

Usage:
    chartmirror check-config [--json]
"""

from __future__ import annotations

import json

import click

from ..config import MirrorSettings
from ..tools import REQUIRED_TOOLS, check_tool


@click.command("check-config")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def check_config(as_json: bool) -> None:
    """Check mirror settings and required tools."""
    settings = MirrorSettings.from_env()
    tools = [check_tool(name) for name in REQUIRED_TOOLS]
    ready = all(t.installed for t in tools)

    if as_json:
        click.echo(json.dumps({
            "ready": ready,
            "settings": settings.to_dict(),
            "tools": [t.to_dict() for t in tools],
        }, indent=2))
        if not ready:
            raise SystemExit(1)
        return

    click.echo("\n📋 Mirror Configuration\n")
    click.echo(f"  Source repo:     {settings.source_repo}")
    click.echo(f"  Versions/chart:  {settings.num_versions}")
    click.echo(f"  Base URL:        {settings.base_url}")
    click.echo(f"  Push target:     {settings.git_remote}/{settings.git_branch}")
    click.echo(f"  Workers:         {settings.workers}")
    if settings.discovery_enabled:
        click.echo(f"  Discovery:       {settings.discovery_url} (org={settings.discovery_org})")
    else:
        click.secho("  Discovery:       disabled (--latest unavailable)", fg="yellow")

    click.echo("\n🔧 Tools\n")
    for tool in tools:
        if tool.installed:
            click.secho(f"  ✓ {tool.name}", fg="green", nl=False)
            click.echo(f" — {tool.version or tool.path}")
        else:
            click.secho(f"  ✗ {tool.name}", fg="red", nl=False)
            click.echo(f" — not found. {tool.install_hint or ''}")
    click.echo()

    if not ready:
        raise SystemExit(1)
