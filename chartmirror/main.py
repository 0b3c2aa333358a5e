"""
chartmirror — CLI Entry Point

Usage:
    chartmirror sync [--all | --latest N | --chart NAME --version V]
    chartmirror status [--json]
    chartmirror check-config [--json]
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import click
from dotenv import load_dotenv

from . import __version__
from .cli.check import check_config
from .cli.status import status
from .cli.sync import sync
from .logging_config import setup_logging

CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}


def load_env_file(directory: Optional[Path] = None) -> bool:
    """Load MIRROR_* settings from a .env file, without overriding the environment."""
    env_file = (directory or Path.cwd()) / ".env"
    if env_file.exists():
        return load_dotenv(env_file, override=False)
    return False


@click.group(context_settings=CONTEXT_SETTINGS)
@click.option("--log-level", default=None, help="DEBUG, INFO, WARNING or ERROR (default: LOG_LEVEL or INFO)")
@click.option("--log-format", type=click.Choice(["text", "json"]), default=None, help="Log output format")
@click.pass_context
def cli(ctx: click.Context, log_level: Optional[str], log_format: Optional[str]) -> None:
    """Sync Bitnami charts to a personal Helm repository on GitHub Pages."""
    load_env_file()
    setup_logging(level=log_level, format_type=log_format)
    ctx.ensure_object(dict)
    ctx.obj["version"] = __version__


cli.add_command(sync)
cli.add_command(status)
cli.add_command(check_config)


if __name__ == "__main__":
    cli()
