"""
Tool Checks — Verify that helm and git are installed.

Used by the controller's preflight (fail before any external call) and
by `chartmirror check-config`.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from dataclasses import asdict, dataclass
from typing import Dict, Iterable, List, Optional

from .errors import DependencyMissingError

logger = logging.getLogger(__name__)

REQUIRED_TOOLS = ("helm", "git")

INSTALL_HINTS = {
    "helm": "Please install it (e.g. 'brew install helm', see https://helm.sh/docs/intro/install/) and try again.",
    "git": "Please install it (see https://git-scm.com/downloads) and try again.",
}

VERSION_ARGS = {
    "helm": ["version", "--short"],
    "git": ["--version"],
}


@dataclass
class ToolStatus:
    """Status of an external tool."""

    name: str
    installed: bool
    version: Optional[str] = None
    path: Optional[str] = None
    install_hint: Optional[str] = None

    def to_dict(self) -> Dict:
        return asdict(self)


def check_tool(name: str) -> ToolStatus:
    """Check if a tool is installed and get its version."""
    path = shutil.which(name)
    if not path:
        return ToolStatus(name=name, installed=False, install_hint=INSTALL_HINTS.get(name))

    version = None
    try:
        result = subprocess.run(
            [path] + VERSION_ARGS.get(name, ["--version"]),
            capture_output=True,
            text=True,
            timeout=5,
        )
        if result.returncode == 0:
            version = result.stdout.strip().split("\n")[0]
    except (OSError, subprocess.TimeoutExpired) as e:
        logger.debug(f"Could not read {name} version: {e}")

    return ToolStatus(name=name, installed=True, version=version, path=path)


def require_tools(names: Iterable[str] = REQUIRED_TOOLS) -> List[str]:
    """
    Ensure each tool is on PATH.

    Returns the resolved paths. Raises DependencyMissingError for the
    first missing tool.
    """
    paths = []
    for name in names:
        path = shutil.which(name)
        if not path:
            raise DependencyMissingError(name, INSTALL_HINTS.get(name))
        paths.append(path)
    return paths
