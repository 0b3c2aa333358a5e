"""
Mirror Configuration — Parse MIRROR_* environment variables.

Configures where charts come from (a helm repo alias such as "bitnami"),
how many versions to mirror per chart, and which GitHub Pages repository
hosts the result.

Minimal required config: none. The defaults mirror Bitnami into
https://razvanbalsan-boatyardx.github.io/bitnami-helm-repo.

    MIRROR_GITHUB_USER=my-user
    MIRROR_GITHUB_REPO=my-helm-repo
    MIRROR_NUM_VERSIONS=5
"""

from __future__ import annotations

import logging
import os
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

DEFAULT_GITHUB_USER = "razvanbalsan-boatyardx"
DEFAULT_GITHUB_REPO = "bitnami-helm-repo"
DEFAULT_SOURCE_REPO = "bitnami"
DEFAULT_NUM_VERSIONS = 10
DEFAULT_DISCOVERY_URL = "https://artifacthub.io/api/v1/packages/search"


def _env_int(name: str, default: int, minimum: int = 0) -> int:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning(f"{name}={raw!r} is not an integer, using {default}")
        return default
    if value < minimum:
        logger.warning(f"{name}={value} is below {minimum}, using {default}")
        return default
    return value


@dataclass
class MirrorSettings:
    """Settings for one mirror run."""

    github_user: str = DEFAULT_GITHUB_USER
    github_repo: str = DEFAULT_GITHUB_REPO
    base_url_override: Optional[str] = None

    source_repo: str = DEFAULT_SOURCE_REPO
    num_versions: int = DEFAULT_NUM_VERSIONS

    # Empty URL disables --latest
    discovery_url: str = DEFAULT_DISCOVERY_URL
    discovery_org: str = DEFAULT_SOURCE_REPO

    git_remote: str = "origin"
    git_branch: str = "main"

    workers: int = 1
    helm_timeout: int = 300
    http_timeout: int = 30

    @property
    def base_url(self) -> str:
        """Public URL the repository index is stamped with."""
        if self.base_url_override:
            return self.base_url_override.rstrip("/")
        return f"https://{self.github_user}.github.io/{self.github_repo}"

    @property
    def discovery_enabled(self) -> bool:
        return bool(self.discovery_url)

    @classmethod
    def from_env(cls) -> "MirrorSettings":
        """Parse mirror configuration from environment variables."""
        settings = cls(
            github_user=os.environ.get("MIRROR_GITHUB_USER", DEFAULT_GITHUB_USER),
            github_repo=os.environ.get("MIRROR_GITHUB_REPO", DEFAULT_GITHUB_REPO),
            base_url_override=os.environ.get("MIRROR_BASE_URL") or None,
            source_repo=os.environ.get("MIRROR_SOURCE_REPO", DEFAULT_SOURCE_REPO),
            num_versions=_env_int("MIRROR_NUM_VERSIONS", DEFAULT_NUM_VERSIONS, minimum=1),
            discovery_url=os.environ.get("MIRROR_DISCOVERY_URL", DEFAULT_DISCOVERY_URL),
            discovery_org=os.environ.get("MIRROR_DISCOVERY_ORG", DEFAULT_SOURCE_REPO),
            git_remote=os.environ.get("MIRROR_GIT_REMOTE", "origin"),
            git_branch=os.environ.get("MIRROR_GIT_BRANCH", "main"),
            workers=_env_int("MIRROR_WORKERS", 1, minimum=1),
            helm_timeout=_env_int("MIRROR_HELM_TIMEOUT", 300, minimum=1),
            http_timeout=_env_int("MIRROR_HTTP_TIMEOUT", 30, minimum=1),
        )

        if not settings.discovery_enabled:
            logger.debug("MIRROR_DISCOVERY_URL is empty, --latest is unavailable")

        return settings

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["base_url"] = self.base_url
        return data
