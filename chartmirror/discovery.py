"""
Discovery Client — Find recently updated charts on Artifact Hub.

Only used by `sync --latest N`:

    GET https://artifacthub.io/api/v1/packages/search
        ?org=bitnami&kind=0&sort=updated&limit=N

    {"packages": [{"name": "wordpress", ...}, ...]}

kind=0 is Artifact Hub's repository kind for Helm charts.
"""

from __future__ import annotations

import logging
from typing import List, Optional

import requests
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import ExternalCommandFailure

logger = logging.getLogger(__name__)

HELM_KIND = 0
USER_AGENT = "chartmirror"


class DiscoveredPackage(BaseModel):
    """One package entry; everything but the name is ignored."""

    model_config = ConfigDict(extra="ignore")

    name: str


class SearchResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    packages: List[DiscoveredPackage] = Field(default_factory=list)


class DiscoveryClient:
    """Queries a package search endpoint for the most recently updated charts."""

    def __init__(
        self,
        url: str,
        org: str,
        timeout: float = 30,
        session: Optional[requests.Session] = None,
    ):
        self.url = url
        self.org = org
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers["User-Agent"] = USER_AGENT

    def recently_updated(self, limit: int) -> List[str]:
        """Names of the `limit` most recently updated charts, newest first."""
        params = {
            "org": self.org,
            "kind": HELM_KIND,
            "sort": "updated",
            "limit": limit,
        }
        command = ["GET", self.url]
        logger.info(f"Finding the {limit} most recently updated charts...")

        try:
            resp = self.session.get(self.url, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            raise ExternalCommandFailure(command, None, str(e)) from e

        if resp.status_code != 200:
            raise ExternalCommandFailure(command, resp.status_code, resp.text[:200])

        try:
            payload = SearchResponse.model_validate(resp.json())
        except (ValueError, ValidationError) as e:
            raise ExternalCommandFailure(command, resp.status_code, f"invalid response: {e}") from e

        return [p.name for p in payload.packages]
