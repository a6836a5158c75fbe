"""Bitbucket Cloud tags datasource.

Talks to the 2.0 REST API. Tag and commit listings are paged documents of the
form ``{"values": [...], "next": "<url>"}``.
"""
from __future__ import annotations

import logging
import os
from typing import Any, Dict, List, Optional
from urllib.parse import quote, urlsplit

from constants import Constants, RegistryStrategy
from common.errors import DataShapeError, TransportFailure
from common.http_client import get_json
from .base import Datasource

logger = logging.getLogger(__name__)

_CLOUD_HOSTS = {"bitbucket.org", "www.bitbucket.org"}


class BitbucketTagsDatasource(Datasource):
    """Tags, tag commits and branch heads from Bitbucket Cloud.

    Supports optional authentication via BITBUCKET_TOKEN environment variable.
    """

    id = "bitbucket-tags"
    default_registry_urls = [Constants.BITBUCKET_REGISTRY_URL]
    registry_strategy = RegistryStrategy.FIRST

    tag_name_path = ("name",)
    tag_date_path = ("target", "date")
    tag_hash_path = ("target", "hash")
    commit_hash_path = ("hash",)
    default_branch_path = ("mainbranch", "name")

    def __init__(self, token: Optional[str] = None):
        super().__init__()
        self.token = token or os.environ.get(Constants.ENV_BITBUCKET_TOKEN)

    def _get_headers(self) -> Dict[str, str]:
        headers = {}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    @staticmethod
    def api_base(registry_url: str) -> str:
        """Map the browsable registry URL to its API host."""
        host = (urlsplit(registry_url).hostname or "").lower()
        if host in _CLOUD_HOSTS:
            return Constants.BITBUCKET_API_BASE
        return registry_url.rstrip("/")

    def _repo_url(self, repository: str, registry_url: str) -> str:
        return f"{self.api_base(registry_url)}/2.0/repositories/{repository.strip('/')}"

    def _get(self, url: str) -> Any:
        return get_json(url, context=self.id, headers=self._get_headers()).data

    @staticmethod
    def _values(page: Any, url: str) -> List[Dict[str, Any]]:
        if not isinstance(page, dict) or not isinstance(page.get("values"), list):
            raise DataShapeError(f"Expected a paged 'values' document from {url}")
        return page["values"]

    def fetch_releases(self, repository: str, registry_url: str) -> List[Dict[str, Any]]:
        url: Optional[str] = f"{self._repo_url(repository, registry_url)}/refs/tags"
        results: List[Dict[str, Any]] = []
        while url:
            page = self._get(url)
            results.extend(self._values(page, url))
            url = page.get("next")
        return results

    def fetch_tag(self, repository: str, tag: str, registry_url: str) -> Optional[Dict[str, Any]]:
        url = f"{self._repo_url(repository, registry_url)}/refs/tags/{quote(tag, safe='')}"
        try:
            data = self._get(url)
        except TransportFailure as exc:
            if exc.status_code == 404:
                logger.debug("Tag %s not found in %s", tag, repository)
                return None
            raise
        if not isinstance(data, dict):
            raise DataShapeError(f"Expected a tag object from {url}")
        return data

    def fetch_repository(self, repository: str, registry_url: str) -> Dict[str, Any]:
        url = self._repo_url(repository, registry_url)
        data = self._get(url)
        if not isinstance(data, dict):
            raise DataShapeError(f"Expected a repository object from {url}")
        return data

    def fetch_commits(self, repository: str, branch: str, registry_url: str) -> List[Dict[str, Any]]:
        url = f"{self._repo_url(repository, registry_url)}/commits/{quote(branch, safe='')}"
        return self._values(self._get(url), url)
