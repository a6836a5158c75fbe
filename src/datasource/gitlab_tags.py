"""GitLab tags datasource.

Provides a lightweight REST client for the GitLab v4 API: repository tags,
single tag lookups, project metadata and branch commits. Works against
gitlab.com and self-hosted instances alike.
"""
from __future__ import annotations

import os
from typing import List, Optional, Dict, Any
from urllib.parse import quote

from constants import Constants, RegistryStrategy
from common.errors import DataShapeError, TransportFailure
from common.http_client import get_json
from .base import Datasource


class GitlabTagsDatasource(Datasource):
    """Tags and commits from a GitLab instance.

    Supports optional authentication via GITLAB_TOKEN environment variable.
    """

    id = "gitlab-tags"
    default_registry_urls = [Constants.GITLAB_REGISTRY_URL]
    registry_strategy = RegistryStrategy.FIRST

    tag_name_path = ("name",)
    tag_date_path = ("commit", "created_at")
    tag_hash_path = ("commit", "id")
    commit_hash_path = ("id",)
    default_branch_path = ("default_branch",)

    def __init__(self, token: Optional[str] = None):
        """Initialize GitLab datasource.

        Args:
            token: GitLab personal access token (defaults to GITLAB_TOKEN env var)
        """
        super().__init__()
        self.token = token or os.environ.get(Constants.ENV_GITLAB_TOKEN)

    def _get_headers(self) -> Dict[str, str]:
        """Get request headers including authorization if token is available."""
        headers = {}
        if self.token:
            headers['Private-Token'] = self.token
        return headers

    def _project_url(self, repository: str, registry_url: str) -> str:
        # URL encode the project path
        project_path = quote(repository.strip('/'), safe='')
        return f"{registry_url.rstrip('/')}{Constants.GITLAB_API_PATH}/projects/{project_path}"

    def fetch_releases(self, repository: str, registry_url: str) -> List[Dict[str, Any]]:
        """Fetch project tags with pagination.

        Args:
            repository: Project path, e.g. "group/project"
            registry_url: GitLab instance base URL

        Returns:
            List of tag dictionaries, newest first as GitLab orders them
        """
        return self._get_paginated_results(
            f"{self._project_url(repository, registry_url)}/repository/tags"
        )

    def fetch_tag(self, repository: str, tag: str, registry_url: str) -> Optional[Dict[str, Any]]:
        """Fetch a single tag, or None if GitLab answers 404."""
        url = f"{self._project_url(repository, registry_url)}/repository/tags/{quote(tag, safe='')}"
        try:
            data = get_json(url, context=self.id, headers=self._get_headers()).data
        except TransportFailure as exc:
            if exc.status_code == 404:
                return None
            raise
        if not isinstance(data, dict):
            raise DataShapeError(f"Expected a tag object from {url}")
        return data

    def fetch_repository(self, repository: str, registry_url: str) -> Dict[str, Any]:
        """Fetch project metadata (default_branch and friends)."""
        url = self._project_url(repository, registry_url)
        data = get_json(url, context=self.id, headers=self._get_headers()).data
        if not isinstance(data, dict):
            raise DataShapeError(f"Expected a project object from {url}")
        return data

    def fetch_commits(self, repository: str, branch: str, registry_url: str) -> List[Dict[str, Any]]:
        """Fetch the most recent commit on a branch.

        An empty branch name leaves ref_name off so GitLab uses the default branch.
        """
        params = {"per_page": 1}
        if branch:
            params["ref_name"] = branch
        url = f"{self._project_url(repository, registry_url)}/repository/commits"
        data = get_json(url, context=self.id, headers=self._get_headers(), params=params).data
        if not isinstance(data, list):
            raise DataShapeError(f"Expected a commit list from {url}")
        return data

    def _get_paginated_results(self, url: str) -> List[Dict[str, Any]]:
        """Fetch all pages of a paginated endpoint.

        Args:
            url: Base URL for paginated endpoint

        Returns:
            List of all results across pages
        """
        results: List[Dict[str, Any]] = []
        page = 1

        while True:
            response = get_json(
                url,
                context=self.id,
                headers=self._get_headers(),
                params={"per_page": Constants.REPO_API_PER_PAGE, "page": page},
            )
            if not isinstance(response.data, list):
                raise DataShapeError(f"Expected a list from {url}")
            results.extend(response.data)

            # Check for next page
            current_page = self._get_int_header(response.headers, 'x-page')
            total_pages = self._get_int_header(response.headers, 'x-total-pages')

            if current_page and total_pages and current_page < total_pages:
                page = current_page + 1
            else:
                return results

    @staticmethod
    def _get_int_header(headers: Dict[str, str], name: str) -> Optional[int]:
        """Extract an integer pagination header, or None if missing/garbled."""
        value = headers.get(name)
        if value:
            try:
                return int(value)
            except ValueError:
                pass
        return None
