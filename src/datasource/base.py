"""Abstract base for datasource providers.

A provider is a thin translation layer over one hosting API: it knows paths,
authentication and pagination, and returns the provider's native JSON. Turning
that JSON into releases and commit hashes is done by ``datasource.normalize``
using the field paths each provider declares.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple

from constants import RegistryStrategy

FieldPath = Tuple[str, ...]


class Datasource(ABC):
    """Provider backend for one hosting service."""

    id: str = ""
    default_registry_urls: List[str] = []
    registry_strategy: RegistryStrategy = RegistryStrategy.FIRST

    # Where normalization finds things in the provider's JSON
    tag_name_path: FieldPath = ("name",)
    tag_date_path: FieldPath = ()
    tag_hash_path: FieldPath = ()
    commit_hash_path: FieldPath = ("hash",)
    default_branch_path: FieldPath = ()

    def __init__(self) -> None:
        if not self.id:
            raise TypeError(f"{type(self).__name__} must declare an id")
        if not self.default_registry_urls:
            raise TypeError(f"{self.id} must declare at least one default registry URL")

    @property
    def cache_namespace(self) -> str:
        """Namespace isolating this provider's entries in a shared cache."""
        return self.id

    @abstractmethod
    def fetch_releases(self, repository: str, registry_url: str) -> List[Dict[str, Any]]:
        """Return every tag entry for the repository, across all pages."""

    @abstractmethod
    def fetch_tag(self, repository: str, tag: str, registry_url: str) -> Optional[Dict[str, Any]]:
        """Return one tag entry, or None when the provider does not know the tag."""

    @abstractmethod
    def fetch_repository(self, repository: str, registry_url: str) -> Dict[str, Any]:
        """Return repository metadata (used for the default branch name)."""

    @abstractmethod
    def fetch_commits(self, repository: str, branch: str, registry_url: str) -> List[Dict[str, Any]]:
        """Return commits on a branch, most recent first. Only the first page is needed."""

    def __repr__(self) -> str:
        return f"<{type(self).__name__} id={self.id!r}>"
