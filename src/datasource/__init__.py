"""Datasources: fetch and cache release metadata from hosting services.

The engine is the caller-facing entry point::

    engine = MetadataResolutionEngine(MemoryCacheStore())
    engine.get_releases(GetReleasesConfig("bitbucket-tags", "some/dep"))
    engine.get_digest(DigestConfig("bitbucket-tags", "some/dep"), "v1.0.0")
"""

from .models import DigestConfig, GetReleasesConfig, Release, ReleaseResult
from .base import Datasource
from .providers import DATASOURCES, get_datasource, list_datasources
from .engine import MetadataResolutionEngine

__all__ = [
    "Datasource",
    "DATASOURCES",
    "DigestConfig",
    "GetReleasesConfig",
    "MetadataResolutionEngine",
    "Release",
    "ReleaseResult",
    "get_datasource",
    "list_datasources",
]
