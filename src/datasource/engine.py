"""Metadata resolution engine.

Cache-aside layer over the datasource providers. For every lookup it picks the
registry URL(s), checks the package cache, and only on a miss calls the
provider, normalizes the response and writes it back.

The engine keeps no mutable state of its own; the cache store is the only
shared resource. Two threads missing the same key at once will both fetch and
both write the same value. Fetches are idempotent and TTLs short, so there is
no per-key in-flight coalescing.
"""
from __future__ import annotations

import logging
from typing import Any, Iterable, List, Mapping, Optional, Sequence

from constants import Constants, RegistryStrategy
from common.errors import ConfigError, FetchFailure
from common.logging_utils import extra_context, is_debug_enabled, safe_url, Timer
from packagecache import CacheStore
from . import normalize
from .base import Datasource
from .models import DigestConfig, GetReleasesConfig, ReleaseResult
from .providers import DATASOURCES, get_datasource
from .registry_url import host_allowed, join_url, resolve_registry_urls, usable_urls

logger = logging.getLogger(__name__)

TAGS = "tags"
DIGEST = "digest"


def tag_type(ref: str) -> str:
    """Cache operation type for a tag-commit lookup."""
    return f"tag-{ref}"


class MetadataResolutionEngine:
    """Resolve releases and digests for (datasource, repository) pairs."""

    def __init__(
        self,
        cache: CacheStore,
        datasources: Optional[Mapping[str, Datasource]] = None,
        cache_minutes: float = Constants.DEFAULT_CACHE_MINUTES,
        allowed_registry_hosts: Iterable[str] = (),
    ):
        """Initialize the engine.

        Args:
            cache: Store used to memoize results.
            datasources: Datasource id -> provider mapping; defaults to the built-in table.
            cache_minutes: TTL applied to every cache write.
            allowed_registry_hosts: When non-empty, the only registry hosts
                lookups may reach, datasource defaults included.
        """
        self._cache = cache
        self._datasources = DATASOURCES if datasources is None else datasources
        self.cache_minutes = cache_minutes
        self.allowed_registry_hosts = tuple(h.lower() for h in allowed_registry_hosts)

    def datasource(self, datasource_id: str) -> Datasource:
        return get_datasource(datasource_id, self._datasources)

    @staticmethod
    def cache_key(registry_url: str, repository: str, op_type: str) -> str:
        return f"{registry_url}:{repository}:{op_type}"

    def registry_urls(
        self,
        datasource: Datasource,
        candidate_urls: Optional[Sequence[Optional[str]]],
        strategy: RegistryStrategy,
    ) -> List[str]:
        """Resolve registry URLs, keeping only hosts on the allow-list.

        Disallowed candidates are dropped before resolution; the resolved
        URLs, which may be datasource defaults, are checked again.

        Raises:
            ConfigError: if no allowed URL remains.
        """
        allowed = self.allowed_registry_hosts
        candidates = [u for u in usable_urls(candidate_urls) if host_allowed(u, allowed)]
        urls = [
            u for u in resolve_registry_urls(candidates, datasource.default_registry_urls, strategy)
            if host_allowed(u, allowed)
        ]
        if not urls:
            raise ConfigError(
                f"No registry URL for {datasource.id} is in allowed_registry_hosts ({', '.join(allowed)})"
            )
        return urls

    # Public operations

    def get_releases(self, config: GetReleasesConfig) -> Optional[ReleaseResult]:
        """Return all releases of a repository, served from cache when fresh.

        Raises:
            UnknownDatasourceError: if config.datasource is not registered.
            FetchFailure: if the provider call failed (never cached).
            ConfigError: if no allowed registry URL is left.
        """
        datasource = self.datasource(config.datasource)
        strategy = datasource.registry_strategy
        urls = self.registry_urls(datasource, config.registry_urls, strategy)
        self._log_resolved(datasource, config.repository, urls, strategy)

        if strategy is RegistryStrategy.HUNT:
            return self._hunt_releases(datasource, config.repository, urls)
        if strategy is RegistryStrategy.MERGE:
            return self._merge_releases(datasource, config.repository, urls)
        return self._releases_from_registry(datasource, config.repository, urls[0])

    def get_digest(self, config: DigestConfig, ref: Optional[str] = None) -> Optional[str]:
        """Return the commit for a tag (ref given) or the default branch head.

        The two cases hit different endpoints and are cached under different
        keys. Digests always use the first resolved registry URL.
        """
        datasource = self.datasource(config.datasource)
        registry_url = self.registry_urls(datasource, config.registry_urls, RegistryStrategy.FIRST)[0]
        self._log_resolved(datasource, config.repository, [registry_url], RegistryStrategy.FIRST)
        if ref:
            return self.resolve_tag_commit(datasource, config.repository, registry_url, ref)
        return self.resolve_branch_head_commit(datasource, config.repository, registry_url)

    def resolve_tag_commit(self, datasource: Datasource, repository: str, registry_url: str, ref: str) -> Optional[str]:
        """Commit hash a named tag points at; None if the provider does not know the tag."""
        key = self.cache_key(registry_url, repository, tag_type(ref))
        cached = self._lookup(datasource, key)
        if cached is not None:
            return cached

        entry = self._fetch(datasource, "fetch_tag", repository, ref, registry_url)
        if entry is None:
            return None
        commit = normalize.tag_commit(entry, datasource, ref)
        self._store(datasource, key, commit)
        return commit

    def resolve_branch_head_commit(self, datasource: Datasource, repository: str, registry_url: str) -> Optional[str]:
        """Newest commit on the default branch; None if the repository has no commits."""
        key = self.cache_key(registry_url, repository, DIGEST)
        cached = self._lookup(datasource, key)
        if cached is not None:
            return cached

        info = self._fetch(datasource, "fetch_repository", repository, registry_url)
        branch = normalize.default_branch(info, datasource)
        commits = self._fetch(datasource, "fetch_commits", repository, branch, registry_url)
        commit = normalize.head_commit(commits, datasource)
        if commit is None:
            return None
        self._store(datasource, key, commit)
        return commit

    # Release strategies

    def _releases_from_registry(self, datasource: Datasource, repository: str, registry_url: str) -> Optional[ReleaseResult]:
        key = self.cache_key(registry_url, repository, TAGS)
        cached = self._lookup(datasource, key)
        if cached is not None:
            return ReleaseResult.from_dict(cached)

        entries = self._fetch(datasource, "fetch_releases", repository, registry_url)
        if entries is None:
            return None
        result = normalize.to_release_result(entries, join_url(registry_url, repository), datasource)
        self._store(datasource, key, result.to_dict())
        return result

    def _hunt_releases(self, datasource: Datasource, repository: str, urls) -> Optional[ReleaseResult]:
        """First registry that yields a result wins; failures move on to the next."""
        last_error: Optional[FetchFailure] = None
        for url in urls:
            try:
                result = self._releases_from_registry(datasource, repository, url)
            except FetchFailure as exc:
                logger.info("%s lookup of %s failed at %s: %s", datasource.id, repository, safe_url(url), exc)
                last_error = exc
                continue
            if result is not None:
                return result
        if last_error is not None:
            raise last_error
        return None

    def _merge_releases(self, datasource: Datasource, repository: str, urls) -> Optional[ReleaseResult]:
        """Concatenate releases of every registry in order; sourceUrl from the first."""
        merged: Optional[ReleaseResult] = None
        for url in urls:
            result = self._releases_from_registry(datasource, repository, url)
            if result is None:
                continue
            if merged is None:
                merged = ReleaseResult(result.source_url, list(result.releases))
            else:
                merged.releases.extend(result.releases)
        return merged

    # Cache and fetch plumbing

    def _lookup(self, datasource: Datasource, key: str) -> Optional[Any]:
        value = self._cache.get(datasource.cache_namespace, key)
        if is_debug_enabled(logger):
            logger.debug(
                "Cache hit" if value is not None else "Cache miss",
                extra=extra_context(
                    event="cache_hit" if value is not None else "cache_miss",
                    component="engine",
                    namespace=datasource.cache_namespace,
                    target=safe_url(key),
                ),
            )
        return value

    def _store(self, datasource: Datasource, key: str, value: Any) -> None:
        self._cache.set(datasource.cache_namespace, key, value, self.cache_minutes)
        if is_debug_enabled(logger):
            logger.debug(
                "Cache write",
                extra=extra_context(
                    event="cache_write",
                    component="engine",
                    namespace=datasource.cache_namespace,
                    target=safe_url(key),
                    ttl_minutes=self.cache_minutes,
                ),
            )

    def _fetch(self, datasource: Datasource, method: str, *args: Any) -> Any:
        """Call a provider primitive, logging outcome and duration."""
        with Timer() as t:
            try:
                result = getattr(datasource, method)(*args)
            except FetchFailure as exc:
                if is_debug_enabled(logger):
                    logger.debug(
                        "Provider fetch failed",
                        extra=extra_context(
                            event="fetch",
                            component="engine",
                            action=method,
                            outcome="failure",
                            datasource=datasource.id,
                            duration_ms=t.duration_ms(),
                            error=str(exc),
                        ),
                    )
                raise
        if is_debug_enabled(logger):
            logger.debug(
                "Provider fetch",
                extra=extra_context(
                    event="fetch",
                    component="engine",
                    action=method,
                    outcome="success",
                    datasource=datasource.id,
                    duration_ms=t.duration_ms(),
                ),
            )
        return result

    @staticmethod
    def _log_resolved(datasource: Datasource, repository: str, urls, strategy: RegistryStrategy) -> None:
        if is_debug_enabled(logger):
            logger.debug(
                "Registry resolved",
                extra=extra_context(
                    event="registry_resolved",
                    component="engine",
                    datasource=datasource.id,
                    repository=repository,
                    strategy=strategy.value,
                    target=",".join(safe_url(u) for u in urls),
                ),
            )
