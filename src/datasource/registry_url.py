"""Registry URL selection.

Pure functions: given the caller's candidate URLs and a datasource's defaults,
decide which registry base URL(s) a lookup runs against. Returned URLs always
end with exactly one slash so they can be joined with a repository path.
"""
from __future__ import annotations

from typing import Iterable, List, Optional, Sequence, Union
from urllib.parse import urlsplit

from constants import RegistryStrategy

StrategyLike = Union[RegistryStrategy, str]


def ensure_trailing_slash(url: str) -> str:
    """Return url with exactly one trailing slash."""
    return url.rstrip("/") + "/"


def join_url(base: str, path: str) -> str:
    """Join base and path with exactly one separating slash."""
    return ensure_trailing_slash(base) + path.lstrip("/")


def usable_urls(candidates: Optional[Iterable[Optional[str]]]) -> List[str]:
    """Drop blank entries and surrounding whitespace."""
    return [c.strip() for c in (candidates or []) if c and c.strip()]


def _strategy(strategy: StrategyLike) -> RegistryStrategy:
    if isinstance(strategy, RegistryStrategy):
        return strategy
    try:
        return RegistryStrategy(strategy)
    except ValueError:
        raise ValueError(f"Unknown registry strategy: {strategy}") from None


def resolve_registry_urls(
    candidate_urls: Optional[Sequence[Optional[str]]],
    default_urls: Sequence[str],
    strategy: StrategyLike = RegistryStrategy.FIRST,
) -> List[str]:
    """Return the normalized registry URLs a lookup should use, in order.

    Candidates win over defaults whenever at least one is usable. ``first``
    keeps only the leading URL; ``hunt`` and ``merge`` keep all of them.
    """
    chosen = _strategy(strategy)
    urls = usable_urls(candidate_urls) or usable_urls(default_urls)
    if not urls:
        raise ValueError("No usable registry URL and no default declared")

    normalized: List[str] = []
    for url in urls:
        url = ensure_trailing_slash(url)
        if url not in normalized:
            normalized.append(url)

    if chosen is RegistryStrategy.FIRST:
        return normalized[:1]
    return normalized


def resolve_registry_url(
    candidate_urls: Optional[Sequence[Optional[str]]],
    default_urls: Sequence[str],
    strategy: StrategyLike = RegistryStrategy.FIRST,
) -> str:
    """Return the single registry URL to use under the ``first`` policy."""
    return resolve_registry_urls(candidate_urls, default_urls, strategy)[0]


def host_allowed(url: str, allowed_hosts: Iterable[str]) -> bool:
    """True when allowed_hosts is empty or lists url's host (case-insensitive)."""
    hosts = {h.lower() for h in allowed_hosts}
    if not hosts:
        return True
    return (urlsplit(url).hostname or "").lower() in hosts
