"""Privileged (admin-only) options, held in an explicit per-run context.

Some options may only come from the operator, never from a repository's own
configuration. They are stripped out of the user config as soon as it is
loaded and carried in a ``RunContext`` that is set once per run, read many
times and reset when the run ends.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

from constants import CacheBackends, Constants
from common.errors import ConfigError
from datasource.registry_url import host_allowed

logger = logging.getLogger(__name__)

REPO_ADMIN_OPTIONS = [
    "cache_backend",
    "cache_dir",
    "cache_minutes",
    "allowed_registry_hosts",
]


@dataclass(frozen=True)
class AdminConfig:
    """Operator-controlled settings for one run."""
    cache_backend: str = CacheBackends.MEMORY.value
    cache_dir: Optional[str] = None
    cache_minutes: float = Constants.DEFAULT_CACHE_MINUTES
    allowed_registry_hosts: Tuple[str, ...] = ()

    def registry_allowed(self, url: str) -> bool:
        """True when no allow-list is configured or url's host is on it."""
        return host_allowed(url, self.allowed_registry_hosts)

    def filter_registry_urls(self, urls: Sequence[str]) -> List[str]:
        """Drop candidate registry URLs whose host is not allowed."""
        kept = []
        for url in urls:
            if self.registry_allowed(url):
                kept.append(url)
            else:
                logger.warning("Ignoring registry URL not in allowed_registry_hosts: %s", url)
        return kept


def strip_admin_options(config: Dict[str, Any]) -> AdminConfig:
    """Remove admin options from config (in place) and return them as AdminConfig.

    Raises:
        ConfigError: if an admin option has an unusable value.
    """
    raw = {name: config.pop(name) for name in REPO_ADMIN_OPTIONS if name in config}
    values: Dict[str, Any] = {}

    backend = raw.get("cache_backend")
    if backend is not None:
        allowed = [b.value for b in CacheBackends]
        if backend not in allowed:
            raise ConfigError(f"cache_backend must be one of {allowed}, got {backend!r}")
        values["cache_backend"] = backend

    if raw.get("cache_dir") is not None:
        values["cache_dir"] = str(raw["cache_dir"])

    if raw.get("cache_minutes") is not None:
        try:
            minutes = float(raw["cache_minutes"])
        except (TypeError, ValueError):
            raise ConfigError(f"cache_minutes must be a number, got {raw['cache_minutes']!r}") from None
        if minutes <= 0:
            raise ConfigError("cache_minutes must be positive")
        values["cache_minutes"] = minutes

    hosts = raw.get("allowed_registry_hosts")
    if hosts is not None:
        if isinstance(hosts, str) or not isinstance(hosts, (list, tuple)):
            raise ConfigError("allowed_registry_hosts must be a list of host names")
        values["allowed_registry_hosts"] = tuple(str(h).strip().lower() for h in hosts if str(h).strip())

    return AdminConfig(**values)


class RunContext:
    """Holds the admin config for the duration of one run."""

    def __init__(self) -> None:
        self._admin: Optional[AdminConfig] = None

    def set_admin_config(self, config: Dict[str, Any]) -> AdminConfig:
        """Strip admin options from config and pin them for this run.

        Raises:
            ConfigError: if already set since the last reset.
        """
        if self._admin is not None:
            raise ConfigError("Admin config already set for this run")
        self._admin = strip_admin_options(config)
        return self._admin

    @property
    def admin_config(self) -> AdminConfig:
        """The pinned admin config, or defaults when none was set."""
        return self._admin if self._admin is not None else AdminConfig()

    def reset(self) -> None:
        self._admin = None
