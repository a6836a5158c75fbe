"""Configuration loading for the CLI.

Reads an optional YAML/JSON file, layers environment overrides on top, and
builds the resolution engine from the admin part of the result. CLI flags are
applied by the entrypoint and take precedence over both.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict, Optional

import yaml

from admin_config import AdminConfig
from common.errors import ConfigError
from constants import Constants
from datasource import MetadataResolutionEngine
from packagecache import create_cache_store

logger = logging.getLogger(__name__)

_ENV_OVERRIDES = {
    Constants.ENV_CACHE_DIR: "cache_dir",
    Constants.ENV_CACHE_MINUTES: "cache_minutes",
    Constants.ENV_CACHE_BACKEND: "cache_backend",
}


def load_config_file(path: Optional[str]) -> Dict[str, Any]:
    """Load a configuration mapping; ``.json`` files via json, anything else as YAML.

    Returns an empty dict when no path is given.

    Raises:
        ConfigError: if the file is missing, unparsable, or not a mapping.
    """
    if not path:
        return {}
    if not os.path.isfile(path):
        raise ConfigError(f"Config file not found: {path}")

    try:
        with open(path, "r", encoding="utf-8") as fh:
            if path.lower().endswith(".json"):
                data = json.load(fh)
            else:
                data = yaml.safe_load(fh)
    except (OSError, ValueError, yaml.YAMLError) as exc:
        raise ConfigError(f"Failed to load config {path}: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config {path} must contain a mapping at the top level")
    logger.debug("Loaded config from %s", path)
    return data


def apply_env_overrides(config: Dict[str, Any]) -> Dict[str, Any]:
    """Overlay DEPMETA_* environment variables onto config (in place)."""
    for env_name, option in _ENV_OVERRIDES.items():
        value = os.environ.get(env_name)
        if value is not None and value.strip():
            config[option] = value.strip()
    return config


def build_engine(admin: AdminConfig) -> MetadataResolutionEngine:
    """Create the cache store and engine described by the admin config."""
    try:
        cache = create_cache_store(admin.cache_backend, admin.cache_dir)
    except ValueError as exc:
        raise ConfigError(str(exc)) from exc
    return MetadataResolutionEngine(
        cache,
        cache_minutes=admin.cache_minutes,
        allowed_registry_hosts=admin.allowed_registry_hosts,
    )
