"""Constants used in the project."""

from enum import Enum


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    FILE_ERROR = 1
    CONNECTION_ERROR = 2
    DATA_ERROR = 3
    USAGE_ERROR = 4


class RegistryStrategy(Enum):
    """Policies for choosing among candidate registry URLs.

    Args:
        Enum (string): Strategy names as accepted in configuration.
    """

    FIRST = "first"
    HUNT = "hunt"
    MERGE = "merge"


class CacheBackends(Enum):
    """Cache store backings selectable from configuration.

    Args:
        Enum (string): Backend names.
    """

    MEMORY = "memory"
    FILE = "file"


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    LOG_FORMAT = "[%(levelname)s] %(message)s"
    REQUEST_TIMEOUT = 30  # Timeout in seconds for all HTTP requests
    HTTP_RETRY_MAX = 3
    HTTP_RETRY_BASE_DELAY_SEC = 0.3

    # Package cache
    DEFAULT_CACHE_MINUTES = 10
    CACHE_MAX_ENTRIES = 10000
    CACHE_CLEANUP_INTERVAL_SEC = 60
    DEFAULT_CACHE_DIR = ".depmeta-cache"

    # Hosting services
    BITBUCKET_REGISTRY_URL = "https://bitbucket.org"
    BITBUCKET_API_BASE = "https://api.bitbucket.org"
    GITLAB_REGISTRY_URL = "https://gitlab.com"
    GITLAB_API_PATH = "/api/v4"
    ENV_BITBUCKET_TOKEN = "BITBUCKET_TOKEN"
    ENV_GITLAB_TOKEN = "GITLAB_TOKEN"
    REPO_API_PER_PAGE = 100

    # Environment overrides
    ENV_LOG_LEVEL = "DEPMETA_LOG_LEVEL"
    ENV_LOG_FORMAT = "DEPMETA_LOG_FORMAT"
    ENV_CACHE_DIR = "DEPMETA_CACHE_DIR"
    ENV_CACHE_MINUTES = "DEPMETA_CACHE_MINUTES"
    ENV_CACHE_BACKEND = "DEPMETA_CACHE_BACKEND"
