"""Exception taxonomy shared by the transport, providers and engine.

A ``None`` return is how legitimate absence is reported (no commits, unknown
tag). Exceptions mean the acquisition itself broke.
"""
from __future__ import annotations

from typing import Optional


class DepmetaError(Exception):
    """Root of all project errors."""


class FetchFailure(DepmetaError):
    """A provider call could not produce a usable response."""


class TransportFailure(FetchFailure):
    """Network or HTTP-layer failure talking to a provider."""

    def __init__(self, message: str, *, url: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class DataShapeError(FetchFailure):
    """Provider response lacks a field the returned data implies must exist."""


class UnknownDatasourceError(DepmetaError):
    """No datasource is registered under the requested id."""

    def __init__(self, datasource_id: str):
        super().__init__(f"Unknown datasource: {datasource_id}")
        self.datasource_id = datasource_id


class ConfigError(DepmetaError):
    """Configuration could not be loaded or was used out of order."""
