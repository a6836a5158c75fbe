"""Datasource registration table.

Built once at import time from an explicit list; treat it as read-only.
"""
from __future__ import annotations

from types import MappingProxyType
from typing import List, Mapping, Optional

from common.errors import UnknownDatasourceError
from .base import Datasource
from .bitbucket_tags import BitbucketTagsDatasource
from .gitlab_tags import GitlabTagsDatasource


def _build_table(*datasources: Datasource) -> Mapping[str, Datasource]:
    table = {}
    for ds in datasources:
        if ds.id in table:
            raise ValueError(f"Duplicate datasource id: {ds.id}")
        table[ds.id] = ds
    return MappingProxyType(table)


DATASOURCES: Mapping[str, Datasource] = _build_table(
    BitbucketTagsDatasource(),
    GitlabTagsDatasource(),
)


def get_datasource(datasource_id: str, table: Optional[Mapping[str, Datasource]] = None) -> Datasource:
    """Look up a datasource by id in table (the built-in table by default)."""
    try:
        return (DATASOURCES if table is None else table)[datasource_id]
    except KeyError:
        raise UnknownDatasourceError(datasource_id) from None


def list_datasources() -> List[str]:
    """Sorted ids of all registered datasources."""
    return sorted(DATASOURCES)
