"""Turn provider-native JSON into releases and commit hashes.

Optional fields that a provider leaves out stay absent (None); required
fields that are missing raise DataShapeError.
"""
from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

from common.errors import DataShapeError
from .base import Datasource, FieldPath
from .models import Release, ReleaseResult


def dig(obj: Any, path: FieldPath) -> Any:
    """Walk nested dicts along path; None if any step is missing."""
    if not path:
        return None
    for key in path:
        if not isinstance(obj, dict):
            return None
        obj = obj.get(key)
    return obj


def _non_empty_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) and value else None


def to_release(entry: Dict[str, Any], datasource: Datasource) -> Release:
    """Normalize one tag entry; the tag name doubles as the git ref."""
    name = _non_empty_str(dig(entry, datasource.tag_name_path))
    if name is None:
        raise DataShapeError(f"{datasource.id} returned a tag without a name")
    return Release(
        version=name,
        git_ref=name,
        release_timestamp=_non_empty_str(dig(entry, datasource.tag_date_path)),
    )


def to_release_result(entries: Iterable[Dict[str, Any]], source_url: str, datasource: Datasource) -> ReleaseResult:
    releases: List[Release] = [to_release(entry, datasource) for entry in entries]
    return ReleaseResult(source_url=source_url, releases=releases)


def tag_commit(entry: Dict[str, Any], datasource: Datasource, tag: str) -> str:
    """Commit hash a tag points at. A reported tag must carry one."""
    commit = _non_empty_str(dig(entry, datasource.tag_hash_path))
    if commit is None:
        raise DataShapeError(f"{datasource.id} reported tag {tag!r} without a target commit")
    return commit


def default_branch(info: Dict[str, Any], datasource: Datasource) -> str:
    """Default branch name, or "" when the provider does not report one."""
    return _non_empty_str(dig(info, datasource.default_branch_path)) or ""


def head_commit(commits: List[Dict[str, Any]], datasource: Datasource) -> Optional[str]:
    """Hash of the first (newest) commit; None for a repository without commits."""
    if not commits:
        return None
    commit = _non_empty_str(dig(commits[0], datasource.commit_hash_path))
    if commit is None:
        raise DataShapeError(f"{datasource.id} returned a commit without a hash")
    return commit
