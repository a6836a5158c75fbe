"""Tests for provider response normalization."""

import pytest

from common.errors import DataShapeError
from datasource.bitbucket_tags import BitbucketTagsDatasource
from datasource.gitlab_tags import GitlabTagsDatasource
from datasource.normalize import (
    default_branch,
    dig,
    head_commit,
    tag_commit,
    to_release,
    to_release_result,
)

BITBUCKET = BitbucketTagsDatasource(token=None)
GITLAB = GitlabTagsDatasource(token=None)


def test_dig_walks_and_tolerates_gaps():
    assert dig({"a": {"b": 1}}, ("a", "b")) == 1
    assert dig({"a": None}, ("a", "b")) is None
    assert dig({"a": "x"}, ("a", "b")) is None
    assert dig({"a": 1}, ()) is None


class TestReleases:
    """Tag entries to releases."""

    def test_bitbucket_tag_shapes(self):
        entries = [
            {"name": "v1.0.0", "target": {"date": "2020-11-19T09:05:35+00:00"}},
            {"name": "v1.1.0", "target": {}},
            {"name": "v1.1.1"},
        ]

        result = to_release_result(entries, "https://bitbucket.org/some/dep2", BITBUCKET)

        assert result.source_url == "https://bitbucket.org/some/dep2"
        assert [r.version for r in result.releases] == ["v1.0.0", "v1.1.0", "v1.1.1"]
        assert all(r.git_ref == r.version for r in result.releases)
        assert [r.release_timestamp for r in result.releases] == ["2020-11-19T09:05:35+00:00", None, None]

    def test_gitlab_tag_uses_commit_date(self):
        release = to_release({"name": "1.2.3", "commit": {"created_at": "2021-01-01T00:00:00Z"}}, GITLAB)
        assert release.release_timestamp == "2021-01-01T00:00:00Z"

    def test_absent_timestamp_not_serialized(self):
        assert to_release({"name": "v1"}, BITBUCKET).to_dict() == {"version": "v1", "gitRef": "v1"}

    def test_nameless_tag_fails_whole_result(self):
        with pytest.raises(DataShapeError):
            to_release_result([{"name": "v1"}, {"target": {}}], "https://bitbucket.org/x", BITBUCKET)


class TestCommits:
    """Commit hash extraction."""

    def test_tag_commit(self):
        assert tag_commit({"target": {"hash": "abc123"}}, BITBUCKET, "v1.0.0") == "abc123"

    @pytest.mark.parametrize("entry", [{"name": "v1"}, {"target": {}}, {"target": {"hash": ""}}])
    def test_tag_without_hash_is_data_shape_error(self, entry):
        with pytest.raises(DataShapeError, match="v1.0.0"):
            tag_commit(entry, BITBUCKET, "v1.0.0")

    def test_default_branch_falls_back_to_empty(self):
        assert default_branch({"mainbranch": {"name": "master"}}, BITBUCKET) == "master"
        assert default_branch({}, BITBUCKET) == ""
        assert default_branch({"default_branch": "main"}, GITLAB) == "main"

    def test_head_commit(self):
        assert head_commit([], BITBUCKET) is None
        assert head_commit([{"hash": "new"}, {"hash": "old"}], BITBUCKET) == "new"
        assert head_commit([{"id": "sha"}], GITLAB) == "sha"

    def test_head_commit_without_hash(self):
        with pytest.raises(DataShapeError):
            head_commit([{"date": "x"}], BITBUCKET)
