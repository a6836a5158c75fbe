"""Tests for registry URL selection."""

import pytest

from constants import RegistryStrategy
from datasource.registry_url import (
    ensure_trailing_slash,
    host_allowed,
    join_url,
    resolve_registry_url,
    resolve_registry_urls,
    usable_urls,
)

DEFAULTS = ["https://bitbucket.org"]


class TestResolveFirst:
    """Tests for the 'first' strategy."""

    def test_empty_candidates_use_first_default(self):
        assert resolve_registry_url([], ["https://a.example", "https://b.example"]) == "https://a.example/"

    def test_none_and_blank_candidates_are_ignored(self):
        assert resolve_registry_url(None, DEFAULTS) == "https://bitbucket.org/"
        assert resolve_registry_url(["", "  "], DEFAULTS) == "https://bitbucket.org/"

    def test_first_candidate_wins(self):
        url = resolve_registry_url(["https://git.example.com/", "https://other.example"], DEFAULTS)
        assert url == "https://git.example.com/"

    def test_blank_leading_candidate_skipped(self):
        assert resolve_registry_url(["", "https://git.example.com"], DEFAULTS) == "https://git.example.com/"

    def test_first_returns_single_url_list(self):
        assert resolve_registry_urls(["https://a.example", "https://b.example"], DEFAULTS) == ["https://a.example/"]


class TestResolveMany:
    """Tests for the 'hunt' and 'merge' strategies."""

    @pytest.mark.parametrize("strategy", [RegistryStrategy.HUNT, "merge"])
    def test_all_candidates_kept_in_order(self, strategy):
        urls = resolve_registry_urls(["https://a.example", "https://b.example/"], DEFAULTS, strategy)
        assert urls == ["https://a.example/", "https://b.example/"]

    def test_duplicates_collapse_after_normalization(self):
        urls = resolve_registry_urls(["https://a.example", "https://a.example/"], DEFAULTS, "hunt")
        assert urls == ["https://a.example/"]

    def test_all_defaults_used_without_candidates(self):
        urls = resolve_registry_urls([], ["https://a.example", "https://b.example"], "hunt")
        assert urls == ["https://a.example/", "https://b.example/"]

    def test_unknown_strategy_raises(self):
        with pytest.raises(ValueError, match="Unknown registry strategy"):
            resolve_registry_urls([], DEFAULTS, "random")


class TestUrlHelpers:
    """Tests for slash normalization."""

    @pytest.mark.parametrize("url", ["https://bitbucket.org", "https://bitbucket.org/", "https://bitbucket.org//"])
    def test_ensure_trailing_slash(self, url):
        assert ensure_trailing_slash(url) == "https://bitbucket.org/"

    @pytest.mark.parametrize("base", ["https://bitbucket.org", "https://bitbucket.org/"])
    def test_join_url_single_separator(self, base):
        assert join_url(base, "some/dep2") == "https://bitbucket.org/some/dep2"
        assert join_url(base, "/some/dep2") == "https://bitbucket.org/some/dep2"

    def test_usable_urls_strips(self):
        assert usable_urls([" https://a.example ", None, ""]) == ["https://a.example"]

    def test_host_allowed(self):
        assert host_allowed("https://Bitbucket.org/x", ["bitbucket.org"])
        assert host_allowed("https://anything.example", [])
        assert not host_allowed("https://evil.example", ["bitbucket.org"])
        assert not host_allowed("https://bitbucket.org.evil.example", ["bitbucket.org"])
