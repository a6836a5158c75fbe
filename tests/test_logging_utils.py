"""Unit tests for shared logging helpers."""

import json
import logging

from common.logging_utils import JsonFormatter, Timer, extra_context, safe_url


def test_extra_context_drops_none():
    assert extra_context(event="cache_hit", target=None) == {"event": "cache_hit"}


def test_safe_url_redacts_credentials():
    assert safe_url("https://user:pw@gitlab.com/api/v4?private_token=abc&page=2") == (
        "https://***@gitlab.com/api/v4?private_token=***&page=2"
    )


def test_safe_url_leaves_plain_urls():
    assert safe_url("https://api.bitbucket.org/2.0/repositories/a/b") == "https://api.bitbucket.org/2.0/repositories/a/b"
    assert safe_url(None) is None


def test_json_formatter_includes_extras():
    record = logging.makeLogRecord({"msg": "Cache hit", "levelname": "DEBUG", "name": "x", "event": "cache_hit"})
    payload = json.loads(JsonFormatter().format(record))
    assert payload["message"] == "Cache hit"
    assert payload["event"] == "cache_hit"


def test_timer_measures():
    with Timer() as t:
        pass
    assert t.duration_ms() >= 0
