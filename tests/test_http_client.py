"""Tests for the shared HTTP transport."""

import json
from unittest.mock import MagicMock, patch

import pytest
import requests

from common.errors import DataShapeError, TransportFailure
from common.http_client import get_json
from constants import Constants


def _response(status_code=200, data=None, text=None, headers=None):
    mock_response = MagicMock()
    mock_response.status_code = status_code
    mock_response.ok = 200 <= status_code < 400
    mock_response.text = text if text is not None else json.dumps(data)
    mock_response.headers = headers or {}
    return mock_response


@patch("common.http_client.time.sleep")
@patch("common.http_client.requests.get")
class TestGetJson:
    """Tests for get_json."""

    def test_parses_body_and_lowercases_headers(self, mock_get, _sleep):
        mock_get.return_value = _response(data={"values": []}, headers={"X-Page": "1"})

        res = get_json("https://api.bitbucket.org/2.0/x", context="test")

        assert res.status_code == 200
        assert res.data == {"values": []}
        assert res.headers == {"x-page": "1"}
        _, kwargs = mock_get.call_args
        assert kwargs["timeout"] == Constants.REQUEST_TIMEOUT
        assert kwargs["headers"]["Accept"] == "application/json"

    def test_non_2xx_raises_with_status(self, mock_get, _sleep):
        mock_get.return_value = _response(status_code=404, text="not found")

        with pytest.raises(TransportFailure) as excinfo:
            get_json("https://api.bitbucket.org/2.0/x", context="test")

        assert excinfo.value.status_code == 404
        assert mock_get.call_count == 1

    def test_malformed_body_is_data_shape_error(self, mock_get, _sleep):
        mock_get.return_value = _response(text="<html>")

        with pytest.raises(DataShapeError):
            get_json("https://api.bitbucket.org/2.0/x", context="test")

    def test_retries_connection_errors_then_succeeds(self, mock_get, mock_sleep):
        mock_get.side_effect = [requests.ConnectionError("boom"), _response(data=[1])]

        res = get_json("https://gitlab.com/api/v4/x", context="test")

        assert res.data == [1]
        assert mock_get.call_count == 2
        mock_sleep.assert_called_once()

    def test_gives_up_after_max_attempts(self, mock_get, _sleep):
        mock_get.side_effect = requests.Timeout("slow")

        with pytest.raises(TransportFailure) as excinfo:
            get_json("https://gitlab.com/api/v4/x", context="test")

        assert excinfo.value.status_code is None
        assert mock_get.call_count == Constants.HTTP_RETRY_MAX

    def test_extra_headers_merged(self, mock_get, _sleep):
        mock_get.return_value = _response(data={})

        get_json("https://gitlab.com/api/v4/x", context="test", headers={"Private-Token": "t"})

        _, kwargs = mock_get.call_args
        assert kwargs["headers"]["Private-Token"] == "t"
