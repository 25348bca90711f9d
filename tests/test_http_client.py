"""Tests for the shared HTTP helpers."""

from unittest.mock import MagicMock, patch

import pytest
import requests

from common import http_client
from common.logging_utils import safe_url


def make_response(status_code=200, content=b"{}"):
    response = MagicMock()
    response.status_code = status_code
    response.content = content
    return response


@pytest.fixture(autouse=True)
def clean_cache():
    http_client.clear_cache()
    yield
    http_client.clear_cache()


class TestFetch:
    """Retries, caching and raw bodies."""

    @patch("common.http_client.time.sleep")
    @patch("common.http_client.requests.get")
    def test_retries_then_succeeds(self, mock_get, _mock_sleep):
        mock_get.side_effect = [requests.Timeout(), make_response(503), make_response(200, b'{"ok": true}')]

        status, data = http_client.fetch_json("https://registry.test/pkg", accept="application/json")

        assert status == 200
        assert data == {"ok": True}
        assert mock_get.call_count == 3
        assert mock_get.call_args.kwargs["headers"] == {"Accept": "application/json"}

    @patch("common.http_client.time.sleep")
    @patch("common.http_client.requests.get", side_effect=requests.ConnectionError("refused"))
    def test_all_attempts_fail(self, mock_get, _mock_sleep, restore_constants):
        restore_constants.HTTP_RETRY_MAX = 2

        response = http_client.fetch("https://registry.test/pkg")

        assert response.status_code == 0
        assert response.content == b""
        assert "refused" in response.error
        assert mock_get.call_count == 2

    @patch("common.http_client.requests.get", return_value=make_response(200, b"\xef\xbb\xbfbody\xff"))
    def test_body_is_returned_as_bytes(self, _mock_get):
        assert http_client.fetch("https://cdn.test/file.js", use_cache=False).content == b"\xef\xbb\xbfbody\xff"

    @patch("common.http_client.requests.get", return_value=make_response(404, b"missing"))
    def test_responses_are_cached(self, mock_get):
        http_client.fetch("https://registry.test/pkg")
        response = http_client.fetch("https://registry.test/pkg")

        assert response.status_code == 404
        assert mock_get.call_count == 1

    @patch("common.http_client.requests.get", return_value=make_response(200, b"x"))
    def test_uncached_fetch_always_hits_network(self, mock_get):
        http_client.fetch("https://cdn.test/a.js", use_cache=False)
        http_client.fetch("https://cdn.test/a.js", use_cache=False)

        assert mock_get.call_count == 2

    @patch("common.http_client.requests.get", return_value=make_response(200, b"{}"))
    def test_cache_is_bounded(self, mock_get, restore_constants):
        restore_constants.HTTP_CACHE_MAX_ENTRIES = 2

        for name in ("a", "b", "c"):
            http_client.fetch(f"https://registry.test/{name}")
        http_client.fetch("https://registry.test/a")

        assert len(http_client._response_cache) == 2
        assert mock_get.call_count == 4

    @patch("common.http_client.requests.get", return_value=make_response(200, b"{}"))
    def test_expired_entries_are_pruned(self, mock_get, restore_constants):
        restore_constants.HTTP_CACHE_TTL_SEC = 0

        http_client.fetch("https://registry.test/a")
        http_client.fetch("https://registry.test/a")

        assert mock_get.call_count == 2
        assert len(http_client._response_cache) == 1

    @patch("common.http_client.requests.get", return_value=make_response(200, b"not json"))
    def test_fetch_json_bad_body(self, _mock_get):
        assert http_client.fetch_json("https://registry.test/pkg") == (200, None)


def test_safe_url_masks_credentials():
    assert safe_url("https://user:pw@registry.test/pkg?token=abc&x=1") == (
        "https://[REDACTED]@registry.test/pkg?token=[REDACTED]&x=1"
    )
