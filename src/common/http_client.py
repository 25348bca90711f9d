"""HTTP access for the npm registry and the package CDN.

Requests are retried with exponential backoff. Transport failures do not
raise: they come back as a response with status code 0 and the caller
decides how to fail. Registry metadata is kept in a small TTL cache so a
batch naming the same package twice only fetches it once.
"""
from __future__ import annotations

import json
import logging
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

import requests

from constants import Constants
from common.logging_utils import extra_context, is_debug_enabled, safe_url, Timer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HttpResponse:
    """Status and raw body of a GET; ``error`` is set when no response arrived."""

    status_code: int
    content: bytes = b""
    error: Optional[str] = None


# url + accept -> (stored_at, response), oldest first
_response_cache: "OrderedDict[Tuple[str, Optional[str]], Tuple[float, HttpResponse]]" = OrderedDict()


def clear_cache() -> None:
    """Drop every cached response."""
    _response_cache.clear()


def _cached(key: Tuple[str, Optional[str]]) -> Optional[HttpResponse]:
    now = time.time()
    while _response_cache:
        oldest_key, (stored_at, _) = next(iter(_response_cache.items()))
        if now - stored_at < Constants.HTTP_CACHE_TTL_SEC:
            break
        del _response_cache[oldest_key]

    hit = _response_cache.get(key)
    return hit[1] if hit else None


def _store(key: Tuple[str, Optional[str]], response: HttpResponse) -> None:
    _response_cache.pop(key, None)
    _response_cache[key] = (time.time(), response)
    while len(_response_cache) > Constants.HTTP_CACHE_MAX_ENTRIES:
        _response_cache.popitem(last=False)


def fetch(url: str, *, accept: Optional[str] = None, use_cache: bool = True) -> HttpResponse:
    """GET ``url`` with retries.

    Server errors (5xx) and timeouts are retried up to
    ``Constants.HTTP_RETRY_MAX`` attempts. Responses below 500 are cached
    when ``use_cache`` is set.
    """
    key = (url, accept)
    target = safe_url(url)
    if use_cache:
        cached = _cached(key)
        if cached is not None:
            logger.debug("HTTP cache hit for %s", target)
            return cached

    headers = {"Accept": accept} if accept else None
    response = HttpResponse(0, error="no attempt made")
    for attempt in range(1, Constants.HTTP_RETRY_MAX + 1):
        if attempt > 1:
            time.sleep(Constants.HTTP_RETRY_BASE_DELAY_SEC * (2 ** (attempt - 2)))

        with Timer() as timer:
            try:
                raw = requests.get(url, headers=headers, timeout=Constants.REQUEST_TIMEOUT)
                response = HttpResponse(raw.status_code, raw.content)
            except requests.Timeout:
                response = HttpResponse(0, error="timeout")
            except requests.RequestException as exc:
                response = HttpResponse(0, error=str(exc))

        if is_debug_enabled(logger):
            logger.debug(
                "HTTP GET",
                extra=extra_context(
                    event="http_request",
                    component="http_client",
                    action="GET",
                    target=target,
                    attempt=attempt,
                    status_code=response.status_code,
                    outcome=response.error or "response",
                    duration_ms=timer.duration_ms(),
                ),
            )

        if response.error is None and response.status_code < 500:
            if use_cache:
                _store(key, response)
            return response

    logger.warning(
        "GET %s failed after %s attempts: %s",
        target,
        Constants.HTTP_RETRY_MAX,
        response.error or f"status {response.status_code}",
    )
    return response


def fetch_json(url: str, *, accept: Optional[str] = None) -> Tuple[int, Optional[Dict[str, Any]]]:
    """GET ``url`` and decode a JSON object body.

    Returns:
        ``(status_code, data)``; ``data`` is None unless the status is 200
        and the body is a JSON object.
    """
    response = fetch(url, accept=accept)
    if response.status_code != 200:
        return response.status_code, None

    try:
        data = json.loads(response.content)
    except ValueError:
        logger.debug("Invalid JSON body from %s", safe_url(url))
        return response.status_code, None
    return response.status_code, data if isinstance(data, dict) else None
