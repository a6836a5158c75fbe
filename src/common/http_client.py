"""Shared HTTP helpers used by the datasource providers.

Encapsulates timeout/retry handling and JSON decoding so providers avoid
duplicating try/except blocks. Failures are raised as ``TransportFailure`` or
``DataShapeError``; nothing here caches, that is the resolution engine's job.
"""
from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests

from constants import Constants
from common.errors import DataShapeError, TransportFailure
from common.logging_utils import extra_context, is_debug_enabled, safe_url, Timer

logger = logging.getLogger(__name__)

HEADERS_JSON = {"Accept": "application/json"}


@dataclass
class JsonResponse:
    """Decoded JSON response plus the bits of the HTTP envelope providers need.

    Header names are lower-cased.
    """

    status_code: int
    headers: Dict[str, str]
    data: Any


def robust_get(
    url: str,
    *,
    context: str,
    headers: Optional[Dict[str, str]] = None,
    **kwargs: Any
) -> requests.Response:
    """Perform GET request with timeout and retries on connection errors.

    Raises:
        TransportFailure: when every attempt timed out or failed to connect.
    """
    safe_target = safe_url(url)
    request_headers = {**HEADERS_JSON, **(headers or {})}
    last_exception: Optional[str] = None

    for attempt in range(Constants.HTTP_RETRY_MAX):
        if attempt:
            time.sleep(Constants.HTTP_RETRY_BASE_DELAY_SEC * (2 ** (attempt - 1)))
        with Timer() as t:
            try:
                if is_debug_enabled(logger):
                    logger.debug(
                        "HTTP request",
                        extra=extra_context(
                            event="http_request",
                            component="http_client",
                            action="GET",
                            target=safe_target,
                            context=context,
                            attempt=attempt + 1
                        )
                    )

                response = requests.get(
                    url,
                    timeout=Constants.REQUEST_TIMEOUT,
                    headers=request_headers,
                    **kwargs
                )

                if is_debug_enabled(logger):
                    logger.debug(
                        "HTTP response",
                        extra=extra_context(
                            event="http_response",
                            component="http_client",
                            action="GET",
                            outcome="success" if response.ok else "http_error",
                            status_code=response.status_code,
                            duration_ms=t.duration_ms(),
                            target=safe_target,
                            context=context
                        )
                    )
                return response

            except requests.Timeout:
                last_exception = f"timed out after {Constants.REQUEST_TIMEOUT} seconds"
                outcome = "timeout"
            except requests.RequestException as exc:  # includes ConnectionError
                last_exception = str(exc)
                outcome = "request_exception"

            if is_debug_enabled(logger):
                logger.debug(
                    "HTTP request exception",
                    extra=extra_context(
                        event="http_exception",
                        component="http_client",
                        action="GET",
                        outcome=outcome,
                        attempt=attempt + 1,
                        target=safe_target,
                        context=context
                    )
                )

    logger.warning("%s request to %s failed: %s", context, safe_target, last_exception)
    raise TransportFailure(
        f"{context} request failed after {Constants.HTTP_RETRY_MAX} attempts: {last_exception}",
        url=url,
    )


def get_json(
    url: str,
    *,
    context: str,
    headers: Optional[Dict[str, str]] = None,
    **kwargs: Any
) -> JsonResponse:
    """Perform GET request and parse the JSON body.

    Args:
        url: Target URL
        context: Human-readable source tag for logs (e.g., "bitbucket-tags")
        headers: Optional request headers
        **kwargs: Additional requests.get parameters

    Returns:
        JsonResponse with status code, response headers and parsed body

    Raises:
        TransportFailure: on connection failure or a non-2xx status.
        DataShapeError: when a 2xx body is not valid JSON.
    """
    response = robust_get(url, context=context, headers=headers, **kwargs)
    safe_target = safe_url(url)

    if not 200 <= response.status_code < 300:
        logger.debug(
            "Non-success status",
            extra=extra_context(
                event="http_response",
                component="http_client",
                action="get_json",
                outcome="http_error",
                status_code=response.status_code,
                target=safe_target
            )
        )
        raise TransportFailure(
            f"{context} request to {safe_target} returned HTTP {response.status_code}",
            url=url,
            status_code=response.status_code,
        )

    try:
        data = json.loads(response.text)
    except (json.JSONDecodeError, TypeError) as exc:
        if is_debug_enabled(logger):
            logger.debug(
                "JSON decode error",
                extra=extra_context(
                    event="parse",
                    component="http_client",
                    action="get_json",
                    outcome="json_decode_error",
                    status_code=response.status_code,
                    target=safe_target
                )
            )
        raise DataShapeError(f"{context} returned a malformed JSON body from {safe_target}") from exc

    lowered = {k.lower(): v for k, v in response.headers.items()}
    return JsonResponse(response.status_code, lowered, data)
