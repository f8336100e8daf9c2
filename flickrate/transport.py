"""Blocking HTTP GET with error classification.

Shared by the OAuth handshake and the REST client. A single attempt is made
per call; there are no automatic retries.
"""

import time

import httpx
import structlog

from flickrate.errors import NetworkError, ProtocolError
from flickrate.observability.redact import redact_url


logger = structlog.get_logger()

# HTTP Status Code Ranges
HTTP_STATUS_OK_MIN = 200
HTTP_STATUS_OK_MAX = 300

# Default hard timeout for a single request (seconds)
DEFAULT_TIMEOUT_SECONDS = 30.0

USER_AGENT = "flickrate/0.1"


def create_http_client(timeout: float = DEFAULT_TIMEOUT_SECONDS) -> httpx.Client:
    """Create the shared HTTP client.

    httpx.Client is safe to share between worker threads.

    Args:
        timeout: Hard timeout for each request in seconds.

    Returns:
        Configured httpx.Client.
    """
    return httpx.Client(
        timeout=timeout,
        follow_redirects=True,
        headers={"User-Agent": USER_AGENT},
    )


def http_get(client: httpx.Client, url: str, component: str) -> httpx.Response:
    """Execute a GET request and reject non-2xx responses.

    Args:
        client: HTTP client.
        url: Fully built URL (query string included).
        component: Log component name.

    Returns:
        The successful response.

    Raises:
        NetworkError: On timeout or transport failure.
        ProtocolError: On a non-2xx status.
    """
    log = logger.bind(component=component, url=redact_url(url))
    start_time_ns = time.perf_counter_ns()

    try:
        response = client.get(url)
    except httpx.TimeoutException as e:
        log.warning("request_timeout", error=str(e))
        msg = f"Request timed out: {e}"
        raise NetworkError(msg) from e
    except httpx.HTTPError as e:
        log.warning("request_failed", error=str(e))
        msg = f"Request failed: {e}"
        raise NetworkError(msg) from e

    duration_ms = (time.perf_counter_ns() - start_time_ns) / 1_000_000
    log.debug(
        "request_complete",
        status_code=response.status_code,
        bytes=len(response.content),
        duration_ms=round(duration_ms, 2),
    )

    if not HTTP_STATUS_OK_MIN <= response.status_code < HTTP_STATUS_OK_MAX:
        msg = (
            f"{redact_url(url)} returned {response.status_code} "
            f"{response.reason_phrase}"
        )
        raise ProtocolError(msg, status_code=response.status_code)

    return response
