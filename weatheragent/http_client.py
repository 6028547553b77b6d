"""Shared httpx client and the request helper both API clients use."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from weatheragent import config
from weatheragent.errors import DecodeError, HttpStatusError, NetworkError

logger = logging.getLogger(__name__)


def create_http_client(timeout: float | None = None) -> httpx.AsyncClient:
    """Create the async client shared by the weather and chat pipelines.

    Connect, read, write and pool acquisition are each bounded by the
    same timeout, fixed for the client's lifetime.
    """
    return httpx.AsyncClient(
        timeout=httpx.Timeout(timeout if timeout is not None else config.HTTP_TIMEOUT),
        headers={"Accept": "application/json"},
        follow_redirects=True,
    )


async def get_json(
    client: httpx.AsyncClient,
    url: str,
    params: dict[str, Any] | None = None,
) -> Any:
    """Make a single GET request and return the decoded JSON body.

    Raises:
        NetworkError: On timeouts and transport failures.
        HttpStatusError: On any non-2xx response.
        DecodeError: If the body is not valid JSON.
    """
    logger.debug("GET %s params=%s", url, params)
    try:
        response = await client.get(url, params=params)
    except httpx.TimeoutException as exc:
        raise NetworkError(f"Request timed out: {exc}") from exc
    except (httpx.HTTPError, httpx.InvalidURL) as exc:
        raise NetworkError(f"HTTP error communicating with {url}: {exc}") from exc

    if not response.is_success:
        raise HttpStatusError(response.status_code)

    try:
        return response.json()
    except ValueError as exc:
        raise DecodeError("Received invalid JSON from server.") from exc
