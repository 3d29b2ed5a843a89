"""Shared async HTTP client utilities for registry access.

Provides a thin wrapper around ``httpx.AsyncClient`` with standardised
timeouts, user-agent headers, and error handling. Registry clients and the
artifact pipeline use this module so that HTTP behaviour is consistent and
testable (tests pass an ``httpx.AsyncClient`` backed by
``httpx.MockTransport``).

Transport failures are never swallowed: they surface as
``RegistryUnavailable`` so a resolution aborts instead of silently
treating an outage as "no versions".
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from modpin import __version__
from modpin.exceptions import RegistryUnavailable

logger = logging.getLogger(__name__)

# Timeout for all registry HTTP requests (seconds).
DEFAULT_TIMEOUT: float = 30.0

# User-Agent sent with every request.
USER_AGENT: str = f"modpin/{__version__}"


def make_client(timeout: float = DEFAULT_TIMEOUT) -> httpx.AsyncClient:
    """Create an ``httpx.AsyncClient`` with modpin's defaults."""
    return httpx.AsyncClient(
        timeout=timeout,
        headers={"User-Agent": USER_AGENT},
        follow_redirects=True,
    )


async def fetch_json(
    client: httpx.AsyncClient,
    url: str,
    *,
    params: dict[str, str] | None = None,
) -> Any:
    """Fetch a URL and parse the response as JSON.

    Args:
        client: Client to issue the request with.
        url: The URL to fetch.
        params: Optional query parameters.

    Returns:
        Parsed JSON response.

    Raises:
        RegistryUnavailable: On HTTP errors, timeouts, or invalid JSON. The
            error carries the URL and, for HTTP errors, the status code.
    """
    try:
        resp = await client.get(url, params=params)
        resp.raise_for_status()
        return resp.json()
    except httpx.TimeoutException as exc:
        logger.warning("Timeout fetching %s", url)
        raise RegistryUnavailable(f"Timeout fetching {url}", url=url) from exc
    except httpx.HTTPStatusError as exc:
        status = exc.response.status_code
        logger.warning("HTTP %d from %s", status, url)
        raise RegistryUnavailable(
            f"HTTP {status} from {url}", url=url, status_code=status
        ) from exc
    except httpx.RequestError as exc:
        logger.warning("Request error for %s: %s", url, exc)
        raise RegistryUnavailable(f"Request error for {url}: {exc}", url=url) from exc
    except ValueError as exc:
        logger.warning("Invalid JSON from %s", url)
        raise RegistryUnavailable(f"Invalid JSON from {url}", url=url) from exc
