import time
from typing import Any, Dict, Optional

import httpx
from loguru import logger

from core.errors import FetchError

DEFAULT_TIMEOUT = 15.0


def http_get_bytes(
    url: str,
    params: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
    timeout: float = DEFAULT_TIMEOUT,
    client: Optional[httpx.Client] = None,
) -> bytes:
    """
    Perform a single HTTP GET (following redirects) and return the body.

    ``timeout`` bounds each network phase and also the whole download, so a
    server trickling bytes cannot hold the caller past the deadline.
    Transport failures, timeouts and non-2xx statuses raise FetchError.
    """
    deadline = time.monotonic() + timeout
    try:
        if client is not None:
            return _stream_body(client, url, params, headers, timeout, deadline)

        with httpx.Client(timeout=timeout, follow_redirects=True) as own_client:
            return _stream_body(own_client, url, params, headers, timeout, deadline)

    except httpx.HTTPStatusError as e:
        logger.debug(f"HTTP {e.response.status_code} from {url}")
        raise FetchError(f"HTTP {e.response.status_code} from {url}") from e
    except httpx.TimeoutException as e:
        raise FetchError(f"Timed out after {timeout}s fetching {url}") from e
    except httpx.RequestError as e:
        raise FetchError(f"Failed to connect to {url} - {e}") from e


def _stream_body(
    client: httpx.Client,
    url: str,
    params: Optional[Dict[str, Any]],
    headers: Optional[Dict[str, str]],
    timeout: float,
    deadline: float,
) -> bytes:
    chunks = []
    with client.stream(
        "GET", url, params=params, headers=headers, timeout=timeout, follow_redirects=True
    ) as response:
        response.raise_for_status()
        for chunk in response.iter_bytes():
            chunks.append(chunk)
            if time.monotonic() > deadline:
                raise FetchError(f"Timed out after {timeout}s downloading {url}")
    return b"".join(chunks)
