"""Shared HTTP plumbing for acquisition sources."""

from __future__ import annotations

from typing import Any, Mapping

import httpx
from tenacity import (
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

DEFAULT_TIMEOUT_SECONDS = 30.0
USER_AGENT = "RE_TRACKER/0.1.0 (Rossmoor Housing Tracker; Educational)"
_DEFAULT_WAIT = wait_exponential(min=1, max=16)
_DEFAULT_STOP = stop_after_attempt(5)


Params = Mapping[str, Any] | None


def is_transient_error(exc: BaseException) -> bool:
    """Network failures and 5xx/429 responses are worth retrying; other 4xx are not."""

    if isinstance(exc, httpx.TransportError):
        return True
    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        return status >= 500 or status == 429
    return False


@retry(
    wait=_DEFAULT_WAIT,
    stop=_DEFAULT_STOP,
    retry=retry_if_exception(is_transient_error),
    reraise=True,
)
async def fetch_json(
    url: str,
    *,
    params: Params = None,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
) -> Any:
    """GET ``url`` and return the decoded JSON payload.

    Transient failures are retried with exponential backoff; the last error is
    re-raised once attempts are exhausted.
    """

    headers = {"User-Agent": USER_AGENT, "Accept": "application/json"}
    async with httpx.AsyncClient(timeout=timeout, headers=headers) as client:
        response = await client.get(url, params=params)

    response.raise_for_status()
    return response.json()


__all__ = ["fetch_json", "is_transient_error", "DEFAULT_TIMEOUT_SECONDS", "USER_AGENT"]
