"""HTTP retry helper shared by the LLM providers."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)

BACKOFF_BASE_SECONDS = 0.5


async def request_with_retry(
    http: httpx.AsyncClient,
    method: str,
    url: str,
    *,
    max_retries: int,
    **kwargs: Any,
) -> httpx.Response:
    """Send a request, retrying 5xx answers and transport errors with backoff.

    Client errors (4xx) are returned at once. The last response is returned
    once retries run out; the last transport error is re-raised.
    """
    attempts = max(1, max_retries + 1)
    for attempt in range(attempts):
        last = attempt == attempts - 1
        delay = BACKOFF_BASE_SECONDS * (2 ** attempt)
        try:
            resp = await http.request(method, url, **kwargs)
        except httpx.TransportError as exc:
            if last:
                raise
            logger.warning(
                "Transport error on %s: %s, retrying in %.1fs (%d/%d)",
                url, exc, delay, attempt + 1, attempts,
            )
            await asyncio.sleep(delay)
            continue

        if resp.status_code < 500 or last:
            return resp
        logger.warning(
            "Request to %s returned %d, retrying in %.1fs (%d/%d)",
            url, resp.status_code, delay, attempt + 1, attempts,
        )
        await asyncio.sleep(delay)

    raise AssertionError("unreachable")


async def post_json(
    http: httpx.AsyncClient,
    url: str,
    payload: dict[str, Any],
    *,
    max_retries: int,
) -> Any:
    """POST a JSON payload and decode the JSON answer; raises on HTTP errors."""
    resp = await request_with_retry(http, "POST", url, max_retries=max_retries, json=payload)
    resp.raise_for_status()
    return resp.json()
