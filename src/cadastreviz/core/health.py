"""Shared health probing helper."""

from __future__ import annotations

import time
from typing import Any, Awaitable, Callable

from cadastreviz.core.types import HealthStatus


async def timed_probe(
    service: str,
    check: Callable[[], Awaitable[bool]],
    details: dict[str, Any] | None = None,
) -> HealthStatus:
    """Run an availability check and report it with its latency."""
    details = dict(details or {})
    try:
        start = time.monotonic()
        available = await check()
        latency_ms = (time.monotonic() - start) * 1000
    except Exception as exc:
        details["error"] = str(exc)
        return HealthStatus(service=service, healthy=False, details=details)

    return HealthStatus(
        service=service,
        healthy=available,
        latency_ms=round(latency_ms, 2),
        details=details,
    )
