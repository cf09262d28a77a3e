"""Fixed-window rate limiter backed by the shared key/value store."""

from __future__ import annotations

from fastapi import HTTPException, Request, status

from grammar_engine.cache.span_cache import SpanCache
from grammar_engine.observability.logger import get_logger

logger = get_logger("rate_limiter")

WINDOW_SECONDS = 60


def client_key(request: Request) -> str:
    forwarded = request.headers.get("X-Forwarded-For", "")
    host = forwarded.split(",")[0].strip() or (request.client.host if request.client else "")
    return host or "anonymous"


async def rate_limit(request: Request) -> str:
    """FastAPI dependency: enforce the per-client request budget.

    Returns the client key for downstream use.
    """
    settings = request.app.state.settings
    store = request.app.state.cache
    client = client_key(request)

    count = await store.increment(
        SpanCache.make_key("ratelimit", client), ttl_seconds=WINDOW_SECONDS
    )
    if count > settings.rate_limit_requests_per_minute:
        logger.warning("rate_limited", client=client, count=count)
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Rate limit exceeded. Try again later.",
            headers={"Retry-After": str(WINDOW_SECONDS)},
        )
    return client
