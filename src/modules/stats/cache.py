"""Scope-keyed caching for stats results.

Each scope (``global`` or one tenant) owns a generation counter.  Result
keys embed the current generation, so bumping the counter makes every
cached result of that scope unreachable at once; stale entries simply
expire.  Invalidating a tenant also bumps ``global``, since admin-wide
results include that tenant's rows.
"""

from __future__ import annotations

from typing import Any, Callable, Optional

import structlog
from django.conf import settings
from django.core.cache import cache

logger = structlog.get_logger(__name__)

GLOBAL_SCOPE = "global"


def scope_for(customer_id: Optional[int]) -> str:
    return GLOBAL_SCOPE if customer_id is None else f"customer:{customer_id}"


def _generation_key(scope: str) -> str:
    return f"stats:gen:{scope}"


def generation(scope: str) -> int:
    return cache.get_or_set(_generation_key(scope), 1, timeout=None)


def bump(scope: str) -> None:
    key = _generation_key(scope)
    try:
        cache.incr(key)
    except ValueError:
        cache.set(key, 2, timeout=None)


def invalidate(customer_id: Optional[int]) -> None:
    """Drop cached stats for ``customer_id`` (if any) and the global scope."""
    if customer_id is not None:
        bump(scope_for(customer_id))
    bump(GLOBAL_SCOPE)
    logger.info("stats.cache_invalidated", customer_id=customer_id)


def cached(name: str, scope: str, params: str, compute: Callable[[], Any]) -> Any:
    key = f"stats:{name}:{scope}:g{generation(scope)}:{params}"
    value = cache.get(key)
    if value is not None:
        logger.debug("stats.cache_hit", key=key)
        return value
    value = compute()
    cache.set(key, value, timeout=settings.STATS_CACHE_TIMEOUT)
    logger.debug("stats.cache_miss", key=key)
    return value
