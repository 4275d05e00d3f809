"""Sliding-window rate limit gate for the search channels.

Built on the `limits` moving-window strategy (the engine underneath
SlowAPI) so budgets are enforced per `{channel}:{caller-address}` key
rather than per route. Storage is chosen by URI: in-process memory by
default, Redis or Memcached for multi-instance deployments.
"""

import logging

from limits import RateLimitItemPerSecond
from limits.aio.strategies import MovingWindowRateLimiter
from limits.storage import storage_from_string

from marketsearch.application.interfaces.services import RateLimitDecision
from marketsearch.core.config import RateLimitBudget
from marketsearch.core.constants import RATE_LIMIT_KEY_SEP
from marketsearch.shared.utils.sanitization import sanitize_log_message

logger = logging.getLogger(__name__)

UNKNOWN_CALLER = "unknown"
_ASYNC_SCHEME_PREFIX = "async+"


def rate_limit_key(channel: str, caller_address: str | None) -> str:
    """Gate key for one channel and caller; missing address maps to 'unknown'."""
    return f"{channel}{RATE_LIMIT_KEY_SEP}{caller_address or UNKNOWN_CALLER}"


def _async_storage_uri(uri: str) -> str:
    """limits needs the async+ scheme for its asyncio storage backends."""
    return uri if uri.startswith(_ASYNC_SCHEME_PREFIX) else _ASYNC_SCHEME_PREFIX + uri


class RateLimitGate:
    """Moving-window admission control.

    A storage failure fails open: the request is admitted and the error
    logged, so an unreachable limiter backend never takes search down.
    """

    def __init__(self, storage_uri: str = "memory://") -> None:
        """Initialize with a limits storage URI.

        Args:
            storage_uri: e.g. 'memory://' or 'redis://localhost:6379'.
        """
        self._storage = storage_from_string(_async_storage_uri(storage_uri))
        self._strategy = MovingWindowRateLimiter(self._storage)

    async def check(self, key: str, budget: RateLimitBudget) -> RateLimitDecision:
        """Count one request against key; denied once the window is full."""
        item = RateLimitItemPerSecond(budget.max_requests, budget.window_seconds)
        try:
            allowed = await self._strategy.hit(item, key)
            stats = await self._strategy.get_window_stats(item, key)
        except Exception as e:
            logger.error(
                "Rate limit storage failed, admitting request: %s",
                sanitize_log_message(e),
            )
            return RateLimitDecision(allowed=True)
        return RateLimitDecision(allowed=allowed, remaining=stats.remaining)
