"""Health check for the steamfriends service."""

from __future__ import annotations

import redis.asyncio

from ..models.health import HealthCheck, HealthStatus

__all__ = ["HealthCheckService"]


class HealthCheckService:
    """Check the health of the steamfriends service.

    Intended to be invoked via a Kubernetes liveness check.  Only the record
    store is checked, since a Steam outage only delays refreshes.

    Parameters
    ----------
    redis_client
        Client for the Redis server holding friend records.
    steam_enabled
        Whether a Steam Web API key is configured.
    """

    def __init__(
        self, redis_client: redis.asyncio.Redis, *, steam_enabled: bool
    ) -> None:
        self._redis = redis_client
        self._steam_enabled = steam_enabled

    async def check(self) -> HealthCheck:
        """Check the health of the record store.

        Returns
        -------
        HealthCheck
            Health of the service.

        Raises
        ------
        redis.exceptions.RedisError
            Raised if Redis is unavailable.
        """
        await self._redis.ping()
        return HealthCheck(
            status=HealthStatus.HEALTHY,
            record_store=HealthStatus.HEALTHY,
            steam_enabled=self._steam_enabled,
        )
