"""Create steamfriends components."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import aclosing, asynccontextmanager
from dataclasses import dataclass
from typing import Self

import redis.asyncio
import structlog
from httpx import AsyncClient
from redis.backoff import ExponentialBackoff
from redis.retry import Retry
from safir.dependencies.http_client import http_client_dependency
from safir.redis import PydanticRedisStorage
from safir.slack.webhook import SlackWebhookClient
from structlog.stdlib import BoundLogger

from .cache import FriendRecordCache, OnlineUserCache, WarmupCache
from .config import Config
from .constants import (
    FRIEND_RECORD_NAMESPACE,
    FRIEND_RECORD_PREFIX,
    REDIS_BACKOFF_MAX,
    REDIS_BACKOFF_START,
    REDIS_RETRIES,
    STEAM_API_KEY_URL,
)
from .exceptions import NotConfiguredError
from .models.friends import FriendRecord
from .services.friends import FriendsService
from .services.health import HealthCheckService
from .services.relationships import RelationshipService
from .services.sessions import SessionService
from .services.startup import WarmupService
from .storage.friends import FriendRecordStore
from .storage.steam import SteamStorage

__all__ = ["Factory", "ProcessContext"]


@dataclass(frozen=True, slots=True)
class ProcessContext:
    """Per-process application context.

    This object caches all of the per-process singletons that can be reused
    for every request and only need to be recreated if the application
    configuration changes.  In particular, it holds the in-memory friend
    record cache, so every request sees the same records and in-flight
    refreshes.
    """

    config: Config
    """steamfriends configuration."""

    http_client: AsyncClient
    """Shared HTTP client."""

    redis: redis.asyncio.Redis
    """Connection pool to use to talk to Redis."""

    friend_cache: FriendRecordCache
    """In-memory friend records and in-flight refreshes."""

    online_users: OnlineUserCache
    """Currently connected users."""

    warmup_cache: WarmupCache
    """Running cache warm-up, if any."""

    @classmethod
    async def from_config(cls, config: Config) -> Self:
        """Create a new process context from the steamfriends configuration.

        Parameters
        ----------
        config
            The steamfriends configuration.

        Returns
        -------
        ProcessContext
            Shared context for a steamfriends process.
        """
        password = None
        if config.redis_password:
            password = config.redis_password.get_secret_value()
        redis_client = redis.asyncio.from_url(
            str(config.redis_url),
            password=password,
            retry=Retry(
                ExponentialBackoff(
                    base=REDIS_BACKOFF_START, cap=REDIS_BACKOFF_MAX
                ),
                REDIS_RETRIES,
            ),
        )

        return cls(
            config=config,
            http_client=await http_client_dependency(),
            redis=redis_client,
            friend_cache=FriendRecordCache(),
            online_users=OnlineUserCache(),
            warmup_cache=WarmupCache(),
        )

    async def aclose(self) -> None:
        """Clean up a process context.

        Called during shutdown, or before recreating the process context using
        a different configuration.  Any warm-up or refresh still running is
        cancelled.
        """
        await self.warmup_cache.clear()
        await self.friend_cache.clear()
        await self.online_users.clear()
        await self.redis.aclose()


class Factory:
    """Build steamfriends components.

    Uses the contents of a `ProcessContext` to construct the components of the
    application on demand.

    Parameters
    ----------
    context
        Shared process context.
    logger
        Logger to use for errors.
    """

    @classmethod
    async def create(cls, config: Config) -> Self:
        """Create a component factory outside of a request.

        Intended for long-running daemons and command-line tools other than
        the FastAPI web application.  If an async context manager can be
        used, call `standalone` rather than this method.

        Parameters
        ----------
        config
            steamfriends configuration.

        Returns
        -------
        Factory
            Newly-created factory.  The caller must call `aclose` on the
            returned object during shutdown.
        """
        logger = structlog.get_logger("steamfriends")
        context = await ProcessContext.from_config(config)
        return cls(context, logger)

    @classmethod
    @asynccontextmanager
    async def standalone(cls, config: Config) -> AsyncIterator[Self]:
        """Async context manager for steamfriends components.

        Intended for background jobs and the command-line interface.  Do not
        use this factory inside the web application, since it will have its
        own friend record cache separate from that of the application.

        Parameters
        ----------
        config
            steamfriends configuration.

        Yields
        ------
        Factory
            The factory.  Must be used as an async context manager.

        Examples
        --------
        .. code-block:: python

           async with Factory.standalone(config) as factory:
               store = factory.create_friend_record_store()
               record = await store.get(steam_id)
        """
        factory = await cls.create(config)
        async with aclosing(factory):
            yield factory

    def __init__(self, context: ProcessContext, logger: BoundLogger) -> None:
        self._context = context
        self._logger = logger

    @property
    def redis(self) -> redis.asyncio.Redis:
        """Underlying Redis connection pool, mainly for tests."""
        return self._context.redis

    async def aclose(self) -> None:
        """Shut down the factory.

        After this method is called, the factory object is no longer valid and
        must not be used.
        """
        await self._context.aclose()

    def create_friend_record_store(self) -> FriendRecordStore:
        """Create the storage layer for friend records.

        Returns
        -------
        FriendRecordStore
            Newly-created friend record store.
        """
        storage = PydanticRedisStorage(
            datatype=FriendRecord,
            redis=self._context.redis,
            key_prefix=f"{FRIEND_RECORD_NAMESPACE}/{FRIEND_RECORD_PREFIX}",
        )
        slack_client = self.create_slack_client()
        return FriendRecordStore(storage, slack_client, self._logger)

    def create_friends_service(self) -> FriendsService:
        """Create the service that manages cached friend lists.

        Returns
        -------
        FriendsService
            Newly-created friends service.

        Raises
        ------
        NotConfiguredError
            Raised if no Steam Web API key has been configured.
        """
        return FriendsService(
            config=self._context.config,
            cache=self._context.friend_cache,
            store=self.create_friend_record_store(),
            steam=self.create_steam_storage(),
            logger=self._logger,
        )

    def create_health_check_service(self) -> HealthCheckService:
        """Create a service for performing health checks.

        Returns
        -------
        HealthCheckService
            Newly-created health check service.
        """
        return HealthCheckService(
            self._context.redis,
            steam_enabled=self._context.config.steam_enabled,
        )

    def create_relationship_service(self) -> RelationshipService:
        """Create the service that answers friendship questions.

        Returns
        -------
        RelationshipService
            Newly-created relationship service.

        Raises
        ------
        NotConfiguredError
            Raised if no Steam Web API key has been configured.
        """
        return RelationshipService(
            friends_service=self.create_friends_service(),
            online_users=self._context.online_users,
        )

    def create_session_service(self) -> SessionService:
        """Create the service that handles connection events.

        Returns
        -------
        SessionService
            Newly-created session service.

        Raises
        ------
        NotConfiguredError
            Raised if no Steam Web API key has been configured.
        """
        return SessionService(
            friends_service=self.create_friends_service(),
            warmup_service=self.create_warmup_service(),
            online_users=self._context.online_users,
            logger=self._logger,
        )

    def create_slack_client(self) -> SlackWebhookClient | None:
        """Create a client for sending messages to Slack.

        Returns
        -------
        SlackWebhookClient or None
            Configured Slack client if a Slack webhook was configured,
            otherwise `None`.
        """
        if not self._context.config.slack_webhook:
            return None
        return SlackWebhookClient(
            self._context.config.slack_webhook, "steamfriends", self._logger
        )

    def create_steam_storage(self) -> SteamStorage:
        """Create the Steam Web API client.

        Returns
        -------
        SteamStorage
            Newly-created Steam Web API client.

        Raises
        ------
        NotConfiguredError
            Raised if no Steam Web API key has been configured.
        """
        config = self._context.config
        if not config.steam_enabled:
            msg = f"No Steam Web API key configured, see {STEAM_API_KEY_URL}"
            raise NotConfiguredError(msg)
        return SteamStorage(
            base_url=str(config.steam_api_url),
            api_key=config.api_key,
            http_client=self._context.http_client,
            logger=self._logger,
        )

    def create_warmup_service(self) -> WarmupService:
        """Create the service that paces lookups of many users.

        Returns
        -------
        WarmupService
            Newly-created warm-up service.

        Raises
        ------
        NotConfiguredError
            Raised if no Steam Web API key has been configured.
        """
        return WarmupService(
            friends_service=self.create_friends_service(),
            warmup_cache=self._context.warmup_cache,
            delay=self._context.config.init_delay_seconds,
            logger=self._logger,
        )

    def set_logger(self, logger: BoundLogger) -> None:
        """Replace the internal logger.

        Used by the context dependency to update the logger for all
        newly-created components when it's rebound with additional context.

        Parameters
        ----------
        logger
            New logger.
        """
        self._logger = logger
