"""Paced loading of friend lists for connected users."""

from __future__ import annotations

import asyncio
from collections.abc import Iterable

from structlog.stdlib import BoundLogger

from ..cache import WarmupCache
from .friends import FriendsService

__all__ = ["WarmupService"]

_sleep = asyncio.sleep
"""Pause between lookups, replaced by the test suite."""


class WarmupService:
    """Load the friend lists of many users without flooding Steam.

    When the service starts, or the game server reports its full list of
    connected players, every one of those users needs a friend lookup.  Doing
    them all at once would send a burst of requests to the rate-limited Steam
    Web API, so instead they are done one at a time with a delay in between.

    Parameters
    ----------
    friends_service
        Service managing the friend record cache.
    warmup_cache
        Holder for the running warm-up task.
    delay
        Delay in seconds between lookups.
    logger
        Logger to use.
    """

    def __init__(
        self,
        *,
        friends_service: FriendsService,
        warmup_cache: WarmupCache,
        delay: float,
        logger: BoundLogger,
    ) -> None:
        self._friends = friends_service
        self._warmup = warmup_cache
        self._delay = delay
        self._logger = logger

    def schedule(self, user_ids: Iterable[str]) -> asyncio.Task[None]:
        """Warm the cache for a list of users in the background.

        Any warm-up already running is cancelled.

        Parameters
        ----------
        user_ids
            Steam IDs of the users to look up.

        Returns
        -------
        asyncio.Task
            The background task, mainly for tests.
        """
        task = asyncio.create_task(
            self.warm(list(user_ids)), name="steam-friends-warmup"
        )
        self._warmup.replace(task)
        return task

    async def warm(self, user_ids: list[str]) -> None:
        """Look up each user in turn, pausing between lookups.

        The lookups only start refreshes as needed.  Their results are
        discarded.

        Parameters
        ----------
        user_ids
            Steam IDs of the users to look up.
        """
        self._logger.info("Warming friend cache", count=len(user_ids))
        for i, user_id in enumerate(user_ids):
            if i > 0:
                await _sleep(self._delay)
            await self._friends.try_find(user_id)
        self._logger.info("Finished warming friend cache")
