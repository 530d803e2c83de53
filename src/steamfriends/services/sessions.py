"""Handling of game server connection events."""

from __future__ import annotations

from structlog.stdlib import BoundLogger

from ..cache import OnlineUserCache
from .friends import FriendsService
from .startup import WarmupService

__all__ = ["SessionService"]


class SessionService:
    """Track connected users and warm their friend lists.

    Parameters
    ----------
    friends_service
        Service managing the friend record cache.
    warmup_service
        Service for paced lookups of many users.
    online_users
        Currently connected users.
    logger
        Logger to use.
    """

    def __init__(
        self,
        *,
        friends_service: FriendsService,
        warmup_service: WarmupService,
        online_users: OnlineUserCache,
        logger: BoundLogger,
    ) -> None:
        self._friends = friends_service
        self._warmup = warmup_service
        self._online = online_users
        self._logger = logger

    async def connect(self, user_id: str) -> None:
        """Handle a user connecting.

        The user's friend list is looked up so that a refresh starts if
        needed.  The result of the lookup is not used.

        Parameters
        ----------
        user_id
            Steam ID of the user.
        """
        self._online.add(user_id)
        await self._friends.try_find(user_id)
        self._logger.debug("User connected", steam_id=user_id)

    def disconnect(self, user_id: str) -> None:
        """Handle a user disconnecting.

        The cached friend list of the user is kept.

        Parameters
        ----------
        user_id
            Steam ID of the user.
        """
        self._online.discard(user_id)
        self._logger.debug("User disconnected", steam_id=user_id)

    def replace(self, user_ids: list[str]) -> None:
        """Replace the full list of connected users.

        Used when the game server starts or restarts.  Friend lists of all
        of the users are loaded in the background with pacing.

        Parameters
        ----------
        user_ids
            Steam IDs of all connected users.
        """
        self._online.replace(user_ids)
        self._warmup.schedule(user_ids)
        self._logger.info("Replaced connected users", count=len(user_ids))
