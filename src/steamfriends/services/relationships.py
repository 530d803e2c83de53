"""Relationship queries against cached friend lists."""

from __future__ import annotations

from ..cache import OnlineUserCache
from .friends import FriendsService

__all__ = ["RelationshipService"]


class RelationshipService:
    """Answer friendship questions from cached data.

    Only friend records already in memory are consulted.  Nothing here starts
    a refresh, so answers may be out of date or missing while data is stale
    or a refresh is in flight.  Missing data is always treated as "not a
    friend."

    Parameters
    ----------
    friends_service
        Service managing the friend record cache.
    online_users
        Currently connected users.
    """

    def __init__(
        self,
        *,
        friends_service: FriendsService,
        online_users: OnlineUserCache,
    ) -> None:
        self._friends = friends_service
        self._online = online_users

    def is_friend(self, user_id: str, target_id: str) -> bool:
        """Check whether two users are friends.

        Both directions are checked, since the friend list of one user may be
        unavailable (for example, if their Steam profile is private) while
        the other user's friend list shows the relationship.

        Parameters
        ----------
        user_id
            Steam ID of the first user.
        target_id
            Steam ID of the second user.

        Returns
        -------
        bool
            Whether the cached friends of either user include the other.
        """
        record = self._friends.find(user_id)
        if record and target_id in record.friends:
            return True
        record = self._friends.find(target_id)
        return bool(record and user_id in record.friends)

    def online_friends_of(self, user_id: str) -> list[str]:
        """List the connected friends of a user.

        Parameters
        ----------
        user_id
            Steam ID of the user.

        Returns
        -------
        list of str
            Steam IDs of connected users who are friends of that user, in the
            order in which they connected.
        """
        return [
            candidate
            for candidate in self._online.list_users()
            if self.is_friend(user_id, candidate)
        ]
