"""Models for Steam friend records and the Steam friend list API."""

from __future__ import annotations

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, field_serializer
from pydantic.alias_generators import to_camel

__all__ = [
    "FriendRecord",
    "Friendship",
    "OnlineFriends",
    "SteamFriend",
    "SteamFriendsList",
    "SteamFriendsResponse",
]


class FriendRecord(BaseModel):
    """Cached friend list of one Steam user.

    This is both the in-memory representation and the persisted form of a
    friend list.  The field aliases give the persisted JSON format, which is
    ``{"ownerID": ..., "lastUpdated": ..., "friends": [...]}``.
    """

    model_config = ConfigDict(
        frozen=True, populate_by_name=True, serialize_by_alias=True
    )

    owner_id: Annotated[
        str,
        Field(
            ...,
            title="Owner",
            description="Steam ID of the user whose friends these are",
            alias="ownerID",
            min_length=1,
        ),
    ]

    last_updated: Annotated[
        float,
        Field(
            ...,
            title="Last update",
            description=(
                "When the friend list was last retrieved from Steam, in"
                " seconds since epoch"
            ),
            alias="lastUpdated",
        ),
    ]

    friends: Annotated[
        frozenset[str],
        Field(
            frozenset(),
            title="Friends",
            description="Steam IDs of the friends of the owner",
        ),
    ]

    @field_serializer("friends")
    def _serialize_friends(self, friends: frozenset[str]) -> list[str]:
        return sorted(friends)

    def is_stale(self, now: float, refresh_interval: int) -> bool:
        """Whether this record is due for a refresh.

        Parameters
        ----------
        now
            Current time in seconds since epoch.
        refresh_interval
            Refresh interval in seconds.

        Returns
        -------
        bool
            `True` if the current time is past the end of the refresh
            interval that started at the last update.
        """
        return now > self.last_updated + refresh_interval


class SteamFriend(BaseModel):
    """One entry in a friend list returned by the Steam Web API.

    Only ``steamid`` is used.  The other fields are parsed for completeness.
    """

    steamid: str = Field(..., title="Steam ID of the friend", min_length=1)

    relationship: str | None = Field(None, title="Type of relationship")

    friend_since: int | None = Field(
        None, title="When the friendship started, in seconds since epoch"
    )


class SteamFriendsList(BaseModel):
    """The ``friendslist`` key of a Steam friend list response."""

    friends: list[SteamFriend] | None = Field(
        None, title="Friends of the user"
    )


class SteamFriendsResponse(BaseModel):
    """Response from the Steam ``GetFriendList`` method."""

    friendslist: SteamFriendsList = Field(..., title="Friend list")

    def friend_ids(self) -> list[str]:
        """Return the Steam IDs of all listed friends."""
        if not self.friendslist.friends:
            return []
        return [f.steamid for f in self.friendslist.friends]


class Friendship(BaseModel):
    """Whether two users are friends, as returned by the API."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True
    )

    user_id: str = Field(..., title="Steam ID of the first user")

    target_id: str = Field(..., title="Steam ID of the second user")

    is_friend: bool = Field(
        ...,
        title="Whether they are friends",
        description=(
            "Whether either user's cached friend list contains the other."
            " False if no data is cached yet for either user."
        ),
    )


class OnlineFriends(BaseModel):
    """Connected friends of a user, as returned by the API."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True
    )

    user_id: str = Field(..., title="Steam ID of the user")

    friends: list[str] = Field(
        ..., title="Steam IDs of connected friends of the user"
    )
