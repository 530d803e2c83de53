"""Steam Web API mocks for testing."""

from __future__ import annotations

import respx
from httpx import Request, Response

from steamfriends.config import Config
from steamfriends.constants import STEAM_FRIENDS_PATH

__all__ = ["MockSteam", "mock_steam", "steam_friends_url"]


class MockSteam:
    """Pretends to be the Steam friend list API for testing.

    The methods of this object should be installed as respx mock side effects
    using `mock_steam`.

    Parameters
    ----------
    api_key
        Expected Steam Web API key.

    Attributes
    ----------
    friends
        Mapping of Steam IDs to the friends to return for that user.  Users
        not in this mapping have no friends.
    requests
        Steam IDs of every friend list request received, in order.
    """

    def __init__(self, api_key: str) -> None:
        self._api_key = api_key
        self.friends: dict[str, list[str]] = {}
        self.requests: list[str] = []

    def get_friend_list(self, request: Request) -> Response:
        assert request.url.params["key"] == self._api_key
        user_id = request.url.params["steamid"]
        self.requests.append(user_id)
        friends = [
            {
                "steamid": friend,
                "relationship": "friend",
                "friend_since": 1600000000,
            }
            for friend in self.friends.get(user_id, [])
        ]
        return Response(200, json={"friendslist": {"friends": friends}})


def steam_friends_url(config: Config) -> str:
    """Return the URL of the friend list method.

    Parameters
    ----------
    config
        steamfriends configuration.

    Returns
    -------
    str
        URL of the friend list method, without query parameters.
    """
    return str(config.steam_api_url).rstrip("/") + STEAM_FRIENDS_PATH


def mock_steam(config: Config, respx_mock: respx.Router) -> MockSteam:
    """Set up the mocks for Steam friend list lookups.

    Parameters
    ----------
    config
        steamfriends configuration.
    respx_mock
        The mock router.

    Returns
    -------
    MockSteam
        The mock, whose ``friends`` attribute can be changed to control the
        results.
    """
    mock = MockSteam(config.api_key.get_secret_value())
    url = steam_friends_url(config)
    respx_mock.get(url__startswith=url).mock(side_effect=mock.get_friend_list)
    return mock
