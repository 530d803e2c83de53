"""Steam Web API storage layer for steamfriends."""

from __future__ import annotations

from httpx import AsyncClient, HTTPError
from pydantic import SecretStr, ValidationError
from structlog.stdlib import BoundLogger

from ..constants import STEAM_FRIENDS_PATH, STEAM_TIMEOUT
from ..exceptions import SteamError, SteamWebError
from ..models.friends import SteamFriendsResponse

__all__ = ["SteamStorage"]


class SteamStorage:
    """Retrieve friend lists from the Steam Web API.

    Parameters
    ----------
    base_url
        Base URL of the Steam Web API.
    api_key
        Steam Web API key.
    http_client
        HTTP client to use.
    logger
        Logger to use.
    """

    def __init__(
        self,
        *,
        base_url: str,
        api_key: SecretStr,
        http_client: AsyncClient,
        logger: BoundLogger,
    ) -> None:
        self._url = base_url.rstrip("/") + STEAM_FRIENDS_PATH
        self._api_key = api_key
        self._http_client = http_client
        self._logger = logger

    async def get_friends(self, user_id: str) -> list[str]:
        """Get the friends of a user from Steam.

        Parameters
        ----------
        user_id
            Steam ID of the user.

        Returns
        -------
        list of str
            Steam IDs of the friends of that user.  This will be empty if the
            response had no friend list.

        Raises
        ------
        SteamError
            Raised if the response from Steam could not be parsed.
        SteamWebError
            Raised if the request to Steam failed, timed out, or returned a
            status other than 200.
        """
        params = {
            "key": self._api_key.get_secret_value(),
            "steamid": user_id,
        }
        try:
            r = await self._http_client.get(
                self._url, params=params, timeout=STEAM_TIMEOUT
            )
        except HTTPError as e:
            # The request URL contains the API key, so build the exception
            # by hand rather than with from_exception.
            msg = f"Cannot get Steam friends: {type(e).__name__}: {e!s}"
            raise SteamWebError(msg, method="GET", url=self._url) from e
        if r.status_code != 200:
            msg = f"Status {r.status_code} from GET {self._url}"
            raise SteamWebError(
                msg,
                method="GET",
                url=self._url,
                status=r.status_code,
                body=r.text,
            )
        try:
            result = SteamFriendsResponse.model_validate_json(r.content)
        except ValidationError as e:
            error = f"{type(e).__name__}: {e!s}"
            msg = f"Steam friend list for {user_id} invalid: {error}"
            raise SteamError(msg) from e
        friends = result.friend_ids()
        self._logger.debug(
            f"Retrieved {len(friends)} Steam friends",
            steam_id=user_id,
            steam_url=self._url,
        )
        return friends
