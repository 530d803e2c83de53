"""Friend record cache and refresh logic."""

from __future__ import annotations

import time
from collections.abc import Iterable

from redis.exceptions import RedisError
from structlog.stdlib import BoundLogger

from ..cache import FriendRecordCache
from ..config import Config
from ..exceptions import SteamError
from ..models.friends import FriendRecord
from ..storage.friends import FriendRecordStore
from ..storage.steam import SteamStorage

__all__ = ["FriendsService"]


class FriendsService:
    """Manage cached Steam friend lists.

    This is the only component that changes friend records.  It decides
    whether a record is trusted, loaded from storage, or refreshed from
    Steam, and merges the results of refreshes back into the in-memory cache
    and storage.

    Refreshes run as background tasks tracked by the cache, so lookups never
    wait for Steam.  A lookup that has to start a refresh returns `None`, and
    the caller is expected to try again later.

    Parameters
    ----------
    config
        steamfriends configuration.
    cache
        In-memory cache of friend records and in-flight fetches.
    store
        Persistent storage for friend records.
    steam
        Steam Web API client.
    logger
        Logger to use.
    """

    def __init__(
        self,
        *,
        config: Config,
        cache: FriendRecordCache,
        store: FriendRecordStore,
        steam: SteamStorage,
        logger: BoundLogger,
    ) -> None:
        self._config = config
        self._cache = cache
        self._store = store
        self._steam = steam
        self._logger = logger

    def find(self, user_id: str) -> FriendRecord | None:
        """Get the in-memory record for a user, if any.

        Never consults storage and never starts a refresh.  A record whose
        refresh is in flight is still returned.

        Parameters
        ----------
        user_id
            Steam ID of the user.

        Returns
        -------
        FriendRecord or None
            The cached record, or `None` if no record is loaded.
        """
        return self._cache.get(user_id)

    async def merge_fetch_result(
        self, user_id: str, friend_ids: Iterable[str]
    ) -> None:
        """Replace the friends of a user with the result of a fetch.

        If there is no in-memory record for the user, the result is dropped.

        Parameters
        ----------
        user_id
            Steam ID of the user.
        friend_ids
            Steam IDs of all of the friends of that user.
        """
        record = self._cache.get(user_id)
        if not record:
            self._logger.debug(
                "Dropping Steam friends for unknown user", steam_id=user_id
            )
            return
        update = {"friends": frozenset(friend_ids), "last_updated": _now()}
        record = record.model_copy(update=update)
        self.remove(user_id)
        self._cache.store(record)
        await self._store.store(record)
        self._logger.info(
            "Updated Steam friends",
            steam_id=user_id,
            friend_count=len(record.friends),
        )

    def remove(self, user_id: str) -> None:
        """Remove the in-memory record for a user, if any.

        Parameters
        ----------
        user_id
            Steam ID of the user.
        """
        self._cache.remove(user_id)

    async def try_find(self, user_id: str) -> FriendRecord | None:
        """Get the friend record for a user, refreshing it if needed.

        This is the primary entry point for friend lookups.  A record already
        loaded in memory is returned directly.  Otherwise, the record is
        loaded from storage and, if it is stale or missing, a refresh from
        Steam is started in the background.

        Parameters
        ----------
        user_id
            Steam ID of the user.

        Returns
        -------
        FriendRecord or None
            The friend record, or `None` if a refresh from Steam is in flight
            or storage is unavailable, and the caller should try again later.
        """
        if self._cache.is_fetching(user_id):
            return None
        record = self._cache.get(user_id)
        if record:
            return self._check_resident(record)
        async with await self._cache.lock(user_id):
            if self._cache.is_fetching(user_id):
                return None
            record = self._cache.get(user_id)
            if record:
                return record

            # Not yet loaded, so try storage next.  If storage is unavailable,
            # report the record as not ready without creating a placeholder,
            # so that stored data is not replaced by an empty record.
            try:
                record = await self._store.get(user_id)
            except RedisError as e:
                msg = "Unable to load friend record"
                self._logger.exception(msg, steam_id=user_id, error=str(e))
                return None
            if record:
                self._cache.store(record)
                if self._is_stale(record):
                    self._request_friends(user_id)
                    return None
                return record

            # Never seen before.  Register a placeholder before the fetch so
            # that lookups while it is in flight don't start another.  The
            # placeholder is persisted by the fetch itself so that it cannot
            # overwrite the fetch result.
            record = FriendRecord(owner_id=user_id, last_updated=_now())
            self._cache.store(record)
            self._request_friends(user_id, placeholder=record)
            return None

    async def wait_for_fetches(self) -> None:
        """Wait for all refreshes currently in flight to finish."""
        await self._cache.wait_for_fetches()

    def _check_resident(self, record: FriendRecord) -> FriendRecord | None:
        """Decide whether to use a record that is already in memory."""
        if self._config.revalidate_cached and self._is_stale(record):
            self._request_friends(record.owner_id)
            return None
        return record

    def _is_stale(self, record: FriendRecord) -> bool:
        interval = self._config.refresh_interval_seconds
        return record.is_stale(_now(), interval)

    async def _refresh(
        self, user_id: str, placeholder: FriendRecord | None = None
    ) -> None:
        """Fetch the friends of a user from Steam and merge them.

        Errors are logged and otherwise ignored.  The existing record stays
        in place until a later refresh succeeds.
        """
        if placeholder:
            try:
                await self._store.store(placeholder)
            except RedisError as e:
                msg = "Unable to store placeholder friend record"
                self._logger.exception(msg, steam_id=user_id, error=str(e))
        try:
            friends = await self._steam.get_friends(user_id)
        except SteamError as e:
            msg = "Unable to retrieve Steam friends"
            self._logger.warning(msg, steam_id=user_id, error=str(e))
            return
        try:
            await self.merge_fetch_result(user_id, friends)
        except RedisError as e:
            msg = "Unable to store Steam friends"
            self._logger.exception(msg, steam_id=user_id, error=str(e))

    def _request_friends(
        self, user_id: str, placeholder: FriendRecord | None = None
    ) -> None:
        """Start a background refresh of the friends of a user."""
        fetch = self._refresh(user_id, placeholder)
        if self._cache.start_fetch(user_id, fetch):
            self._logger.debug("Requested Steam friends", steam_id=user_id)


def _now() -> float:
    """Current time in seconds since epoch."""
    return time.time()
