"""Storage layer for friend records."""

from __future__ import annotations

from safir.redis import DeserializeError, PydanticRedisStorage
from safir.slack.webhook import SlackWebhookClient
from structlog.stdlib import BoundLogger

from ..models.friends import FriendRecord

__all__ = ["FriendRecordStore"]


class FriendRecordStore:
    """Stores and retrieves friend records in Redis.

    Records are stored without an expiration.  Whether a record is still
    fresh enough to use is decided by the caller based on its last update
    time.

    Parameters
    ----------
    storage
        Underlying storage for friend records.  Its key prefix provides the
        namespace that keeps these records separate from any other data.
    slack_client
        If provided, Slack webhook client to report deserialization errors of
        Redis data.
    logger
        Logger for diagnostics.
    """

    def __init__(
        self,
        storage: PydanticRedisStorage[FriendRecord],
        slack_client: SlackWebhookClient | None,
        logger: BoundLogger,
    ) -> None:
        self._storage = storage
        self._slack = slack_client
        self._logger = logger

    async def delete(self, user_id: str) -> bool:
        """Delete the stored record for a user.

        Parameters
        ----------
        user_id
            Steam ID of the owner of the record.

        Returns
        -------
        bool
            `True` if there was a record to delete, `False` otherwise.
        """
        return await self._storage.delete(user_id)

    async def delete_all(self) -> None:
        """Delete all stored friend records."""
        await self._storage.delete_all("*")

    async def get(self, user_id: str) -> FriendRecord | None:
        """Retrieve the stored record for a user, if any.

        Records that cannot be parsed, or that are stored under the key of a
        different user, are logged and treated as if they did not exist so
        that they will be replaced by a fresh record from Steam.

        Parameters
        ----------
        user_id
            Steam ID of the owner of the record.

        Returns
        -------
        FriendRecord or None
            The stored record, or `None` if there is no valid record.
        """
        try:
            record = await self._storage.get(user_id)
        except DeserializeError as e:
            msg = "Cannot retrieve friend record"
            self._logger.exception(msg, steam_id=user_id, error=str(e))
            if self._slack:
                await self._slack.post_exception(e)
            return None
        if record and record.owner_id != user_id:
            msg = "Ignoring friend record stored for another user"
            self._logger.warning(
                msg, steam_id=user_id, record_owner=record.owner_id
            )
            return None
        return record

    async def store(self, record: FriendRecord) -> None:
        """Store a friend record, replacing any existing record.

        Parameters
        ----------
        record
            Record to store.
        """
        await self._storage.store(record.owner_id, record)
