"""Shared caches.

These caches are process-global, managed by
`~steamfriends.factory.ProcessContext`.  The common theme is some storage
wrapped in an `asyncio.Lock`, possibly with some complex structure to allow
per-user locking.  These caches sit below the main service layer and are only
intended for use via their service layer
(`~steamfriends.services.friends.FriendsService` and
`~steamfriends.services.relationships.RelationshipService`).
"""

from __future__ import annotations

import asyncio
from abc import ABCMeta, abstractmethod
from collections.abc import Callable, Coroutine
from types import TracebackType
from typing import Any, Literal

from .models.friends import FriendRecord

__all__ = [
    "BaseCache",
    "FriendRecordCache",
    "OnlineUserCache",
    "PerUserCache",
    "UserLockManager",
    "WarmupCache",
]


class BaseCache(metaclass=ABCMeta):
    """Base class for caches managed by the process context."""

    @abstractmethod
    async def clear(self) -> None:
        """Invalidate the cache.

        Used primarily for testing.
        """


class UserLockManager:
    """Helper class for managing per-user locks.

    This should only be created by `PerUserCache`.  It is returned by the
    `PerUserCache.lock` method and implements the async context manager
    protocol.

    Parameters
    ----------
    general_lock
        Lock protecting the per-user locks.
    user_lock
        Per-user lock for a given user.
    on_release
        Called once this manager no longer holds or waits for the user lock.
    """

    def __init__(
        self,
        general_lock: asyncio.Lock,
        user_lock: asyncio.Lock,
        on_release: Callable[[], None],
    ) -> None:
        self._general_lock = general_lock
        self._user_lock = user_lock
        self._on_release = on_release

    async def __aenter__(self) -> asyncio.Lock:
        try:
            async with self._general_lock:
                await self._user_lock.acquire()
        except asyncio.CancelledError:
            self._on_release()
            raise
        return self._user_lock

    async def __aexit__(
        self,
        exc_type: type[Exception] | None,
        exc: Exception | None,
        tb: TracebackType | None,
    ) -> Literal[False]:
        self._user_lock.release()
        self._on_release()
        return False


class PerUserCache(BaseCache):
    """Base class for a cache with per-user locking.

    Notes
    -----
    When there's a cache miss for a specific user, the goal is to block the
    storage lookup for that user until the first requester has either loaded
    the data or decided to fetch it from Steam, either way adding it to the
    cache.  Subsequent requests that were blocked on the lock can then be
    answered from the cache.

    There is therefore a dictionary of per-user locks, but since we don't know
    the list of users in advance, we have to populate those locks on the fly.
    The per-user lock must be acquired before the general lock is released,
    so the `lock` method cannot simply return the per-user lock.
    `UserLockManager` is used to handle this.

    A per-user lock is dropped once no caller holds or waits for it, so locks
    do not accumulate for every Steam ID ever looked up.
    """

    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._user_locks: dict[str, asyncio.Lock] = {}
        self._lock_users: dict[str, int] = {}

    async def clear(self) -> None:
        """Invalidate the cache.

        Used primarily for testing.  Calls the `initialize` method provided by
        derivative classes, with proper locking, to reinitialize the cache.
        """
        async with self._lock:
            for user, lock in list(self._user_locks.items()):
                async with lock:
                    self._user_locks.pop(user, None)
                    self._lock_users.pop(user, None)
            self.initialize()

    @abstractmethod
    def initialize(self) -> None:
        """Initialize the cache.

        This will be called by `clear` and should also be called by the
        derived class's ``__init__`` method.
        """

    async def lock(self, user_id: str) -> UserLockManager:
        """Return the per-user lock for locking.

        The return value should be used with ``async with`` to hold a lock
        around checking for a cached record and, if one is not found, loading
        it from storage or starting a fetch.

        Parameters
        ----------
        user_id
            Steam ID of the user whose lock to hold.

        Returns
        -------
        UserLockManager
            Async context manager that will take the user lock.
        """
        async with self._lock:
            lock = self._user_locks.get(user_id)
            if lock is None:
                lock = asyncio.Lock()
                self._user_locks[user_id] = lock
            self._lock_users[user_id] = self._lock_users.get(user_id, 0) + 1
            return UserLockManager(
                self._lock, lock, lambda: self._release_lock(user_id, lock)
            )

    def _release_lock(self, user_id: str, lock: asyncio.Lock) -> None:
        if self._user_locks.get(user_id) is not lock:
            return
        users = self._lock_users.get(user_id, 1) - 1
        if users > 0:
            self._lock_users[user_id] = users
        else:
            del self._user_locks[user_id]
            self._lock_users.pop(user_id, None)


class FriendRecordCache(PerUserCache):
    """In-memory friend records and the fetches refreshing them.

    This contains only the data structures and some simple accessor
    functions.  All of the logic deciding when to trust, load, or refresh a
    record is handled by `~steamfriends.services.friends.FriendsService`.

    There is at most one record per Steam ID.  Records are never expired from
    this cache.  The only way a record leaves the cache is `remove`, which is
    called immediately before the refreshed version is stored.

    Notes
    -----
    All mutation happens on the event loop, so the record dictionary itself
    needs no lock.  The per-user locks from `PerUserCache` are only needed
    around the store lookup, since that is the suspension point between
    noticing a cache miss and filling it.
    """

    def __init__(self) -> None:
        super().__init__()
        self._records: dict[str, FriendRecord]
        self._fetches: dict[str, asyncio.Task[None]]
        self.initialize()

    async def clear(self) -> None:
        """Invalidate the cache.

        Any fetches still in flight are cancelled.  Used primarily for
        testing and during shutdown.
        """
        fetches = list(self._fetches.values())
        for fetch in fetches:
            fetch.cancel()
        await asyncio.gather(*fetches, return_exceptions=True)
        await super().clear()

    def get(self, user_id: str) -> FriendRecord | None:
        """Retrieve a record from the cache.

        Parameters
        ----------
        user_id
            Steam ID of the owner of the record.

        Returns
        -------
        FriendRecord or None
            The cached record or `None` if there is no record in the cache.
        """
        return self._records.get(user_id)

    def initialize(self) -> None:
        """Initialize the cache."""
        self._records = {}
        self._fetches = {}

    def is_fetching(self, user_id: str) -> bool:
        """Whether a fetch of the friends of a user is in flight.

        Parameters
        ----------
        user_id
            Steam ID of the user.

        Returns
        -------
        bool
            `True` if a fetch was started and has not yet finished.
        """
        return user_id in self._fetches

    def remove(self, user_id: str) -> None:
        """Remove the record for a user, if any.

        Parameters
        ----------
        user_id
            Steam ID of the owner of the record.
        """
        self._records.pop(user_id, None)

    def start_fetch(
        self, user_id: str, fetch: Coroutine[Any, Any, None]
    ) -> bool:
        """Start a fetch of the friends of a user in the background.

        The fetch is tracked until it finishes, so that `is_fetching` can be
        used to avoid starting a second fetch for the same user.

        Parameters
        ----------
        user_id
            Steam ID of the user.
        fetch
            Coroutine that performs the fetch and merges the result.

        Returns
        -------
        bool
            `True` if the fetch was started, `False` if a fetch for that user
            was already in flight.  In the latter case, ``fetch`` is closed
            without being run.
        """
        if user_id in self._fetches:
            fetch.close()
            return False
        task = asyncio.create_task(fetch, name=f"steam-friends-{user_id}")
        self._fetches[user_id] = task
        task.add_done_callback(lambda t: self._finish_fetch(user_id, t))
        return True

    def store(self, record: FriendRecord) -> None:
        """Store a record in the cache, replacing any existing record.

        Parameters
        ----------
        record
            Record to store.
        """
        self._records[record.owner_id] = record

    async def wait_for_fetches(self) -> None:
        """Wait for all fetches currently in flight to finish."""
        while self._fetches:
            fetches = list(self._fetches.values())
            await asyncio.gather(*fetches, return_exceptions=True)

    def _finish_fetch(self, user_id: str, task: asyncio.Task[None]) -> None:
        if self._fetches.get(user_id) is task:
            del self._fetches[user_id]


class OnlineUserCache(BaseCache):
    """The set of currently connected users.

    Users are kept in the order in which they connected.  This is maintained
    from connection and disconnection events reported by the game server.
    """

    def __init__(self) -> None:
        self._users: dict[str, None] = {}

    async def clear(self) -> None:
        """Forget all connected users."""
        self._users = {}

    def add(self, user_id: str) -> None:
        """Record that a user has connected.

        Parameters
        ----------
        user_id
            Steam ID of the user.
        """
        self._users[user_id] = None

    def discard(self, user_id: str) -> None:
        """Record that a user has disconnected.

        Parameters
        ----------
        user_id
            Steam ID of the user.
        """
        self._users.pop(user_id, None)

    def list_users(self) -> list[str]:
        """Return the Steam IDs of all connected users."""
        return list(self._users)

    def replace(self, user_ids: list[str]) -> None:
        """Replace the set of connected users.

        Parameters
        ----------
        user_ids
            Steam IDs of all currently connected users.
        """
        self._users = dict.fromkeys(user_ids)


class WarmupCache(BaseCache):
    """Holds the background task warming the cache, if any.

    Only one warm-up may run at a time.  Starting a new one cancels the
    previous one, since the new one is for a more recent list of connected
    users.
    """

    def __init__(self) -> None:
        self._task: asyncio.Task[None] | None = None

    async def clear(self) -> None:
        """Cancel any running warm-up."""
        if self._task:
            self._task.cancel()
            await asyncio.gather(self._task, return_exceptions=True)
        self._task = None

    def get(self) -> asyncio.Task[None] | None:
        """Return the current warm-up task, if any."""
        return self._task

    def replace(self, task: asyncio.Task[None]) -> None:
        """Set a new warm-up task, cancelling any previous one.

        Parameters
        ----------
        task
            The new warm-up task.
        """
        if self._task and not self._task.done():
            self._task.cancel()
        self._task = task
