"""Tests for friendship queries."""

from __future__ import annotations

import pytest

from steamfriends.factory import Factory

from ..support.records import make_record
from ..support.steam import MockSteam


@pytest.mark.asyncio
async def test_is_friend(factory: Factory, mock_steam_api: MockSteam) -> None:
    mock_steam_api.friends["1"] = ["2", "3"]
    friends_service = factory.create_friends_service()
    relationship_service = factory.create_relationship_service()

    # Nothing is known yet, so nobody is a friend.
    assert not relationship_service.is_friend("1", "2")
    assert await friends_service.try_find("1") is None
    await friends_service.wait_for_fetches()

    # Only the record of the first user is known, which is enough to answer
    # in both directions.
    assert relationship_service.is_friend("1", "2")
    assert relationship_service.is_friend("2", "1")
    assert relationship_service.is_friend("3", "1")
    assert not relationship_service.is_friend("2", "3")
    assert not relationship_service.is_friend("1", "4")
    assert mock_steam_api.requests == ["1"]


@pytest.mark.asyncio
async def test_is_friend_one_sided(factory: Factory) -> None:
    friends_service = factory.create_friends_service()
    relationship_service = factory.create_relationship_service()
    store = factory.create_friend_record_store()
    await store.store(make_record("1", ["2"]))
    await store.store(make_record("2", []))
    assert await friends_service.try_find("1")
    assert await friends_service.try_find("2")

    # Either user's friend list is enough.
    assert relationship_service.is_friend("1", "2")
    assert relationship_service.is_friend("2", "1")


@pytest.mark.asyncio
async def test_online_friends(
    factory: Factory, mock_steam_api: MockSteam
) -> None:
    friends_service = factory.create_friends_service()
    relationship_service = factory.create_relationship_service()
    session_service = factory.create_session_service()
    store = factory.create_friend_record_store()
    await store.store(make_record("1", ["2", "3", "4"]))
    await store.store(make_record("5", ["1"]))
    await store.store(make_record("6", []))
    assert await friends_service.try_find("1")

    assert relationship_service.online_friends_of("1") == []
    for user_id in ("5", "3", "6", "2"):
        await session_service.connect(user_id)
    assert relationship_service.online_friends_of("1") == ["5", "3", "2"]
    assert relationship_service.online_friends_of("5") == []
    assert relationship_service.online_friends_of("6") == []

    session_service.disconnect("3")
    assert relationship_service.online_friends_of("1") == ["5", "2"]
    await friends_service.wait_for_fetches()
    assert sorted(mock_steam_api.requests) == ["2", "3"]
