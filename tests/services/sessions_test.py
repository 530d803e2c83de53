"""Tests for handling of connection events."""

from __future__ import annotations

import pytest

from steamfriends.factory import Factory

from ..support.records import make_record
from ..support.steam import MockSteam


@pytest.mark.asyncio
async def test_connect(factory: Factory, mock_steam_api: MockSteam) -> None:
    mock_steam_api.friends["1"] = ["2"]
    friends_service = factory.create_friends_service()
    session_service = factory.create_session_service()

    await session_service.connect("1")
    await friends_service.wait_for_fetches()
    record = friends_service.find("1")
    assert record
    assert record.friends == frozenset({"2"})

    # Reconnecting does not refresh a fresh record.
    session_service.disconnect("1")
    await session_service.connect("1")
    await friends_service.wait_for_fetches()
    assert mock_steam_api.requests == ["1"]

    # Disconnecting keeps the friend list.
    session_service.disconnect("1")
    session_service.disconnect("1")
    assert friends_service.find("1") == record


@pytest.mark.asyncio
async def test_replace(factory: Factory, mock_steam_api: MockSteam) -> None:
    store = factory.create_friend_record_store()
    await store.store(make_record("1", ["2", "3"]))
    friends_service = factory.create_friends_service()
    relationship_service = factory.create_relationship_service()
    session_service = factory.create_session_service()
    await session_service.connect("4")

    session_service.replace(["2", "1", "3"])
    assert relationship_service.online_friends_of("1") == []
    task = factory._context.warmup_cache.get()
    assert task
    await task
    await friends_service.wait_for_fetches()

    assert relationship_service.online_friends_of("1") == ["2", "3"]
    assert relationship_service.online_friends_of("4") == []
    assert sorted(mock_steam_api.requests) == ["2", "3", "4"]
