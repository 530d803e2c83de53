"""Tests for the friend lookup API."""

from __future__ import annotations

import pytest
from asgi_lifespan import LifespanManager
from httpx import ASGITransport, AsyncClient

from steamfriends.factory import Factory
from steamfriends.main import create_app

from ..support.app import wait_for_app_fetches, wait_for_app_warmup
from ..support.config import configure
from ..support.records import make_record
from ..support.steam import MockSteam


@pytest.mark.asyncio
async def test_get_user(
    client: AsyncClient, mock_steam_api: MockSteam
) -> None:
    mock_steam_api.friends["1"] = ["3", "2"]

    r = await client.get("/steamfriends/users/1")
    assert r.status_code == 404
    assert r.json() == {
        "detail": [
            {
                "loc": ["path", "user_id"],
                "msg": "Friend list not yet available",
                "type": "not_found",
            }
        ]
    }

    await wait_for_app_fetches()
    r = await client.get("/steamfriends/users/1")
    assert r.status_code == 200
    data = r.json()
    assert data["ownerID"] == "1"
    assert data["friends"] == ["2", "3"]
    assert isinstance(data["lastUpdated"], float)
    assert mock_steam_api.requests == ["1"]


@pytest.mark.asyncio
async def test_get_user_stored(
    client: AsyncClient, factory: Factory, mock_steam_api: MockSteam
) -> None:
    store = factory.create_friend_record_store()
    record = make_record("1", ["2"])
    await store.store(record)

    r = await client.get("/steamfriends/users/1")
    assert r.status_code == 200
    assert r.json() == {
        "ownerID": "1",
        "lastUpdated": record.last_updated,
        "friends": ["2"],
    }

    await store.store(make_record("4", ["5"], age=7200))
    r = await client.get("/steamfriends/users/4")
    assert r.status_code == 404
    await wait_for_app_fetches()
    assert mock_steam_api.requests == ["4"]


@pytest.mark.asyncio
async def test_friendship(
    client: AsyncClient, factory: Factory, mock_steam_api: MockSteam
) -> None:
    r = await client.get("/steamfriends/users/1/friends/2")
    assert r.status_code == 200
    assert r.json() == {"userId": "1", "targetId": "2", "isFriend": False}

    # Friendship queries never load records or start refreshes.
    store = factory.create_friend_record_store()
    await store.store(make_record("1", ["2"]))
    r = await client.get("/steamfriends/users/2/friends/1")
    assert r.json()["isFriend"] is False

    r = await client.get("/steamfriends/users/1")
    assert r.status_code == 200
    r = await client.get("/steamfriends/users/2/friends/1")
    assert r.json() == {"userId": "2", "targetId": "1", "isFriend": True}
    assert mock_steam_api.requests == []


@pytest.mark.asyncio
async def test_sessions(
    client: AsyncClient, factory: Factory, mock_steam_api: MockSteam
) -> None:
    mock_steam_api.friends["1"] = ["2", "3", "4"]
    store = factory.create_friend_record_store()
    await store.store(make_record("2", []))
    await store.store(make_record("3", []))

    r = await client.put("/steamfriends/sessions/1")
    assert r.status_code == 204
    r = await client.put("/steamfriends/sessions/2")
    assert r.status_code == 204
    r = await client.put("/steamfriends/sessions/3")
    assert r.status_code == 204
    await wait_for_app_fetches()

    r = await client.get("/steamfriends/users/1/online-friends")
    assert r.status_code == 200
    assert r.json() == {"userId": "1", "friends": ["2", "3"]}

    r = await client.delete("/steamfriends/sessions/2")
    assert r.status_code == 204
    r = await client.get("/steamfriends/users/1/online-friends")
    assert r.json() == {"userId": "1", "friends": ["3"]}

    r = await client.put("/steamfriends/sessions", json=["4", "1"])
    assert r.status_code == 202
    await wait_for_app_warmup()
    r = await client.get("/steamfriends/users/1/online-friends")
    assert r.json() == {"userId": "1", "friends": ["4"]}
    r = await client.get("/steamfriends/users/4/online-friends")
    assert r.json() == {"userId": "4", "friends": ["1"]}
    assert sorted(mock_steam_api.requests) == ["1", "4"]


@pytest.mark.asyncio
async def test_invalid(client: AsyncClient) -> None:
    r = await client.put("/steamfriends/sessions", json={"users": ["1"]})
    assert r.status_code == 422

    r = await client.get(f"/steamfriends/users/{'1' * 65}")
    assert r.status_code == 422


@pytest.mark.asyncio
async def test_disabled() -> None:
    configure("disabled")
    app = create_app()
    async with LifespanManager(app):
        transport = ASGITransport(app=app)
        base_url = "https://example.com"
        async with AsyncClient(transport=transport, base_url=base_url) as c:
            for method, route in (
                ("GET", "/steamfriends/users/1"),
                ("GET", "/steamfriends/users/1/friends/2"),
                ("GET", "/steamfriends/users/1/online-friends"),
                ("PUT", "/steamfriends/sessions/1"),
                ("DELETE", "/steamfriends/sessions/1"),
            ):
                r = await c.request(method, route)
                assert r.status_code == 404, route
                assert r.json()["detail"][0]["type"] == "not_supported"
            r = await c.put("/steamfriends/sessions", json=["1"])
            assert r.status_code == 404

            # Health checks still work.
            r = await c.get("/health")
            assert r.status_code == 200
            assert r.json()["steamEnabled"] is False
