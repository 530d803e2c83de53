"""Tests for friend record models."""

from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from steamfriends.models.friends import FriendRecord, SteamFriendsResponse


def test_is_stale() -> None:
    record = FriendRecord(owner_id="1", last_updated=1000.0)

    assert not record.is_stale(1000.0, 60)
    assert not record.is_stale(1060.0, 60)
    assert record.is_stale(1060.5, 60)
    assert record.is_stale(5000.0, 60)


def test_serialization() -> None:
    record = FriendRecord(
        owner_id="1", last_updated=1000.5, friends=frozenset({"3", "2"})
    )
    data = json.loads(record.model_dump_json())
    assert data == {
        "ownerID": "1",
        "lastUpdated": 1000.5,
        "friends": ["2", "3"],
    }

    stored = '{"ownerID": "4", "lastUpdated": 12, "friends": ["5", "5"]}'
    record = FriendRecord.model_validate_json(stored)
    assert record.owner_id == "4"
    assert record.last_updated == 12.0
    assert record.friends == frozenset({"5"})

    stored = '{"ownerID": "4", "lastUpdated": 1}'
    record = FriendRecord.model_validate_json(stored)
    assert record.friends == frozenset()

    with pytest.raises(ValidationError):
        FriendRecord.model_validate_json('{"ownerID": "", "lastUpdated": 1}')


def test_steam_response() -> None:
    response = SteamFriendsResponse.model_validate(
        {
            "friendslist": {
                "friends": [
                    {
                        "steamid": "76561197960265731",
                        "relationship": "friend",
                        "friend_since": 0,
                    },
                    {"steamid": "76561197960265738"},
                ]
            }
        }
    )
    assert response.friend_ids() == ["76561197960265731", "76561197960265738"]

    response = SteamFriendsResponse.model_validate({"friendslist": {}})
    assert response.friend_ids() == []

    with pytest.raises(ValidationError):
        SteamFriendsResponse.model_validate({"error": "denied"})
