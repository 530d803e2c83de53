"""Test fixtures."""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Any

import pytest
import pytest_asyncio
import redis.asyncio
import respx
from asgi_lifespan import LifespanManager
from fakeredis import FakeAsyncRedis, FakeServer
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from safir.dependencies.http_client import http_client_dependency
from safir.testing.slack import MockSlackWebhook, mock_slack_webhook

from steamfriends.config import Config
from steamfriends.factory import Factory
from steamfriends.main import create_app

from .support.config import configure
from .support.steam import MockSteam, mock_steam


@pytest.fixture(autouse=True)
def environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Set default values of environment variables for testing."""
    monkeypatch.setenv("STEAMFRIENDS_REDIS_URL", "redis://localhost:6379/0")
    monkeypatch.delenv("STEAMFRIENDS_API_KEY", raising=False)
    monkeypatch.delenv("STEAMFRIENDS_SLACK_WEBHOOK", raising=False)


@pytest.fixture(autouse=True)
def fake_redis(monkeypatch: pytest.MonkeyPatch) -> FakeServer:
    """Replace connections to Redis with connections to a fake server.

    Every client created during one test talks to the same fake server, so
    data written by the application is visible to the test and to any
    separate component factory.
    """
    server = FakeServer()

    def from_url(url: str, **kwargs: Any) -> FakeAsyncRedis:
        return FakeAsyncRedis(server=server)

    monkeypatch.setattr(redis.asyncio, "from_url", from_url)
    return server


@pytest_asyncio.fixture
async def app(
    config: Config, mock_slack: MockSlackWebhook | None
) -> AsyncIterator[FastAPI]:
    """Return a configured test application.

    Wraps the application in a lifespan manager so that startup and shutdown
    events are sent during test execution.
    """
    app = create_app()
    async with LifespanManager(app):
        yield app


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncIterator[AsyncClient]:
    """Return an ``httpx.AsyncClient`` configured to talk to the test app."""
    async with AsyncClient(
        base_url="https://example.com", transport=ASGITransport(app=app)
    ) as client:
        yield client


@pytest.fixture
def config(monkeypatch: pytest.MonkeyPatch) -> Config:
    """Set up and return the default test configuration.

    Notes
    -----
    This fixture must not be async so that it can be used by the cli tests,
    which must not be async because the Click support starts its own asyncio
    loop.
    """
    slack_webhook = "https://slack.example.com/webhook"
    monkeypatch.setenv("STEAMFRIENDS_SLACK_WEBHOOK", slack_webhook)
    return configure("base")


@pytest_asyncio.fixture
async def factory(config: Config) -> AsyncIterator[Factory]:
    """Return a component factory.

    Note that this factory has its own in-memory friend record cache separate
    from that of the application, although both use the same Redis server.
    """
    async with Factory.standalone(config) as factory:
        yield factory
    await http_client_dependency.aclose()


@pytest.fixture
def mock_slack(
    config: Config, respx_mock: respx.Router
) -> MockSlackWebhook | None:
    """Mock a Slack webhook."""
    if not config.slack_webhook:
        return None
    webhook = config.slack_webhook.get_secret_value()
    return mock_slack_webhook(webhook, respx_mock)


@pytest.fixture
def mock_steam_api(config: Config, respx_mock: respx.Router) -> MockSteam:
    """Mock the Steam friend list API."""
    return mock_steam(config, respx_mock)
