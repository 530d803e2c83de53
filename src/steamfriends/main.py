"""Application definition for steamfriends."""

from __future__ import annotations

import json
from collections.abc import AsyncGenerator, Awaitable, Callable
from contextlib import asynccontextmanager
from importlib.metadata import version

import structlog
from fastapi import FastAPI
from fastapi.openapi.utils import get_openapi
from safir.dependencies.http_client import http_client_dependency
from safir.fastapi import ClientRequestError, client_request_error_handler
from safir.logging import configure_uvicorn_logging
from safir.models import ErrorModel
from safir.slack.webhook import SlackRouteErrorHandler

from .constants import STEAM_API_KEY_URL
from .dependencies.config import config_dependency
from .dependencies.context import context_dependency
from .factory import Factory
from .handlers import api, internal

__all__ = ["create_app", "create_openapi"]


def create_app(
    *,
    load_config: bool = True,
    extra_startup: Callable[[FastAPI], Awaitable[None]] | None = None,
) -> FastAPI:
    """Create the FastAPI application.

    This is in a function rather than using a global variable (as is more
    typical for FastAPI) because the Slack alert configuration depends on
    configuration settings and we therefore want to recreate the application
    between tests.

    Parameters
    ----------
    load_config
        If set to `False`, do not try to load the configuration.  This is
        used primarily for OpenAPI schema generation, where constructing the
        app is required but the configuration won't matter.
    extra_startup
        If provided, an additional coroutine to run as part of the startup
        section of the lifespan context manager, used by the test suite.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
        config = config_dependency.config()
        logger = structlog.get_logger("steamfriends")
        await context_dependency.initialize(config)
        if not config.steam_enabled:
            msg = (
                "No Steam Web API key configured, friend lookups are"
                f" disabled. Get a key from {STEAM_API_KEY_URL}"
            )
            logger.error(msg)
        elif config.initial_users:
            factory = Factory(context_dependency.process_context, logger)
            warmup_service = factory.create_warmup_service()
            warmup_service.schedule(config.initial_users)
        if extra_startup:
            await extra_startup(app)

        yield

        await context_dependency.aclose()
        await http_client_dependency.aclose()

    app = FastAPI(
        title="steamfriends",
        description=(
            "steamfriends caches Steam friend lists for a game server and"
            " answers friendship questions from the cache, refreshing lists"
            " from the Steam Web API in the background."
        ),
        version=version("steamfriends"),
        tags_metadata=[
            {
                "name": "friends",
                "description": "Friendship lookups from the cache.",
            },
            {
                "name": "sessions",
                "description": "Connection events from the game server.",
            },
            {
                "name": "internal",
                "description": "Internal routes used by health checks.",
            },
        ],
        openapi_url="/steamfriends/openapi.json",
        docs_url="/steamfriends/docs",
        redoc_url="/steamfriends/redoc",
        lifespan=lifespan,
    )

    # Add all of the routes.
    app.include_router(
        api.router,
        responses={
            404: {"description": "Not found", "model": ErrorModel},
        },
    )
    app.include_router(internal.router)

    # Load configuration if it is available to us and configure Uvicorn
    # logging.
    config = None
    if load_config:
        config = config_dependency.config()
        configure_uvicorn_logging()

    # Configure Slack alerts.
    if config and config.slack_alerts and config.slack_webhook:
        logger = structlog.get_logger("steamfriends")
        SlackRouteErrorHandler.initialize(
            config.slack_webhook, "steamfriends", logger
        )
        logger.debug("Initialized Slack webhook")

    # Handle exceptions descended from ClientRequestError.
    app.exception_handler(ClientRequestError)(client_request_error_handler)

    return app


def create_openapi() -> str:
    """Generate the OpenAPI schema.

    Returns
    -------
    str
        OpenAPI schema as serialized JSON.
    """
    app = create_app(load_config=False)
    schema = get_openapi(
        title=app.title,
        description=app.description,
        version=app.version,
        routes=app.routes,
    )
    return json.dumps(schema)
