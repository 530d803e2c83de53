"""Exceptions for steamfriends."""

from __future__ import annotations

from fastapi import status
from safir.fastapi import ClientRequestError
from safir.models import ErrorLocation
from safir.slack.blockkit import SlackException, SlackWebException

__all__ = [
    "InputValidationError",
    "NotConfiguredError",
    "NotFoundError",
    "SteamError",
    "SteamWebError",
]


class InputValidationError(ClientRequestError):
    """Represents an input validation error.

    This is a thin wrapper around `~safir.fastapi.ClientRequestError` so that
    all errors returned to API clients share a common base class.
    """


class NotConfiguredError(InputValidationError):
    """The requested operation was not configured.

    Raised for every friend or session route when no Steam Web API key has
    been configured, since the whole service is disabled in that case.
    """

    error = "not_supported"
    status_code = status.HTTP_404_NOT_FOUND


class NotFoundError(InputValidationError):
    """The named resource does not exist."""

    error = "not_found"
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, message: str, field: str) -> None:
        super().__init__(message, ErrorLocation.path, [field])


class SteamError(SlackException):
    """The response from the Steam Web API could not be parsed.

    Errors talking to Steam are never raised to callers of the cache.  They
    are caught by the refresh task and logged, and the cached data is left
    unchanged.
    """


class SteamWebError(SlackWebException, SteamError):
    """A web request to the Steam Web API failed or timed out."""
