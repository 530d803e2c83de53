"""Models for the steamfriends health check."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

__all__ = ["HealthCheck", "HealthStatus"]


class HealthStatus(StrEnum):
    """Status of one part of the service.

    A failed record store check is reported as an HTTP 500 error rather than
    a status, since Kubernetes only looks at the status code.
    """

    HEALTHY = "healthy"


class HealthCheck(BaseModel):
    """Results of an internal health check."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True
    )

    status: HealthStatus = Field(..., title="Overall status")

    record_store: HealthStatus = Field(
        ...,
        title="Record store status",
        description="Result of a ping of the Redis server holding records",
    )

    steam_enabled: bool = Field(
        ...,
        title="Whether Steam lookups are enabled",
        description=(
            "False if no Steam Web API key is configured, in which case all"
            " friend routes return errors. This does not make the service"
            " unhealthy."
        ),
    )
