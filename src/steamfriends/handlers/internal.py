"""Routes for Kubernetes probes and service metadata.

These are mounted at the root of the application rather than under
``/steamfriends`` and are not meant to be exposed outside the cluster.
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from safir.metadata import Metadata, get_metadata
from safir.slack.webhook import SlackRouteErrorHandler

from ..dependencies.context import RequestContext, context_dependency
from ..models.health import HealthCheck

router = APIRouter(route_class=SlackRouteErrorHandler, tags=["internal"])

__all__ = ["router"]


@router.get(
    "/",
    description="Name, version, and description of the running service.",
    response_model=Metadata,
    response_model_exclude_none=True,
    summary="Service metadata",
)
async def get_index() -> Metadata:
    return get_metadata(
        package_name="steamfriends", application_name="steamfriends"
    )


@router.get(
    "/health",
    description=(
        "Ping the Redis server holding friend records and report whether"
        " Steam lookups are configured. Returns 500 if Redis is unavailable."
        " A missing Steam key or a Steam outage does not fail the check."
    ),
    response_model=HealthCheck,
    summary="Health check",
)
async def get_health(
    context: Annotated[RequestContext, Depends(context_dependency)],
) -> HealthCheck:
    health_check_service = context.factory.create_health_check_service()
    return await health_check_service.check()
