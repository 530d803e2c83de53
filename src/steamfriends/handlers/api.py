"""Handlers for the friend lookup API used by game servers."""

from typing import Annotated

from fastapi import APIRouter, Body, Depends, Path
from safir.models import ErrorModel
from safir.slack.webhook import SlackRouteErrorHandler

from ..dependencies.context import RequestContext, context_dependency
from ..exceptions import NotFoundError
from ..models.friends import FriendRecord, Friendship, OnlineFriends

router = APIRouter(prefix="/steamfriends", route_class=SlackRouteErrorHandler)
"""Router for the friend lookup API."""

__all__ = ["router"]

_STEAM_ID_PATH = Path(
    ...,
    title="Steam ID",
    description="Steam ID of the user",
    examples=["76561197960287930"],
    min_length=1,
    max_length=64,
)


@router.get(
    "/users/{user_id}",
    description=(
        "Return the cached friend list of a user. If the friend list is not"
        " cached or is out of date, a refresh from Steam is started and this"
        " route returns 404. Try again later to get the refreshed list."
    ),
    response_model=FriendRecord,
    responses={404: {"description": "Not yet available", "model": ErrorModel}},
    summary="Get friend list",
    tags=["friends"],
)
async def get_friend_record(
    user_id: Annotated[str, _STEAM_ID_PATH],
    context: Annotated[RequestContext, Depends(context_dependency)],
) -> FriendRecord:
    context.rebind_logger(steam_id=user_id)
    friends_service = context.factory.create_friends_service()
    record = await friends_service.try_find(user_id)
    if not record:
        msg = "Friend list not yet available"
        raise NotFoundError(msg, "user_id")
    return record


@router.get(
    "/users/{user_id}/friends/{target_id}",
    description=(
        "Check whether two users are friends, using only cached friend lists."
        " Either user's friend list may show the friendship. If neither user"
        " has a cached friend list, the answer is false."
    ),
    response_model=Friendship,
    summary="Check friendship",
    tags=["friends"],
)
async def get_friendship(
    user_id: Annotated[str, _STEAM_ID_PATH],
    target_id: Annotated[
        str,
        Path(
            ...,
            title="Target Steam ID",
            description="Steam ID of the other user",
            examples=["76561197960287931"],
            min_length=1,
            max_length=64,
        ),
    ],
    context: Annotated[RequestContext, Depends(context_dependency)],
) -> Friendship:
    relationship_service = context.factory.create_relationship_service()
    is_friend = relationship_service.is_friend(user_id, target_id)
    return Friendship(
        user_id=user_id, target_id=target_id, is_friend=is_friend
    )


@router.get(
    "/users/{user_id}/online-friends",
    description=(
        "List the connected users who are friends of the given user, using"
        " only cached friend lists."
    ),
    response_model=OnlineFriends,
    summary="List connected friends",
    tags=["friends"],
)
async def get_online_friends(
    user_id: Annotated[str, _STEAM_ID_PATH],
    context: Annotated[RequestContext, Depends(context_dependency)],
) -> OnlineFriends:
    relationship_service = context.factory.create_relationship_service()
    friends = relationship_service.online_friends_of(user_id)
    return OnlineFriends(user_id=user_id, friends=friends)


@router.put(
    "/sessions",
    description=(
        "Replace the list of connected users, such as after a game server"
        " restart, and load their friend lists in the background. Lookups"
        " are spaced out to avoid flooding the Steam Web API."
    ),
    status_code=202,
    summary="Set connected users",
    tags=["sessions"],
)
async def put_sessions(
    user_ids: Annotated[
        list[str],
        Body(
            ...,
            title="Connected users",
            description="Steam IDs of all connected users",
            examples=[["76561197960287930", "76561197960287931"]],
        ),
    ],
    context: Annotated[RequestContext, Depends(context_dependency)],
) -> None:
    session_service = context.factory.create_session_service()
    session_service.replace(user_ids)


@router.put(
    "/sessions/{user_id}",
    description=(
        "Record that a user has connected and start loading their friend"
        " list if needed."
    ),
    status_code=204,
    summary="User connected",
    tags=["sessions"],
)
async def put_session(
    user_id: Annotated[str, _STEAM_ID_PATH],
    context: Annotated[RequestContext, Depends(context_dependency)],
) -> None:
    context.rebind_logger(steam_id=user_id)
    session_service = context.factory.create_session_service()
    await session_service.connect(user_id)


@router.delete(
    "/sessions/{user_id}",
    description=(
        "Record that a user has disconnected. Their cached friend list is"
        " kept."
    ),
    status_code=204,
    summary="User disconnected",
    tags=["sessions"],
)
async def delete_session(
    user_id: Annotated[str, _STEAM_ID_PATH],
    context: Annotated[RequestContext, Depends(context_dependency)],
) -> None:
    context.rebind_logger(steam_id=user_id)
    session_service = context.factory.create_session_service()
    session_service.disconnect(user_id)
