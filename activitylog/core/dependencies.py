"""
FastAPI dependency injection functions.
Provides get_db, get_current_user, the request context, and per-request
activity services built on one shared query runner.
"""
from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from activitylog.core.exceptions import InvalidTokenException, UnauthorizedException
from activitylog.core.security import decode_access_token
from activitylog.crud.activity import ActivityQueryRunner
from activitylog.crud.user import crud_user
from activitylog.db.session import get_db
from activitylog.models.user import User
from activitylog.schemas.activity import RequestContext
from activitylog.services.activity_feed import ActivityFeedQuery
from activitylog.services.activity_recorder import ActivityRecorder
from activitylog.services.last_updated import LastUpdatedResolver
from activitylog.services.metadata import ActivityMetadataResolver
from activitylog.services.revisions import RevisionsService

# Re-export get_db so routes can import from one place
__all__ = [
    "get_db",
    "get_current_user",
    "get_request_context",
    "DBSession",
    "CurrentUser",
    "RequestCtx",
    "Recorder",
    "FeedQuery",
    "LastUpdated",
    "MetadataResolver",
    "Revisions",
]

bearer_scheme = HTTPBearer(auto_error=False)

IP_MAX_LENGTH = 50
USER_AGENT_MAX_LENGTH = 255


async def get_current_user(
    db: Annotated[AsyncSession, Depends(get_db)],
    credentials: Annotated[
        HTTPAuthorizationCredentials | None, Depends(bearer_scheme)
    ] = None,
) -> User:
    """
    Extract and validate the JWT access token from the Authorization header.
    Returns the authenticated User model.
    """
    if credentials is None:
        raise UnauthorizedException("Missing authentication token")

    try:
        user_id = decode_access_token(credentials.credentials)
    except JWTError:
        raise InvalidTokenException("Invalid or expired access token")

    user = await crud_user.get(db, user_id)
    if user is None:
        raise UnauthorizedException("User not found")
    if not user.is_active:
        raise UnauthorizedException("User account is deactivated")

    return user


def get_request_context(request: Request) -> RequestContext:
    """
    Client address and user agent of the current request, empty when unknown.
    Both are cut to the width of their activity columns.
    """
    forwarded = request.headers.get("x-forwarded-for", "")
    ip = forwarded.split(",")[0].strip()
    if not ip and request.client is not None:
        ip = request.client.host
    user_agent = request.headers.get("user-agent", "")[:USER_AGENT_MAX_LENGTH]
    return RequestContext(ip=(ip or "")[:IP_MAX_LENGTH], user_agent=user_agent)


def get_query_runner(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ActivityQueryRunner:
    return ActivityQueryRunner(db)


QueryRunner = Annotated[ActivityQueryRunner, Depends(get_query_runner)]


def get_activity_recorder(runner: QueryRunner) -> ActivityRecorder:
    return ActivityRecorder(runner)


def get_feed_query(runner: QueryRunner) -> ActivityFeedQuery:
    return ActivityFeedQuery(runner)


def get_last_updated_resolver(runner: QueryRunner) -> LastUpdatedResolver:
    return LastUpdatedResolver(runner)


def get_metadata_resolver(runner: QueryRunner) -> ActivityMetadataResolver:
    return ActivityMetadataResolver(runner)


def get_revisions_service(
    feed: Annotated[ActivityFeedQuery, Depends(get_feed_query)],
) -> RevisionsService:
    return RevisionsService(feed)


# Convenience type aliases for route signatures
DBSession = Annotated[AsyncSession, Depends(get_db)]
CurrentUser = Annotated[User, Depends(get_current_user)]
RequestCtx = Annotated[RequestContext, Depends(get_request_context)]
Recorder = Annotated[ActivityRecorder, Depends(get_activity_recorder)]
FeedQuery = Annotated[ActivityFeedQuery, Depends(get_feed_query)]
LastUpdated = Annotated[LastUpdatedResolver, Depends(get_last_updated_resolver)]
MetadataResolver = Annotated[ActivityMetadataResolver, Depends(get_metadata_resolver)]
Revisions = Annotated[RevisionsService, Depends(get_revisions_service)]
