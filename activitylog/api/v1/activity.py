"""
Activity routes.
Feed, last-updated lookups, item provenance, and activity capture.
"""
from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query, status

from activitylog.api.v1.params import feed_params
from activitylog.core.dependencies import (
    CurrentUser,
    FeedQuery,
    LastUpdated,
    MetadataResolver,
    Recorder,
    RequestCtx,
)
from activitylog.schemas.activity import (
    ActivityRead,
    CommentIn,
    FeedParams,
    ItemMetadata,
    LastUpdatedRead,
    MutationIn,
)
from activitylog.schemas.envelope import ResponseEnvelope

router = APIRouter(prefix="/activity", tags=["Activity"])


@router.get(
    "/",
    response_model=ResponseEnvelope[list[dict[str, Any]]],
    summary="Activity feed, newest first",
)
async def activity_feed(
    _user: CurrentUser,
    feed: FeedQuery,
    params: Annotated[FeedParams, Depends(feed_params)],
) -> ResponseEnvelope[list[dict[str, Any]]]:
    return await feed.fetch_feed(params)


@router.post(
    "/",
    response_model=ResponseEnvelope[ActivityRead],
    status_code=status.HTTP_201_CREATED,
    summary="Record a change made to a collection item",
)
async def record_mutation(
    body: MutationIn,
    current_user: CurrentUser,
    recorder: Recorder,
    context: RequestCtx,
) -> ResponseEnvelope[ActivityRead]:
    record = await recorder.record_mutation(
        collection=body.collection,
        item=body.item,
        action=body.action,
        user_id=current_user.id,
        context=context,
    )
    return ResponseEnvelope(data=ActivityRead.model_validate(record))


@router.post(
    "/comments",
    response_model=ResponseEnvelope[ActivityRead],
    status_code=status.HTTP_201_CREATED,
    summary="Comment on a collection item",
)
async def record_comment(
    body: CommentIn,
    current_user: CurrentUser,
    recorder: Recorder,
    context: RequestCtx,
) -> ResponseEnvelope[ActivityRead]:
    record = await recorder.record_comment(
        collection=body.collection,
        item=body.item,
        comment=body.comment,
        user_id=current_user.id,
        context=context,
        parent_id=body.parent_id,
    )
    return ResponseEnvelope(data=ActivityRead.model_validate(record))


@router.get(
    "/{collection}/last-updated",
    response_model=ResponseEnvelope[list[LastUpdatedRead]],
    summary="Latest write per (item, user) for a batch of items",
)
async def last_updated(
    collection: str,
    _user: CurrentUser,
    resolver: LastUpdated,
    ids: str = Query(description="Comma-separated item ids"),
    meta: int = Query(default=0, ge=0, le=1),
) -> ResponseEnvelope[list[dict[str, Any]]]:
    item_ids = [part.strip() for part in ids.split(",") if part.strip()]
    return await resolver.get_last_updated(collection, item_ids, meta=meta)


@router.get(
    "/{collection}/{item}/metadata",
    response_model=ResponseEnvelope[ItemMetadata],
    summary="Creation and last-update provenance of an item",
)
async def item_metadata(
    collection: str,
    item: str,
    _user: CurrentUser,
    resolver: MetadataResolver,
) -> ResponseEnvelope[ItemMetadata]:
    return ResponseEnvelope(data=await resolver.get_metadata(collection, item))
