"""
Revision routes.
GET /revisions/{collection}/{item}
"""
from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Depends

from activitylog.api.v1.params import feed_params
from activitylog.core.dependencies import CurrentUser, Revisions
from activitylog.schemas.activity import FeedParams
from activitylog.schemas.envelope import ResponseEnvelope

router = APIRouter(prefix="/revisions", tags=["Revisions"])


@router.get(
    "/{collection}/{item}",
    response_model=ResponseEnvelope[list[dict[str, Any]]],
    summary="All activity recorded for one item",
)
async def item_revisions(
    collection: str,
    item: str,
    _user: CurrentUser,
    revisions: Revisions,
    params: Annotated[FeedParams, Depends(feed_params)],
) -> ResponseEnvelope[list[dict[str, Any]]]:
    return await revisions.find_item_all(collection, item, params)
