"""
Revision listing for a single item.
"""
from __future__ import annotations

from typing import Any

from activitylog.schemas.activity import FeedParams
from activitylog.schemas.envelope import ResponseEnvelope
from activitylog.services.activity_feed import ActivityFeedQuery


class RevisionsService:

    def __init__(self, feed: ActivityFeedQuery) -> None:
        self.feed = feed

    async def find_item_all(
        self,
        collection: str,
        item: str,
        params: FeedParams | None = None,
    ) -> ResponseEnvelope[list[dict[str, Any]]]:
        """All top-level activity recorded for one item, newest first."""
        params = params or FeedParams()
        scoped = params.model_copy(
            update={"filter": {**params.filter, "collection": collection, "item": str(item)}}
        )
        return await self.feed.fetch_feed(scoped)
