"""
Last-write lookups for a batch of items.
"""
from __future__ import annotations

import uuid
from collections.abc import Iterable
from typing import Any

from sqlalchemy import func, select

from activitylog.core.exceptions import BadRequestException
from activitylog.crud.activity import ActivityQueryRunner
from activitylog.models.activity import Activity, ActivityAction, ActivityType
from activitylog.schemas.envelope import ResponseEnvelope
from activitylog.services.record_parser import RecordParser, record_parser

ItemId = str | int | uuid.UUID


class LastUpdatedResolver:

    def __init__(
        self,
        runner: ActivityQueryRunner,
        parser: RecordParser = record_parser,
    ) -> None:
        self.runner = runner
        self.parser = parser

    async def get_last_updated(
        self,
        collection: str,
        ids: ItemId | Iterable[ItemId],
        *,
        meta: int = 0,
    ) -> ResponseEnvelope[list[dict[str, Any]]]:
        """
        Return the latest ADD/UPDATE time per (item, user), newest first.

        Rows are not collapsed per item: an item written by two users yields
        two rows. Callers wanting one answer per item should keep the first
        row they see for each item.
        """
        if isinstance(ids, (str, int, uuid.UUID)):
            ids = [ids]
        item_ids = [str(item_id) for item_id in ids]
        if not item_ids:
            raise BadRequestException("At least one item id is required")

        last_write = func.max(Activity.datetime)
        query = (
            select(Activity.item, Activity.user, last_write.label("datetime"))
            .where(
                Activity.collection == collection,
                Activity.type == ActivityType.ENTRY,
                Activity.action.in_([ActivityAction.UPDATE, ActivityAction.ADD]),
                Activity.item.in_(item_ids),
            )
            .group_by(Activity.item, Activity.user)
            .order_by(last_write.desc())
        )

        rows = self.parser.parse_records(await self.runner.fetch_all(query))
        return self.parser.wrap_data(rows, meta=meta)
