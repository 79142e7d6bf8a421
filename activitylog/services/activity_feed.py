"""
Activity feed query.
Newest-first, filtered and paged view over top-level activity.
"""
from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import ColumnElement, Table, or_, select

from activitylog.crud.activity import ActivityQueryRunner
from activitylog.crud.query_params import apply_filters, apply_paging, resolve_column
from activitylog.models.activity import Activity, ActivityType
from activitylog.schemas.activity import FeedParams
from activitylog.schemas.envelope import ResponseEnvelope
from activitylog.services.record_parser import RecordParser, record_parser

logger = logging.getLogger(__name__)


def visibility_predicate(table: Table) -> ColumnElement[bool]:
    """Threaded replies stay out of the feed; file activity is always shown."""
    return or_(table.c.parent_id.is_(None), table.c.type == ActivityType.FILES)


class ActivityFeedQuery:

    def __init__(
        self,
        runner: ActivityQueryRunner,
        parser: RecordParser = record_parser,
    ) -> None:
        self.runner = runner
        self.parser = parser

    async def fetch_feed(
        self, params: FeedParams | None = None
    ) -> ResponseEnvelope[list[dict[str, Any]]]:
        """
        Return activity ordered by id descending.
        ``params.columns`` replaces the default projection of every column and
        is not checked against the table; ``params.sort`` is ignored.
        """
        params = params or FeedParams()
        table: Table = Activity.__table__  # type: ignore[assignment]

        if params.sort:
            logger.debug("Ignoring requested feed sort %s; feed is ordered by id", params.sort)

        names = params.columns or [col.name for col in table.columns]
        query = select(*(resolve_column(table, name) for name in names)).select_from(table)
        query = apply_filters(query, table, params.filter)
        query = query.where(visibility_predicate(table)).order_by(table.c.id.desc())

        rows = await self.runner.fetch_all(
            apply_paging(query, limit=params.limit, offset=params.offset, page=params.page)
        )
        data = self.parser.parse_records(rows)

        total_count = await self.runner.count(query) if params.meta else None
        return self.parser.wrap_data(data, meta=params.meta, total_count=total_count)
