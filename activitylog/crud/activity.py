"""
Query execution against the activity table.
One ActivityQueryRunner is built per session and shared by the feed,
recorder and resolver services.
"""
from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import Select, func, select
from sqlalchemy.exc import StatementError
from sqlalchemy.ext.asyncio import AsyncSession

from activitylog.core.exceptions import InvalidQueryException
from activitylog.models.activity import Activity

logger = logging.getLogger(__name__)


class ActivityQueryRunner:

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def fetch_all(self, query: Select[Any]) -> list[dict[str, Any]]:
        """Execute a select and return each row as a plain mapping."""
        try:
            result = await self.db.execute(query)
        except StatementError as exc:
            raise self._invalid_query(exc) from exc
        return [dict(row) for row in result.mappings().all()]

    async def count(self, query: Select[Any]) -> int:
        """Count the rows ``query`` matches, ignoring its ordering and paging."""
        inner = query.order_by(None).limit(None).offset(None).subquery()
        try:
            result = await self.db.execute(select(func.count()).select_from(inner))
        except StatementError as exc:
            raise self._invalid_query(exc) from exc
        return result.scalar_one()

    async def exists(self, activity_id: int) -> bool:
        return await self.db.get(Activity, activity_id) is not None

    async def insert(self, values: dict[str, Any]) -> Activity:
        """Append one activity row. Write failures propagate unchanged."""
        entry = Activity(**values)
        self.db.add(entry)
        await self.db.flush()
        await self.db.refresh(entry)
        return entry

    @staticmethod
    def _invalid_query(exc: StatementError) -> InvalidQueryException:
        message = str(exc.orig) if exc.orig is not None else str(exc)
        logger.warning("Activity query failed: %s | query=%s", message, exc.statement)
        return InvalidQueryException(message, query=exc.statement)
