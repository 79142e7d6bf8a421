"""
Activity recording service.
Appends immutable records to the activity table: logins, item mutations and comments.
"""
from __future__ import annotations

import logging
import uuid
from typing import Any

from pydantic import ValidationError

from activitylog.core.config import settings
from activitylog.core.exceptions import BadRequestException
from activitylog.crud.activity import ActivityQueryRunner
from activitylog.models.activity import (
    Activity,
    ActivityAction,
    ActivityType,
    activity_type_for_collection,
)
from activitylog.schemas.activity import ActivityCreate, RequestContext

logger = logging.getLogger(__name__)


class ActivityRecorder:

    def __init__(self, runner: ActivityQueryRunner) -> None:
        self.runner = runner

    async def record_login(
        self,
        user_id: uuid.UUID | str | None,
        context: RequestContext | None = None,
    ) -> Activity:
        """Record that ``user_id`` logged in. The user is both actor and item."""
        if not user_id:
            raise BadRequestException("A user id is required to record a login")
        return await self._append(
            type=ActivityType.LOGIN,
            action=ActivityAction.LOGIN,
            collection=settings.USERS_COLLECTION,
            item=str(user_id),
            user=user_id,
            context=context,
        )

    async def record_mutation(
        self,
        *,
        collection: str,
        item: str,
        action: ActivityAction,
        user_id: uuid.UUID,
        context: RequestContext | None = None,
    ) -> Activity:
        """Record a committed change; the type follows from the collection."""
        return await self._append(
            type=activity_type_for_collection(collection),
            action=action,
            collection=collection,
            item=item,
            user=user_id,
            context=context,
        )

    async def record_comment(
        self,
        *,
        collection: str,
        item: str,
        comment: str,
        user_id: uuid.UUID,
        context: RequestContext | None = None,
        parent_id: int | None = None,
    ) -> Activity:
        """
        Record a comment on an item.
        Replies point at the record they answer through ``parent_id``.
        """
        if parent_id is not None and not await self.runner.exists(parent_id):
            raise BadRequestException(f"Parent activity '{parent_id}' does not exist")
        return await self._append(
            type=ActivityType.COMMENT,
            action=ActivityAction.ADD,
            collection=collection,
            item=item,
            user=user_id,
            parent_id=parent_id,
            comment=comment,
            context=context,
        )

    async def _append(self, *, context: RequestContext | None, **fields: Any) -> Activity:
        try:
            entry = ActivityCreate(**fields)
        except ValidationError as exc:
            raise BadRequestException(
                "; ".join(error["msg"] for error in exc.errors())
            ) from exc

        context = context or RequestContext()
        values = entry.model_dump()
        values.update(ip=context.ip, user_agent=context.user_agent)

        try:
            record = await self.runner.insert(values)
        except Exception as exc:
            logger.error(
                "Failed to write activity: type=%s action=%s collection=%s item=%s: %s",
                entry.type.value,
                entry.action.value,
                entry.collection,
                entry.item,
                exc,
            )
            raise

        logger.debug(
            "Activity recorded: id=%s %s/%s %s:%s",
            record.id,
            record.type.value,
            record.action.value,
            record.collection,
            record.item,
        )
        return record
