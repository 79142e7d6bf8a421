"""
Per-item provenance: who created an item and who last updated it.
"""
from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from sqlalchemy import func, select

from activitylog.core.config import settings
from activitylog.crud.activity import ActivityQueryRunner
from activitylog.models.activity import Activity, ActivityAction, ActivityType
from activitylog.models.user import User
from activitylog.schemas.activity import ItemMetadata
from activitylog.services.record_parser import RecordParser, record_parser

logger = logging.getLogger(__name__)

# At most one creation group and one update group are reconciled. When an item
# has more (action, user) groups, e.g. two different updaters, the extra groups
# are dropped and the answer can name the wrong updater. The grouped query has
# no ORDER BY, so which groups survive the cap depends on the storage engine.
MAX_PROVENANCE_GROUPS = 2


class ActivityMetadataResolver:

    def __init__(
        self,
        runner: ActivityQueryRunner,
        parser: RecordParser = record_parser,
    ) -> None:
        self.runner = runner
        self.parser = parser

    async def get_metadata(self, collection: str, item: str | int) -> ItemMetadata:
        activity_type = (
            ActivityType.FILES
            if collection == settings.FILES_COLLECTION
            else ActivityType.ENTRY
        )
        query = (
            select(
                Activity.action,
                Activity.user,
                func.max(Activity.datetime).label("datetime"),
            )
            .join(User, User.id == Activity.user)
            .where(
                Activity.collection == collection,
                Activity.item == str(item),
                Activity.type == activity_type,
                Activity.action.in_([ActivityAction.ADD, ActivityAction.UPDATE]),
            )
            .group_by(Activity.action, Activity.user)
            # One extra group is read only to detect that the cap discarded something.
            # Without an ORDER BY the engine decides which groups come back first.
            .limit(MAX_PROVENANCE_GROUPS + 1)
        )

        rows = self.parser.parse_records(await self.runner.fetch_all(query))
        if len(rows) > MAX_PROVENANCE_GROUPS:
            logger.warning(
                "Provenance for %s:%s spans more than %d action groups; extra groups dropped",
                collection,
                item,
                MAX_PROVENANCE_GROUPS,
            )
            rows = rows[:MAX_PROVENANCE_GROUPS]

        return reconcile_provenance(rows)


def reconcile_provenance(rows: Iterable[dict[str, Any]]) -> ItemMetadata:
    """
    Fold (action, user, datetime) groups into creation/update provenance.
    Without an UPDATE group the creator is reported as the last updater.
    """
    metadata = ItemMetadata()
    for row in rows:
        if row.get("action") == ActivityAction.ADD:
            metadata.created_by = row["user"]
            metadata.created_on = row["datetime"]
        elif row.get("action") == ActivityAction.UPDATE:
            metadata.updated_by = row["user"]
            metadata.updated_on = row["datetime"]

    if metadata.updated_by is None and metadata.updated_on is None:
        metadata.updated_by = metadata.created_by
        metadata.updated_on = metadata.created_on
    return metadata
