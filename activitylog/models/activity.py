"""
Activity ORM model.
Append-only log of events recorded against collection items.
Rows are inserted once and never updated or deleted by this package.
"""
from __future__ import annotations

import datetime as dt
import enum
import uuid

from sqlalchemy import Enum, ForeignKey, Index, Integer, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import DateTime

from activitylog.core.config import settings
from activitylog.db.base import Base


class ActivityType(str, enum.Enum):
    """What kind of thing changed."""

    ENTRY = "ENTRY"
    FILES = "FILES"
    SETTINGS = "SETTINGS"
    LOGIN = "LOGIN"
    COMMENT = "COMMENT"


class ActivityAction(str, enum.Enum):
    """What happened to it."""

    ADD = "ADD"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    LOGIN = "LOGIN"
    SOFT_DELETE = "SOFT_DELETE"
    REVERT = "REVERT"


_MUTATIONS = frozenset(
    {
        ActivityAction.ADD,
        ActivityAction.UPDATE,
        ActivityAction.DELETE,
        ActivityAction.SOFT_DELETE,
        ActivityAction.REVERT,
    }
)

ALLOWED_ACTIONS: dict[ActivityType, frozenset[ActivityAction]] = {
    ActivityType.ENTRY: _MUTATIONS,
    ActivityType.FILES: _MUTATIONS,
    ActivityType.SETTINGS: _MUTATIONS,
    ActivityType.LOGIN: frozenset({ActivityAction.LOGIN}),
    ActivityType.COMMENT: frozenset(
        {ActivityAction.ADD, ActivityAction.UPDATE, ActivityAction.DELETE}
    ),
}


def is_allowed(type_: ActivityType, action: ActivityAction) -> bool:
    return action in ALLOWED_ACTIONS.get(type_, frozenset())


def activity_type_for_collection(collection: str) -> ActivityType:
    """Map the collection a mutation touched to the activity type it is logged under."""
    if collection == settings.SETTINGS_COLLECTION:
        return ActivityType.SETTINGS
    if collection == settings.FILES_COLLECTION:
        return ActivityType.FILES
    return ActivityType.ENTRY


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


class Activity(Base):
    __tablename__ = "activity"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    type: Mapped[ActivityType] = mapped_column(
        Enum(ActivityType, name="activity_type_enum"),
        nullable=False,
    )
    action: Mapped[ActivityAction] = mapped_column(
        Enum(ActivityAction, name="activity_action_enum"),
        nullable=False,
    )
    collection: Mapped[str] = mapped_column(String(64), nullable=False)
    item: Mapped[str] = mapped_column(String(255), nullable=False)
    user: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id"),
        nullable=False,
    )
    datetime: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
    )
    ip: Mapped[str] = mapped_column(String(50), nullable=False, default="")
    user_agent: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    parent_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("activity.id"),
        nullable=True,
    )
    comment: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        Index("ix_activity_collection_item", "collection", "item"),
        Index("ix_activity_datetime", "datetime"),
        Index("ix_activity_user", "user"),
        Index("ix_activity_parent_id", "parent_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<Activity id={self.id} type={self.type.value} action={self.action.value} "
            f"collection={self.collection!r} item={self.item!r}>"
        )
