"""
Activity Pydantic schemas.
Validation of type/action values happens here, before anything reaches the store.
"""
from __future__ import annotations

import datetime as dt
import uuid
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from activitylog.models.activity import ActivityAction, ActivityType, is_allowed


# ── Create ────────────────────────────────────────────────────────────────────

class ActivityCreate(BaseModel):
    type: ActivityType
    action: ActivityAction
    collection: str = Field(min_length=1, max_length=64)
    item: str = Field(min_length=1, max_length=255)
    user: uuid.UUID
    parent_id: int | None = Field(default=None, ge=1)
    comment: str | None = None

    @model_validator(mode="after")
    def check_type_action_pair(self) -> "ActivityCreate":
        if not is_allowed(self.type, self.action):
            raise ValueError(
                f"Action {self.action.value} cannot be recorded for type {self.type.value}"
            )
        return self


class MutationIn(BaseModel):
    """Body for reporting a committed change to a collection item."""

    collection: str = Field(min_length=1, max_length=64)
    item: str = Field(min_length=1, max_length=255)
    action: ActivityAction


class CommentIn(BaseModel):
    collection: str = Field(min_length=1, max_length=64)
    item: str = Field(min_length=1, max_length=255)
    comment: str = Field(min_length=1, max_length=10000)
    parent_id: int | None = Field(default=None, ge=1)


class RequestContext(BaseModel):
    """Best-effort request provenance attached to recorded activity."""

    ip: str = ""
    user_agent: str = ""

    model_config = {"frozen": True}


# ── Read ──────────────────────────────────────────────────────────────────────

class ActivityRead(BaseModel):
    id: int
    type: ActivityType
    action: ActivityAction
    collection: str
    item: str
    user: uuid.UUID
    datetime: dt.datetime
    ip: str
    user_agent: str
    parent_id: int | None
    comment: str | None = None

    model_config = {"from_attributes": True}


class LastUpdatedRead(BaseModel):
    item: str
    user: uuid.UUID
    datetime: dt.datetime


class ItemMetadata(BaseModel):
    """Resolved creation and last-update provenance of one item."""

    created_by: uuid.UUID | None = None
    created_on: dt.datetime | None = None
    updated_by: uuid.UUID | None = None
    updated_on: dt.datetime | None = None


# ── Feed parameters ───────────────────────────────────────────────────────────

class FeedParams(BaseModel):
    """
    Options accepted by the activity feed.
    ``sort`` is accepted for compatibility but the feed is always newest first.
    """

    columns: list[str] | None = None
    filter: dict[str, Any] = Field(default_factory=dict)
    sort: list[str] | None = None
    limit: int | None = Field(default=None, ge=1)
    offset: int = Field(default=0, ge=0)
    page: int | None = Field(default=None, ge=1)
    meta: Literal[0, 1] = 0

    @field_validator("columns", "sort", mode="before")
    @classmethod
    def split_comma_list(cls, v: Any) -> Any:
        if isinstance(v, str):
            return [part.strip() for part in v.split(",") if part.strip()] or None
        return v
