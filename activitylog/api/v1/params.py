"""
Query-string parsing shared by the feed and revision routes.
Filters arrive as ``filter[field]=value`` or ``filter[field][operator]=value``.
"""
from __future__ import annotations

import re
from typing import Any

from fastapi import Query, Request
from pydantic import ValidationError
from starlette.datastructures import QueryParams

from activitylog.core.exceptions import BadRequestException
from activitylog.schemas.activity import FeedParams

_FILTER_KEY = re.compile(r"^filter\[(?P<field>[^\[\]]+)\](?:\[(?P<op>[^\[\]]+)\])?$")


def parse_filter_params(query_params: QueryParams) -> dict[str, Any]:
    filters: dict[str, Any] = {}
    for key, value in query_params.multi_items():
        match = _FILTER_KEY.match(key)
        if match is None:
            continue
        field, op = match.group("field"), match.group("op") or "eq"
        conditions = filters.setdefault(field, {})
        if not isinstance(conditions, dict):
            continue
        conditions[op] = value
    return filters


def feed_params(
    request: Request,
    columns: str | None = Query(default=None, description="Comma-separated projection"),
    sort: str | None = Query(default=None, description="Ignored; feed is newest first"),
    limit: int | None = Query(default=None, ge=1),
    offset: int = Query(default=0, ge=0),
    page: int | None = Query(default=None, ge=1),
    meta: int = Query(default=0, ge=0, le=1),
) -> FeedParams:
    try:
        return FeedParams(
            columns=columns,  # type: ignore[arg-type]
            sort=sort,  # type: ignore[arg-type]
            filter=parse_filter_params(request.query_params),
            limit=limit,
            offset=offset,
            page=page,
            meta=meta,  # type: ignore[arg-type]
        )
    except ValidationError as exc:
        raise BadRequestException(str(exc))
