"""
Generic query shaping for activity selects.
Applies caller filters and limit/offset/page paging to a base select.

Filters map a column name to either a plain value (equality) or to
{operator: value}. Supported operators: eq, neq, lt, lte, gt, gte, in, nin,
null, nnull, contains, ncontains. ``in``/``nin`` accept a list or a
comma-separated string.
"""
from __future__ import annotations

import datetime as dt
import enum
from collections.abc import Callable, Mapping
from typing import Any

from sqlalchemy import ColumnElement, Select, Table, column, not_

from activitylog.core.config import settings
from activitylog.core.exceptions import BadRequestException


def resolve_column(table: Table, name: str) -> ColumnElement[Any]:
    """
    Return the table column called ``name``.
    Unknown names are passed through as bare identifiers; the database rejects them.
    """
    if name in table.c:
        return table.c[name]
    return column(name)


def _coerce(col: ColumnElement[Any], value: Any) -> Any:
    if not isinstance(value, str):
        return value
    try:
        python_type = col.type.python_type
    except NotImplementedError:
        return value
    if python_type is str or issubclass(python_type, enum.Enum):
        return value
    try:
        if python_type is dt.datetime:
            return dt.datetime.fromisoformat(value)
        if python_type is bool:
            return value.lower() in ("1", "true", "yes")
        return python_type(value)
    except (TypeError, ValueError):
        raise BadRequestException(f"Invalid value {value!r} for column '{col.name}'")


def _as_list(value: Any) -> list[Any]:
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    if isinstance(value, (list, tuple, set)):
        return list(value)
    return [value]


_OPERATORS: dict[str, Callable[[ColumnElement[Any], Any], ColumnElement[bool]]] = {
    "eq": lambda col, v: col == _coerce(col, v),
    "neq": lambda col, v: col != _coerce(col, v),
    "lt": lambda col, v: col < _coerce(col, v),
    "lte": lambda col, v: col <= _coerce(col, v),
    "gt": lambda col, v: col > _coerce(col, v),
    "gte": lambda col, v: col >= _coerce(col, v),
    "in": lambda col, v: col.in_([_coerce(col, x) for x in _as_list(v)]),
    "nin": lambda col, v: col.not_in([_coerce(col, x) for x in _as_list(v)]),
    "null": lambda col, v: col.is_(None),
    "nnull": lambda col, v: col.is_not(None),
    "contains": lambda col, v: col.contains(v),
    "ncontains": lambda col, v: not_(col.contains(v)),
}


def apply_filters(
    query: Select[Any],
    table: Table,
    filters: Mapping[str, Any],
) -> Select[Any]:
    for name, condition in filters.items():
        col = resolve_column(table, name)
        if not isinstance(condition, Mapping):
            condition = {"eq": condition}
        for operator, value in condition.items():
            build = _OPERATORS.get(operator)
            if build is None:
                raise BadRequestException(f"Unknown filter operator '{operator}'")
            query = query.where(build(col, value))
    return query


def apply_paging(
    query: Select[Any],
    *,
    limit: int | None = None,
    offset: int = 0,
    page: int | None = None,
) -> Select[Any]:
    """
    Apply limit/offset. ``page`` (1-based) takes precedence over ``offset``.
    The limit falls back to the configured default and is capped at the maximum.
    """
    size = min(limit or settings.FEED_DEFAULT_LIMIT, settings.FEED_MAX_LIMIT)
    if page is not None:
        offset = (page - 1) * size
    return query.limit(size).offset(offset)
