"""
Row normalization for activity query results.
Turns raw storage rows into typed values and wraps them in the response envelope.
"""
from __future__ import annotations

import datetime as dt
import uuid
from collections.abc import Iterable, Mapping
from typing import Any, TypeVar

from activitylog.models.activity import ActivityAction, ActivityType
from activitylog.schemas.envelope import ResponseEnvelope, ResponseMeta

T = TypeVar("T")


def _to_utc(value: Any) -> dt.datetime | None:
    if value is None:
        return None
    if isinstance(value, str):
        value = dt.datetime.fromisoformat(value)
    # SQLite hands timestamps back without an offset; they were written in UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=dt.timezone.utc)
    return value.astimezone(dt.timezone.utc)


def _to_int(value: Any) -> int | None:
    return None if value is None else int(value)


def _to_uuid(value: Any) -> uuid.UUID | None:
    if value is None or isinstance(value, uuid.UUID):
        return value
    return uuid.UUID(str(value))


_CONVERTERS = {
    "id": _to_int,
    "parent_id": _to_int,
    "type": lambda v: None if v is None else ActivityType(v),
    "action": lambda v: None if v is None else ActivityAction(v),
    "user": _to_uuid,
    "datetime": _to_utc,
}


class RecordParser:
    """Normalizes activity rows and builds response envelopes."""

    def parse_record(self, row: Mapping[str, Any]) -> dict[str, Any]:
        """Return a copy of ``row`` with known columns coerced to their domain types."""
        record = dict(row)
        for key, convert in _CONVERTERS.items():
            if key in record:
                record[key] = convert(record[key])
        return record

    def parse_records(self, rows: Iterable[Mapping[str, Any]]) -> list[dict[str, Any]]:
        return [self.parse_record(row) for row in rows]

    def wrap_data(
        self,
        data: T,
        *,
        meta: int = 0,
        total_count: int | None = None,
    ) -> ResponseEnvelope[T]:
        """
        Build the response envelope.
        When ``meta`` is set, ``total_count`` defaults to the number of rows in ``data``.
        """
        if not meta:
            return ResponseEnvelope(data=data)

        result_count = len(data) if isinstance(data, list) else 1
        return ResponseEnvelope(
            data=data,
            meta=ResponseMeta(
                total_count=result_count if total_count is None else total_count,
                result_count=result_count,
            ),
        )


record_parser = RecordParser()
