"""
RecordParser tests.
Covers: row normalization, envelope wrapping with and without count metadata.
"""
from __future__ import annotations

import datetime as dt
import uuid

from activitylog.models.activity import ActivityAction, ActivityType
from activitylog.services.record_parser import RecordParser

parser = RecordParser()


class TestParseRecord:
    def test_coerces_known_columns(self) -> None:
        user_id = uuid.uuid4()
        record = parser.parse_record(
            {
                "id": "7",
                "type": "ENTRY",
                "action": "UPDATE",
                "user": str(user_id),
                "datetime": "2024-01-01 09:30:00",
                "parent_id": None,
            }
        )
        assert record["id"] == 7
        assert record["type"] is ActivityType.ENTRY
        assert record["action"] is ActivityAction.UPDATE
        assert record["user"] == user_id
        assert record["datetime"] == dt.datetime(2024, 1, 1, 9, 30, tzinfo=dt.timezone.utc)
        assert record["parent_id"] is None

    def test_naive_datetimes_are_read_as_utc(self) -> None:
        record = parser.parse_record({"datetime": dt.datetime(2024, 5, 1, 12, 0)})
        assert record["datetime"].tzinfo == dt.timezone.utc

    def test_aware_datetimes_are_converted_to_utc(self) -> None:
        plus_two = dt.timezone(dt.timedelta(hours=2))
        record = parser.parse_record({"datetime": dt.datetime(2024, 5, 1, 12, 0, tzinfo=plus_two)})
        assert record["datetime"] == dt.datetime(2024, 5, 1, 10, 0, tzinfo=dt.timezone.utc)

    def test_unknown_columns_pass_through(self) -> None:
        record = parser.parse_record({"collection": "posts", "extra": 1})
        assert record == {"collection": "posts", "extra": 1}

    def test_does_not_mutate_input(self) -> None:
        row = {"id": "3"}
        parser.parse_record(row)
        assert row == {"id": "3"}


class TestWrapData:
    def test_without_meta_omits_meta_key(self) -> None:
        envelope = parser.wrap_data([{"id": 1}])
        assert envelope.meta is None
        assert envelope.model_dump() == {"data": [{"id": 1}]}

    def test_meta_counts_returned_rows(self) -> None:
        envelope = parser.wrap_data([{"id": 2}, {"id": 1}], meta=1)
        assert envelope.meta is not None
        assert envelope.meta.result_count == 2
        assert envelope.meta.total_count == 2

    def test_meta_uses_supplied_total(self) -> None:
        envelope = parser.wrap_data([{"id": 2}], meta=1, total_count=40)
        assert envelope.model_dump()["meta"] == {"total_count": 40, "result_count": 1}
