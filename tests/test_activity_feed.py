"""
Activity feed tests.
Covers: newest-first ordering, visibility of threaded records, projection,
filters, paging, count metadata, and query failures.
"""
from __future__ import annotations

import datetime as dt

import pytest

from activitylog.core.exceptions import BadRequestException, InvalidQueryException
from activitylog.crud.activity import ActivityQueryRunner
from activitylog.models.activity import ActivityAction, ActivityType
from activitylog.models.user import User
from activitylog.schemas.activity import FeedParams
from activitylog.services.activity_feed import ActivityFeedQuery

from conftest import T0, ActivityFactory

pytestmark = pytest.mark.asyncio


async def _seed_thread(make_activity: ActivityFactory, user: User) -> None:
    """Five top-level records, one comment reply and one file record with a parent."""
    for minute in range(5):
        await make_activity(
            user,
            action=ActivityAction.UPDATE,
            item=str(minute % 2),
            at=T0 + dt.timedelta(minutes=minute),
        )
    comment = await make_activity(
        user, type=ActivityType.COMMENT, action=ActivityAction.ADD, comment="first"
    )
    await make_activity(
        user,
        type=ActivityType.COMMENT,
        action=ActivityAction.ADD,
        comment="reply",
        parent_id=comment.id,
    )
    await make_activity(
        user,
        type=ActivityType.FILES,
        action=ActivityAction.ADD,
        collection="files",
        item="logo.png",
        parent_id=comment.id,
    )


class TestOrderingAndVisibility:
    async def test_newest_first(
        self, runner: ActivityQueryRunner, alice: User, make_activity: ActivityFactory
    ) -> None:
        await _seed_thread(make_activity, alice)
        envelope = await ActivityFeedQuery(runner).fetch_feed()

        ids = [row["id"] for row in envelope.data]
        assert ids == sorted(ids, reverse=True)
        assert len(set(ids)) == len(ids)

    async def test_replies_hidden_files_shown(
        self, runner: ActivityQueryRunner, alice: User, make_activity: ActivityFactory
    ) -> None:
        await _seed_thread(make_activity, alice)
        envelope = await ActivityFeedQuery(runner).fetch_feed()

        for row in envelope.data:
            assert row["parent_id"] is None or row["type"] is ActivityType.FILES
        assert "reply" not in [row["comment"] for row in envelope.data]
        assert any(row["item"] == "logo.png" for row in envelope.data)
        assert len(envelope.data) == 7

    async def test_requested_sort_is_ignored(
        self, runner: ActivityQueryRunner, alice: User, make_activity: ActivityFactory
    ) -> None:
        await _seed_thread(make_activity, alice)
        envelope = await ActivityFeedQuery(runner).fetch_feed(FeedParams(sort="id"))

        ids = [row["id"] for row in envelope.data]
        assert ids == sorted(ids, reverse=True)

    async def test_empty_log_returns_no_rows(self, runner: ActivityQueryRunner) -> None:
        envelope = await ActivityFeedQuery(runner).fetch_feed(FeedParams(meta=1))
        assert envelope.data == []
        assert envelope.meta is not None
        assert envelope.meta.total_count == 0


class TestProjection:
    async def test_defaults_to_every_column(
        self, runner: ActivityQueryRunner, alice: User, make_activity: ActivityFactory
    ) -> None:
        await make_activity(alice)
        envelope = await ActivityFeedQuery(runner).fetch_feed()

        assert set(envelope.data[0]) == {
            "id", "type", "action", "collection", "item", "user",
            "datetime", "ip", "user_agent", "parent_id", "comment",
        }

    async def test_columns_override_projection(
        self, runner: ActivityQueryRunner, alice: User, make_activity: ActivityFactory
    ) -> None:
        await make_activity(alice)
        envelope = await ActivityFeedQuery(runner).fetch_feed(
            FeedParams(columns="id,action")
        )
        assert envelope.data == [{"id": 1, "action": ActivityAction.ADD}]

    async def test_unknown_column_fails_with_query_text(
        self, runner: ActivityQueryRunner, alice: User, make_activity: ActivityFactory
    ) -> None:
        await make_activity(alice)
        with pytest.raises(InvalidQueryException) as exc_info:
            await ActivityFeedQuery(runner).fetch_feed(FeedParams(columns=["id", "bogus"]))

        assert exc_info.value.query is not None
        assert "bogus" in exc_info.value.query
        assert exc_info.value.status_code == 400


class TestFiltersAndPaging:
    async def test_equality_filter(
        self, runner: ActivityQueryRunner, alice: User, make_activity: ActivityFactory
    ) -> None:
        await make_activity(alice, collection="posts")
        await make_activity(alice, collection="pages")
        envelope = await ActivityFeedQuery(runner).fetch_feed(
            FeedParams(filter={"collection": "pages"})
        )
        assert [row["collection"] for row in envelope.data] == ["pages"]

    async def test_operator_filters(
        self, runner: ActivityQueryRunner, alice: User, make_activity: ActivityFactory
    ) -> None:
        await _seed_thread(make_activity, alice)
        envelope = await ActivityFeedQuery(runner).fetch_feed(
            FeedParams(filter={"item": {"in": "0,1"}, "action": {"neq": "ADD"}})
        )
        assert len(envelope.data) == 5
        assert {row["item"] for row in envelope.data} == {"0", "1"}

    async def test_user_filter_accepts_uuid_text(
        self,
        runner: ActivityQueryRunner,
        alice: User,
        bob: User,
        make_activity: ActivityFactory,
    ) -> None:
        await make_activity(alice)
        await make_activity(bob)
        envelope = await ActivityFeedQuery(runner).fetch_feed(
            FeedParams(filter={"user": str(bob.id)})
        )
        assert [row["user"] for row in envelope.data] == [bob.id]

    async def test_unknown_operator_is_rejected(self, runner: ActivityQueryRunner) -> None:
        with pytest.raises(BadRequestException):
            await ActivityFeedQuery(runner).fetch_feed(
                FeedParams(filter={"item": {"like": "5"}})
            )

    async def test_limit_and_page(
        self, runner: ActivityQueryRunner, alice: User, make_activity: ActivityFactory
    ) -> None:
        await _seed_thread(make_activity, alice)
        feed = ActivityFeedQuery(runner)

        first = await feed.fetch_feed(FeedParams(limit=3, meta=1))
        second = await feed.fetch_feed(FeedParams(limit=3, page=2, meta=1))

        assert [row["id"] for row in first.data] == [8, 6, 5]
        assert [row["id"] for row in second.data] == [4, 3, 2]
        assert first.meta is not None and first.meta.total_count == 7
        assert first.meta.result_count == 3

    async def test_offset(
        self, runner: ActivityQueryRunner, alice: User, make_activity: ActivityFactory
    ) -> None:
        await _seed_thread(make_activity, alice)
        envelope = await ActivityFeedQuery(runner).fetch_feed(FeedParams(limit=2, offset=5))
        assert [row["id"] for row in envelope.data] == [2, 1]
