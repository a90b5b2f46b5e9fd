"""Database 모킹 모드 / 타임아웃 래핑 테스트"""
import time
from datetime import date, datetime, timedelta

import pytest

from src.config import APP_TZ
from src.database import (
    StoreError,
    StoreTimeoutError,
    DailyChatSessionSchema,
    ChatMessageSchema,
    ChatDaySummarySchema,
    day_bounds,
    clamp_to_day,
)

DAY = date(2026, 3, 10)


def message(message_id, created_at, user_id="user-1", chat_date=DAY):
    return ChatMessageSchema(
        id=message_id,
        user_id=user_id,
        chat_date=chat_date,
        sender="user",
        content=message_id,
        created_at=created_at,
    )


class SlowQuery:
    def execute(self):
        time.sleep(0.3)


class BrokenQuery:
    def execute(self):
        raise RuntimeError("connection reset")


class TestExecute:
    async def test_timeout_raises_store_timeout(self, db):
        db.timeout = 0.05
        with pytest.raises(StoreTimeoutError) as exc_info:
            await db._execute("list_messages", SlowQuery())
        assert exc_info.value.operation == "list_messages"

    async def test_client_error_is_wrapped(self, db):
        with pytest.raises(StoreError) as exc_info:
            await db._execute("insert_message", BrokenQuery())
        assert exc_info.value.operation == "insert_message"
        assert "connection reset" in exc_info.value.detail

    async def test_mock_mode_connection(self, db):
        assert db.supabase is None
        assert await db.test_connection() is True


class TestSessions:
    async def test_unique_user_and_date(self, db):
        first = await db.insert_session(DailyChatSessionSchema(user_id="user-1", chat_date=DAY))
        second = await db.insert_session(DailyChatSessionSchema(user_id="user-1", chat_date=DAY))

        assert first.id
        assert second is None
        assert len(await db.list_sessions("user-1")) == 1

    async def test_archive_skips_excluded_date_and_other_users(self, db):
        await db.insert_session(DailyChatSessionSchema(user_id="user-1", chat_date=DAY - timedelta(days=1)))
        await db.insert_session(DailyChatSessionSchema(user_id="user-1", chat_date=DAY))
        await db.insert_session(DailyChatSessionSchema(user_id="user-2", chat_date=DAY - timedelta(days=1)))

        changed = await db.update_session_status("user-1", exclude_date=DAY)

        assert changed == 1
        assert [s.chat_date for s in await db.list_active_sessions("user-1")] == [DAY]
        assert len(await db.list_active_sessions("user-2")) == 1


class TestMessages:
    async def test_list_is_ordered_by_created_at(self, db):
        base = datetime(2026, 3, 10, 9, 0, tzinfo=APP_TZ)
        await db.insert_message(message("late", base + timedelta(minutes=5)))
        await db.insert_message(message("early", base))
        await db.insert_message(message("other-day", base, chat_date=DAY - timedelta(days=1)))

        listed = await db.list_messages("user-1", DAY)

        assert [m.id for m in listed] == ["early", "late"]

    async def test_duplicate_id_is_rejected(self, db):
        created_at = datetime(2026, 3, 10, 9, 0, tzinfo=APP_TZ)
        await db.insert_message(message("m1", created_at))
        with pytest.raises(StoreError):
            await db.insert_message(message("m1", created_at))

    async def test_update_and_delete_check_owner(self, db):
        await db.insert_message(message("m1", datetime(2026, 3, 10, 9, 0, tzinfo=APP_TZ)))

        assert await db.update_message("user-2", "m1", "hacked") is False
        assert await db.delete_message("user-2", "m1") is False
        assert await db.update_message("user-1", "m1", "edited") is True
        assert (await db.list_messages("user-1", DAY))[0].content == "edited"


class TestDaySummaries:
    async def test_range_must_contain_summary(self, db):
        start, end = day_bounds(DAY, APP_TZ)

        async def insert(range_start, range_end, text, created_at):
            await db.insert_day_summary(ChatDaySummarySchema(
                user_id="user-1",
                time_range_start=range_start,
                time_range_end=range_end,
                summary=text,
                created_at=created_at,
            ))

        await insert(start - timedelta(hours=1), start + timedelta(hours=2), "spans midnight", end)
        await insert(start + timedelta(hours=20), end, "ends at next midnight", end)
        await insert(start + timedelta(hours=9), start + timedelta(hours=10), "older", end)
        await insert(start + timedelta(hours=18), start + timedelta(hours=19), "newer", end + timedelta(hours=1))

        found = await db.get_day_summary("user-1", start, end)

        assert found.summary == "newer"

    def test_day_bounds(self):
        start, end = day_bounds(DAY, APP_TZ)
        assert start == datetime(2026, 3, 10, 0, 0, tzinfo=APP_TZ)
        assert end - start == timedelta(days=1)

    def test_clamp_to_day_cuts_after_midnight(self):
        start, end = day_bounds(DAY, APP_TZ)

        clamped = clamp_to_day(DAY, APP_TZ, start + timedelta(hours=23, minutes=59), end + timedelta(minutes=2))

        assert clamped == (start + timedelta(hours=23, minutes=59), end - timedelta(microseconds=1))
        assert clamp_to_day(DAY, APP_TZ, start - timedelta(hours=1), start + timedelta(hours=1)) == (
            start, start + timedelta(hours=1)
        )


class TestMemories:
    async def test_important_memories_sorted_and_limited(self, db, make_memory):
        await make_memory("goal", "low", importance_score=4)
        await make_memory("goal", "mid", importance_score=6)
        await make_memory("habit", "high", importance_score=9)
        await make_memory("habit", "top", importance_score=10)

        memories = await db.list_important_memories("user-1", min_importance=5, limit=2)

        assert [m.title for m in memories] == ["top", "high"]

    async def test_search_is_case_insensitive(self, db, make_memory):
        await make_memory("preference", "Tea", content="Loves Green TEA")
        await make_memory("goal", "Marathon")

        found = await db.search_memories("user-1", "green tea")

        assert [m.title for m in found] == ["Tea"]
        assert await db.search_memories("user-1", "   ") == []

    async def test_touch_and_delete(self, db, make_memory):
        memory = await make_memory("person", "Mom")
        referenced_at = datetime(2026, 3, 11, 8, 0, tzinfo=APP_TZ)

        assert await db.touch_memory("user-1", memory.id, referenced_at) is True
        assert (await db.list_memories("user-1"))[0].last_referenced_at == referenced_at
        assert await db.delete_memory("user-2", memory.id) is False
        assert await db.delete_memory("user-1", memory.id) is True
        assert await db.list_memories("user-1") == []
