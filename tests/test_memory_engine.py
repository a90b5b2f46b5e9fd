"""MemoryEngine 캐시 / 컨텍스트 테스트"""
import asyncio
from datetime import date, datetime, timedelta
from unittest.mock import patch

from src.config import APP_TZ
from src.database import StoreError
from src.service.memory import MemoryEngine, render_context
from src.utils.schemas import LifeMemorySummary, ChatDaySummary, MemoryContext


def make_engine(db, user_id, clock):
    return MemoryEngine(db, user_id, clock=clock)


class TestLifeSummaryCache:
    async def test_build_filters_by_importance(self, db, user_id, clock, make_memory):
        await make_memory("goal", "Run a marathon", importance_score=8)
        await make_memory("goal", "Learn juggling", importance_score=3)
        await make_memory("habit", "Journal at night", importance_score=5)
        engine = make_engine(db, user_id, clock)

        summary = await engine.build_life_summary()

        assert summary.goals == ["Run a marathon"]
        assert summary.habits == ["Journal at night"]

    async def test_study_focus_uses_recent_day_summaries(self, db, user_id, clock, make_day_summary):
        today = clock().date()
        await make_day_summary(today - timedelta(days=2), key_topics=["Python course", "groceries"])
        await make_day_summary(
            today - timedelta(days=20),
            key_topics=["History class"],
            created_at=clock() - timedelta(days=20),
        )
        engine = make_engine(db, user_id, clock)

        summary = await engine.build_life_summary()

        assert summary.study_focus == ["Python course"]

    async def test_second_call_returns_cached_object(self, db, user_id, clock, make_memory):
        await make_memory("goal", "Run a marathon")
        engine = make_engine(db, user_id, clock)

        with patch.object(db, "list_important_memories", wraps=db.list_important_memories) as query:
            first = await engine.build_life_summary()
            clock.advance(hours=23, minutes=59)
            second = await engine.build_life_summary()

        assert second is first
        assert query.await_count == 1

    async def test_rebuilds_once_after_ttl(self, db, user_id, clock, make_memory):
        await make_memory("goal", "Run a marathon")
        engine = make_engine(db, user_id, clock)

        with patch.object(db, "list_important_memories", wraps=db.list_important_memories) as query:
            first = await engine.build_life_summary()
            await make_memory("goal", "Read 12 books")
            clock.advance(hours=24)
            second = await engine.build_life_summary()
            third = await engine.build_life_summary()

        assert query.await_count == 2
        assert second is not first
        assert third is second
        assert "Read 12 books" in second.goals

    async def test_store_failure_without_cache_returns_default(self, db, user_id, clock):
        engine = make_engine(db, user_id, clock)

        with patch.object(db, "list_important_memories", side_effect=StoreError("list_important_memories", "down")):
            summary = await engine.build_life_summary()

        assert summary == LifeMemorySummary()

    async def test_store_failure_serves_stale_and_retries(self, db, user_id, clock, make_memory):
        await make_memory("goal", "Run a marathon")
        engine = make_engine(db, user_id, clock)
        first = await engine.build_life_summary()
        clock.advance(hours=25)

        with patch.object(db, "list_important_memories", side_effect=StoreError("list_important_memories", "down")) as query:
            stale = await engine.build_life_summary()
            again = await engine.build_life_summary()

        assert stale is first
        assert again is first
        # fetched_at이 갱신되지 않으므로 매 호출마다 재시도
        assert query.await_count == 2

    async def test_invalidate_forces_rebuild(self, db, user_id, clock, make_memory):
        engine = make_engine(db, user_id, clock)
        await engine.build_life_summary()
        await make_memory("habit", "Stretching")

        engine.invalidate_life_summary()
        summary = await engine.build_life_summary()

        assert summary.habits == ["Stretching"]


class TestYesterdaySummaryCache:
    async def test_returns_yesterday_summary(self, db, user_id, clock, make_day_summary):
        yesterday = clock().date() - timedelta(days=1)
        await make_day_summary(yesterday, summary="Had a rough day at work.", open_loops=["talk to boss"])
        engine = make_engine(db, user_id, clock)

        summary = await engine.get_yesterday_summary()

        assert summary.chat_date == yesterday
        assert summary.summary_text == "Had a rough day at work."
        assert summary.open_loops == ["talk to boss"]

    async def test_ignores_other_days(self, db, user_id, clock, make_day_summary):
        await make_day_summary(clock().date() - timedelta(days=2))
        await make_day_summary(clock().date())
        engine = make_engine(db, user_id, clock)

        assert await engine.get_yesterday_summary() is None

    async def test_second_call_within_ttl_skips_store(self, db, user_id, clock, make_day_summary):
        await make_day_summary(clock().date() - timedelta(days=1))
        engine = make_engine(db, user_id, clock)

        with patch.object(db, "get_day_summary", wraps=db.get_day_summary) as query:
            first = await engine.get_yesterday_summary()
            clock.advance(hours=5)
            second = await engine.get_yesterday_summary()

        assert second is first
        assert query.await_count == 1

    async def test_missing_summary_is_cached(self, db, user_id, clock):
        engine = make_engine(db, user_id, clock)

        with patch.object(db, "get_day_summary", wraps=db.get_day_summary) as query:
            assert await engine.get_yesterday_summary() is None
            assert await engine.get_yesterday_summary() is None

        assert query.await_count == 1

    async def test_refetches_after_ttl(self, db, user_id, clock):
        engine = make_engine(db, user_id, clock)

        with patch.object(db, "get_day_summary", wraps=db.get_day_summary) as query:
            await engine.get_yesterday_summary()
            clock.advance(hours=6)
            await engine.get_yesterday_summary()

        assert query.await_count == 2

    async def test_day_change_makes_entry_stale(self, db, user_id, clock, make_day_summary):
        clock.now = datetime(2026, 3, 10, 23, 0, tzinfo=APP_TZ)
        engine = make_engine(db, user_id, clock)
        assert await engine.get_yesterday_summary() is None

        await make_day_summary(date(2026, 3, 10), summary="Finished the project.")
        clock.advance(hours=2)
        summary = await engine.get_yesterday_summary()

        assert summary.summary_text == "Finished the project."

    async def test_store_failure_returns_none_without_cache(self, db, user_id, clock):
        engine = make_engine(db, user_id, clock)

        with patch.object(db, "get_day_summary", side_effect=StoreError("get_day_summary", "down")):
            assert await engine.get_yesterday_summary() is None

        # 실패는 캐시되지 않음
        with patch.object(db, "get_day_summary", wraps=db.get_day_summary) as query:
            await engine.get_yesterday_summary()
        assert query.await_count == 1


class TestLoadMemoryContext:
    async def test_empty_history_gives_empty_context(self, db, user_id, clock):
        engine = make_engine(db, user_id, clock)

        context = await engine.load_memory_context()

        assert context.is_loaded
        assert engine.get_context_for_ai() == ""

    async def test_not_loaded_gives_empty_context(self, db, user_id, clock):
        engine = make_engine(db, user_id, clock)
        assert not engine.is_loaded
        assert engine.get_context_for_ai() == ""

    async def test_concurrent_loads_share_one_build(self, db, user_id, clock, make_memory):
        await make_memory("goal", "Run a marathon")
        engine = make_engine(db, user_id, clock)

        with patch.object(db, "list_important_memories", wraps=db.list_important_memories) as query:
            results = await asyncio.gather(*(engine.load_memory_context() for _ in range(5)))

        assert query.await_count == 1
        assert all(result is results[0] for result in results)

    async def test_context_sections_in_order(self, db, user_id, clock, make_memory, make_day_summary):
        await make_memory("goal", "Run a marathon")
        await make_memory("habit", "Morning walk")
        await make_memory("emotional_pattern", "Sunday", content="Anxious on Sundays")
        await make_day_summary(
            clock().date() - timedelta(days=1),
            summary="Studied for the python course.",
            key_topics=["python course"],
            open_loops=["finish chapter 3", "call mom", "book dentist"],
        )
        engine = make_engine(db, user_id, clock)

        await engine.load_memory_context()

        assert engine.get_context_for_ai().split("\n") == [
            "Active goals: Run a marathon",
            "Regular habits: Morning walk",
            "Study focus: python course",
            "Mood pattern: Anxious on Sundays",
            "Yesterday: Studied for the python course.",
            "Pending: finish chapter 3, call mom",
        ]
        assert engine.context.active_goals == ["Run a marathon"]

    async def test_routing_delegates_to_classifier(self, db, user_id, clock):
        engine = make_engine(db, user_id, clock)
        assert engine.get_response_path("explain how binary search works") == "deep"
        assert engine.get_response_path("hey") == "fast"
        assert engine.is_deep_request("debug my script")


class TestRenderContext:
    def test_pathological_sizes_stay_bounded(self):
        many = [f"item {i}" for i in range(1000)]
        context = MemoryContext(
            life_summary=LifeMemorySummary(
                goals=many, habits=many, study_focus=many, mood_pattern="restless",
            ),
            yesterday_summary=ChatDaySummary(
                chat_date=date(2026, 3, 9), summary_text="Busy day.", open_loops=many,
            ),
            active_goals=many,
            is_loaded=True,
        )

        lines = render_context(context).split("\n")

        assert len(lines) <= 6
        assert lines[0] == "Active goals: item 0, item 1, item 2, item 3, item 4"
        assert lines[1].count(",") == 4
        assert lines[2] == "Study focus: item 0, item 1, item 2"
        assert lines[-1] == "Pending: item 0, item 1"

    def test_multiline_text_is_collapsed(self):
        context = MemoryContext(
            yesterday_summary=ChatDaySummary(
                chat_date=date(2026, 3, 9),
                summary_text="Line one.\n\nLine two.\n- Line three",
            ),
            is_loaded=True,
        )

        assert render_context(context) == "Yesterday: Line one. Line two. - Line three"

    def test_neutral_mood_is_omitted(self):
        context = MemoryContext(
            life_summary=LifeMemorySummary(habits=["Yoga"]),
            is_loaded=True,
        )
        assert render_context(context) == "Regular habits: Yoga"
