"""LifeMemorySummary 집계(순수 함수) 테스트"""
from datetime import datetime, timezone

from src.database import LifeMemorySchema, ChatDaySummarySchema
from src.service.memory import summarize_life_memories, extract_focus_topics, dedupe_and_cap

NOW = datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)


def memory(memory_type, title, content=None, importance=7):
    return LifeMemorySchema(
        user_id="u",
        memory_type=memory_type,
        title=title,
        content=content or title,
        importance_score=importance,
    )


def day_summary(key_topics):
    return ChatDaySummarySchema(
        user_id="u",
        time_range_start=NOW,
        time_range_end=NOW,
        summary="...",
        key_topics=key_topics,
    )


class TestDedupeAndCap:
    def test_keeps_first_occurrence_order(self):
        assert dedupe_and_cap(["run", "read", "run", "swim"], 5) == ["run", "read", "swim"]

    def test_caps_and_skips_blank(self):
        assert dedupe_and_cap(["a", "", "  ", "b", "c", "d"], 2) == ["a", "b"]


class TestExtractFocusTopics:
    def test_matches_keywords_case_insensitively(self):
        topics = extract_focus_topics([
            day_summary(["Python COURSE", "weekend trip"]),
            day_summary(["Exam study plan", "Learning guitar", "dinner"]),
        ])
        assert topics == ["Python COURSE", "Exam study plan", "Learning guitar"]

    def test_no_summaries(self):
        assert extract_focus_topics([]) == []


class TestSummarizeLifeMemories:
    def test_buckets_by_memory_type(self):
        summary = summarize_life_memories([
            memory("goal", "Run a marathon"),
            memory("habit", "Morning walk"),
            memory("preference", "Tea", content="Prefers green tea over coffee"),
            memory("emotional_pattern", "Sunday blues", content="Anxious on Sunday evenings", importance=9),
            memory("emotional_pattern", "Calm", content="Calm after exercise", importance=6),
            memory("person", "Mom"),
        ], [])

        assert summary.goals == ["Run a marathon"]
        assert summary.habits == ["Morning walk"]
        assert summary.preferences == ["Prefers green tea over coffee"]
        # importance 내림차순 입력 기준 첫 번째 패턴 사용
        assert summary.mood_pattern == "Anxious on Sunday evenings"
        assert summary.communication_style == "balanced"

    def test_defaults_when_empty(self):
        summary = summarize_life_memories([], [])
        assert summary.goals == []
        assert summary.mood_pattern == "neutral"
        assert summary.study_focus == []

    def test_lists_are_capped(self):
        memories = [memory("goal", f"goal {i}") for i in range(20)]
        memories += [memory("habit", f"habit {i}") for i in range(20)]
        memories += [memory("preference", f"pref {i}") for i in range(20)]
        topics = [f"study topic {i}" for i in range(10)]

        summary = summarize_life_memories(memories, [day_summary(topics)])

        assert summary.goals == [f"goal {i}" for i in range(5)]
        assert len(summary.habits) == 5
        assert len(summary.preferences) == 5
        assert summary.study_focus == ["study topic 0", "study topic 1", "study topic 2"]
