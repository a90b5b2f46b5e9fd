"""장기 기억 → LifeMemorySummary 집계 (순수 함수)"""
from typing import Iterable, List

from ...config import (
    FOCUS_KEYWORDS,
    MAX_GOALS,
    MAX_HABITS,
    MAX_STUDY_FOCUS,
    MAX_PREFERENCES,
    DEFAULT_MOOD_PATTERN,
)
from ...database.schemas import LifeMemorySchema, ChatDaySummarySchema
from ...utils.schemas import LifeMemorySummary


def dedupe_and_cap(items: Iterable[str], limit: int) -> List[str]:
    """순서 유지 중복 제거 후 limit개로 자르기 (빈 문자열 제외)"""
    seen = set()
    result = []
    for item in items:
        text = (item or "").strip()
        if not text or text in seen:
            continue
        seen.add(text)
        result.append(text)
        if len(result) >= limit:
            break
    return result


def extract_focus_topics(day_summaries: Iterable[ChatDaySummarySchema]) -> List[str]:
    """일일 요약 key_topics 중 학습 관련 키워드를 포함한 토픽 추출"""
    topics = []
    for summary in day_summaries:
        for topic in summary.key_topics or []:
            lowered = topic.lower()
            if any(keyword in lowered for keyword in FOCUS_KEYWORDS):
                topics.append(topic)
    return topics


def summarize_life_memories(
    memories: List[LifeMemorySchema],
    day_summaries: List[ChatDaySummarySchema]
) -> LifeMemorySummary:
    """memory_type별 버킷팅으로 LifeMemorySummary 생성

    Args:
        memories: importance 내림차순 장기 기억
        day_summaries: 최근 일일 요약 (최신순)

    Returns:
        LifeMemorySummary: 리스트별 상한이 적용된 새 요약
    """
    goals, habits, preferences = [], [], []
    mood_pattern = None

    for memory in memories:
        if memory.memory_type == "goal":
            goals.append(memory.title)
        elif memory.memory_type == "habit":
            habits.append(memory.title)
        elif memory.memory_type == "preference":
            preferences.append(memory.content)
        elif memory.memory_type == "emotional_pattern" and mood_pattern is None:
            # importance가 가장 높은 패턴 하나만 사용
            mood_pattern = memory.content.strip() or None

    return LifeMemorySummary(
        goals=dedupe_and_cap(goals, MAX_GOALS),
        habits=dedupe_and_cap(habits, MAX_HABITS),
        study_focus=dedupe_and_cap(extract_focus_topics(day_summaries), MAX_STUDY_FOCUS),
        mood_pattern=mood_pattern or DEFAULT_MOOD_PATTERN,
        preferences=dedupe_and_cap(preferences, MAX_PREFERENCES),
    )
