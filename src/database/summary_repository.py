"""요약 관련 복합 DB 로직"""
from typing import List, Optional, Tuple
from datetime import date, datetime, time, timedelta, tzinfo
import logging

from .schemas import ChatDaySummarySchema, ChatMessageSchema

logger = logging.getLogger(__name__)


def day_bounds(chat_date: date, tz: tzinfo) -> Tuple[datetime, datetime]:
    """chat_date의 [시작, 다음날 시작) 구간 (서비스 시간대 기준)"""
    start = datetime.combine(chat_date, time.min, tzinfo=tz)
    return start, start + timedelta(days=1)


def to_chat_day_summary(row: ChatDaySummarySchema, chat_date: date) -> "ChatDaySummary":
    """chat_summaries 행 → 엔진용 ChatDaySummary"""
    from ..utils.schemas import ChatDaySummary

    return ChatDaySummary(
        chat_date=chat_date,
        summary_text=row.summary,
        emotional_trend=row.emotional_trend,
        key_topics=list(row.key_topics or []),
        open_loops=list(row.open_loops or []),
    )


async def get_summary_for_date(
    db,
    user_id: str,
    chat_date: date,
    tz: tzinfo
) -> Optional["ChatDaySummary"]:
    """특정 날짜 구간에 완전히 포함되는 최신 일일 요약 조회

    Args:
        db: Database 인스턴스
        user_id: 사용자 ID
        chat_date: 조회할 날짜
        tz: 날짜 경계를 결정하는 시간대

    Returns:
        Optional[ChatDaySummary]: 요약 (없으면 None)
    """
    range_start, range_end = day_bounds(chat_date, tz)
    row = await db.get_day_summary(user_id, range_start, range_end)
    if not row:
        logger.info(f"[SummaryRepo] 요약 없음: {user_id} {chat_date}")
        return None
    return to_chat_day_summary(row, chat_date)


def clamp_to_day(
    chat_date: date,
    tz: tzinfo,
    first_at: datetime,
    last_at: datetime
) -> Tuple[datetime, datetime]:
    """메시지 시각 구간을 chat_date 하루 [시작, 다음날 시작) 안으로 맞춤

    자정 직후에 저장된 응답도 전날 세션에 속하므로 구간 끝을 잘라냅니다.
    """
    day_start, day_end = day_bounds(chat_date, tz)
    day_last = day_end - timedelta(microseconds=1)
    start = min(max(first_at, day_start), day_last)
    end = max(min(last_at, day_last), start)
    return start, end


async def save_day_summary(
    db,
    user_id: str,
    chat_date: date,
    messages: List[ChatMessageSchema],
    output: "DailySummaryOutput",
    now: datetime
) -> ChatDaySummarySchema:
    """Summary Builder 결과 저장

    time_range는 첫/마지막 메시지 시각을 chat_date 하루 구간 안으로 맞춰 기록하여
    get_day_summary의 날짜 구간 조회에 항상 걸리도록 합니다.

    Args:
        db: Database 인스턴스
        user_id: 사용자 ID
        chat_date: 요약 대상 세션 날짜
        messages: 요약 대상 메시지 (created_at 오름차순, 1개 이상)
        output: LLM 요약 결과
        now: 서비스 시계 기준 현재 시각 (시간대 + created_at)

    Returns:
        ChatDaySummarySchema: 저장된 요약 행
    """
    range_start, range_end = clamp_to_day(
        chat_date, now.tzinfo, messages[0].created_at, messages[-1].created_at
    )
    summary = await db.insert_day_summary(ChatDaySummarySchema(
        user_id=user_id,
        time_range_start=range_start,
        time_range_end=range_end,
        summary=output.summary,
        emotional_trend=output.emotional_trend,
        key_topics=output.key_topics,
        open_loops=output.open_loops,
        message_count=len(messages),
        created_at=now,
    ))
    logger.info(
        f"[SummaryRepo] 일일 요약 저장 완료: {user_id} {chat_date} "
        f"(messages={len(messages)}, topics={len(output.key_topics)})"
    )
    return summary
