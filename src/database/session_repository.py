"""일일 세션 관련 복합 DB 로직 (rollover)"""
from datetime import date, datetime
import logging

from .errors import StoreError
from .schemas import DailyChatSessionSchema

logger = logging.getLogger(__name__)


class RolloverConflictError(StoreError):
    """보관 처리 후에도 다른 날짜의 active 세션이 남아 있음 (다음 initialize에서 재시도)"""


async def ensure_today_session(
    db,
    user_id: str,
    today: date,
    now: datetime
) -> DailyChatSessionSchema:
    """오늘 세션 조회 또는 rollover 후 생성

    각 단계는 독립적으로 재시도 가능:
    1. (user_id, today) 세션이 있으면 그대로 재개
    2. 없으면 오늘이 아닌 active 세션을 모두 archived로 변경
    3. active 세션이 남아있지 않을 때만 새 세션 insert
       (UNIQUE(user_id, chat_date) 충돌 시 승자의 세션을 다시 조회해서 재개)

    Args:
        db: Database 인스턴스
        user_id: 사용자 ID
        today: 서비스 시간대 기준 오늘 날짜
        now: archived_at에 기록할 현재 시각

    Returns:
        DailyChatSessionSchema: 오늘의 active 세션

    Raises:
        StoreError: 저장소 오류 (호출자가 재시도)
        RolloverConflictError: 보관되지 않은 이전 active 세션이 남아있음
    """
    existing = await db.get_session(user_id, today)
    if existing:
        logger.info(f"[SessionRepo] 오늘 세션 재개: {user_id} {today} (message_count={existing.message_count})")
        return existing

    archived_count = await db.update_session_status(
        user_id,
        exclude_date=today,
        status="archived",
        archived_at=now
    )
    if archived_count:
        logger.info(f"[SessionRepo] 이전 세션 보관 완료: {user_id} ({archived_count}개)")

    # insert 조건: 다른 날짜의 active 세션이 없어야 함
    active_sessions = await db.list_active_sessions(user_id)
    for session in active_sessions:
        if session.chat_date == today:
            logger.info(f"[SessionRepo] 동시 초기화로 생성된 오늘 세션 재개: {user_id}")
            return session
    if active_sessions:
        stale_dates = [s.chat_date.isoformat() for s in active_sessions]
        raise RolloverConflictError("ensure_today_session", f"보관되지 않은 active 세션: {stale_dates}")

    created = await db.insert_session(DailyChatSessionSchema(
        user_id=user_id,
        chat_date=today,
        status="active",
        message_count=0
    ))
    if created:
        logger.info(f"✨ [SessionRepo] 새 일일 세션 생성: {user_id} {today}")
        return created

    # 다른 인스턴스가 먼저 생성 → 승자의 세션 재개
    winner = await db.get_session(user_id, today)
    if not winner:
        raise StoreError("ensure_today_session", "세션 생성 충돌 후 재조회 실패")
    logger.info(f"[SessionRepo] 세션 생성 경쟁에서 짐 → 기존 세션 재개: {user_id} {today}")
    return winner
