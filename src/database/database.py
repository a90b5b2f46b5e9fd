import os
import asyncio
import logging
import uuid
from supabase import create_client, Client
from typing import Optional, Dict, Any, List
from datetime import datetime, date, timezone

from ..config import STORE_TIMEOUT_SECONDS
from .errors import StoreError, StoreTimeoutError
from .schemas import (
    DailyChatSessionSchema,
    ChatMessageSchema,
    ChatDaySummarySchema,
    LifeMemorySchema,
)

logger = logging.getLogger(__name__)

# PostgreSQL unique_violation 코드 - daily_chats UNIQUE(user_id, chat_date)
UNIQUE_VIOLATION_CODE = "23505"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _to_row(model) -> Dict[str, Any]:
    """Pydantic 모델 → Supabase insert/update용 dict (None 필드 제외)"""
    return model.model_dump(mode="json", exclude_none=True)


class Database:
    def __init__(self, timeout: float = STORE_TIMEOUT_SECONDS):
        self.timeout = timeout

        # Supabase 클라이언트 설정
        if os.getenv("SUPABASE_URL") and os.getenv("SUPABASE_ANON_KEY"):
            self.supabase: Optional[Client] = create_client(
                os.getenv("SUPABASE_URL"),
                os.getenv("SUPABASE_ANON_KEY")
            )
            logger.info("✅ [DB] Supabase 클라이언트 초기화 성공")
        else:
            logger.warning("⚠️ [DB] Supabase 환경 변수가 설정되지 않았습니다. 모킹 모드로 실행됩니다.")
            self.supabase = None

        # 모킹 데이터 저장소 (실제 DB 없을 때 사용, id → row)
        self._mock_sessions: Dict[str, DailyChatSessionSchema] = {}
        self._mock_messages: Dict[str, ChatMessageSchema] = {}
        self._mock_summaries: Dict[str, ChatDaySummarySchema] = {}
        self._mock_memories: Dict[str, LifeMemorySchema] = {}

    async def _execute(self, operation: str, query):
        """Supabase 쿼리 실행 (이벤트 루프 밖에서, 타임아웃 적용)

        Raises:
            StoreTimeoutError: STORE_TIMEOUT_SECONDS 초과
            StoreError: 그 외 모든 클라이언트/서버 오류
        """
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(query.execute),
                timeout=self.timeout
            )
        except asyncio.TimeoutError as e:
            logger.error(f"❌ [DB] {operation} 타임아웃 ({self.timeout}초)")
            raise StoreTimeoutError(operation, f"{self.timeout}초 초과") from e
        except Exception as e:
            logger.error(f"❌ [DB] {operation} 실패: {e}")
            raise StoreError(operation, str(e)) from e

    async def test_connection(self) -> bool:
        """데이터베이스 연결 테스트"""
        if not self.supabase:
            logger.info("⚠️ [DB] 모킹 모드에서 실행 중입니다.")
            return True

        try:
            await self._execute(
                "test_connection",
                self.supabase.table("daily_chats").select("id").limit(1)
            )
            logger.info("✅ [DB] Supabase 연결 성공!")
            return True
        except StoreError:
            return False

    # ============================================
    # daily_chats (일일 세션)
    # ============================================

    async def get_session(self, user_id: str, chat_date: date) -> Optional[DailyChatSessionSchema]:
        """(user_id, chat_date) 세션 조회 (없으면 None)"""
        if not self.supabase:
            for session in self._mock_sessions.values():
                if session.user_id == user_id and session.chat_date == chat_date:
                    return session.model_copy()
            return None

        response = await self._execute(
            "get_session",
            self.supabase.table("daily_chats")
            .select("*")
            .eq("user_id", user_id)
            .eq("chat_date", chat_date.isoformat())
            .limit(1)
        )
        return DailyChatSessionSchema(**response.data[0]) if response.data else None

    async def list_active_sessions(self, user_id: str) -> List[DailyChatSessionSchema]:
        """status=active 세션 목록 (정상 상태라면 0~1개)"""
        if not self.supabase:
            return [
                s.model_copy() for s in self._mock_sessions.values()
                if s.user_id == user_id and s.status == "active"
            ]

        response = await self._execute(
            "list_active_sessions",
            self.supabase.table("daily_chats")
            .select("*")
            .eq("user_id", user_id)
            .eq("status", "active")
        )
        return [DailyChatSessionSchema(**row) for row in (response.data or [])]

    async def insert_session(self, session: DailyChatSessionSchema) -> Optional[DailyChatSessionSchema]:
        """세션 생성 - 같은 (user_id, chat_date) 행이 이미 있으면 None 반환

        UNIQUE(user_id, chat_date) 제약으로 중복 생성을 막으므로
        재시도/동시 초기화에서 안전하게 호출할 수 있습니다.
        """
        if not self.supabase:
            for existing in self._mock_sessions.values():
                if existing.user_id == session.user_id and existing.chat_date == session.chat_date:
                    return None
            created = session.model_copy(update={
                "id": session.id or str(uuid.uuid4()),
                "created_at": session.created_at or _utc_now(),
            })
            self._mock_sessions[created.id] = created
            return created.model_copy()

        try:
            response = await self._execute(
                "insert_session",
                self.supabase.table("daily_chats").insert(_to_row(session))
            )
        except StoreError as e:
            if UNIQUE_VIOLATION_CODE in e.detail:
                logger.info(f"[DB] 세션 중복 생성 감지 → 기존 세션 사용: {session.user_id} {session.chat_date}")
                return None
            raise
        return DailyChatSessionSchema(**response.data[0]) if response.data else None

    async def update_session_status(
        self,
        user_id: str,
        exclude_date: date,
        status: str = "archived",
        archived_at: Optional[datetime] = None
    ) -> int:
        """exclude_date가 아닌 active 세션을 일괄 상태 변경 (보관 처리)

        Returns:
            int: 변경된 세션 수
        """
        archived_at = archived_at or _utc_now()

        if not self.supabase:
            changed = 0
            for session_id, session in list(self._mock_sessions.items()):
                if (session.user_id == user_id
                        and session.status == "active"
                        and session.chat_date != exclude_date):
                    self._mock_sessions[session_id] = session.model_copy(update={
                        "status": status,
                        "archived_at": archived_at,
                    })
                    changed += 1
            return changed

        response = await self._execute(
            "update_session_status",
            self.supabase.table("daily_chats")
            .update({"status": status, "archived_at": archived_at.isoformat()})
            .eq("user_id", user_id)
            .eq("status", "active")
            .neq("chat_date", exclude_date.isoformat())
        )
        return len(response.data or [])

    async def update_session_message_count(self, session_id: str, message_count: int) -> None:
        """세션 message_count 갱신"""
        if not self.supabase:
            session = self._mock_sessions.get(session_id)
            if session:
                self._mock_sessions[session_id] = session.model_copy(
                    update={"message_count": message_count}
                )
            return

        await self._execute(
            "update_session_message_count",
            self.supabase.table("daily_chats")
            .update({"message_count": message_count})
            .eq("id", session_id)
        )

    async def link_session_summary(self, session_id: str, summary_id: str) -> None:
        """세션에 일일 요약 연결 (summary_id)"""
        if not self.supabase:
            session = self._mock_sessions.get(session_id)
            if session:
                self._mock_sessions[session_id] = session.model_copy(
                    update={"summary_id": summary_id}
                )
            return

        await self._execute(
            "link_session_summary",
            self.supabase.table("daily_chats")
            .update({"summary_id": summary_id})
            .eq("id", session_id)
        )

    async def list_sessions(self, user_id: str) -> List[DailyChatSessionSchema]:
        """사용자의 모든 세션 (최신 날짜순)"""
        if not self.supabase:
            sessions = [s.model_copy() for s in self._mock_sessions.values() if s.user_id == user_id]
            return sorted(sessions, key=lambda s: s.chat_date, reverse=True)

        response = await self._execute(
            "list_sessions",
            self.supabase.table("daily_chats")
            .select("*")
            .eq("user_id", user_id)
            .order("chat_date", desc=True)
        )
        return [DailyChatSessionSchema(**row) for row in (response.data or [])]

    # ============================================
    # chat_messages (메시지)
    # ============================================

    async def list_messages(self, user_id: str, chat_date: date) -> List[ChatMessageSchema]:
        """특정 날짜의 메시지 (created_at 오름차순)"""
        if not self.supabase:
            messages = [
                m.model_copy() for m in self._mock_messages.values()
                if m.user_id == user_id and m.chat_date == chat_date
            ]
            return sorted(messages, key=lambda m: m.created_at)

        response = await self._execute(
            "list_messages",
            self.supabase.table("chat_messages")
            .select("*")
            .eq("user_id", user_id)
            .eq("chat_date", chat_date.isoformat())
            .order("created_at", desc=False)
        )
        return [ChatMessageSchema(**row) for row in (response.data or [])]

    async def insert_message(self, message: ChatMessageSchema) -> ChatMessageSchema:
        """메시지 저장 (id는 호출자가 생성)"""
        if not self.supabase:
            if message.id in self._mock_messages:
                raise StoreError("insert_message", f"duplicate key {UNIQUE_VIOLATION_CODE}: {message.id}")
            self._mock_messages[message.id] = message.model_copy()
            return message.model_copy()

        response = await self._execute(
            "insert_message",
            self.supabase.table("chat_messages").insert(_to_row(message))
        )
        return ChatMessageSchema(**response.data[0]) if response.data else message

    async def update_message(self, user_id: str, message_id: str, content: str) -> bool:
        """메시지 content 수정

        Returns:
            bool: 수정된 행 존재 여부
        """
        if not self.supabase:
            message = self._mock_messages.get(message_id)
            if not message or message.user_id != user_id:
                return False
            self._mock_messages[message_id] = message.model_copy(update={"content": content})
            return True

        response = await self._execute(
            "update_message",
            self.supabase.table("chat_messages")
            .update({"content": content})
            .eq("id", message_id)
            .eq("user_id", user_id)
        )
        return bool(response.data)

    async def delete_message(self, user_id: str, message_id: str) -> bool:
        """메시지 삭제

        Returns:
            bool: 삭제된 행 존재 여부
        """
        if not self.supabase:
            message = self._mock_messages.get(message_id)
            if not message or message.user_id != user_id:
                return False
            del self._mock_messages[message_id]
            return True

        response = await self._execute(
            "delete_message",
            self.supabase.table("chat_messages")
            .delete()
            .eq("id", message_id)
            .eq("user_id", user_id)
        )
        return bool(response.data)

    async def delete_messages_by_date(self, user_id: str, chat_date: date) -> int:
        """특정 날짜의 메시지 전체 삭제

        Returns:
            int: 삭제된 메시지 수
        """
        if not self.supabase:
            targets = [
                m.id for m in self._mock_messages.values()
                if m.user_id == user_id and m.chat_date == chat_date
            ]
            for message_id in targets:
                del self._mock_messages[message_id]
            return len(targets)

        response = await self._execute(
            "delete_messages_by_date",
            self.supabase.table("chat_messages")
            .delete()
            .eq("user_id", user_id)
            .eq("chat_date", chat_date.isoformat())
        )
        return len(response.data or [])

    # ============================================
    # chat_summaries (일일 요약)
    # ============================================

    async def get_day_summary(
        self,
        user_id: str,
        range_start: datetime,
        range_end: datetime
    ) -> Optional[ChatDaySummarySchema]:
        """[range_start, range_end) 안에 완전히 포함되는 최신 요약 1개"""
        if not self.supabase:
            candidates = [
                s for s in self._mock_summaries.values()
                if s.user_id == user_id
                and s.time_range_start >= range_start
                and s.time_range_end < range_end
            ]
            if not candidates:
                return None
            return max(candidates, key=lambda s: s.created_at).model_copy()

        response = await self._execute(
            "get_day_summary",
            self.supabase.table("chat_summaries")
            .select("*")
            .eq("user_id", user_id)
            .gte("time_range_start", range_start.isoformat())
            .lt("time_range_end", range_end.isoformat())
            .order("created_at", desc=True)
            .limit(1)
        )
        return ChatDaySummarySchema(**response.data[0]) if response.data else None

    async def insert_day_summary(self, summary: ChatDaySummarySchema) -> ChatDaySummarySchema:
        """일일 요약 저장 (Summary Builder 결과)"""
        if not self.supabase:
            created = summary.model_copy(update={
                "id": summary.id or str(uuid.uuid4()),
                "created_at": summary.created_at or _utc_now(),
            })
            self._mock_summaries[created.id] = created
            return created.model_copy()

        response = await self._execute(
            "insert_day_summary",
            self.supabase.table("chat_summaries").insert(_to_row(summary))
        )
        return ChatDaySummarySchema(**response.data[0]) if response.data else summary

    async def list_recent_day_summaries(
        self,
        user_id: str,
        since: datetime,
        limit: int
    ) -> List[ChatDaySummarySchema]:
        """since 이후 생성된 일일 요약 (최신순, 최대 limit개)"""
        if not self.supabase:
            summaries = [
                s.model_copy() for s in self._mock_summaries.values()
                if s.user_id == user_id and s.created_at >= since
            ]
            summaries.sort(key=lambda s: s.created_at, reverse=True)
            return summaries[:limit]

        response = await self._execute(
            "list_recent_day_summaries",
            self.supabase.table("chat_summaries")
            .select("*")
            .eq("user_id", user_id)
            .gte("created_at", since.isoformat())
            .order("created_at", desc=True)
            .limit(limit)
        )
        return [ChatDaySummarySchema(**row) for row in (response.data or [])]

    # ============================================
    # life_memories (장기 기억)
    # ============================================

    async def list_important_memories(
        self,
        user_id: str,
        min_importance: int,
        limit: int
    ) -> List[LifeMemorySchema]:
        """importance_score >= min_importance 기억 (importance 내림차순)"""
        if not self.supabase:
            memories = [
                m.model_copy() for m in self._mock_memories.values()
                if m.user_id == user_id and m.importance_score >= min_importance
            ]
            memories.sort(key=lambda m: m.importance_score, reverse=True)
            return memories[:limit]

        response = await self._execute(
            "list_important_memories",
            self.supabase.table("life_memories")
            .select("*")
            .eq("user_id", user_id)
            .gte("importance_score", min_importance)
            .order("importance_score", desc=True)
            .limit(limit)
        )
        return [LifeMemorySchema(**row) for row in (response.data or [])]

    async def list_memories(
        self,
        user_id: str,
        memory_type: Optional[str] = None,
        limit: int = 50
    ) -> List[LifeMemorySchema]:
        """기억 목록 (importance → 최근 참조 순)"""
        if not self.supabase:
            memories = [
                m.model_copy() for m in self._mock_memories.values()
                if m.user_id == user_id and (memory_type is None or m.memory_type == memory_type)
            ]
            memories.sort(key=lambda m: (m.importance_score, m.last_referenced_at), reverse=True)
            return memories[:limit]

        query = self.supabase.table("life_memories").select("*").eq("user_id", user_id)
        if memory_type:
            query = query.eq("memory_type", memory_type)
        response = await self._execute(
            "list_memories",
            query.order("importance_score", desc=True)
            .order("last_referenced_at", desc=True)
            .limit(limit)
        )
        return [LifeMemorySchema(**row) for row in (response.data or [])]

    async def add_memory(self, memory: LifeMemorySchema) -> LifeMemorySchema:
        """장기 기억 추가"""
        if not self.supabase:
            now = _utc_now()
            created = memory.model_copy(update={
                "id": memory.id or str(uuid.uuid4()),
                "last_referenced_at": memory.last_referenced_at or now,
                "created_at": memory.created_at or now,
                "updated_at": now,
            })
            self._mock_memories[created.id] = created
            return created.model_copy()

        response = await self._execute(
            "add_memory",
            self.supabase.table("life_memories").insert(_to_row(memory))
        )
        return LifeMemorySchema(**response.data[0]) if response.data else memory

    async def touch_memory(self, user_id: str, memory_id: str, referenced_at: Optional[datetime] = None) -> bool:
        """대화에서 참조된 기억의 last_referenced_at 갱신"""
        referenced_at = referenced_at or _utc_now()

        if not self.supabase:
            memory = self._mock_memories.get(memory_id)
            if not memory or memory.user_id != user_id:
                return False
            self._mock_memories[memory_id] = memory.model_copy(
                update={"last_referenced_at": referenced_at}
            )
            return True

        response = await self._execute(
            "touch_memory",
            self.supabase.table("life_memories")
            .update({"last_referenced_at": referenced_at.isoformat()})
            .eq("id", memory_id)
            .eq("user_id", user_id)
        )
        return bool(response.data)

    async def delete_memory(self, user_id: str, memory_id: str) -> bool:
        """장기 기억 삭제"""
        if not self.supabase:
            memory = self._mock_memories.get(memory_id)
            if not memory or memory.user_id != user_id:
                return False
            del self._mock_memories[memory_id]
            return True

        response = await self._execute(
            "delete_memory",
            self.supabase.table("life_memories")
            .delete()
            .eq("id", memory_id)
            .eq("user_id", user_id)
        )
        return bool(response.data)

    async def search_memories(self, user_id: str, query: str, limit: int = 20) -> List[LifeMemorySchema]:
        """title/content 부분 일치 검색 (대소문자 무시, importance 내림차순)"""
        needle = query.strip()
        if not needle:
            return []

        if not self.supabase:
            lowered = needle.lower()
            memories = [
                m.model_copy() for m in self._mock_memories.values()
                if m.user_id == user_id
                and (lowered in m.title.lower() or lowered in m.content.lower())
            ]
            memories.sort(key=lambda m: m.importance_score, reverse=True)
            return memories[:limit]

        # PostgREST or 필터 구분자 제거
        safe = needle.replace(",", " ").replace("(", " ").replace(")", " ")
        response = await self._execute(
            "search_memories",
            self.supabase.table("life_memories")
            .select("*")
            .eq("user_id", user_id)
            .or_(f"title.ilike.%{safe}%,content.ilike.%{safe}%")
            .order("importance_score", desc=True)
            .limit(limit)
        )
        return [LifeMemorySchema(**row) for row in (response.data or [])]
