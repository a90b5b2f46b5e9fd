"""
컴패니언 관리 모듈 - 유저별 세션/메모리 엔진/워크플로우 관리
"""

from dataclasses import dataclass
from datetime import date, datetime
from functools import partial
from typing import Any, Callable, Dict, List, Optional
import asyncio
import logging
from langgraph.graph.state import CompiledStateGraph

from .workflow import build_companion_graph
from .state import CompanionState
from .reply_generator import to_chat_history
from ..config import get_now, ROLLOVER_CHECK_INTERVAL_SECONDS, MAX_HISTORY_MESSAGES
from ..database import (
    LifeMemorySchema,
    DailyChatSessionSchema,
    ChatMessageSchema,
    save_day_summary,
    to_chat_day_summary,
)
from ..prompt.companion_prompt import FALLBACK_REPLY
from ..service.memory import MemoryEngine
from ..service.router import ContextAssembler
from ..service.session import DailySessionManager
from ..service.daily import generate_daily_summary
from ..utils.models import get_fast_llm, get_deep_llm, get_summary_llm
from ..utils.schemas import ArchivedSession, ChatDaySummary, DailySummaryOutput
from ..utils.exceptions import NotAuthenticatedError, SessionNotReadyError, MessageNotSentError

logger = logging.getLogger(__name__)


@dataclass
class UserSession:
    """로그인한 사용자 1명의 엔진 묶음 (로그아웃 시 폐기)"""
    user_id: str
    session_manager: DailySessionManager
    memory_engine: MemoryEngine
    assembler: ContextAssembler
    graph: CompiledStateGraph


class CompanionManager:
    """컴패니언 전체 관리 클래스"""

    def __init__(
        self,
        database,
        clock: Callable[[], datetime] = get_now,
        fast_llm=None,
        deep_llm=None,
        summary_llm=None,
        rollover_interval: float = ROLLOVER_CHECK_INTERVAL_SECONDS,
        watch_rollover: bool = True
    ):
        self.db = database
        self.clock = clock
        self.rollover_interval = rollover_interval
        self.watch_rollover = watch_rollover
        self.sessions: Dict[str, UserSession] = {}
        self._lock = asyncio.Lock()

        # None이면 첫 사용 시 Vertex AI 모델 생성 (캐시됨)
        self._fast_llm = fast_llm
        self._deep_llm = deep_llm
        self._summary_llm = summary_llm

    def _get_summary_llm(self):
        if self._summary_llm is None:
            self._summary_llm = get_summary_llm().with_structured_output(DailySummaryOutput)
        return self._summary_llm

    # ============================================
    # 세션 생성 / 폐기
    # ============================================

    async def open_session(self, user_id: str) -> UserSession:
        """사용자 엔진 묶음 가져오기 (없으면 생성) + 오늘 세션/메모리 컨텍스트 준비"""
        if not user_id:
            raise NotAuthenticatedError("로그인된 사용자가 없습니다.")

        async with self._lock:
            user_session = self.sessions.get(user_id)
            if user_session is None:
                user_session = self._create_user_session(user_id)
                self.sessions[user_id] = user_session

        session_manager = user_session.session_manager
        await session_manager.check_rollover()
        await asyncio.gather(
            session_manager.initialize(),
            user_session.memory_engine.load_memory_context(),
        )
        return user_session

    def _create_user_session(self, user_id: str) -> UserSession:
        session_manager = DailySessionManager(
            self.db,
            user_id,
            clock=self.clock,
            on_rollover=partial(self._on_rollover, user_id)
        )
        memory_engine = MemoryEngine(self.db, user_id, clock=self.clock)
        assembler = ContextAssembler(memory_engine)
        graph = build_companion_graph(
            assembler,
            self._fast_llm or get_fast_llm(),
            self._deep_llm or get_deep_llm()
        )

        if self.watch_rollover:
            session_manager.start_rollover_watch(self.rollover_interval)

        logger.info(f"✨ [CompanionManager] 유저 세션 생성: {user_id}")
        return UserSession(
            user_id=user_id,
            session_manager=session_manager,
            memory_engine=memory_engine,
            assembler=assembler,
            graph=graph,
        )

    async def _on_rollover(self, user_id: str, today: date) -> None:
        """날짜 변경 후: 어제 요약 캐시 무효화 + 메모리 컨텍스트 다시 로드"""
        user_session = self.sessions.get(user_id)
        if not user_session:
            return
        user_session.memory_engine.invalidate_yesterday_summary()
        await user_session.memory_engine.load_memory_context()
        logger.info(f"📅 [CompanionManager] rollover 후 메모리 컨텍스트 갱신: {user_id} {today}")

    async def close_session(self, user_id: str) -> bool:
        """로그아웃 - 엔진 묶음 폐기"""
        user_session = self.sessions.pop(user_id, None)
        if not user_session:
            return False
        await user_session.session_manager.stop_rollover_watch()
        logger.info(f"[CompanionManager] 유저 세션 폐기: {user_id}")
        return True

    async def shutdown(self) -> None:
        for user_id in list(self.sessions.keys()):
            await self.close_session(user_id)

    # ============================================
    # 대화
    # ============================================

    async def handle_conversation(self, user_id: str, message: str) -> Dict[str, Any]:
        """대화 처리 - 워크플로우 진입점

        Raises:
            SessionNotReadyError: 오늘 세션 준비 실패 (재시도 가능)
            MessageNotSentError: 사용자 메시지 저장 실패 (재시도 가능)
        """
        user_session = await self.open_session(user_id)
        session_manager = user_session.session_manager
        if not session_manager.is_active:
            raise SessionNotReadyError(session_manager.error or "세션이 아직 준비되지 않았습니다.")

        recent_turns = to_chat_history(session_manager.messages[-MAX_HISTORY_MESSAGES:])
        user_message = await session_manager.add_message(message, "user")

        final_state = await user_session.graph.ainvoke(CompanionState(
            user_id=user_id,
            message=message,
            recent_turns=recent_turns,
            request=None,
            path=None,
            ai_response=""
        ))
        reply_text = final_state.get("ai_response") or FALLBACK_REPLY

        reply_id = None
        try:
            reply = await session_manager.add_message(reply_text, "companion")
            reply_id = reply.id
        except MessageNotSentError as e:
            logger.warning(f"⚠️ [CompanionManager] 응답 저장 실패 (응답은 그대로 전달): {e}")

        return {
            "reply": reply_text,
            "path": final_state.get("path") or "fast",
            "chat_date": session_manager.session.chat_date.isoformat(),
            "message_id": user_message.id,
            "reply_id": reply_id,
        }

    # ============================================
    # 오늘 대화 / 지난 세션
    # ============================================

    async def get_today(self, user_id: str) -> Dict[str, Any]:
        user_session = await self.open_session(user_id)
        session_manager = user_session.session_manager
        return {
            "state": session_manager.state.value,
            "error": session_manager.error,
            "session": session_manager.session,
            "messages": list(session_manager.messages),
        }

    async def update_message(self, user_id: str, message_id: str, content: str) -> ChatMessageSchema:
        user_session = await self.open_session(user_id)
        return await user_session.session_manager.update_message(message_id, content)

    async def delete_message(self, user_id: str, message_id: str) -> None:
        user_session = await self.open_session(user_id)
        await user_session.session_manager.delete_message(message_id)

    async def clear_today_chat(self, user_id: str) -> None:
        user_session = await self.open_session(user_id)
        await user_session.session_manager.clear_today_chat()

    async def list_sessions(self, user_id: str) -> List[DailyChatSessionSchema]:
        user_session = await self.open_session(user_id)
        return await user_session.session_manager.list_sessions()

    async def get_archived_session(self, user_id: str, chat_date: date) -> Optional[ArchivedSession]:
        user_session = await self.open_session(user_id)
        return await user_session.session_manager.get_archived_session(chat_date)

    # ============================================
    # 일일 요약 (Summary Builder)
    # ============================================

    async def summarize_day(self, user_id: str, chat_date: date) -> Optional[ChatDaySummary]:
        """특정 날짜 대화 요약 생성 → 저장 → 세션 연결 → 캐시 무효화

        Returns:
            Optional[ChatDaySummary]: 생성된 요약 (메시지가 없으면 None)
        """
        user_session = await self.open_session(user_id)

        messages = await self.db.list_messages(user_id, chat_date)
        if not messages:
            logger.info(f"[CompanionManager] 요약할 메시지 없음: {user_id} {chat_date}")
            return None

        output = await generate_daily_summary(messages, chat_date, self._get_summary_llm())
        row = await save_day_summary(self.db, user_id, chat_date, messages, output, self.clock())

        session = await self.db.get_session(user_id, chat_date)
        if session and session.id and row.id:
            await self.db.link_session_summary(session.id, row.id)

        # 새 요약은 어제 요약/학습 포커스 양쪽에 영향
        user_session.memory_engine.invalidate()
        return to_chat_day_summary(row, chat_date)

    # ============================================
    # 장기 기억 (life memory graph)
    # ============================================

    def _invalidate_life_summary(self, user_id: str) -> None:
        user_session = self.sessions.get(user_id)
        if user_session:
            user_session.memory_engine.invalidate_life_summary()

    async def list_memories(
        self,
        user_id: str,
        memory_type: Optional[str] = None,
        limit: int = 50
    ) -> List[LifeMemorySchema]:
        return await self.db.list_memories(user_id, memory_type=memory_type, limit=limit)

    async def add_memory(
        self,
        user_id: str,
        memory_type: str,
        title: str,
        content: str,
        importance_score: int = 5,
        metadata: Optional[Dict[str, Any]] = None
    ) -> LifeMemorySchema:
        if not user_id:
            raise NotAuthenticatedError("로그인된 사용자가 없습니다.")

        memory = await self.db.add_memory(LifeMemorySchema(
            user_id=user_id,
            memory_type=memory_type,
            title=title,
            content=content,
            importance_score=importance_score,
            metadata=metadata or {},
            last_referenced_at=self.clock(),
        ))
        self._invalidate_life_summary(user_id)
        logger.info(f"[CompanionManager] 장기 기억 추가: {user_id} ({memory_type}, importance={importance_score})")
        return memory

    async def touch_memory(self, user_id: str, memory_id: str) -> bool:
        return await self.db.touch_memory(user_id, memory_id, self.clock())

    async def delete_memory(self, user_id: str, memory_id: str) -> bool:
        deleted = await self.db.delete_memory(user_id, memory_id)
        if deleted:
            self._invalidate_life_summary(user_id)
        return deleted

    async def search_memories(self, user_id: str, query: str, limit: int = 20) -> List[LifeMemorySchema]:
        return await self.db.search_memories(user_id, query, limit=limit)
