"""일일 대화 세션 라이프사이클 관리

- 사용자당 하루 1개의 active 세션 보장 (날짜 변경 시 이전 세션 보관)
- 오늘 메시지 목록과 현재 세션 참조를 소유
- 메시지 연산은 낙관적 업데이트 후 저장, 실패 시 이전 값으로 롤백

상태 전이:
    UNINITIALIZED → INITIALIZING → ACTIVE | ERROR
    ACTIVE → ACTIVE (같은 날 재호출, no-op)
    ACTIVE → INITIALIZING → ACTIVE (프로세스 유지 중 날짜 변경)
"""
import asyncio
import logging
import uuid
from contextlib import suppress
from datetime import date, datetime
from enum import Enum
from typing import Awaitable, Callable, List, Optional

from ...config import get_now, ROLLOVER_CHECK_INTERVAL_SECONDS
from ...database import (
    StoreError,
    ChatMessageSchema,
    DailyChatSessionSchema,
    ensure_today_session,
    get_summary_for_date,
)
from ...utils.schemas import ArchivedSession
from ...utils.exceptions import (
    NotAuthenticatedError,
    SessionNotReadyError,
    MessageNotSentError,
    MessageSyncError,
    MessageNotFoundError,
)

logger = logging.getLogger(__name__)

MESSAGE_SENDERS = ("user", "companion")


class SessionState(str, Enum):
    """세션 매니저 상태"""
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    ACTIVE = "active"
    ERROR = "error"


class DailySessionManager:
    """사용자 1명의 오늘 세션과 메시지 목록 관리"""

    def __init__(
        self,
        db,
        user_id: str,
        clock: Callable[[], datetime] = get_now,
        on_rollover: Optional[Callable[[date], Awaitable[None]]] = None
    ):
        if not user_id:
            raise NotAuthenticatedError("로그인된 사용자가 없습니다.")

        self.db = db
        self.user_id = user_id
        self.clock = clock
        self.on_rollover = on_rollover

        self.state = SessionState.UNINITIALIZED
        self.session: Optional[DailyChatSessionSchema] = None
        self.messages: List[ChatMessageSchema] = []
        self.error: Optional[str] = None

        self._init_lock = asyncio.Lock()
        self._watch_task: Optional[asyncio.Task] = None

    def today(self) -> date:
        """서비스 시간대 기준 오늘 날짜"""
        return self.clock().date()

    @property
    def is_active(self) -> bool:
        return self.state == SessionState.ACTIVE and self.session is not None

    # ============================================
    # 초기화 / rollover
    # ============================================

    async def initialize(self) -> SessionState:
        """오늘 세션 준비 (멱등)

        이미 오늘 세션이 ACTIVE면 no-op. 동시 호출은 진행 중인 초기화가
        끝날 때까지 기다린 뒤 그 결과를 그대로 사용합니다.
        저장소 오류는 ERROR 상태로 기록되며 예외로 전파되지 않습니다.
        """
        async with self._init_lock:
            today = self.today()
            if self.is_active and self.session.chat_date == today:
                return self.state

            previous_state = self.state
            self.state = SessionState.INITIALIZING
            self.error = None
            logger.info(f"[SessionManager] 초기화 시작: {self.user_id} {today} (이전 상태={previous_state.value})")

            try:
                session = await ensure_today_session(self.db, self.user_id, today, self.clock())
                messages = await self.db.list_messages(self.user_id, today)
            except StoreError as e:
                logger.error(f"❌ [SessionManager] 초기화 실패: {self.user_id} - {e}")
                self.state = SessionState.ERROR
                self.error = "채팅을 불러오지 못했습니다. 잠시 후 다시 시도해주세요."
                return self.state

            self.session = session
            self.messages = messages
            self.state = SessionState.ACTIVE
            logger.info(f"✅ [SessionManager] 세션 준비 완료: {self.user_id} {today} (messages={len(messages)})")
            return self.state

    async def check_rollover(self) -> bool:
        """날짜가 바뀌었으면 다시 초기화

        Returns:
            bool: 새 날짜 세션으로 전환되었는지 여부
        """
        if not self.is_active:
            return False

        today = self.today()
        previous_date = self.session.chat_date
        if previous_date == today:
            return False

        logger.info(f"📅 [SessionManager] 날짜 변경 감지: {previous_date} → {today}")
        await self.initialize()
        rolled = self.is_active and self.session.chat_date == today

        if rolled and self.on_rollover:
            await self.on_rollover(today)
        return rolled

    def start_rollover_watch(self, interval: float = ROLLOVER_CHECK_INTERVAL_SECONDS) -> None:
        """주기적 날짜 변경 체크 시작 (이미 실행 중이면 무시)"""
        if self._watch_task and not self._watch_task.done():
            return
        self._watch_task = asyncio.create_task(self._watch_rollover(interval))

    async def stop_rollover_watch(self) -> None:
        if not self._watch_task:
            return
        self._watch_task.cancel()
        with suppress(asyncio.CancelledError):
            await self._watch_task
        self._watch_task = None

    async def _watch_rollover(self, interval: float) -> None:
        while True:
            await asyncio.sleep(interval)
            if self.state == SessionState.ERROR:
                # 초기화 실패 상태는 다음 요청을 기다리지 않고 재시도
                logger.info(f"[SessionManager] 초기화 재시도: {self.user_id}")
                await self.initialize()
            else:
                await self.check_rollover()

    # ============================================
    # 오늘 메시지 연산 (낙관적 업데이트 + 롤백)
    # ============================================

    def _require_session(self) -> DailyChatSessionSchema:
        if not self.is_active:
            raise SessionNotReadyError("세션이 아직 준비되지 않았습니다.")
        return self.session

    def _index_of(self, message_id: str) -> int:
        for index, message in enumerate(self.messages):
            if message.id == message_id:
                return index
        raise MessageNotFoundError(f"오늘 메시지에 없는 id: {message_id}")

    async def _sync_message_count(self) -> None:
        """message_count를 메모리 목록 길이로 맞춤 (실패해도 메시지 변경은 유지)"""
        count = len(self.messages)
        self.session = self.session.model_copy(update={"message_count": count})
        try:
            await self.db.update_session_message_count(self.session.id, count)
        except StoreError as e:
            logger.warning(f"⚠️ [SessionManager] message_count 갱신 실패 (count={count}): {e}")

    async def add_message(self, content: str, sender: str) -> ChatMessageSchema:
        """오늘 세션에 메시지 추가

        Raises:
            MessageNotSentError: 저장 실패 (로컬 추가는 롤백됨, 재시도 가능)
        """
        if sender not in MESSAGE_SENDERS:
            raise ValueError(f"지원하지 않는 sender: {sender}")
        session = self._require_session()

        message = ChatMessageSchema(
            id=str(uuid.uuid4()),
            user_id=self.user_id,
            chat_date=session.chat_date,
            sender=sender,
            content=content,
            created_at=self.clock()
        )
        self.messages.append(message)

        try:
            await self.db.insert_message(message)
        except StoreError as e:
            self.messages = [m for m in self.messages if m.id != message.id]
            logger.error(f"❌ [SessionManager] 메시지 저장 실패 → 롤백: {message.id} - {e}")
            raise MessageNotSentError("메시지를 보내지 못했습니다. 다시 시도해주세요.") from e

        await self._sync_message_count()
        return message

    async def update_message(self, message_id: str, content: str) -> ChatMessageSchema:
        """메시지 content 수정 (스트리밍 응답 확정 등)

        Raises:
            MessageSyncError: 저장 실패 (이전 content로 롤백됨)
        """
        self._require_session()
        index = self._index_of(message_id)
        previous = self.messages[index]
        updated = previous.model_copy(update={"content": content})
        self.messages[index] = updated

        try:
            await self.db.update_message(self.user_id, message_id, content)
        except StoreError as e:
            with suppress(MessageNotFoundError):
                self.messages[self._index_of(message_id)] = previous
            logger.error(f"❌ [SessionManager] 메시지 수정 실패 → 롤백: {message_id} - {e}")
            raise MessageSyncError("메시지를 수정하지 못했습니다. 다시 시도해주세요.") from e

        return updated

    async def delete_message(self, message_id: str) -> None:
        """메시지 삭제

        Raises:
            MessageSyncError: 저장 실패 (원래 위치로 복원됨)
        """
        self._require_session()
        index = self._index_of(message_id)
        removed = self.messages.pop(index)

        try:
            await self.db.delete_message(self.user_id, message_id)
        except StoreError as e:
            self.messages.insert(min(index, len(self.messages)), removed)
            logger.error(f"❌ [SessionManager] 메시지 삭제 실패 → 복원: {message_id} - {e}")
            raise MessageSyncError("메시지를 삭제하지 못했습니다. 다시 시도해주세요.") from e

        await self._sync_message_count()

    async def clear_today_chat(self) -> None:
        """오늘 메시지 전체 삭제 (message_count = 0)

        Raises:
            MessageSyncError: 저장 실패 (삭제 전 목록으로 복원됨)
        """
        session = self._require_session()
        snapshot = list(self.messages)
        self.messages = []

        try:
            deleted = await self.db.delete_messages_by_date(self.user_id, session.chat_date)
        except StoreError as e:
            self.messages = snapshot + self.messages
            logger.error(f"❌ [SessionManager] 오늘 대화 삭제 실패 → 복원: {self.user_id} - {e}")
            raise MessageSyncError("대화를 지우지 못했습니다. 다시 시도해주세요.") from e

        logger.info(f"🗑️ [SessionManager] 오늘 대화 삭제 완료: {self.user_id} ({deleted}개)")
        await self._sync_message_count()

    # ============================================
    # 지난 세션 조회 (읽기 전용)
    # ============================================

    async def get_archived_session(self, chat_date: date) -> Optional[ArchivedSession]:
        """지난 날짜 세션 + 메시지 + 요약 조회 (읽기 전용 객체)

        Returns:
            Optional[ArchivedSession]: 세션이 없거나 조회 실패 시 None
        """
        if chat_date == self.today():
            raise ValueError("오늘 세션은 보관 세션으로 조회할 수 없습니다.")

        try:
            session = await self.db.get_session(self.user_id, chat_date)
            if not session:
                return None
            messages, summary = await asyncio.gather(
                self.db.list_messages(self.user_id, chat_date),
                get_summary_for_date(self.db, self.user_id, chat_date, self.clock().tzinfo)
            )
        except StoreError as e:
            logger.error(f"❌ [SessionManager] 보관 세션 조회 실패: {chat_date} - {e}")
            return None

        return ArchivedSession(session=session, messages=tuple(messages), summary=summary)

    async def list_sessions(self) -> List[DailyChatSessionSchema]:
        """모든 세션 목록 (최신 날짜순, 조회 실패 시 빈 목록)"""
        try:
            return await self.db.list_sessions(self.user_id)
        except StoreError as e:
            logger.error(f"❌ [SessionManager] 세션 목록 조회 실패: {e}")
            return []
