"""공용 테스트 fixture

- Database는 Supabase 환경 변수를 지운 모킹 모드로 생성
- 시계는 FakeClock으로 주입해서 날짜 변경/TTL 경과를 직접 제어
- Vertex AI 모델 대신 langchain_core의 FakeListChatModel 사용
"""
from datetime import datetime, timedelta

import pytest
from langchain_core.language_models.fake_chat_models import FakeListChatModel
from langchain_core.runnables import RunnableLambda

from src.config import APP_TZ
from src.database import Database, ChatDaySummarySchema, LifeMemorySchema
from src.utils.schemas import DailySummaryOutput
from src.chatbot.graph_manager import CompanionManager

USER_ID = "user-1"


class FakeClock:
    """호출 가능한 고정 시계 (advance로 시간 이동)"""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock(datetime(2026, 3, 10, 10, 0, tzinfo=APP_TZ))


@pytest.fixture
def db(monkeypatch):
    monkeypatch.delenv("SUPABASE_URL", raising=False)
    monkeypatch.delenv("SUPABASE_ANON_KEY", raising=False)
    return Database()


@pytest.fixture
def user_id():
    return USER_ID


@pytest.fixture
def make_memory(db, user_id):
    """장기 기억 저장 헬퍼"""
    async def _make(memory_type, title, content="", importance_score=7):
        return await db.add_memory(LifeMemorySchema(
            user_id=user_id,
            memory_type=memory_type,
            title=title,
            content=content or title,
            importance_score=importance_score,
        ))
    return _make


@pytest.fixture
def make_day_summary(db, user_id):
    """chat_date 저녁 대화를 요약한 일일 요약 저장 헬퍼"""
    async def _make(chat_date, summary="Talked about the week.", key_topics=None,
                    open_loops=None, created_at=None):
        start = datetime(chat_date.year, chat_date.month, chat_date.day, 20, 0, tzinfo=APP_TZ)
        return await db.insert_day_summary(ChatDaySummarySchema(
            user_id=user_id,
            time_range_start=start,
            time_range_end=start + timedelta(hours=1),
            summary=summary,
            key_topics=key_topics or [],
            open_loops=open_loops or [],
            created_at=created_at or start + timedelta(hours=2),
        ))
    return _make


@pytest.fixture
def fast_llm():
    return FakeListChatModel(responses=["Haha nice, how did it go?"])


@pytest.fixture
def deep_llm():
    return FakeListChatModel(responses=["Sure! Step 1: split the list in half."])


@pytest.fixture
def summary_llm():
    """structured output LLM 대용 - 항상 같은 DailySummaryOutput 반환"""
    return RunnableLambda(lambda messages: DailySummaryOutput(
        summary="Prepared for the python course exam and felt nervous.",
        emotional_trend="anxious but motivated",
        key_topics=["python course", "exam"],
        open_loops=["finish chapter 3", "call mom", "book dentist"],
    ))


@pytest.fixture
async def manager(db, clock, fast_llm, deep_llm, summary_llm):
    companion_manager = CompanionManager(
        db,
        clock=clock,
        fast_llm=fast_llm,
        deep_llm=deep_llm,
        summary_llm=summary_llm,
        watch_rollover=False,
    )
    yield companion_manager
    await companion_manager.shutdown()
