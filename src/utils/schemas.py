"""AI Service Layer Schemas

메모리 엔진과 AI 호출(LLM)의 Input/Output을 명확히 정의하여
데이터 레이어(Repository)와 비즈니스 로직(Service)을 분리합니다.
"""
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, List, Literal, Tuple
from datetime import date

from ..config import DEFAULT_MOOD_PATTERN, DEFAULT_COMMUNICATION_STYLE
from ..database.schemas import DailyChatSessionSchema, ChatMessageSchema


ResponsePath = Literal["fast", "deep"]


# ============================================
# 메모리 컨텍스트 스키마
# ============================================

class LifeMemorySummary(BaseModel):
    """장기 기억 집계 결과 (부분 수정 없이 재빌드 시 통째로 교체)"""
    model_config = ConfigDict(frozen=True)

    goals: List[str] = Field(default_factory=list)  # 최대 5개
    habits: List[str] = Field(default_factory=list)  # 최대 5개
    study_focus: List[str] = Field(default_factory=list)  # 최대 3개
    communication_style: str = DEFAULT_COMMUNICATION_STYLE
    mood_pattern: str = DEFAULT_MOOD_PATTERN
    preferences: List[str] = Field(default_factory=list)  # 최대 5개


class ChatDaySummary(BaseModel):
    """하루 대화 요약 (엔진 입장에서는 읽기 전용)"""
    model_config = ConfigDict(frozen=True)

    chat_date: date
    summary_text: str
    emotional_trend: Optional[str] = None
    key_topics: List[str] = Field(default_factory=list)
    open_loops: List[str] = Field(default_factory=list)


class MemoryContext(BaseModel):
    """loadMemoryContext 결과 - getContextForAI의 입력"""
    life_summary: LifeMemorySummary = Field(default_factory=LifeMemorySummary)
    yesterday_summary: Optional[ChatDaySummary] = None
    active_goals: List[str] = Field(default_factory=list)
    is_loaded: bool = False


# ============================================
# 세션 조회 스키마
# ============================================

class ArchivedChatSession(DailyChatSessionSchema):
    """보관 세션 행 (읽기 전용 사본)"""
    model_config = ConfigDict(frozen=True)


class ArchivedChatMessage(ChatMessageSchema):
    """보관 메시지 행 (읽기 전용 사본)"""
    model_config = ConfigDict(frozen=True)


class ArchivedSession(BaseModel):
    """지난 날짜 세션 (읽기 전용 - 어떤 수정 연산도 허용되지 않음)

    session/messages는 저장소 행을 받아 frozen 사본으로 바꿔 보관합니다.
    """
    model_config = ConfigDict(frozen=True)

    session: ArchivedChatSession
    messages: Tuple[ArchivedChatMessage, ...] = ()
    summary: Optional[ChatDaySummary] = None
    is_readonly: Literal[True] = True

    @field_validator("session", mode="before")
    @classmethod
    def _freeze_session(cls, value):
        if isinstance(value, BaseModel):
            return value.model_dump()
        return value

    @field_validator("messages", mode="before")
    @classmethod
    def _freeze_messages(cls, value):
        return tuple(
            message.model_dump() if isinstance(message, BaseModel) else message
            for message in value or ()
        )


# ============================================
# Reasoning Backend 입출력 스키마
# ============================================

class ReasoningRequest(BaseModel):
    """외부 추론 백엔드로 전달되는 요청"""
    message: str
    context: str = ""
    path: ResponsePath = "fast"


class DailySummaryOutput(BaseModel):
    """일일 요약 생성 결과 (Structured Output용)"""
    summary: str = Field(description="Two to four sentence digest of the day's conversation")
    emotional_trend: Optional[str] = Field(default=None, description="Overall emotional direction of the day")
    key_topics: List[str] = Field(default_factory=list, description="Main topics discussed")
    open_loops: List[str] = Field(default_factory=list, description="Unresolved items worth following up")
