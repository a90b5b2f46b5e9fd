"""Database Pydantic Schemas"""
from pydantic import BaseModel, Field
from typing import Optional, Dict, Any, List, Literal
from datetime import datetime, date


SessionStatus = Literal["active", "archived"]
MessageSender = Literal["user", "companion"]
MemoryType = Literal[
    "person", "goal", "habit", "emotional_pattern",
    "decision", "preference", "routine", "relationship"
]


# ============================================
# 1. daily_chats 테이블 스키마
# ============================================

class DailyChatSessionSchema(BaseModel):
    """daily_chats 테이블 스키마 - (user_id, chat_date)당 1행"""
    id: Optional[str] = None  # UUID
    user_id: str
    chat_date: date  # 생성 후 변경 불가
    status: SessionStatus = "active"
    message_count: int = 0
    summary_id: Optional[str] = None  # chat_summaries의 UUID
    created_at: Optional[datetime] = None
    archived_at: Optional[datetime] = None


# ============================================
# 2. chat_messages 테이블 스키마
# ============================================

class ChatMessageSchema(BaseModel):
    """chat_messages 테이블 스키마 (append-only, content만 수정 가능)"""
    id: str  # UUID (클라이언트에서 생성)
    user_id: str
    chat_date: date  # 소속 세션의 chat_date
    sender: MessageSender
    content: str
    created_at: datetime


# ============================================
# 3. chat_summaries 테이블 스키마
# ============================================

class ChatDaySummarySchema(BaseModel):
    """chat_summaries 테이블 스키마 (Summary Builder가 생성)"""
    id: Optional[str] = None  # UUID
    user_id: str
    time_range_start: datetime
    time_range_end: datetime
    summary: str
    emotional_trend: Optional[str] = None
    key_topics: List[str] = Field(default_factory=list)
    open_loops: List[str] = Field(default_factory=list)
    message_count: int = 0
    created_at: Optional[datetime] = None


# ============================================
# 4. life_memories 테이블 스키마
# ============================================

class LifeMemorySchema(BaseModel):
    """life_memories 테이블 스키마 (장기 기억)"""
    id: Optional[str] = None  # UUID
    user_id: str
    memory_type: MemoryType
    title: str
    content: str
    metadata: Dict[str, Any] = Field(default_factory=dict)
    importance_score: int = Field(default=5, ge=1, le=10)
    last_referenced_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
