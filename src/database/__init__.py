"""Database module - DB 접근 및 복합 쿼리"""

from .database import Database
from .errors import StoreError, StoreTimeoutError

# Schemas
from .schemas import (
    DailyChatSessionSchema,
    ChatMessageSchema,
    ChatDaySummarySchema,
    LifeMemorySchema,
)

# Session Repository
from .session_repository import (
    ensure_today_session,
    RolloverConflictError,
)

# Summary Repository
from .summary_repository import (
    day_bounds,
    clamp_to_day,
    to_chat_day_summary,
    get_summary_for_date,
    save_day_summary,
)

__all__ = [
    # Database class
    "Database",
    "StoreError",
    "StoreTimeoutError",

    # Schemas
    "DailyChatSessionSchema",
    "ChatMessageSchema",
    "ChatDaySummarySchema",
    "LifeMemorySchema",

    # Session Repository
    "ensure_today_session",
    "RolloverConflictError",

    # Summary Repository
    "day_bounds",
    "clamp_to_day",
    "to_chat_day_summary",
    "get_summary_for_date",
    "save_day_summary",
]
