"""Utilities module"""

from .schemas import (
    ResponsePath,
    LifeMemorySummary,
    ChatDaySummary,
    MemoryContext,
    ArchivedSession,
    ReasoningRequest,
    DailySummaryOutput,
)
from .exceptions import (
    CompanionError,
    NotAuthenticatedError,
    SessionNotReadyError,
    MessageNotSentError,
    MessageSyncError,
    MessageNotFoundError,
)

__all__ = [
    "ResponsePath",
    "LifeMemorySummary",
    "ChatDaySummary",
    "MemoryContext",
    "ArchivedSession",
    "ReasoningRequest",
    "DailySummaryOutput",
    "CompanionError",
    "NotAuthenticatedError",
    "SessionNotReadyError",
    "MessageNotSentError",
    "MessageSyncError",
    "MessageNotFoundError",
]
