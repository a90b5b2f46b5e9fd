"""Session Lifecycle - 일일 세션 rollover 및 오늘 메시지 관리"""
from .lifecycle import DailySessionManager, SessionState, MESSAGE_SENDERS

__all__ = [
    "DailySessionManager",
    "SessionState",
    "MESSAGE_SENDERS",
]
