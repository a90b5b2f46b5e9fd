"""서비스 레이어 - 세션 라이프사이클 / 메모리 캐시 / 라우팅 / 요약"""

# Router
from .router import ContextAssembler, is_deep_request, get_response_path

# Memory
from .memory import MemoryEngine, CacheEntry

# Session
from .session import DailySessionManager, SessionState

# Daily Summary
from .daily import generate_daily_summary

__all__ = [
    # Router
    "ContextAssembler",
    "is_deep_request",
    "get_response_path",
    # Memory
    "MemoryEngine",
    "CacheEntry",
    # Session
    "DailySessionManager",
    "SessionState",
    # Daily
    "generate_daily_summary",
]
