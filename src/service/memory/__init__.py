"""Memory Cache Layer - 라이프/어제 요약 캐시 및 AI 컨텍스트"""
from .cache import CacheEntry
from .life_summary import summarize_life_memories, extract_focus_topics, dedupe_and_cap
from .engine import MemoryEngine, render_context

__all__ = [
    "CacheEntry",
    "summarize_life_memories",
    "extract_focus_topics",
    "dedupe_and_cap",
    "MemoryEngine",
    "render_context",
]
