"""Configuration module

이 모듈은 애플리케이션의 모든 설정 값을 중앙에서 관리합니다.
"""

from datetime import datetime, timezone, timedelta

from .business_config import (
    LIFE_SUMMARY_TTL,
    YESTERDAY_SUMMARY_TTL,
    MIN_MEMORY_IMPORTANCE,
    MAX_IMPORTANT_MEMORIES,
    FOCUS_LOOKBACK_DAYS,
    MAX_RECENT_DAY_SUMMARIES,
    FOCUS_KEYWORDS,
    MAX_GOALS,
    MAX_HABITS,
    MAX_STUDY_FOCUS,
    MAX_PREFERENCES,
    DEFAULT_MOOD_PATTERN,
    DEFAULT_COMMUNICATION_STYLE,
    MAX_OPEN_LOOPS,
    MAX_CONTEXT_LINES,
    DEEP_MESSAGE_LENGTH_THRESHOLD,
    MAX_HISTORY_MESSAGES,
)
from .config import (
    STORE_TIMEOUT_SECONDS,
    ROLLOVER_CHECK_INTERVAL_SECONDS,
    APP_UTC_OFFSET_HOURS,
    LOG_LEVEL,
)

# 서비스 기준 시간대 (기본 KST = UTC+9)
APP_TZ = timezone(timedelta(hours=APP_UTC_OFFSET_HOURS))


def get_now():
    """서비스 시간대 기준 현재 datetime 반환 (timezone-aware)"""
    return datetime.now(APP_TZ)


__all__ = [
    "LIFE_SUMMARY_TTL",
    "YESTERDAY_SUMMARY_TTL",
    "MIN_MEMORY_IMPORTANCE",
    "MAX_IMPORTANT_MEMORIES",
    "FOCUS_LOOKBACK_DAYS",
    "MAX_RECENT_DAY_SUMMARIES",
    "FOCUS_KEYWORDS",
    "MAX_GOALS",
    "MAX_HABITS",
    "MAX_STUDY_FOCUS",
    "MAX_PREFERENCES",
    "DEFAULT_MOOD_PATTERN",
    "DEFAULT_COMMUNICATION_STYLE",
    "MAX_OPEN_LOOPS",
    "MAX_CONTEXT_LINES",
    "DEEP_MESSAGE_LENGTH_THRESHOLD",
    "MAX_HISTORY_MESSAGES",
    "STORE_TIMEOUT_SECONDS",
    "ROLLOVER_CHECK_INTERVAL_SECONDS",
    "APP_UTC_OFFSET_HOURS",
    "LOG_LEVEL",
    "APP_TZ",
    "get_now",
]
