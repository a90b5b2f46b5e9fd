"""애플리케이션 전역 상수 정의

이 파일에 정의된 상수를 변경하면 전체 시스템에 반영됩니다.
"""

from datetime import timedelta

# =============================================================================
# 메모리 캐시 관련 상수
# =============================================================================

LIFE_SUMMARY_TTL = timedelta(hours=24)
"""라이프 요약 캐시 유효 시간
- 장기 기억은 천천히 변하므로 하루 단위로 재계산
- 변경 시 영향: service/memory/engine.py
"""

YESTERDAY_SUMMARY_TTL = timedelta(hours=6)
"""어제 요약 캐시 유효 시간
- 요약 작업 직후 결과가 반영되도록 라이프 요약보다 짧게 유지
- 변경 시 영향: service/memory/engine.py
"""

# =============================================================================
# 라이프 요약 빌드 관련 상수
# =============================================================================

MIN_MEMORY_IMPORTANCE = 5
"""라이프 요약에 포함할 장기 기억의 최소 importance_score (1~10)"""

MAX_IMPORTANT_MEMORIES = 20
"""라이프 요약 빌드 시 조회할 장기 기억 최대 개수 (importance 내림차순)"""

FOCUS_LOOKBACK_DAYS = 14
"""학습 포커스 추출에 사용할 최근 일일 요약 범위 (일)"""

MAX_RECENT_DAY_SUMMARIES = 10
"""학습 포커스 추출 시 조회할 일일 요약 최대 개수"""

FOCUS_KEYWORDS = ("study", "learn", "course", "class", "subject")
"""key_topics 중 학습 포커스로 분류할 키워드 (대소문자 무시, 부분 일치)"""

MAX_GOALS = 5
MAX_HABITS = 5
MAX_STUDY_FOCUS = 3
MAX_PREFERENCES = 5
"""라이프 요약 리스트별 최대 개수
- 변경 시 영향: service/memory/life_summary.py, engine.py (컨텍스트 렌더링)
"""

DEFAULT_MOOD_PATTERN = "neutral"
DEFAULT_COMMUNICATION_STYLE = "balanced"
"""장기 기억이 없을 때 사용하는 기본값
- mood_pattern이 기본값이면 AI 컨텍스트에서 생략됨
"""

# =============================================================================
# AI 컨텍스트 / 라우팅 관련 상수
# =============================================================================

MAX_OPEN_LOOPS = 2
"""AI 컨텍스트에 포함할 어제의 미해결 주제(open loop) 최대 개수"""

MAX_CONTEXT_LINES = 6
"""AI 컨텍스트 최대 줄 수
- 섹션 순서: goals, habits, study focus, mood, yesterday, pending
"""

DEEP_MESSAGE_LENGTH_THRESHOLD = 100
"""이 길이(문자 수)를 초과하는 메시지는 deep path로 분류"""

MAX_HISTORY_MESSAGES = 6
"""응답 생성 시 함께 전달할 오늘 대화의 최근 메시지 수 (현재 메시지 제외)"""
