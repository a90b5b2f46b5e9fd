import os

# 빠른 응답 모델 설정 (fast path, Google Vertex AI)
FAST_MODEL_NAME = "gemini-2.5-flash-lite"
FAST_TEMPERATURE = 0.7
FAST_MAX_TOKENS = 300

# 깊은 응답 모델 설정 (deep path, Google Vertex AI)
DEEP_MODEL_NAME = "gemini-2.5-flash"
DEEP_TEMPERATURE = 0.4
DEEP_MAX_TOKENS = 1200

# 요약 모델 설정 (Google Vertex AI)
SUMMARY_MODEL_NAME = "gemini-2.5-flash-lite"
SUMMARY_TEMPERATURE = 0.0
SUMMARY_MAX_TOKENS = 400

# 원격 저장소 호출 타임아웃 (초) - 초과 시 StoreTimeoutError
STORE_TIMEOUT_SECONDS = float(os.getenv("STORE_TIMEOUT_SECONDS", "8.0"))

# 날짜 변경(rollover) 주기 체크 간격 (초)
ROLLOVER_CHECK_INTERVAL_SECONDS = float(os.getenv("ROLLOVER_CHECK_INTERVAL_SECONDS", "3600"))

# "오늘"을 결정하는 기준 시간대 (UTC 오프셋, 시간 단위)
APP_UTC_OFFSET_HOURS = int(os.getenv("APP_UTC_OFFSET_HOURS", "9"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
