from langchain_google_vertexai import ChatVertexAI
from ..config.config import (
    FAST_MODEL_NAME,
    FAST_TEMPERATURE,
    FAST_MAX_TOKENS,
    DEEP_MODEL_NAME,
    DEEP_TEMPERATURE,
    DEEP_MAX_TOKENS,
    SUMMARY_MODEL_NAME,
    SUMMARY_TEMPERATURE,
    SUMMARY_MAX_TOKENS,
)


# Vertex AI 모델 설정 (credentials는 환경변수에서 자동 로드)
FAST_MODEL_CONFIG = {
    "model_name": FAST_MODEL_NAME,
    "temperature": FAST_TEMPERATURE,
    "max_output_tokens": FAST_MAX_TOKENS,
}

DEEP_MODEL_CONFIG = {
    "model_name": DEEP_MODEL_NAME,
    "temperature": DEEP_TEMPERATURE,
    "max_output_tokens": DEEP_MAX_TOKENS,
}

SUMMARY_MODEL_CONFIG = {
    "model_name": SUMMARY_MODEL_NAME,
    "temperature": SUMMARY_TEMPERATURE,
    "max_output_tokens": SUMMARY_MAX_TOKENS,
}


# =============================================================================
# LLM 인스턴스 캐싱 (싱글톤 패턴)
# =============================================================================

_cached_fast_llm = None
_cached_deep_llm = None
_cached_summary_llm = None


def get_fast_llm() -> ChatVertexAI:
    """fast 경로 응답용 LLM 인스턴스 반환 (캐시됨)"""
    global _cached_fast_llm
    if _cached_fast_llm is None:
        _cached_fast_llm = ChatVertexAI(**FAST_MODEL_CONFIG)
    return _cached_fast_llm


def get_deep_llm() -> ChatVertexAI:
    """deep 경로 응답용 LLM 인스턴스 반환 (캐시됨)"""
    global _cached_deep_llm
    if _cached_deep_llm is None:
        _cached_deep_llm = ChatVertexAI(**DEEP_MODEL_CONFIG)
    return _cached_deep_llm


def get_summary_llm() -> ChatVertexAI:
    """일일 요약용 LLM 인스턴스 반환 (캐시됨)"""
    global _cached_summary_llm
    if _cached_summary_llm is None:
        _cached_summary_llm = ChatVertexAI(**SUMMARY_MODEL_CONFIG)
    return _cached_summary_llm
