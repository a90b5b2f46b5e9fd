"""Service Router - 응답 경로 분류 및 추론 요청 조립"""
from .response_path import (
    PathHeuristic,
    DEEP_REQUEST_HEURISTICS,
    match_deep_heuristic,
    is_deep_request,
    get_response_path,
)
from .context_assembler import ContextAssembler

__all__ = [
    "PathHeuristic",
    "DEEP_REQUEST_HEURISTICS",
    "match_deep_heuristic",
    "is_deep_request",
    "get_response_path",
    "ContextAssembler",
]
