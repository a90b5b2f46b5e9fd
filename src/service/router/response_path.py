"""Fast/Deep 응답 경로 분류

위에서부터 순서대로 평가되는 휴리스틱 테이블. 하나라도 맞으면 deep,
아무것도 맞지 않으면 fast. 어떤 입력에도 예외를 던지지 않습니다.
"""
import re
import logging
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from ...config import DEEP_MESSAGE_LENGTH_THRESHOLD
from ...utils.schemas import ResponsePath

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PathHeuristic:
    """deep 경로 판정 규칙 (이름 + 판정 함수)"""
    name: str
    predicate: Callable[[str], bool]

    def matches(self, message: str) -> bool:
        return self.predicate(message)


def _pattern(regex: str) -> Callable[[str], bool]:
    compiled = re.compile(regex, re.IGNORECASE)
    return lambda message: compiled.search(message) is not None


DEEP_REQUEST_HEURISTICS: Tuple[PathHeuristic, ...] = (
    PathHeuristic("explain_or_teach", _pattern(r"explain|teach|help me (understand|learn)")),
    PathHeuristic("how_or_what_question", _pattern(r"how (does|do|to)|what (is|are)")),
    PathHeuristic("debug_or_code", _pattern(r"debug|fix|code|programming")),
    PathHeuristic("step_by_step", _pattern(r"step by step|in detail|detailed")),
    PathHeuristic("summarize_or_analyze", _pattern(r"summarize|analyze|compare")),
    PathHeuristic("long_message", lambda message: len(message) > DEEP_MESSAGE_LENGTH_THRESHOLD),
)


def match_deep_heuristic(message) -> Optional[str]:
    """처음으로 일치한 휴리스틱 이름 (없으면 None)"""
    if not isinstance(message, str):
        return None
    for heuristic in DEEP_REQUEST_HEURISTICS:
        if heuristic.matches(message):
            return heuristic.name
    return None


def is_deep_request(message) -> bool:
    return match_deep_heuristic(message) is not None


def get_response_path(message) -> ResponsePath:
    """메시지 → "fast" | "deep" """
    matched = match_deep_heuristic(message)
    if matched:
        logger.debug(f"[Router] deep 경로 선택 ({matched})")
        return "deep"
    return "fast"
