"""Context Assembler - 사용자 메시지 + 메모리 컨텍스트 + 경로를 하나의 요청으로 묶음

상태/캐시/재시도 없음. 캐시는 MemoryEngine, 재시도는 추론 백엔드 책임.
"""
import logging

from ...utils.schemas import ReasoningRequest

logger = logging.getLogger(__name__)


class ContextAssembler:
    def __init__(self, memory_engine: "MemoryEngine"):
        self.memory_engine = memory_engine

    def prepare(self, message: str) -> ReasoningRequest:
        """추론 백엔드로 보낼 {message, context, path} 생성"""
        request = ReasoningRequest(
            message=message,
            context=self.memory_engine.get_context_for_ai(),
            path=self.memory_engine.get_response_path(message),
        )
        logger.info(
            f"[ContextAssembler] 요청 준비: path={request.path}, "
            f"context_lines={len(request.context.splitlines())}"
        )
        return request
