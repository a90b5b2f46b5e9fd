from .state import CompanionState
from .reply_generator import generate_companion_reply
from ..prompt.companion_prompt import FALLBACK_REPLY
import logging
from langsmith import traceable

logger = logging.getLogger(__name__)


# =============================================================================
# 1. Assemble Context Node - 메모리 컨텍스트 + 응답 경로 결정
# =============================================================================

@traceable(name="assemble_context_node")
async def assemble_context_node(state: CompanionState, assembler) -> dict:
    """ContextAssembler로 {message, context, path} 준비"""
    request = assembler.prepare(state["message"])
    logger.info(f"🔀 [AssembleContext] path={request.path}")
    return {"request": request, "path": request.path}


def route_by_path(state: CompanionState) -> str:
    """assemble_context_node 이후 분기: "fast" | "deep" """
    return state.get("path") or "fast"


# =============================================================================
# 2. Reply Nodes - 경로별 LLM 호출
# =============================================================================

async def _reply(state: CompanionState, llm, tag: str) -> dict:
    try:
        reply = await generate_companion_reply(
            state["request"],
            llm,
            state.get("recent_turns") or []
        )
    except Exception as e:
        logger.error(f"[{tag}] ❌ 응답 생성 실패 → fallback 응답: {e}")
        reply = ""
    return {"ai_response": reply or FALLBACK_REPLY}


@traceable(name="fast_reply_node")
async def fast_reply_node(state: CompanionState, llm) -> dict:
    """짧은 잡담/빠른 응답"""
    return await _reply(state, llm, "FastReply")


@traceable(name="deep_reply_node")
async def deep_reply_node(state: CompanionState, llm) -> dict:
    """설명/분석/단계별 도움 등 깊은 응답"""
    return await _reply(state, llm, "DeepReply")
