"""컴패니언 응답 생성 (순수 LLM 호출만)"""
from typing import List, Optional
from langchain_core.messages import SystemMessage, HumanMessage, AIMessage, BaseMessage
from langsmith import traceable
import logging

from ..prompt.companion_prompt import (
    COMPANION_SYSTEM_PROMPT,
    FAST_REPLY_INSTRUCTION,
    DEEP_REPLY_INSTRUCTION,
    MEMORY_CONTEXT_BLOCK,
)
from ..database.schemas import ChatMessageSchema
from ..utils.schemas import ReasoningRequest

logger = logging.getLogger(__name__)


def to_chat_history(messages: List[ChatMessageSchema]) -> List[BaseMessage]:
    """저장된 메시지 → LangChain 메시지 (user → Human, companion → AI)"""
    history = []
    for message in messages:
        if message.sender == "user":
            history.append(HumanMessage(content=message.content))
        else:
            history.append(AIMessage(content=message.content))
    return history


def build_system_prompt(request: ReasoningRequest) -> str:
    """경로별 응답 스타일 + 메모리 컨텍스트(있을 때만)를 붙인 시스템 프롬프트"""
    instruction = DEEP_REPLY_INSTRUCTION if request.path == "deep" else FAST_REPLY_INSTRUCTION
    system_prompt = COMPANION_SYSTEM_PROMPT + instruction
    if request.context:
        system_prompt += MEMORY_CONTEXT_BLOCK.format(context=request.context)
    return system_prompt


@traceable(name="generate_companion_reply")
async def generate_companion_reply(
    request: ReasoningRequest,
    llm,
    history: Optional[List[BaseMessage]] = None
) -> str:
    """추론 백엔드 호출

    Args:
        request: {message, context, path}
        llm: 경로에 맞는 LLM 인스턴스
        history: 오늘 대화 최근 메시지

    Returns:
        str: 컴패니언 응답 텍스트
    """
    response = await llm.ainvoke([
        SystemMessage(content=build_system_prompt(request)),
        *(history or []),
        HumanMessage(content=request.message)
    ])
    reply = str(response.content).strip()
    logger.info(f"[CompanionReply] 응답 생성 완료 (path={request.path}, length={len(reply)})")
    return reply
