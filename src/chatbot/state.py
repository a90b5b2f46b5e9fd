"""
LangGraph용 대화 상태 관리
"""

from typing import List, Optional, TypedDict
from langchain_core.messages import BaseMessage

from ..utils.schemas import ReasoningRequest, ResponsePath


class CompanionState(TypedDict):
    """컴패니언 응답 워크플로우 상태"""
    user_id: str
    message: str
    recent_turns: List[BaseMessage]  # 오늘 대화 최근 메시지 (현재 메시지 제외)

    # assemble_context_node에서 채움
    request: Optional[ReasoningRequest]
    path: Optional[ResponsePath]

    ai_response: str
