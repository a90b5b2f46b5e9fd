"""일일 요약 생성 서비스 (순수 LLM 호출만)

DB 접근 로직 없음 - 호출자가 준비한 메시지를 받아서 LLM 호출만 수행
"""
from datetime import date
from typing import List
from langchain_core.messages import SystemMessage, HumanMessage
from ...prompt.daily_summary_prompt import (
    DAILY_SUMMARY_SYSTEM_PROMPT,
    DAILY_SUMMARY_USER_PROMPT,
)
from ...database.schemas import ChatMessageSchema
from ...utils.schemas import DailySummaryOutput
from langsmith import traceable
import logging

logger = logging.getLogger(__name__)

SENDER_LABELS = {"user": "User", "companion": "Companion"}


def format_transcript(messages: List[ChatMessageSchema]) -> str:
    """메시지 목록 → "User: ..." / "Companion: ..." 형식의 대화록"""
    return "\n".join(
        f"{SENDER_LABELS.get(m.sender, m.sender)}: {m.content}"
        for m in messages
    )


@traceable(name="generate_daily_summary")
async def generate_daily_summary(
    messages: List[ChatMessageSchema],
    chat_date: date,
    llm
) -> DailySummaryOutput:
    """일일 요약 생성 (순수 LLM 호출)

    Args:
        messages: 해당 날짜 메시지 (created_at 오름차순)
        chat_date: 요약 대상 날짜
        llm: DailySummaryOutput structured output이 적용된 LLM

    Returns:
        DailySummaryOutput: LLM이 생성한 요약 결과
    """
    try:
        summary_prompt = DAILY_SUMMARY_USER_PROMPT.format(
            chat_date=chat_date.isoformat(),
            conversation_turns=format_transcript(messages)
        )

        output = await llm.ainvoke([
            SystemMessage(content=DAILY_SUMMARY_SYSTEM_PROMPT),
            HumanMessage(content=summary_prompt)
        ])

        logger.info(
            f"[DailySummary] 요약 생성 완료 "
            f"({chat_date}, messages={len(messages)}, topics={len(output.key_topics)})"
        )
        return output

    except Exception as e:
        logger.error(f"[DailySummary] 요약 생성 실패: {e}")
        raise
