"""Daily Summary - 하루 대화 요약 생성"""
from .summary_generator import generate_daily_summary, format_transcript

__all__ = [
    "generate_daily_summary",
    "format_transcript",
]
