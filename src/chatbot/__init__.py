"""
데일리 컴패니언 챗봇 모듈
LangGraph 기반 fast/deep 응답 워크플로우
"""

from .workflow import build_companion_graph
from .graph_manager import CompanionManager, UserSession

__all__ = ['build_companion_graph', 'CompanionManager', 'UserSession']
__version__ = "1.0.0"
