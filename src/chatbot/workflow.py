"""
LangGraph 워크플로우 - 컨텍스트 조립 후 fast/deep 경로 분기
"""

from functools import partial
from langgraph.graph import StateGraph, END
from .state import CompanionState
from .nodes import assemble_context_node, route_by_path, fast_reply_node, deep_reply_node


def build_companion_graph(assembler, fast_llm, deep_llm):
    """컴패니언 응답 워크플로우 그래프 구성

    START → assemble_context_node ─┬─ fast → fast_reply_node → END
                                   └─ deep → deep_reply_node → END
    """

    # StateGraph 생성
    workflow = StateGraph(CompanionState)

    workflow.add_node(
        "assemble_context_node",
        partial(assemble_context_node, assembler=assembler)
    )
    workflow.add_node("fast_reply_node", partial(fast_reply_node, llm=fast_llm))
    workflow.add_node("deep_reply_node", partial(deep_reply_node, llm=deep_llm))

    # 시작점 설정
    workflow.set_entry_point("assemble_context_node")

    # path에 따라 분기
    workflow.add_conditional_edges(
        "assemble_context_node",
        route_by_path,
        {"fast": "fast_reply_node", "deep": "deep_reply_node"}
    )
    workflow.add_edge("fast_reply_node", END)
    workflow.add_edge("deep_reply_node", END)

    return workflow.compile()
