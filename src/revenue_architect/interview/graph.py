"""LangGraph state graph for one interview turn.

Flow: open → (report | advance → draft → apply → advance → finalize)
"""

from __future__ import annotations

from langgraph.graph import END, StateGraph

from revenue_architect.interview.nodes import (
    FINISH_CHOICES,
    advance_after_reply,
    advance_before_reply,
    apply_reply,
    draft_reply,
    finalize_turn,
    open_turn,
    request_report,
)
from revenue_architect.interview.snapshot import Attachment, CompanySnapshot, SiteSnapshot
from revenue_architect.interview.state import InterviewState, TurnResult
from revenue_architect.session import Session


def _route_turn(state: InterviewState) -> str:
    """Conditional edge: hand over to the report or run a normal turn."""
    if state.get("choice") in FINISH_CHOICES:
        return "request_report"
    return "advance_before_reply"


def build_graph() -> StateGraph:
    """Build and return the compiled turn graph."""
    graph = StateGraph(InterviewState)

    # Add nodes
    graph.add_node("open_turn", open_turn)
    graph.add_node("request_report", request_report)
    graph.add_node("advance_before_reply", advance_before_reply)
    graph.add_node("draft_reply", draft_reply)
    graph.add_node("apply_reply", apply_reply)
    graph.add_node("advance_after_reply", advance_after_reply)
    graph.add_node("finalize_turn", finalize_turn)

    # Set entry point
    graph.set_entry_point("open_turn")

    # Wire edges
    graph.add_conditional_edges("open_turn", _route_turn)
    graph.add_edge("request_report", END)
    graph.add_edge("advance_before_reply", "draft_reply")
    graph.add_edge("draft_reply", "apply_reply")
    graph.add_edge("apply_reply", "advance_after_reply")
    graph.add_edge("advance_after_reply", "finalize_turn")
    graph.add_edge("finalize_turn", END)

    return graph.compile()


# Module-level compiled graph
interview = build_graph()


def take_turn(
    session: Session | None,
    choice: str,
    *,
    attachments: list[Attachment] | None = None,
    website: str = "",
    description: str = "",
    site: SiteSnapshot | None = None,
    company: CompanySnapshot | None = None,
) -> TurnResult:
    """Run one turn: the session and user input in, the new session and payload out."""
    state = interview.invoke({
        "session": session or Session(),
        "choice": choice,
        "attachments": attachments or [],
        "website": website,
        "description": description,
        "site": site,
        "company": company,
    })
    return state["result"]
