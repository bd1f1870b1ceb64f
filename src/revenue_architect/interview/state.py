"""Turn state schema and the client-facing turn result."""

from __future__ import annotations

from typing import Any, Literal, TypedDict

from pydantic import BaseModel

from revenue_architect.interview.responses import GeneratorReply, Option
from revenue_architect.interview.snapshot import Attachment, CompanySnapshot, SiteSnapshot
from revenue_architect.session import Session

Mode = Literal["buttons", "mixed"]


class TurnResult(BaseModel):
    step_id: str
    message: str
    mode: Mode
    options: list[Option]
    allow_text: bool
    session: Session
    current_phase: str
    turn_count: int
    confidence_state: dict[str, int]

    def to_payload(self) -> dict[str, Any]:
        """Wire payload; the session goes out under ``session_data``."""
        return {
            "step_id": self.step_id,
            "message": self.message,
            "mode": self.mode,
            "options": [option.model_dump() for option in self.options],
            "allow_text": self.allow_text,
            "session_data": self.session.to_wire(),
            "current_phase": self.current_phase,
            "turn_count": self.turn_count,
            "confidence_state": self.confidence_state,
        }


class InterviewState(TypedDict, total=False):
    """State that flows through every node of the turn graph.

    Fields use ``total=False`` so nodes can return partial updates
    (only the keys they modify).
    """

    # Input
    session: Session
    choice: str
    attachments: list[Attachment]
    website: str
    description: str
    site: SiteSnapshot | None
    company: CompanySnapshot | None

    # After open_turn
    attachment_block: str

    # After draft_reply
    reply: GeneratorReply
    used_fallback: bool

    # After finalize_turn / request_report
    result: TurnResult
