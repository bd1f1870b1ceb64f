"""Processing nodes for the interview turn graph.

Each node is a function that receives the current ``InterviewState`` and
returns a dict with the keys it wants to update. The Session inside the
state is immutable, so every node that changes it returns a new one.
"""

from __future__ import annotations

import logging
from typing import Any

from revenue_architect.catalog import PHASES
from revenue_architect.confidence import confidence_state
from revenue_architect.exceptions import GenerationError
from revenue_architect.interview.context import SNAPSHOT_INIT, build_turn_prompt
from revenue_architect.interview.responses import GeneratorReply, fallback_reply, sanitize_options
from revenue_architect.interview.snapshot import apply_snapshot, attachment_context, note_attachments
from revenue_architect.interview.state import InterviewState, TurnResult
from revenue_architect.llm import draft_turn
from revenue_architect.phases import PhaseEngine
from revenue_architect.session import append_entry, apply_signals, count_turn, update_profile

logger = logging.getLogger(__name__)

# Choices that end the interview and hand over to report generation
FINISH_CHOICES = frozenset({"generate_report", "update_and_generate"})

# Module-level engine over the default phase table
_engine = PhaseEngine()


# ------------------------------------------------------------------
# Node functions
# ------------------------------------------------------------------


def open_turn(state: InterviewState) -> dict[str, Any]:
    """Count the turn, note attachments and record the user's input.

    ``SNAPSHOT_INIT`` restarts the welcome phase and seeds the profile
    from the snapshot instead of adding a transcript entry.
    """
    session = count_turn(state["session"])
    choice = state.get("choice", "")
    attachments = state.get("attachments") or []
    session = note_attachments(session, attachments)

    if choice == SNAPSHOT_INIT:
        session = session.model_copy(update={"current_phase": "welcome", "phase_turns": 0})
        session = apply_snapshot(
            session,
            website=state.get("website", ""),
            description=state.get("description", ""),
            site=state.get("site"),
            company=state.get("company"),
        )
    elif choice not in FINISH_CHOICES:
        session = append_entry(session, "user", choice)
        # Any reply to the welcome message completes the introduction
        if session.current_phase == "welcome" and session.phase_turns >= 1:
            session = session.model_copy(update={"introduction_done": True})

    return {"session": session, "attachment_block": attachment_context(attachments)}


def advance_before_reply(state: InterviewState) -> dict[str, Any]:
    """Phase check on the user's input, so the reply is drafted for the right phase."""
    if state.get("choice") == SNAPSHOT_INIT:
        return {}
    return {"session": _engine.advance(state["session"])}


def draft_reply(state: InterviewState) -> dict[str, Any]:
    """Ask the generator for the reply; use the fallback question if it fails."""
    session = state["session"]
    prompt = build_turn_prompt(
        session,
        state.get("choice", ""),
        _engine,
        attachments=state.get("attachment_block", ""),
    )

    try:
        reply = GeneratorReply.parse(draft_turn(prompt))
    except GenerationError as e:
        logger.warning("Generator unavailable, using fallback reply: %s", e, extra=e.details)
        return {"reply": fallback_reply(session, _engine), "used_fallback": True}

    if not reply.message:
        logger.warning("Generator returned an empty message, using fallback reply")
        return {"reply": fallback_reply(session, _engine), "used_fallback": True}
    return {"reply": reply, "used_fallback": False}


def apply_reply(state: InterviewState) -> dict[str, Any]:
    """Merge profile updates and milestone signals, then record the reply."""
    reply = state["reply"]
    session = update_profile(state["session"], reply.profile_updates)
    session = apply_signals(session, reply.phase_signals)
    session = append_entry(session, "assistant", reply.message)
    return {"session": session}


def advance_after_reply(state: InterviewState) -> dict[str, Any]:
    return {"session": _engine.advance(state["session"])}


def finalize_turn(state: InterviewState) -> dict[str, Any]:
    """Sanitize buttons, pick the input mode and build the turn result."""
    session = state["session"]
    reply = state["reply"]
    options = sanitize_options(reply.options, session.current_phase)

    offers_report = any(option.key == "generate_report" for option in options)
    mode = "buttons" if session.current_phase == "pre_finish" and offers_report else "mixed"
    confidence = confidence_state(session.profile)

    phase = PHASES.get(session.current_phase)
    logger.info(
        "Turn %d phase=%s phase_turns=%d options=%d confidence=%d%%",
        session.total_turns,
        session.current_phase,
        session.phase_turns,
        len(options),
        confidence["total"],
    )
    return {
        "result": TurnResult(
            step_id=session.current_phase,
            message=reply.message,
            mode=mode,
            options=options,
            allow_text=mode != "buttons",
            session=session,
            current_phase=phase.display if phase else session.current_phase,
            turn_count=session.total_turns,
            confidence_state=confidence,
        )
    }


def request_report(state: InterviewState) -> dict[str, Any]:
    """Finish the interview without calling the generator."""
    session = state["session"]
    logger.info("Report requested after %d turn(s)", session.total_turns)
    return {
        "result": TurnResult(
            step_id="GENERATE",
            message="Generating...",
            mode="buttons",
            options=[],
            allow_text=False,
            session=session,
            current_phase="finish",
            turn_count=session.total_turns,
            confidence_state=confidence_state(session.profile),
        )
    }
