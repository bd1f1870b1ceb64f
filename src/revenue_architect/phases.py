"""Phase engine — the guarded, linear state machine over interview phases."""

from __future__ import annotations

import logging
from typing import Mapping

from revenue_architect.catalog import PHASES, PhaseDefinition
from revenue_architect.profile import is_present, missing_fields
from revenue_architect.session import Session

logger = logging.getLogger(__name__)


class PhaseEngine:
    """Decides when a session may leave its current phase and moves it on.

    The phase table is injected so tests can run the engine over a
    hand-built sequence; the default is the interview's ``PHASES``.
    """

    def __init__(self, phases: Mapping[str, PhaseDefinition] = PHASES) -> None:
        self._phases = phases

    def definition(self, session: Session) -> PhaseDefinition | None:
        return self._phases.get(session.current_phase)

    def missing_checklist(self, session: Session) -> list[str]:
        """Checklist fields of the current phase that are still empty."""
        phase = self.definition(session)
        if phase is None:
            return []
        return missing_fields(session.profile, phase.checklist)

    def can_advance(self, session: Session) -> bool:
        phase = self.definition(session)
        if phase is None:
            return False

        if session.phase_turns < phase.min_turns:
            return False

        if phase.terminal:
            return False

        if phase.milestones:
            return all(getattr(session, flag, False) for flag in phase.milestones) and all(
                is_present(session.profile, name) for name in phase.gate_fields
            )

        # Every checklist item, not a majority
        return all(is_present(session.profile, name) for name in phase.checklist)

    def advance(self, session: Session) -> Session:
        """Move to the next phase if the guard passes; otherwise return *session*."""
        if not self.can_advance(session):
            return session

        phase = self._phases[session.current_phase]
        logger.info(
            "Phase %s -> %s after %d turn(s)",
            phase.id,
            phase.next,
            session.phase_turns,
        )
        return session.model_copy(update={"current_phase": phase.next, "phase_turns": 0})
