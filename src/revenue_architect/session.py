"""Session value — the whole interview state, passed in and returned each turn.

A Session is immutable; every helper returns a new one. The camelCase
dump (``to_wire``) is the contract with clients and must round-trip
losslessly through ``Session.model_validate``.
"""

from __future__ import annotations

from typing import Any, Iterable, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from revenue_architect.catalog import PHASE_ORDER
from revenue_architect.profile import Profile, apply_updates

Role = Literal["user", "assistant"]

# Milestone flags the generator may raise through ``phase_signals``
SIGNAL_FLAGS: dict[str, str] = {
    "welcome_done": "introduction_done",
    "introduction_done": "introduction_done",
    "diagnosis_presented": "diagnosis_presented",
    "diagnosis_validated": "diagnosis_validated",
}


class TranscriptEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    role: Role
    text: str = ""


class Session(BaseModel):
    """Interview state: phase position, counters, milestones, transcript, profile."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )

    current_phase: str = PHASE_ORDER[0]
    phase_turns: int = 0
    total_turns: int = 0
    introduction_done: bool = Field(
        default=False,
        validation_alias=AliasChoices("introductionDone", "welcomeDone", "introduction_done"),
        serialization_alias="introductionDone",
    )
    diagnosis_presented: bool = False
    diagnosis_validated: bool = False
    transcript: tuple[TranscriptEntry, ...] = ()
    profile: Profile = Field(default_factory=Profile)
    scraped_summary: str = ""
    resolved_stage: str | None = None

    @classmethod
    def from_wire(cls, data: dict[str, Any] | None) -> "Session":
        """Build a Session from a client payload; ``None`` starts a new one."""
        if not data:
            return cls()
        return cls.model_validate(data)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


def new_session() -> Session:
    return Session()


def count_turn(session: Session) -> Session:
    """Bump both the total and the in-phase turn counters."""
    return session.model_copy(update={
        "total_turns": session.total_turns + 1,
        "phase_turns": session.phase_turns + 1,
    })


def append_entry(session: Session, role: Role, text: str) -> Session:
    entry = TranscriptEntry(role=role, text=text)
    return session.model_copy(update={"transcript": (*session.transcript, entry)})


def update_profile(session: Session, updates: dict[str, Any] | None) -> Session:
    profile = apply_updates(session.profile, updates)
    if profile is session.profile:
        return session
    return session.model_copy(update={"profile": profile})


def apply_signals(session: Session, signals: dict[str, Any] | None) -> Session:
    """Raise milestone flags signalled ``True``; flags never go back to False."""
    if not isinstance(signals, dict):
        return session
    raised = {
        SIGNAL_FLAGS[name]: True
        for name, value in signals.items()
        if value is True and name in SIGNAL_FLAGS
    }
    if not raised:
        return session
    return session.model_copy(update=raised)


def user_texts(transcript: Iterable[TranscriptEntry]) -> list[str]:
    return [entry.text for entry in transcript if entry.role == "user"]
