"""Validation of generator replies, button sanitizing and deterministic fallbacks."""

from __future__ import annotations

import logging
from typing import Any

from pydantic import BaseModel, ConfigDict

from revenue_architect.phases import PhaseEngine
from revenue_architect.session import Session

logger = logging.getLogger(__name__)

MAX_OPTIONS = 6
MIN_OPTIONS = 2
MAX_KEY_LENGTH = 80
MAX_LABEL_LENGTH = 120


class Option(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: str
    label: str


class GeneratorReply(BaseModel):
    """One structured reply from the generator, after shape checks."""

    message: str = ""
    options: list[Any] = []
    profile_updates: dict[str, Any] = {}
    phase_signals: dict[str, Any] = {}

    @classmethod
    def parse(cls, raw: Any) -> "GeneratorReply":
        """Accept any value; keep only the parts with the expected type."""
        if not isinstance(raw, dict):
            return cls()
        message = raw.get("message")
        options = raw.get("options")
        updates = raw.get("profile_updates")
        signals = raw.get("phase_signals")
        return cls(
            message=message.strip() if isinstance(message, str) else "",
            options=options if isinstance(options, list) else [],
            profile_updates=updates if isinstance(updates, dict) else {},
            phase_signals=signals if isinstance(signals, dict) else {},
        )


# ---------------------------------------------------------------------------
# Options
# ---------------------------------------------------------------------------

_WELCOME_DEFAULTS = (
    Option(key="correct", label="Yes, mostly correct"),
    Option(key="partial", label="Partially — let me clarify"),
    Option(key="wrong", label="Not quite right"),
)
_PRE_FINISH_DEFAULTS = (
    Option(key="generate_report", label="📥 Generate Strategic Growth Plan"),
    Option(key="add_context", label="Add more context first"),
)
_GENERIC_DEFAULTS = (
    Option(key="continue", label="Continue →"),
    Option(key="explain", label="Let me explain in detail"),
)


def default_options(phase: str) -> list[Option]:
    if phase == "welcome":
        return list(_WELCOME_DEFAULTS)
    if phase == "pre_finish":
        return list(_PRE_FINISH_DEFAULTS)
    return list(_GENERIC_DEFAULTS)


def sanitize_options(raw: Any, phase: str) -> list[Option]:
    """Clamp generator buttons; fall back to the phase defaults.

    Entries need a non-empty string ``key`` and ``label``; both are
    truncated and at most six are kept. Fewer than two valid entries means
    the whole list is replaced.
    """
    if not isinstance(raw, list) or not raw:
        return default_options(phase)

    valid = [
        Option(key=item["key"][:MAX_KEY_LENGTH], label=item["label"][:MAX_LABEL_LENGTH])
        for item in raw
        if isinstance(item, dict)
        and isinstance(item.get("key"), str)
        and isinstance(item.get("label"), str)
        and item["key"]
        and item["label"]
    ][:MAX_OPTIONS]

    if len(valid) < MIN_OPTIONS:
        return default_options(phase)
    return valid


# ---------------------------------------------------------------------------
# Fallback
# ---------------------------------------------------------------------------


def _options(*pairs: tuple[str, str]) -> tuple[Option, ...]:
    return tuple(Option(key=key, label=label) for key, label in pairs)


# Question asked when the generator is unavailable, by first missing field
FALLBACK_QUESTIONS: dict[str, tuple[str, tuple[Option, ...]]] = {
    "businessModel": (
        "Let's talk about your revenue model. How do you charge customers?",
        _options(("saas", "SaaS subscription"), ("services", "Services"),
                 ("marketplace", "Marketplace"), ("other", "Other")),
    ),
    "stage": (
        "What growth stage are you at?",
        _options(("pre", "Pre-revenue"), ("early", "Early (< €10K MRR)"),
                 ("growing", "Growing (€10-50K)"), ("scaling", "Scaling (€50K+)")),
    ),
    "revenue": (
        "What's your current monthly recurring revenue?",
        _options(("low", "< €5K MRR"), ("mid", "€5-20K MRR"),
                 ("high", "€20-100K MRR"), ("top", "€100K+ MRR")),
    ),
    "teamSize": (
        "How large is your team?",
        _options(("solo", "1-2 people"), ("small", "3-10"), ("mid", "10-50"), ("large", "50+")),
    ),
    "funding": (
        "What's your funding status?",
        _options(("boot", "Bootstrapped"), ("seed", "Seed"), ("a", "Series A+"), ("other", "Other")),
    ),
    "icpTitle": (
        "Who is your ideal buyer?",
        _options(("smb", "SMB owners"), ("mid", "Mid-market"), ("ent", "Enterprise"), ("dev", "Technical")),
    ),
    "salesMotion": (
        "How do you sell?",
        _options(("in", "Inbound"), ("out", "Outbound"), ("plg", "Product-led"), ("mix", "Mix")),
    ),
    "channels": (
        "Which channels work best?",
        _options(("seo", "Content/SEO"), ("social", "LinkedIn"), ("paid", "Paid ads"), ("ref", "Referrals")),
    ),
    "avgDealSize": (
        "What's your average deal size?",
        _options(("s", "< €1K"), ("m", "€1-10K"), ("l", "€10-50K"), ("xl", "€50K+")),
    ),
    "salesProcess": (
        "Describe your sales process.",
        _options(("none", "No process"), ("basic", "Basic"), ("doc", "Documented"), ("self", "Self-serve")),
    ),
    "whoCloses": (
        "Who closes deals?",
        _options(("f", "Founder"), ("fm", "Mostly founder"), ("t", "Sales team"), ("s", "Self-serve")),
    ),
    "mainBottleneck": (
        "Where's the biggest bottleneck?",
        _options(("l", "Lead gen"), ("c", "Conversion"), ("ch", "Churn"), ("sc", "Scaling")),
    ),
}

FALLBACK_DEFAULT = ("Tell me more about your business.", _options(("c", "Continue")))


def fallback_reply(session: Session, engine: PhaseEngine | None = None) -> GeneratorReply:
    """Deterministic reply asking for the first missing checklist field.

    It carries no profile updates and no signals, so a fallback turn can
    never move a milestone.
    """
    engine = engine or PhaseEngine()
    missing = engine.missing_checklist(session)
    message, options = FALLBACK_DEFAULT
    if missing:
        message, options = FALLBACK_QUESTIONS.get(missing[0], FALLBACK_DEFAULT)
    return GeneratorReply(
        message=message,
        options=[option.model_dump() for option in options],
    )
