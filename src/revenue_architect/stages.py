"""Growth-stage classification of free-text stage descriptions."""

from __future__ import annotations

import re
from typing import Literal

StageKey = Literal["pre_seed_idea", "seed_startup", "early_scale", "expansion_enterprise"]

STAGE_KEYS: tuple[StageKey, ...] = (
    "pre_seed_idea",
    "seed_startup",
    "early_scale",
    "expansion_enterprise",
)
DEFAULT_STAGE: StageKey = "seed_startup"

# Checked in order; the first stage with a matching phrase wins. Phrases
# are written in normalized form (lower-case, punctuation as spaces).
STAGE_KEYWORDS: tuple[tuple[StageKey, tuple[str, ...]], ...] = (
    ("pre_seed_idea", (
        "pre seed", "preseed", "idea", "concept", "pre revenue", "prerevenue",
        "just started", "no revenue", "prototype",
    )),
    ("seed_startup", (
        "seed", "startup", "early", "pre series a", "angel",
        "bootstrap", "bootstrapped",
    )),
    ("early_scale", (
        "series a", "growth", "scaling", "scale", "growing", "scaleup", "scale up",
    )),
    ("expansion_enterprise", (
        "series b", "series c", "series d", "enterprise", "expansion", "mature",
        "ipo", "late stage",
    )),
)

_PATTERNS: tuple[tuple[StageKey, re.Pattern[str]], ...] = tuple(
    (
        key,
        re.compile(r"\b(?:" + "|".join(re.escape(p) for p in phrases) + r")\b"),
    )
    for key, phrases in STAGE_KEYWORDS
)


def normalize(text: str) -> str:
    """Lower-case, turn punctuation into spaces, collapse whitespace."""
    return " ".join(re.sub(r"[^a-z0-9]+", " ", text.lower()).split())


def resolve_stage(raw: str | None) -> StageKey:
    """Map a stage description to one of the four stage keys.

    Canonical keys are returned unchanged; empty or unrecognised text
    resolves to ``seed_startup``.
    """
    if not raw:
        return DEFAULT_STAGE
    raw = raw.strip()
    if raw in STAGE_KEYS:
        return raw  # type: ignore[return-value]

    text = normalize(raw)
    for key, pattern in _PATTERNS:
        if pattern.search(text):
            return key
    return DEFAULT_STAGE
