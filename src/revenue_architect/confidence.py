"""Weighted completeness score of a profile (0–100)."""

from __future__ import annotations

from revenue_architect.parsing import round_half_up
from revenue_architect.profile import Profile, is_present

CORE_FIELDS: tuple[str, ...] = (
    "companyName", "businessModel", "stage", "revenue", "teamSize", "funding",
    "icpTitle", "salesMotion", "channels", "avgDealSize",
    "salesProcess", "whoCloses", "mainBottleneck",
)
DEPTH_FIELDS: tuple[str, ...] = (
    "teamRoles", "pricingModel", "revenueGrowth", "competitiveLandscape",
    "icpCompanySize", "icpPainPoints", "bestChannel", "salesCycle",
    "winRate", "lostDealReasons", "churnRate", "crm", "tools",
)
MILESTONE_FIELDS: tuple[str, ...] = ("diagnosedProblems", "userPriority")

TIERS: tuple[tuple[tuple[str, ...], int], ...] = (
    (CORE_FIELDS, 4),
    (DEPTH_FIELDS, 2),
    (MILESTONE_FIELDS, 6),
)

MAX_POINTS = sum(len(fields) * weight for fields, weight in TIERS)


def score(profile: Profile) -> int:
    """Sum of tier weights of present fields, scaled to 0–100.

    Adding facts can only add points, so the score never goes down as the
    interview progresses.
    """
    points = sum(
        weight
        for fields, weight in TIERS
        for name in fields
        if is_present(profile, name)
    )
    return min(100, int(round_half_up(points / MAX_POINTS * 100)))


def confidence_state(profile: Profile) -> dict[str, int]:
    """Client payload shape: ``{"total": score}``."""
    return {"total": score(profile)}
