"""Rule-based feasibility checks over the collected profile.

Each rule looks at a handful of fields and emits at most one flag. Rules
are independent and run in a fixed order, so the flag list is stable for
a given profile. A rule that needs a number it cannot parse is skipped.
"""

from __future__ import annotations

import re
from typing import Callable, Literal

from pydantic import BaseModel, ConfigDict

from revenue_architect.benchmarks import StageBenchmarks
from revenue_architect.parsing import parse_number
from revenue_architect.profile import Profile
from revenue_architect.stages import resolve_stage

Category = Literal["contradiction", "anti_pattern", "risk", "structural"]
Severity = Literal["medium", "high"]


class FeasibilityFlag(BaseModel):
    model_config = ConfigDict(frozen=True)

    category: Category
    severity: Severity
    issue: str
    detail: str
    recommendation: str


_ENTERPRISE_TOOLS = re.compile(
    r"salesforce|hubspot pro|hubspot enterprise|marketo|outreach|salesloft|gong|6sense"
)
_OUTBOUND = re.compile(r"outbound|abm|account.based")
_BOOTSTRAPPED = re.compile(r"bootstrap|self.funded|no funding", re.IGNORECASE)
# "io" is Italian for "me"
_FOUNDER = re.compile(r"\b(?:founder|ceo|co-founder|io|myself)\b", re.IGNORECASE)
_SCALING = re.compile(r"scaling|growth|capacity", re.IGNORECASE)
_ACQUISITION = re.compile(r"lead|acquisition|pipeline|traffic", re.IGNORECASE)

DEFAULT_TOOL_CEILING = 200


def _count(value: float) -> str:
    return f"{value:g}"


def _budget_vs_growth(profile: Profile, stage_data: StageBenchmarks | None) -> FeasibilityFlag | None:
    if profile.budget_level.strip().lower() != "limited":
        return None
    growth = parse_number(profile.growth_target)
    if growth is None or growth <= 100:
        return None
    return FeasibilityFlag(
        category="contradiction",
        severity="high",
        issue="High growth target with limited budget",
        detail=(
            f'Growth target "{profile.growth_target}" paired with "limited" budget is '
            "unrealistic without external funding or radical efficiency gains."
        ),
        recommendation=(
            "Either adjust growth expectations to 30-50% or identify budget "
            "reallocation opportunities."
        ),
    )


def _enterprise_tools(profile: Profile, stage_data: StageBenchmarks | None) -> FeasibilityFlag | None:
    if stage_data is None:
        return None
    if resolve_stage(profile.company_stage or profile.stage) != "pre_seed_idea":
        return None
    if not _ENTERPRISE_TOOLS.search((profile.tools + profile.crm).lower()):
        return None

    ceiling = None
    if stage_data.playbook is not None:
        ceiling = stage_data.playbook.budget_guidance.tool_spend.max
    if ceiling is None:
        ceiling = DEFAULT_TOOL_CEILING

    return FeasibilityFlag(
        category="anti_pattern",
        severity="medium",
        issue=f"Enterprise-grade tools at {stage_data.label} stage",
        detail=(
            f"Tools like Salesforce/Marketo/Gong are over-engineered for a {stage_data.label} "
            f"company. Maximum recommended tool spend: €{ceiling:g}/mo."
        ),
        recommendation="Downgrade to founder-appropriate tools: Google Sheets, Notion, HubSpot Free.",
    )


def _tiny_team_outbound(profile: Profile, stage_data: StageBenchmarks | None) -> FeasibilityFlag | None:
    team = parse_number(profile.team_size)
    if team is None or team > 5:
        return None
    if not _OUTBOUND.search(profile.sales_motion.lower()):
        return None
    return FeasibilityFlag(
        category="contradiction",
        severity="medium",
        issue="Outbound/ABM motion with tiny team",
        detail=(
            f"Team of {_count(team)} running outbound/ABM is unsustainable. "
            "ABM requires dedicated SDRs, content, and ops."
        ),
        recommendation="Focus on founder-led inbound or PLG until team grows to 10+.",
    )


def _cash_runway(profile: Profile, stage_data: StageBenchmarks | None) -> FeasibilityFlag | None:
    if not _BOOTSTRAPPED.search(profile.funding):
        return None
    revenue = parse_number(profile.revenue)
    team = parse_number(profile.team_size)
    if revenue is None or team is None:
        return None
    if revenue >= 5000 or team <= 5:
        return None
    return FeasibilityFlag(
        category="risk",
        severity="high",
        issue="Cash runway concern",
        detail=(
            f"Bootstrapped with <€5K MRR and {_count(team)} team members. "
            "Burn likely exceeds revenue significantly."
        ),
        recommendation=(
            "Urgent: reduce to core team (founder + 1-2) or close bridge funding "
            "within 60 days."
        ),
    )


def _founder_bottleneck(profile: Profile, stage_data: StageBenchmarks | None) -> FeasibilityFlag | None:
    if not (_FOUNDER.search(profile.who_closes) and _SCALING.search(profile.main_bottleneck)):
        return None
    return FeasibilityFlag(
        category="structural",
        severity="high",
        issue="Founder bottleneck blocks scaling",
        detail=(
            "Founder is the only closer while scaling is the identified bottleneck. "
            "These are directly connected."
        ),
        recommendation=(
            "First hire should be an AE who can own the sales process end-to-end, not an SDR."
        ),
    )


def _leaky_bucket(profile: Profile, stage_data: StageBenchmarks | None) -> FeasibilityFlag | None:
    if not _ACQUISITION.search(profile.main_bottleneck):
        return None
    churn = parse_number(profile.churn_rate)
    if churn is None or churn <= 5:
        return None
    return FeasibilityFlag(
        category="contradiction",
        severity="high",
        issue="Leaky bucket: high churn with acquisition focus",
        detail=(
            f"Monthly churn of {churn:g}% means the bucket is leaking. Focusing on lead gen "
            "without fixing retention is burning money."
        ),
        recommendation="Fix retention first: aim for <3% monthly churn before scaling acquisition.",
    )


Rule = Callable[[Profile, StageBenchmarks | None], FeasibilityFlag | None]

RULES: tuple[Rule, ...] = (
    _budget_vs_growth,
    _enterprise_tools,
    _tiny_team_outbound,
    _cash_runway,
    _founder_bottleneck,
    _leaky_bucket,
)


def analyze(profile: Profile, stage_data: StageBenchmarks | None = None) -> list[FeasibilityFlag]:
    """Run every rule in order and collect the flags they raise."""
    flags = []
    for rule in RULES:
        flag = rule(profile, stage_data)
        if flag is not None:
            flags.append(flag)
    return flags


def render_flags(flags: list[FeasibilityFlag]) -> str:
    """Text block for the report prompt."""
    if not flags:
        return "No critical contradictions detected."
    return "\n\n".join(
        f"⚠️ [{flag.severity.upper()}] {flag.issue}\n"
        f"   Detail: {flag.detail}\n"
        f"   Recommendation: {flag.recommendation}"
        for flag in flags
    )
