"""Field catalog and phase table — the static configuration of the interview.

Everything here is immutable. Field names are the camelCase wire names used
in session payloads and in generator ``profile_updates``; lookups for names
outside the catalog return ``None``/``False`` instead of raising.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Literal, Mapping

FieldKind = Literal["scalar", "list"]


@dataclass(frozen=True)
class FieldSpec:
    name: str
    label: str
    kind: FieldKind = "scalar"


FIELDS: tuple[FieldSpec, ...] = (
    # Company DNA
    FieldSpec("companyName", "Company"),
    FieldSpec("website", "Website"),
    FieldSpec("industry", "Industry"),
    FieldSpec("businessModel", "Business Model"),
    FieldSpec("stage", "Stage"),
    FieldSpec("companyStage", "Company Stage"),
    FieldSpec("revenue", "Revenue"),
    FieldSpec("revenueGrowth", "Revenue Growth"),
    FieldSpec("teamSize", "Team Size"),
    FieldSpec("teamRoles", "Team Roles"),
    FieldSpec("funding", "Funding"),
    FieldSpec("runway", "Runway"),
    FieldSpec("productDescription", "Product"),
    FieldSpec("pricingModel", "Pricing Model"),
    FieldSpec("pricingRange", "Pricing Range"),
    FieldSpec("competitiveLandscape", "Competitive Landscape"),
    FieldSpec("differentiator", "Differentiator"),
    # Ideal customer profile
    FieldSpec("icpTitle", "ICP Buyer"),
    FieldSpec("icpCompanySize", "ICP Company Size"),
    FieldSpec("icpIndustry", "ICP Industry"),
    FieldSpec("icpPainPoints", "ICP Pain Points"),
    FieldSpec("icpDecisionProcess", "ICP Decision Process"),
    FieldSpec("icpBudget", "ICP Budget"),
    # Go-to-market
    FieldSpec("salesMotion", "Sales Motion"),
    FieldSpec("channels", "Channels"),
    FieldSpec("bestChannel", "Best Channel"),
    FieldSpec("channelROI", "Channel ROI"),
    FieldSpec("avgDealSize", "Avg Deal Size"),
    FieldSpec("salesCycle", "Sales Cycle"),
    FieldSpec("cac", "CAC"),
    FieldSpec("ltv", "LTV"),
    FieldSpec("contentStrategy", "Content Strategy"),
    FieldSpec("leadGenMethod", "Lead Gen"),
    # Sales engine
    FieldSpec("salesProcess", "Sales Process"),
    FieldSpec("processStages", "Process Stages"),
    FieldSpec("processDocumented", "Documented"),
    FieldSpec("whoCloses", "Who Closes"),
    FieldSpec("founderInvolvement", "Founder Involvement"),
    FieldSpec("winRate", "Win Rate"),
    FieldSpec("lostDealReasons", "Lost Deal Reasons"),
    FieldSpec("mainObjections", "Objections"),
    FieldSpec("mainBottleneck", "Main Bottleneck"),
    FieldSpec("secondaryBottleneck", "Secondary Bottleneck"),
    FieldSpec("churnRate", "Churn Rate"),
    FieldSpec("churnReasons", "Churn Reasons"),
    FieldSpec("expansionRevenue", "Expansion Revenue"),
    FieldSpec("nrr", "NRR"),
    FieldSpec("crm", "CRM"),
    FieldSpec("tools", "Tools"),
    FieldSpec("automationLevel", "Automation Level"),
    FieldSpec("onboardingProcess", "Onboarding"),
    FieldSpec("customerSuccess", "Customer Success"),
    # Diagnosis
    FieldSpec("diagnosedProblems", "Diagnosed Problems", "list"),
    FieldSpec("rootCauses", "Root Causes", "list"),
    FieldSpec("validatedProblems", "Validated Problems", "list"),
    FieldSpec("userPriority", "User Priority"),
    FieldSpec("pastAttempts", "Past Attempts"),
    FieldSpec("budgetLevel", "Budget Level"),
    FieldSpec("growthTarget", "Growth Target"),
    FieldSpec("constraints", "Constraints"),
    FieldSpec("additionalContext", "Additional Context"),
    # Operating model
    FieldSpec("currentSituation", "Current Situation"),
    FieldSpec("orgStructure", "Org Structure"),
    FieldSpec("decisionMaking", "Decision Making"),
    FieldSpec("keyDependencies", "Key Dependencies"),
    FieldSpec("teamMorale", "Team Morale / Culture"),
    FieldSpec("systemsLandscape", "Systems Landscape"),
    FieldSpec("roadmap", "Roadmap (6-12mo)"),
    FieldSpec("plannedChanges", "Planned Changes"),
    FieldSpec("teamEnablement", "Team Enablement"),
)

_BY_NAME: Mapping[str, FieldSpec] = MappingProxyType({f.name: f for f in FIELDS})

FIELD_NAMES: frozenset[str] = frozenset(_BY_NAME)
LIST_FIELDS: frozenset[str] = frozenset(f.name for f in FIELDS if f.kind == "list")


def field_spec(name: str) -> FieldSpec | None:
    """Return the spec for *name*, or ``None`` if it is not a catalog field."""
    return _BY_NAME.get(name)


def is_list_field(name: str) -> bool:
    spec = _BY_NAME.get(name)
    return spec is not None and spec.kind == "list"


def label_for(name: str) -> str:
    """Human label for a field; unknown names are returned as-is."""
    spec = _BY_NAME.get(name)
    return spec.label if spec else name


# ---------------------------------------------------------------------------
# Phases
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PhaseDefinition:
    """Static configuration of one interview phase.

    ``milestones`` name boolean Session attributes. When a phase has
    milestones, advancement is gated on them (plus ``gate_fields``) instead
    of on the checklist; the checklist is then only used to tell the
    generator what is still missing.
    """

    id: str
    display: str
    next: str | None
    min_turns: int
    checklist: tuple[str, ...] = ()
    milestones: tuple[str, ...] = ()
    gate_fields: tuple[str, ...] = ()
    depth_topics: tuple[str, ...] = ()
    description: str = ""

    @property
    def terminal(self) -> bool:
        return self.next is None


PHASE_ORDER: tuple[str, ...] = (
    "welcome",
    "company",
    "gtm",
    "sales",
    "diagnosis",
    "pre_finish",
)

PHASES: Mapping[str, PhaseDefinition] = MappingProxyType({
    "welcome": PhaseDefinition(
        id="welcome",
        display="welcome",
        next="company",
        min_turns=1,
        milestones=("introduction_done",),
        description=(
            "Present findings from the website scan, make assumptions, "
            "get confirmation or correction."
        ),
    ),
    "company": PhaseDefinition(
        id="company",
        display="company",
        next="gtm",
        min_turns=4,
        checklist=("businessModel", "stage", "revenue", "teamSize", "funding"),
        depth_topics=(
            "Pricing structure and packaging strategy",
            "Revenue growth trajectory and seasonality",
            "Team composition: engineering vs commercial ratio",
            "Competitive landscape and differentiation",
            "Runway and burn rate implications",
        ),
        description=(
            "Deep-dive into company DNA: model, revenue, team, funding, "
            "pricing, competitive position."
        ),
    ),
    "gtm": PhaseDefinition(
        id="gtm",
        display="gtm",
        next="sales",
        min_turns=4,
        checklist=("icpTitle", "salesMotion", "channels", "avgDealSize"),
        depth_topics=(
            "ICP specificity: buyer persona, decision-making unit, budget authority",
            "Channel effectiveness: which channel has best ROI and why",
            "Content/marketing strategy and lead generation",
            "Competitive positioning: why customers choose them over alternatives",
            "Sales cycle dynamics and deal qualification criteria",
        ),
        description=(
            "Map go-to-market: ICP depth, channels, positioning, lead gen, "
            "deal economics."
        ),
    ),
    "sales": PhaseDefinition(
        id="sales",
        display="sales",
        next="diagnosis",
        min_turns=4,
        checklist=("salesProcess", "whoCloses", "mainBottleneck"),
        depth_topics=(
            "Full sales process walkthrough: each stage and exit criteria",
            "Founder dependency and delegation readiness",
            "Win/loss analysis: why deals close or die",
            "Objection handling and competitive losses",
            "Tech stack and CRM/automation maturity",
            "Post-sale: onboarding, retention, expansion",
        ),
        description=(
            "Analyze the sales engine: process, people, bottlenecks, tools, "
            "retention."
        ),
    ),
    "diagnosis": PhaseDefinition(
        id="diagnosis",
        display="diagnosis",
        next="pre_finish",
        min_turns=2,
        checklist=("diagnosedProblems", "userPriority"),
        milestones=("diagnosis_presented", "diagnosis_validated"),
        gate_fields=("userPriority",),
        description=(
            "Present the diagnosis, validate it with the user, get the "
            "priority and context on past attempts."
        ),
    ),
    "pre_finish": PhaseDefinition(
        id="pre_finish",
        display="pre_finish",
        next=None,
        min_turns=1,
        description="Final summary, offer report generation.",
    ),
})
