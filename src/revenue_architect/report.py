"""Strategic Growth Plan: deterministic inputs and the generation call.

``prepare_report`` computes everything that does not need the model
(stage, flags, scorecard, charts, dashboard, the confirmed/unknown split,
language) so it can be inspected and tested on its own. ``generate_report``
adds the narrative on top and never raises: a generator failure leaves
``report`` as ``None``.
"""

from __future__ import annotations

import logging
import re
from datetime import date
from typing import Any

from pydantic import BaseModel

from revenue_architect.benchmarks import (
    BenchmarkLibrary,
    ChartSeries,
    Dashboard,
    ScorecardRow,
    StageBenchmarks,
    build_chart_series,
    build_dashboard,
    build_scorecard,
    get_library,
    render_benchmarks,
    render_scorecard,
    stage_benchmarks,
)
from revenue_architect.catalog import FIELDS
from revenue_architect.exceptions import GenerationError
from revenue_architect.feasibility import FeasibilityFlag, analyze, render_flags
from revenue_architect.interview.context import render_transcript
from revenue_architect.llm import REPORT_PROMPT, write_report
from revenue_architect.profile import Profile, format_value, get_value, is_present
from revenue_architect.session import Session, user_texts
from revenue_architect.stages import StageKey, resolve_stage

logger = logging.getLogger(__name__)

OPERATING_MODEL_FIELDS: tuple[tuple[str, str], ...] = (
    ("Current Situation", "currentSituation"),
    ("Org Structure", "orgStructure"),
    ("Decision Making", "decisionMaking"),
    ("Key Dependencies", "keyDependencies"),
    ("Team Morale / Culture", "teamMorale"),
    ("Systems Landscape", "systemsLandscape"),
    ("Roadmap (6-12mo)", "roadmap"),
    ("Planned Changes", "plannedChanges"),
    ("Team Enablement", "teamEnablement"),
    ("Who Closes Deals", "whoCloses"),
    ("Founder Involvement", "founderInvolvement"),
    ("CRM", "crm"),
    ("Tools", "tools"),
    ("Automation Level", "automationLevel"),
)

# Operating-model facts go in their own block
_OM_ONLY = frozenset(name for _, name in OPERATING_MODEL_FIELDS[:9])

_ITALIAN_MARKERS = re.compile(
    r"\b(?:che|sono|abbiamo|nostro|nostra|clienti|vendite|azienda|problema|siamo"
    r"|facciamo|questo|anche|molto|come|alla|delle|della)\b",
    re.IGNORECASE,
)
ITALIAN_THRESHOLD = 5

LANGUAGE_ITALIAN = (
    "The user spoke ITALIAN throughout the conversation. Write the ENTIRE report "
    "in Italian: every heading, every sentence."
)
LANGUAGE_DEFAULT = "Write in the language the user used. Default to English."


# ---------------------------------------------------------------------------
# Building blocks
# ---------------------------------------------------------------------------


def detect_language(texts: list[str]) -> str:
    """Italian when more than five marker words appear in the user's turns."""
    hits = len(_ITALIAN_MARKERS.findall(" ".join(texts)))
    return LANGUAGE_ITALIAN if hits > ITALIAN_THRESHOLD else LANGUAGE_DEFAULT


def split_fields(profile: Profile) -> tuple[list[str], list[str]]:
    """``(confirmed "Label: value" lines, labels of unknown fields)``."""
    confirmed: list[str] = []
    unknown: list[str] = []
    for spec in FIELDS:
        if spec.name in _OM_ONLY:
            continue
        if is_present(profile, spec.name):
            confirmed.append(f"{spec.label}: {format_value(get_value(profile, spec.name))}")
        else:
            unknown.append(spec.label)
    return confirmed, unknown


def operating_model_block(profile: Profile) -> str:
    confirmed: list[str] = []
    gaps: list[str] = []
    for label, name in OPERATING_MODEL_FIELDS:
        if is_present(profile, name):
            confirmed.append(f"  • {label}: {format_value(get_value(profile, name))}")
        else:
            gaps.append(label)

    if not confirmed:
        return "(No operating model data collected during discovery)"

    block = "CONFIRMED OPERATING MODEL DATA:\n" + "\n".join(confirmed)
    if gaps:
        block += (
            '\n\nGAPS (not disclosed, flag as "To be assessed" in the Operating Model '
            "section):\n  " + ", ".join(gaps)
        )
    return block


def playbook_block(stage_data: StageBenchmarks | None) -> str:
    if stage_data is None or stage_data.playbook is None:
        return ""
    pb = stage_data.playbook
    tool_max = pb.budget_guidance.tool_spend.max
    marketing_max = pb.budget_guidance.marketing_spend.max
    anti_patterns = "\n".join(f"  ⛔ {item}" for item in pb.anti_patterns) or "  (none)"
    actions = "\n".join(f"  → {item}" for item in pb.recommended_actions) or "  (none)"
    return (
        f"\nSTAGE PLAYBOOK: {stage_data.label}\n"
        f"Focus: {pb.focus}\n"
        f"Sales Approach: {pb.sales_approach}\n"
        f"Recommended Tech Stack: {', '.join(pb.tech_stack) or 'N/A'}\n"
        f"Key Metrics: {', '.join(pb.key_metrics) or 'N/A'}\n"
        f"Budget Guidance: Tools max ~€{_amount(tool_max)}/mo, "
        f"Marketing max ~€{_amount(marketing_max)}/mo\n\n"
        f"ANTI-PATTERNS:\n{anti_patterns}\n\n"
        f"RECOMMENDED ACTIONS:\n{actions}"
    )


def market_block(market_context: dict[str, Any]) -> str:
    if not market_context:
        return ""
    lines = ["\nMARKET CONTEXT"]
    lines.extend(f"  {key}: {value}" for key, value in market_context.items())
    return "\n".join(lines)


def _amount(value: float | None) -> str:
    return "?" if value is None else f"{value:g}"


def report_filename(company_name: str, on: date) -> str:
    slug = re.sub(r"\s+", "_", company_name.strip())
    return f"Growth_Plan_{slug}_{on.isoformat()}"


# ---------------------------------------------------------------------------
# Report inputs
# ---------------------------------------------------------------------------


class ReportInputs(BaseModel):
    """Everything the narrative is built from, computed without the model."""

    company_name: str
    stage: StageKey
    stage_label: str
    feasibility_flags: list[FeasibilityFlag]
    scorecard: list[ScorecardRow]
    scorecard_markdown: str
    chart_data: ChartSeries | None
    dashboard_data: Dashboard | None
    confirmed: list[str]
    unknown: list[str]
    operating_model: str
    transcript: str
    language: str


def prepare_report(session: Session, library: BenchmarkLibrary | None = None) -> ReportInputs:
    library = library if library is not None else get_library()
    profile = session.profile

    stage_key = resolve_stage(
        session.resolved_stage or profile.company_stage or profile.stage
    )
    stage_data = stage_benchmarks(library, stage_key)
    flags = analyze(profile, stage_data)
    logger.info("Report stage=%s flags=%d", stage_key, len(flags))

    rows = build_scorecard(profile, stage_data)
    confirmed, unknown = split_fields(profile)
    return ReportInputs(
        company_name=profile.company_name or "Company",
        stage=stage_key,
        stage_label=stage_data.label if stage_data else "",
        feasibility_flags=flags,
        scorecard=rows,
        scorecard_markdown=render_scorecard(rows, stage_data.label) if stage_data else "",
        chart_data=build_chart_series(profile, stage_data),
        dashboard_data=build_dashboard(profile, stage_data),
        confirmed=confirmed,
        unknown=unknown,
        operating_model=operating_model_block(profile),
        transcript=render_transcript(
            session.transcript,
            empty="(no conversation recorded)",
            speakers={"user": "USER", "assistant": "REVENUE ARCHITECT"},
        ),
        language=detect_language(user_texts(session.transcript)),
    )


def build_report_prompt(
    session: Session,
    inputs: ReportInputs,
    library: BenchmarkLibrary,
    today: date,
) -> str:
    stage_data = stage_benchmarks(library, inputs.stage)
    tool_ceiling = None
    if stage_data is not None and stage_data.playbook is not None:
        tool_ceiling = stage_data.playbook.budget_guidance.tool_spend.max

    return REPORT_PROMPT.format(
        company_name=inputs.company_name,
        today=f"{today:%B} {today.day}, {today.year}",
        language=inputs.language,
        transcript=inputs.transcript,
        confirmed="\n".join(f"✅ {line}" for line in inputs.confirmed) or "(none)",
        unknown=", ".join(inputs.unknown) or "(none)",
        benchmarks=render_benchmarks(stage_data),
        playbook=playbook_block(stage_data),
        market=market_block(library.market_context),
        flags=render_flags(inputs.feasibility_flags),
        scorecard=inputs.scorecard_markdown
        or "(Insufficient user data for scorecard, compare the available metrics)",
        operating_model=inputs.operating_model,
        scraped=session.scraped_summary or "N/A",
        user_priority=format_value(session.profile.user_priority) or "not specified",
        stage_label=inputs.stage_label or "current",
        tool_ceiling=_amount(tool_ceiling),
    )


# ---------------------------------------------------------------------------
# Generation
# ---------------------------------------------------------------------------


class ReportResult(BaseModel):
    report: str | None
    filename: str
    inputs: ReportInputs

    def to_payload(self) -> dict[str, Any]:
        return {
            "report": self.report,
            "filename": self.filename,
            "feasibility_flags": [f.model_dump() for f in self.inputs.feasibility_flags],
            "stage": self.inputs.stage,
            "chart_data": self.inputs.chart_data.model_dump() if self.inputs.chart_data else None,
            "dashboard_data": (
                self.inputs.dashboard_data.model_dump(mode="json")
                if self.inputs.dashboard_data
                else None
            ),
        }


def generate_report(
    session: Session,
    library: BenchmarkLibrary | None = None,
    today: date | None = None,
) -> ReportResult:
    """Prepare the inputs and ask the generator for the narrative."""
    library = library if library is not None else get_library()
    today = today or date.today()
    inputs = prepare_report(session, library)
    prompt = build_report_prompt(session, inputs, library, today)

    try:
        report = write_report(prompt)
    except GenerationError as e:
        logger.warning("Report generation failed: %s", e, extra=e.details)
        report = None

    return ReportResult(
        report=report,
        filename=report_filename(inputs.company_name, today),
        inputs=inputs,
    )
