"""MCP server exposing the interview core as tools over JSON strings."""

from __future__ import annotations

import json
import logging
from typing import Any

from mcp.server.fastmcp import FastMCP
from pydantic import ValidationError

from revenue_architect.benchmarks import (
    build_scorecard,
    get_library,
    render_scorecard,
    stage_benchmarks,
)
from revenue_architect.confidence import confidence_state
from revenue_architect.feasibility import analyze
from revenue_architect.interview.context import SNAPSHOT_INIT
from revenue_architect.interview.graph import take_turn
from revenue_architect.interview.snapshot import CompanySnapshot, SiteSnapshot
from revenue_architect.logging_config import configure_logging
from revenue_architect.profile import Profile
from revenue_architect.report import generate_report, prepare_report
from revenue_architect.session import Session
from revenue_architect.stages import resolve_stage

logger = logging.getLogger(__name__)

mcp = FastMCP("Revenue Architect Interview Server")

# ------------------------------------------------------------------
# Parsing helpers
# ------------------------------------------------------------------


def _parse_session(session_json: str) -> Session:
    """Session from its camelCase JSON; an empty string starts a new one."""
    if not session_json.strip():
        return Session()
    return Session.model_validate_json(session_json)


def _parse_profile(profile_json: str) -> Profile:
    if not profile_json.strip():
        return Profile()
    return Profile.model_validate_json(profile_json)


def _dumps(payload: Any) -> str:
    return json.dumps(payload, ensure_ascii=False, indent=2)


def _invalid(what: str, error: ValidationError) -> str:
    logger.warning("Rejected %s: %d validation error(s)", what, error.error_count())
    return f"Invalid {what}: {error.errors()[0]['msg']}"


# ------------------------------------------------------------------
# MCP Tools
# ------------------------------------------------------------------


@mcp.tool()
def start_interview(
    website: str = "",
    description: str = "",
    site_json: str = "",
    company_json: str = "",
) -> str:
    """Start a new discovery interview and return the welcome turn.

    ``site_json`` and ``company_json`` are optional scraped snapshots of
    the company's website and company page. The returned JSON contains
    the message, buttons and the ``session_data`` to pass to the next call.
    """
    try:
        site = SiteSnapshot.model_validate_json(site_json) if site_json.strip() else None
        company = (
            CompanySnapshot.model_validate_json(company_json) if company_json.strip() else None
        )
    except ValidationError as e:
        return _invalid("snapshot", e)

    result = take_turn(
        Session(),
        SNAPSHOT_INIT,
        website=website,
        description=description,
        site=site,
        company=company,
    )
    return _dumps(result.to_payload())


@mcp.tool()
def interview_turn(session_json: str, message: str) -> str:
    """Send the user's answer (or a button key) and return the next turn.

    Pass the ``session_data`` from the previous turn as ``session_json``.
    The button keys ``generate_report`` and ``update_and_generate`` end the
    interview.
    """
    try:
        session = _parse_session(session_json)
    except ValidationError as e:
        return _invalid("session", e)
    return _dumps(take_turn(session, message).to_payload())


@mcp.tool()
def profile_confidence(profile_json: str) -> str:
    """Return how complete a profile is, as ``{"total": 0-100}``."""
    try:
        profile = _parse_profile(profile_json)
    except ValidationError as e:
        return _invalid("profile", e)
    return _dumps(confidence_state(profile))


@mcp.tool()
def resolve_company_stage(stage: str) -> str:
    """Classify a free-text stage description into one of the four growth stages.

    Examples: "Series A, scaling fast" → early_scale, "pre-revenue" → pre_seed_idea.
    """
    return resolve_stage(stage)


@mcp.tool()
def check_feasibility(profile_json: str, stage: str = "") -> str:
    """Run the feasibility rules over a profile and list the flags raised.

    ``stage`` overrides the stage stated in the profile.
    """
    try:
        profile = _parse_profile(profile_json)
    except ValidationError as e:
        return _invalid("profile", e)

    stage_key = resolve_stage(stage or profile.company_stage or profile.stage)
    stage_data = stage_benchmarks(get_library(), stage_key)
    flags = analyze(profile, stage_data)
    if not flags:
        return "No feasibility flags raised."
    return _dumps([flag.model_dump() for flag in flags])


@mcp.tool()
def benchmark_scorecard(profile_json: str, stage: str = "") -> str:
    """Compare a profile's metrics with the stage benchmarks as a markdown table."""
    try:
        profile = _parse_profile(profile_json)
    except ValidationError as e:
        return _invalid("profile", e)

    stage_key = resolve_stage(stage or profile.company_stage or profile.stage)
    stage_data = stage_benchmarks(get_library(), stage_key)
    rows = build_scorecard(profile, stage_data)
    if not rows:
        return f"No benchmarks available for stage {stage_key}."
    return render_scorecard(rows, stage_data.label)


@mcp.tool()
def prepare_growth_plan(session_json: str) -> str:
    """Return the deterministic report inputs (stage, flags, scorecard, charts, dashboard)."""
    try:
        session = _parse_session(session_json)
    except ValidationError as e:
        return _invalid("session", e)
    inputs = prepare_report(session, get_library())
    return _dumps(inputs.model_dump(mode="json"))


@mcp.tool()
def generate_growth_plan(session_json: str) -> str:
    """Generate the Strategic Growth Plan for a finished interview.

    ``report`` is null in the result if the model could not produce it;
    the deterministic sections are always returned.
    """
    try:
        session = _parse_session(session_json)
    except ValidationError as e:
        return _invalid("session", e)
    return _dumps(generate_report(session, get_library()).to_payload())


# ------------------------------------------------------------------
# Entry point
# ------------------------------------------------------------------

if __name__ == "__main__":
    configure_logging()
    mcp.run()
