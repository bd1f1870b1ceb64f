"""Unit tests for revenue_architect.mcp_server — MCP tool functions."""

from __future__ import annotations

import json
from unittest.mock import patch

from revenue_architect.benchmarks import BenchmarkLibrary
from revenue_architect.mcp_server import (
    benchmark_scorecard,
    check_feasibility,
    generate_growth_plan,
    interview_turn,
    prepare_growth_plan,
    profile_confidence,
    resolve_company_stage,
    start_interview,
)
from revenue_architect.profile import Profile
from revenue_architect.session import Session

WELCOME_REPLY = {
    "message": "Welcome! Did I get this right?",
    "options": [{"key": "correct", "label": "Yes"}, {"key": "wrong", "label": "No"}],
}


def _patch_library(library: BenchmarkLibrary):
    """Return a patch that replaces the cached benchmark library."""
    return patch("revenue_architect.benchmarks._library", library)


def _patch_draft(**kwargs):
    return patch("revenue_architect.interview.nodes.draft_turn", **kwargs)


def _profile_json(profile: Profile) -> str:
    return profile.model_dump_json(by_alias=True)


# ------------------------------------------------------------------
# Interview tools
# ------------------------------------------------------------------


class TestStartInterview:
    def test_returns_welcome_turn(self):
        site = json.dumps({"url": "https://acme.example", "title": "Acme Analytics | Home"})
        with _patch_draft(return_value=WELCOME_REPLY):
            result = json.loads(start_interview(website="https://acme.example", site_json=site))
        assert result["step_id"] == "welcome"
        assert result["message"] == "Welcome! Did I get this right?"
        assert result["session_data"]["profile"]["companyName"] == "Acme Analytics"

    def test_invalid_snapshot(self):
        assert start_interview(site_json="{broken").startswith("Invalid snapshot:")


class TestInterviewTurn:
    def test_continues_session(self, sample_session: Session):
        with _patch_draft(return_value=WELCOME_REPLY):
            result = json.loads(interview_turn(sample_session.model_dump_json(by_alias=True), "Per seat"))
        assert result["turn_count"] == 5
        assert result["session_data"]["transcript"][0] == {"role": "user", "text": "Per seat"}

    def test_finish(self, sample_session: Session):
        with _patch_draft() as mock_draft:
            result = json.loads(
                interview_turn(sample_session.model_dump_json(by_alias=True), "generate_report")
            )
        mock_draft.assert_not_called()
        assert result["step_id"] == "GENERATE"

    def test_empty_session_starts_new(self):
        result = json.loads(interview_turn("", "update_and_generate"))
        assert result["turn_count"] == 1

    def test_invalid_session(self):
        assert interview_turn('{"phaseTurns": "many"}', "hi").startswith("Invalid session:")


# ------------------------------------------------------------------
# Analysis tools
# ------------------------------------------------------------------


class TestProfileConfidence:
    def test_score(self):
        assert json.loads(profile_confidence('{"companyName": "Acme"}')) == {"total": 4}

    def test_invalid_json(self):
        assert profile_confidence("not json").startswith("Invalid profile:")


class TestResolveCompanyStage:
    def test_resolves(self):
        assert resolve_company_stage("Series A, scaling fast") == "early_scale"
        assert resolve_company_stage("") == "seed_startup"


class TestCheckFeasibility:
    def test_flags(self, library: BenchmarkLibrary):
        profile = Profile(funding="Bootstrapped", revenue="€3K MRR", team_size="8")
        with _patch_library(library):
            flags = json.loads(check_feasibility(_profile_json(profile)))
        assert [f["issue"] for f in flags] == ["Cash runway concern"]

    def test_enterprise_tools_at_pre_seed(self, library: BenchmarkLibrary):
        profile = Profile(stage="pre-revenue", tools="Salesforce")
        with _patch_library(library):
            flags = json.loads(check_feasibility(_profile_json(profile)))
        assert flags[0]["category"] == "anti_pattern"
        assert "€200/mo" in flags[0]["detail"]

    def test_no_flags(self, library: BenchmarkLibrary):
        with _patch_library(library):
            assert check_feasibility(_profile_json(Profile())) == "No feasibility flags raised."

    def test_library_loaded_once(self, library: BenchmarkLibrary):
        with (
            _patch_library(None),
            patch("revenue_architect.benchmarks.load_benchmarks", return_value=library) as mock_load,
        ):
            check_feasibility(_profile_json(Profile()))
            check_feasibility(_profile_json(Profile()))
        mock_load.assert_called_once()


class TestBenchmarkScorecard:
    def test_table(self, full_profile: Profile, library: BenchmarkLibrary):
        with _patch_library(library):
            table = benchmark_scorecard(_profile_json(full_profile), stage="seed_startup")
        assert "Seed / Startup" in table
        assert "| Monthly Churn | 2% |" in table

    def test_no_benchmarks(self, full_profile: Profile):
        with _patch_library(BenchmarkLibrary()):
            text = benchmark_scorecard(_profile_json(full_profile))
        assert text == "No benchmarks available for stage early_scale."


# ------------------------------------------------------------------
# Report tools
# ------------------------------------------------------------------


class TestGrowthPlan:
    def test_prepare(self, full_profile: Profile, library: BenchmarkLibrary):
        session = Session(profile=full_profile)
        with _patch_library(library):
            inputs = json.loads(prepare_growth_plan(session.model_dump_json(by_alias=True)))
        assert inputs["stage"] == "early_scale"
        assert len(inputs["scorecard"]) == 9

    def test_generate(self, full_profile: Profile, library: BenchmarkLibrary):
        session = Session(profile=full_profile)
        with (
            _patch_library(library),
            patch("revenue_architect.report.write_report", return_value="# Plan"),
        ):
            result = json.loads(generate_growth_plan(session.model_dump_json(by_alias=True)))
        assert result["report"] == "# Plan"
        assert result["filename"].startswith("Growth_Plan_Acme_Analytics_")

    def test_invalid_session(self):
        assert generate_growth_plan("[1, 2]").startswith("Invalid session:")
