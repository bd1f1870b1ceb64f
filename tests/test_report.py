"""Unit tests for revenue_architect.report — report inputs, prompt and generation."""

from __future__ import annotations

from datetime import date
from unittest.mock import patch

import httpx

from revenue_architect.benchmarks import BenchmarkLibrary
from revenue_architect.exceptions import GenerationError
from revenue_architect.report import (
    LANGUAGE_DEFAULT,
    LANGUAGE_ITALIAN,
    build_report_prompt,
    detect_language,
    generate_report,
    market_block,
    operating_model_block,
    playbook_block,
    prepare_report,
    report_filename,
    split_fields,
)
from revenue_architect.profile import Profile
from revenue_architect.session import Session, append_entry

TODAY = date(2026, 10, 18)


def _patch_write(**kwargs):
    return patch("revenue_architect.report.write_report", **kwargs)


# ------------------------------------------------------------------
# Building blocks
# ------------------------------------------------------------------


class TestDetectLanguage:
    def test_italian(self):
        texts = [
            "Siamo una azienda che vende software.",
            "Abbiamo molto clienti e anche un problema con le vendite.",
        ]
        assert detect_language(texts) == LANGUAGE_ITALIAN

    def test_english(self):
        assert detect_language(["We sell analytics to CFOs", "About €20K MRR"]) == LANGUAGE_DEFAULT

    def test_few_markers_are_not_enough(self):
        assert detect_language(["come", "che", "alla"]) == LANGUAGE_DEFAULT


class TestSplitFields:
    def test_confirmed_and_unknown(self, full_profile: Profile):
        confirmed, unknown = split_fields(full_profile)
        assert "Company: Acme Analytics" in confirmed
        assert "CRM: HubSpot Pro" in confirmed
        assert "Diagnosed Problems: Founder-dependent closing; No outbound engine" in confirmed
        assert "Website" in unknown

    def test_operating_model_fields_left_out(self):
        confirmed, unknown = split_fields(Profile(roadmap="Launch EU"))
        assert confirmed == []
        assert "Roadmap (6-12mo)" not in unknown


class TestOperatingModelBlock:
    def test_nothing_collected(self):
        assert operating_model_block(Profile()) == (
            "(No operating model data collected during discovery)"
        )

    def test_confirmed_and_gaps(self, full_profile: Profile):
        block = operating_model_block(full_profile)
        assert block.startswith("CONFIRMED OPERATING MODEL DATA:")
        assert "  • Who Closes Deals: Founder" in block
        assert "GAPS" in block
        assert "Current Situation" in block


class TestPlaybookAndMarket:
    def test_playbook(self, library: BenchmarkLibrary):
        block = playbook_block(library.stages["seed_startup"])
        assert "STAGE PLAYBOOK: Seed / Startup" in block
        assert "Budget Guidance: Tools max ~€1000/mo, Marketing max ~€8000/mo" in block
        assert "  ⛔ Scaling paid acquisition before retention is proven" in block

    def test_no_playbook(self):
        assert playbook_block(None) == ""

    def test_market(self, library: BenchmarkLibrary):
        block = market_block(library.market_context)
        assert block.startswith("\nMARKET CONTEXT")
        assert "  fundingClimate: " in block
        assert market_block({}) == ""


class TestReportFilename:
    def test_spaces_become_underscores(self):
        assert report_filename("Acme  Analytics ", TODAY) == "Growth_Plan_Acme_Analytics_2026-10-18"


# ------------------------------------------------------------------
# prepare_report
# ------------------------------------------------------------------


class TestPrepareReport:
    """Verify the deterministic report inputs."""

    def test_full_profile(self, full_profile: Profile, library: BenchmarkLibrary):
        inputs = prepare_report(Session(profile=full_profile), library)
        assert inputs.company_name == "Acme Analytics"
        assert inputs.stage == "early_scale"
        assert inputs.stage_label == "Early Scale / Series A"
        assert [f.issue for f in inputs.feasibility_flags] == ["Founder bottleneck blocks scaling"]
        assert len(inputs.scorecard) == 9
        assert inputs.scorecard_markdown.startswith("## Benchmark Scorecard — Early Scale / Series A")
        assert inputs.chart_data is not None
        assert inputs.dashboard_data.company_name == "Acme Analytics"
        assert inputs.transcript == "(no conversation recorded)"
        assert inputs.language == LANGUAGE_DEFAULT

    def test_resolved_stage_wins(self, full_profile: Profile, library: BenchmarkLibrary):
        session = Session(profile=full_profile, resolved_stage="pre_seed_idea")
        assert prepare_report(session, library).stage == "pre_seed_idea"

    def test_company_stage_before_stage(self, library: BenchmarkLibrary):
        profile = Profile(company_stage="expansion_enterprise", stage="Seed")
        assert prepare_report(Session(profile=profile), library).stage == "expansion_enterprise"

    def test_empty_session(self, library: BenchmarkLibrary):
        inputs = prepare_report(Session(), library)
        assert inputs.company_name == "Company"
        assert inputs.stage == "seed_startup"
        assert inputs.feasibility_flags == []
        assert all(row.assessment == "not_disclosed" for row in inputs.scorecard)
        assert inputs.dashboard_data is None

    def test_without_benchmarks(self, full_profile: Profile):
        inputs = prepare_report(Session(profile=full_profile), BenchmarkLibrary())
        assert inputs.stage_label == ""
        assert inputs.scorecard == []
        assert inputs.scorecard_markdown == ""
        assert inputs.chart_data is None

    def test_transcript_speakers(self, library: BenchmarkLibrary):
        session = append_entry(Session(), "user", "We sell to CFOs")
        session = append_entry(session, "assistant", "Noted.")
        inputs = prepare_report(session, library)
        assert "[Turn 1] USER:\nWe sell to CFOs" in inputs.transcript
        assert "[Turn 1] REVENUE ARCHITECT:\nNoted." in inputs.transcript


class TestBuildReportPrompt:
    def test_prompt(self, full_profile: Profile, library: BenchmarkLibrary):
        session = Session(profile=full_profile, scraped_summary="WEBSITE: https://acme.example")
        inputs = prepare_report(session, library)
        prompt = build_report_prompt(session, inputs, library, TODAY)
        assert "## Acme Analytics | October 18, 2026" in prompt
        assert "✅ Company: Acme Analytics" in prompt
        assert "(max ~€5000/mo total)" in prompt
        assert '"Hire the first AE"' in prompt
        assert "Founder bottleneck blocks scaling" in prompt
        assert "WEBSITE: https://acme.example" in prompt

    def test_defaults(self, library: BenchmarkLibrary):
        session = Session()
        prompt = build_report_prompt(session, prepare_report(session, library), library, TODAY)
        assert "No critical contradictions detected." in prompt
        assert '"not specified"' in prompt


# ------------------------------------------------------------------
# generate_report
# ------------------------------------------------------------------


class TestGenerateReport:
    """Verify the generation step and its failure mode."""

    def test_report(self, full_profile: Profile, library: BenchmarkLibrary):
        with _patch_write(return_value="# Strategic Growth Plan") as mock_write:
            result = generate_report(Session(profile=full_profile), library, today=TODAY)
        mock_write.assert_called_once()
        assert result.report == "# Strategic Growth Plan"
        assert result.filename == "Growth_Plan_Acme_Analytics_2026-10-18"

        payload = result.to_payload()
        assert payload["stage"] == "early_scale"
        assert payload["feasibility_flags"][0]["category"] == "structural"
        assert payload["chart_data"]["stage_label"] == "Early Scale / Series A"
        assert isinstance(payload["dashboard_data"]["generated_at"], str)

    def test_generator_failure(self, full_profile: Profile, library: BenchmarkLibrary):
        with _patch_write(side_effect=GenerationError("down")):
            result = generate_report(Session(profile=full_profile), library, today=TODAY)
        assert result.report is None
        assert result.to_payload()["stage"] == "early_scale"
        assert result.inputs.feasibility_flags

    def test_transport_timeout(self, full_profile: Profile, library: BenchmarkLibrary):
        with patch("revenue_architect.llm.ollama.chat", side_effect=httpx.ReadTimeout("slow")):
            result = generate_report(Session(profile=full_profile), library, today=TODAY)
        assert result.report is None
        assert result.filename == "Growth_Plan_Acme_Analytics_2026-10-18"

    def test_payload_without_benchmarks(self):
        with _patch_write(return_value="# Plan"):
            result = generate_report(Session(), BenchmarkLibrary(), today=TODAY)
        payload = result.to_payload()
        assert payload["chart_data"] is None
        assert payload["dashboard_data"] is None
        assert payload["filename"] == "Growth_Plan_Company_2026-10-18"
