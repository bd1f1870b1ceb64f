"""Unit tests for revenue_architect.interview.context — the per-turn prompt context."""

from __future__ import annotations

from revenue_architect.interview.context import (
    DIAGNOSIS_PRESENT_INSTRUCTIONS,
    DIAGNOSIS_VALIDATE_INSTRUCTIONS,
    PRE_FINISH_INSTRUCTIONS,
    SNAPSHOT_INIT,
    build_turn_prompt,
    phase_instructions,
    profile_context,
    render_transcript,
)
from revenue_architect.phases import PhaseEngine
from revenue_architect.profile import Profile
from revenue_architect.session import Session, append_entry

ENGINE = PhaseEngine()


# ------------------------------------------------------------------
# Transcript and profile
# ------------------------------------------------------------------


class TestRenderTranscript:
    def test_empty(self):
        assert render_transcript(()) == "(No conversation yet)"

    def test_turn_numbers_pair_entries(self):
        session = append_entry(Session(), "user", "hi")
        session = append_entry(session, "assistant", "hello")
        session = append_entry(session, "user", "we sell SaaS")
        text = render_transcript(session.transcript)
        blocks = text.split("\n\n---\n\n")
        assert blocks[0] == "[Turn 1] 👤 USER:\nhi"
        assert blocks[1] == "[Turn 1] 🤖 REVENUE ARCHITECT:\nhello"
        assert blocks[2].startswith("[Turn 2] 👤 USER:")

    def test_custom_speakers(self):
        session = append_entry(Session(), "user", "hi")
        text = render_transcript(session.transcript, speakers={"user": "USER", "assistant": "AI"})
        assert text == "[Turn 1] USER:\nhi"


class TestProfileContext:
    def test_empty_profile(self):
        text = profile_context(Session(), ENGINE)
        assert text == "CONFIRMED DATA:\n(nothing yet)"

    def test_confirmed_and_required(self, company_profile: Profile):
        text = profile_context(Session(current_phase="gtm", profile=company_profile), ENGINE)
        assert "✅ Company: Acme Analytics" in text
        assert "STILL REQUIRED for GTM:" in text
        assert "❓ ICP/Buyer" in text
        assert "❓ Deal Size" in text

    def test_nothing_required(self, sample_session: Session):
        assert "STILL REQUIRED" not in profile_context(sample_session, ENGINE)


# ------------------------------------------------------------------
# Phase instructions
# ------------------------------------------------------------------


class TestPhaseInstructions:
    def test_welcome(self):
        text = phase_instructions(Session(), ENGINE)
        assert text.startswith("PHASE: WELCOME (Turn 1)")

    def test_company(self, sample_session: Session):
        text = phase_instructions(sample_session, ENGINE)
        assert text.startswith("PHASE: COMPANY DNA (Turn 3 of minimum 4)")
        assert "at least 2 more turn(s)" in text
        assert "✅ revenue: €20K MRR (DONE, don't re-ask)" in text
        assert "1. Pricing structure and packaging strategy" in text

    def test_gtm_context_line(self, company_profile: Profile):
        session = Session(current_phase="gtm", phase_turns=4, profile=company_profile)
        text = phase_instructions(session, ENGINE)
        assert "CONTEXT: businessModel: B2B SaaS subscription | stage: Seed" in text
        assert "You can transition soon" in text
        assert "❓ icpTitle: NOT YET COLLECTED" in text

    def test_diagnosis_steps(self):
        assert phase_instructions(Session(current_phase="diagnosis"), ENGINE) == (
            DIAGNOSIS_PRESENT_INSTRUCTIONS
        )
        presented = Session(current_phase="diagnosis", diagnosis_presented=True)
        assert phase_instructions(presented, ENGINE) == DIAGNOSIS_VALIDATE_INSTRUCTIONS
        done = presented.model_copy(update={"diagnosis_validated": True})
        assert phase_instructions(done, ENGINE).startswith("Diagnosis complete")

    def test_pre_finish(self):
        assert phase_instructions(Session(current_phase="pre_finish"), ENGINE) == PRE_FINISH_INSTRUCTIONS

    def test_unknown_phase(self):
        text = phase_instructions(Session(current_phase="nowhere"), ENGINE)
        assert text == "Continue the conversation naturally."


# ------------------------------------------------------------------
# Full prompt
# ------------------------------------------------------------------


class TestBuildTurnPrompt:
    def test_first_message(self):
        prompt = build_turn_prompt(Session(), SNAPSHOT_INIT, ENGINE)
        assert "This is the FIRST message" in prompt
        assert "(No conversation yet)" in prompt

    def test_user_message(self, sample_session: Session):
        prompt = build_turn_prompt(sample_session, "We sell to CFOs", ENGINE)
        assert '"We sell to CFOs"' in prompt
        assert "Phase: company | Phase turn: 2 | Total turns: 4" in prompt
        assert "channelROI" in prompt

    def test_attachments_block(self, sample_session: Session):
        prompt = build_turn_prompt(sample_session, "see deck", ENGINE, attachments="\n\nFILES HERE")
        assert "FILES HERE" in prompt
