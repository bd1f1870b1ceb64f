"""Prompt context for a turn: transcript, known/missing facts, phase instructions."""

from __future__ import annotations

from typing import Iterable

from revenue_architect.catalog import FIELD_NAMES, PhaseDefinition
from revenue_architect.llm import TURN_PROMPT
from revenue_architect.phases import PhaseEngine
from revenue_architect.profile import confirmed_lines, format_value, get_value, is_present
from revenue_architect.session import Session, TranscriptEntry

SNAPSHOT_INIT = "SNAPSHOT_INIT"

_SPEAKERS = {"user": "👤 USER", "assistant": "🤖 REVENUE ARCHITECT"}

# Short labels for the "still required" list
_REQUIRED_LABELS = {
    "businessModel": "Business Model",
    "stage": "Stage",
    "revenue": "Revenue",
    "teamSize": "Team Size",
    "funding": "Funding",
    "icpTitle": "ICP/Buyer",
    "salesMotion": "Sales Motion",
    "channels": "Channels",
    "avgDealSize": "Deal Size",
    "salesProcess": "Sales Process",
    "whoCloses": "Who Closes",
    "mainBottleneck": "Bottleneck",
    "diagnosedProblems": "Diagnosis",
    "userPriority": "Priority",
}


def render_transcript(
    transcript: Iterable[TranscriptEntry],
    empty: str = "(No conversation yet)",
    speakers: dict[str, str] = _SPEAKERS,
) -> str:
    """``[Turn N] SPEAKER:`` blocks; a user line and its reply share N."""
    blocks = [
        f"[Turn {i // 2 + 1}] {speakers[entry.role]}:\n{entry.text}"
        for i, entry in enumerate(transcript)
    ]
    return "\n\n---\n\n".join(blocks) if blocks else empty


def profile_context(session: Session, engine: PhaseEngine) -> str:
    lines = ["CONFIRMED DATA:"]
    confirmed = confirmed_lines(session.profile)
    lines.append("\n".join(f"✅ {line}" for line in confirmed) if confirmed else "(nothing yet)")

    missing = engine.missing_checklist(session)
    if missing:
        lines.append(f"\nSTILL REQUIRED for {session.current_phase.upper()}:")
        lines.extend(f"❓ {_REQUIRED_LABELS.get(name, name)}" for name in missing)
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Phase instructions
# ---------------------------------------------------------------------------

WELCOME_INSTRUCTIONS = """\
PHASE: WELCOME (Turn {turn})

YOUR TASK:
- Reference 3-4 specific things from their website data (headlines, pricing, features, CTAs), quoting them
- Make 3 bold assumptions about (a) their revenue model, (b) their target customer, (c) their growth stage
- Ask them to validate: "Did I get this right? What should I correct?"
- Generate confirmation buttons

When the user replies to this welcome, set phase_signals.introduction_done = true."""

DISCOVERY_INSTRUCTIONS = """\
PHASE: {title} (Turn {turn} of minimum {min_turns})
{pace}
{context}
TOPICS TO EXPLORE (one or two per turn, go deep):
{topics}

CHECKLIST STATUS:
{checklist}

STRATEGY:
{strategy}"""

_DISCOVERY = {
    "company": (
        "COMPANY DNA",
        (),
        "- Ask about ONE missing checklist item per turn\n"
        "- Also go deeper on something already answered with a follow-up question\n"
        "- Provide benchmarks (SaaStr, T2D3, OpenView) for context\n"
        "- Connect every question to why it matters for revenue strategy",
    ),
    "gtm": (
        "GO-TO-MARKET",
        ("businessModel", "stage", "revenue", "teamSize"),
        "- Open with a short summary of the company DNA, then pivot to GTM\n"
        "- Push the ICP to specificity: title, company size, funding stage\n"
        "- Ask about channel performance, not just which channels exist\n"
        "- Ask who they lose deals to and why",
    ),
    "sales": (
        "SALES ENGINE",
        ("businessModel", "icpTitle", "salesMotion", "avgDealSize"),
        "- Ask for a walkthrough of a recent deal from first touch to signature\n"
        "- For the bottleneck, state a hypothesis first and ask them to confirm it\n"
        "- Cover post-sale: onboarding, churn, expansion\n"
        "- Ask which CRM and sales tools they use",
    ),
}

DIAGNOSIS_PRESENT_INSTRUCTIONS = """\
PHASE: DIAGNOSIS, PRESENT YOUR FINDINGS

You have gathered enough data. Present your diagnostic now:
1. COMPANY SNAPSHOT: 4-5 sentences using ONLY confirmed data
2. THREE REVENUE PROBLEMS, each with root cause (what the user told you), revenue \
impact, benchmark and severity
3. CORE HYPOTHESIS: one sentence connecting the three problems
4. Ask: "Does this resonate? What did I get right, and what did I miss?"

Set phase_signals.diagnosis_presented = true
Set profile_updates.diagnosedProblems = ["Problem 1", "Problem 2", "Problem 3"]
Set profile_updates.rootCauses = ["Cause 1", "Cause 2", "Cause 3"]
Only reference confirmed data. Do not invent metrics."""

DIAGNOSIS_VALIDATE_INSTRUCTIONS = """\
PHASE: DIAGNOSIS, VALIDATION

The user responded to your diagnosis:
- If they agreed, suggest a priority order and ask which problem is #1
- If they disagreed, ask what is wrong and adjust
- Ask: "Which problem is your #1 priority? What have you already tried?"

Set phase_signals.diagnosis_validated = true when they confirm.
Extract userPriority from their response."""

PRE_FINISH_INSTRUCTIONS = """\
PHASE: FINAL SUMMARY

Present the complete picture using ONLY confirmed data:
1. Company snapshot
2. The diagnosed problems in priority order
3. Preview of the Strategic Growth Plan: executive summary, findings, 90-day roadmap, metrics, tools
4. Ask: "Ready to generate?"

MUST include the button {"key": "generate_report", "label": "📥 Generate Strategic Growth Plan"}
and {"key": "add_context", "label": "I want to add more context first"}."""


def _checklist_status(session: Session, phase: PhaseDefinition) -> str:
    lines = []
    for name in phase.checklist:
        if is_present(session.profile, name):
            value = format_value(get_value(session.profile, name))
            lines.append(f"  ✅ {name}: {value} (DONE, don't re-ask)")
        else:
            lines.append(f"  ❓ {name}: NOT YET COLLECTED")
    return "\n".join(lines)


def _discovery_instructions(session: Session, phase: PhaseDefinition) -> str:
    title, context_fields, strategy = _DISCOVERY[phase.id]
    turns_left = phase.min_turns - session.phase_turns
    if turns_left > 0:
        pace = f"You need at least {turns_left} more turn(s) in this phase. Take your time."
    else:
        pace = "You can transition soon if all checklist items are filled."

    context = ""
    if context_fields:
        known = " | ".join(
            f"{name}: {format_value(get_value(session.profile, name)) or '?'}"
            for name in context_fields
        )
        context = f"\nCONTEXT: {known}\n"

    return DISCOVERY_INSTRUCTIONS.format(
        title=title,
        turn=session.phase_turns + 1,
        min_turns=phase.min_turns,
        pace=pace,
        context=context,
        topics="\n".join(f"  {i}. {t}" for i, t in enumerate(phase.depth_topics, 1)),
        checklist=_checklist_status(session, phase),
        strategy=strategy,
    )


def phase_instructions(session: Session, engine: PhaseEngine) -> str:
    phase = engine.definition(session)
    if phase is None:
        return "Continue the conversation naturally."
    if phase.id == "welcome":
        return WELCOME_INSTRUCTIONS.format(turn=session.phase_turns + 1)
    if phase.id in _DISCOVERY:
        return _discovery_instructions(session, phase)
    if phase.id == "diagnosis":
        if not session.diagnosis_presented:
            return DIAGNOSIS_PRESENT_INSTRUCTIONS
        if not session.diagnosis_validated:
            return DIAGNOSIS_VALIDATE_INSTRUCTIONS
        return "Diagnosis complete. Transition to the final summary."
    if phase.id == "pre_finish":
        return PRE_FINISH_INSTRUCTIONS
    return "Continue the conversation naturally."


def build_turn_prompt(
    session: Session,
    choice: str,
    engine: PhaseEngine,
    attachments: str = "",
) -> str:
    """Render the full single-shot prompt for the generator."""
    if choice == SNAPSHOT_INIT:
        latest = "═══ This is the FIRST message, welcome them ═══"
    else:
        latest = f'═══ USER\'S LATEST MESSAGE ═══\n"{choice}"'

    return TURN_PROMPT.format(
        transcript=render_transcript(session.transcript),
        profile=profile_context(session, engine),
        scraped=session.scraped_summary or "(none)",
        attachments=attachments,
        phase=session.current_phase,
        phase_turns=session.phase_turns,
        total_turns=session.total_turns,
        instructions=phase_instructions(session, engine),
        latest=latest,
        field_names=", ".join(sorted(FIELD_NAMES)),
    )
