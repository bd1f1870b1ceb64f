"""Ollama client wrapper with prompt templates for interview turns and reports."""

from __future__ import annotations

import json
import logging
import re
from typing import Any

import httpx
import ollama

from revenue_architect.config import settings
from revenue_architect.exceptions import GenerationError

logger = logging.getLogger(__name__)

# ConnectionError covers refused connections; httpx raises the rest of the
# transport failures directly
_CLIENT_ERRORS = (ollama.ResponseError, ollama.RequestError, httpx.HTTPError, ConnectionError)

# ---------------------------------------------------------------------------
# Prompt templates
# ---------------------------------------------------------------------------

SYSTEM_ARCHITECT = (
    "You are the REVENUE ARCHITECT, a senior B2B revenue strategist with 20+ "
    "years of experience. You run deep discovery calls with founders and revenue "
    "leaders. Your style is direct, analytical and specific. You know MEDDPICC, "
    "the Bow-Tie funnel, T2D3, SaaStr benchmarks, April Dunford positioning, "
    "AARRR and David Sacks' efficiency metrics, and you reference them naturally. "
    "Always answer in the language the user writes in."
)

TURN_PROMPT = """\
═══ CONVERSATION TRANSCRIPT (your full conversation so far) ═══
{transcript}

═══ CONFIRMED PROFILE DATA ═══
{profile}

═══ WEBSITE SCAN DATA ═══
{scraped}
{attachments}

═══ CURRENT STATE ═══
Phase: {phase} | Phase turn: {phase_turns} | Total turns: {total_turns}

═══ YOUR INSTRUCTIONS ═══
{instructions}

{latest}

═══ RESPONSE FORMAT ═══
Return a JSON object with these fields:
- "message": your markdown response, thorough and specific
- "options": a list of 3-5 buttons, each {{"key": "short_key", "label": "Button text (max 60 chars)"}}
- "profile_updates": facts extracted from the user's latest message, keyed by \
field name. Use only these field names: {field_names}. For diagnosedProblems \
and rootCauses provide a list of strings.
- "phase_signals": {{"introduction_done": bool, "diagnosis_presented": bool, \
"diagnosis_validated": bool}}, true only when the event happened this turn

═══ RULES ═══
1. Read the transcript. Never ask something that was already answered.
2. Acknowledge the user's specific answer before moving on.
3. Go deep, not wide. Ask follow-ups.
4. Buttons must match your question, not generic options.
5. Never invent data. Only reference confirmed profile data or website data.
6. Every turn should teach the user something: a benchmark, a framework or an insight.
7. If the user attached files, acknowledge them and ask what they contain.

Respond ONLY with valid JSON, no extra text.
"""

REPORT_PROMPT = """\
Generate a Strategic Growth Plan for {company_name}.

ROLE: Senior B2B revenue strategist. Rigorous analysis, practical and actionable.
OUTPUT: Pure Markdown. No JSON, no code fences.
LANGUAGE: {language}

═══ PRIMARY SOURCE: FULL CONVERSATION TRANSCRIPT ═══
(This is the ground truth. Reference specific things the user said.)
{transcript}

═══ CONFIRMED PROFILE DATA ═══
{confirmed}

═══ UNKNOWN FIELDS (not provided by the user, DO NOT INVENT) ═══
{unknown}

═══ STAGE-SPECIFIC BENCHMARKS ═══
{benchmarks}
{playbook}
{market}

═══ PRE-ANALYSIS GUARDRAIL: FEASIBILITY FLAGS ═══
(Address every flag explicitly in Diagnostic Findings or Risk Mitigation.)
{flags}

═══ BENCHMARK SCORECARD (pre-computed, embed in the report) ═══
{scorecard}

═══ OPERATING MODEL DATA ═══
{operating_model}

═══ WEBSITE SCAN ═══
{scraped}

═══ REPORT STRUCTURE ═══
# Strategic Growth Plan
## {company_name} | {today}

## Strategic Narrative
### The Current State
### The Hard Truth
(three findings F1, F2, F3 connected into a causal chain)
### The Unlock
(connected to the user's stated priority: "{user_priority}")
### The Risk of Inaction

## Company Profile
(table: dimension, current state, {stage_label} benchmark, assessment)

## ICP & Go-to-Market
## Diagnostic Findings
## Root Cause Analysis: Causal Chain
## Strategic Recommendations
(three priorities over weeks 1-12; each names its parent_finding_id and a trade-off)
## 90-Day Roadmap
(Month 1 enables Month 2, Month 2 enables Month 3)
## Benchmark Scorecard
(embed the scorecard as-is, then interpret it in 3-5 sentences)
## Operating Model Design
## Metrics Dashboard
## Risk Mitigation
## Recommended Tools: Stage-Calibrated
(max ~€{tool_ceiling}/mo total)
## Quick Wins
## Next Steps

═══ ANTI-HALLUCINATION RULES ═══
1. CONFIRMED fields may be used freely. UNKNOWN fields are "Not disclosed". Never invent.
2. Label every estimate: "~€X (estimated based on ...)".
3. Every recommendation, quick win and risk traces to a finding (F1, F2 or F3).
4. All benchmarks, tools and budgets must fit the {stage_label} stage.
5. Do not produce a roadmap that ignores the feasibility flags.
"""


# ---------------------------------------------------------------------------
# Client functions
# ---------------------------------------------------------------------------


def generate(
    prompt: str,
    system_prompt: str = SYSTEM_ARCHITECT,
    temperature: float = 0.3,
) -> str:
    """Send a prompt to Ollama and return the raw text response."""
    response = ollama.chat(
        model=settings.ollama_model,
        messages=[
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": prompt},
        ],
        options={"temperature": temperature},
    )
    return response["message"]["content"]


def generate_json(prompt: str, system_prompt: str = SYSTEM_ARCHITECT) -> dict[str, Any]:
    """Send a prompt and parse the response as JSON.

    Tries Ollama's native JSON format first; falls back to extracting
    a JSON block from the text response.
    """
    try:
        response = ollama.chat(
            model=settings.ollama_model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": prompt},
            ],
            format="json",
            options={"temperature": 0.7},
        )
        return json.loads(response["message"]["content"])
    except (json.JSONDecodeError, KeyError):
        # Fallback: try without format=json and extract manually
        raw = generate(prompt, system_prompt)
        return _extract_json(raw)


def _extract_json(text: str) -> dict[str, Any]:
    """Best-effort extraction of a JSON object from LLM output."""
    # Try fenced code block first
    match = re.search(r"```(?:json)?\s*(\{.*?\})\s*```", text, re.DOTALL)
    if match:
        return json.loads(match.group(1))

    # Try raw JSON object
    match = re.search(r"\{.*\}", text, re.DOTALL)
    if match:
        return json.loads(match.group(0))

    raise ValueError(f"Could not extract JSON from LLM response: {text[:200]}")


def _strip_fences(text: str) -> str:
    text = re.sub(r"^```(?:markdown)?\s*", "", text.strip(), flags=re.IGNORECASE)
    return re.sub(r"\s*```$", "", text).strip()


# ---------------------------------------------------------------------------
# High-level functions
# ---------------------------------------------------------------------------


def draft_turn(prompt: str) -> dict[str, Any]:
    """Ask the model for the next interview turn.

    Returns the raw reply object; its shape is validated by the caller.
    Raises ``GenerationError`` on any client, transport or JSON failure.
    """
    try:
        reply = generate_json(prompt)
    except (*_CLIENT_ERRORS, ValueError, KeyError) as e:
        raise GenerationError(
            "Turn generation failed", details={"model": settings.ollama_model, "error": str(e)}
        ) from e

    if not isinstance(reply, dict):
        raise GenerationError(
            "Turn generation returned a non-object reply",
            details={"type": type(reply).__name__},
        )
    return reply


def write_report(prompt: str) -> str:
    """Generate the Strategic Growth Plan markdown."""
    try:
        markdown = _strip_fences(generate(prompt, temperature=0.4))
    except (*_CLIENT_ERRORS, KeyError) as e:
        raise GenerationError(
            "Report generation failed", details={"model": settings.ollama_model, "error": str(e)}
        ) from e

    if not markdown:
        raise GenerationError("Report generation returned an empty document")
    logger.info("Report generated (%d chars)", len(markdown))
    return markdown
