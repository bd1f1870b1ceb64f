"""Seeding a new interview from a website/company snapshot and noting attachments.

Fetching pages is not done here: the caller supplies whatever it scraped
as a ``SiteSnapshot`` and/or ``CompanySnapshot``.
"""

from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict, Field

from revenue_architect.profile import get_value
from revenue_architect.session import Session, update_profile


class SiteSnapshot(BaseModel):
    """Text pulled from the company's website."""

    url: str = ""
    title: str = ""
    description: str = ""
    nav_links: list[str] = Field(default_factory=list)
    h1s: list[str] = Field(default_factory=list)
    h2s: list[str] = Field(default_factory=list)
    paragraphs: list[str] = Field(default_factory=list)
    prices: list[str] = Field(default_factory=list)
    proof: list[str] = Field(default_factory=list)
    ctas: list[str] = Field(default_factory=list)


class CompanySnapshot(BaseModel):
    """Company page data (e.g. LinkedIn)."""

    name: str = ""
    employees: str = ""
    industry: str = ""
    description: str = ""


class Attachment(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    content_type: str = Field(default="", alias="type")
    size: int = 0


_TITLE_SEPARATORS = re.compile(r"[|\-–—:]")


def company_name_from_title(title: str) -> str | None:
    """First segment of a page title, if it looks like a name."""
    name = _TITLE_SEPARATORS.split(title, maxsplit=1)[0].strip()
    if 1 < len(name) < 50:
        return name
    return None


def _joined(items: list[str], sep: str = " | ", empty: str = "-") -> str:
    return sep.join(items) if items else empty


def render_snapshot(
    description: str = "",
    site: SiteSnapshot | None = None,
    company: CompanySnapshot | None = None,
) -> str:
    summary = ""
    if description:
        summary += f'USER DESCRIPTION: "{description}"\n'
    if site is not None:
        content = "\n".join(f"  {i}. {p}" for i, p in enumerate(site.paragraphs, 1)) or "-"
        summary += (
            f"WEBSITE: {site.url}\nTITLE: {site.title}\nDESCRIPTION: {site.description}\n"
            f"NAV: {_joined(site.nav_links)}\nH1: {_joined(site.h1s)}\nH2: {_joined(site.h2s)}\n"
            f"CONTENT:\n{content}\n"
            f"PRICING: {_joined(site.prices, ', ', 'none')}\n"
            f"PROOF: {_joined(site.proof, ' | ', 'none')}\n"
            f"CTAs: {_joined(site.ctas)}\n"
        )
    if company is not None:
        summary += (
            f"LINKEDIN: {company.name}, {company.employees or '?'} empl, "
            f"{company.industry or '?'}\nLI DESC: {company.description}\n"
        )
    return summary


def apply_snapshot(
    session: Session,
    website: str = "",
    description: str = "",
    site: SiteSnapshot | None = None,
    company: CompanySnapshot | None = None,
) -> Session:
    """Seed profile fields from the snapshot and store the scan summary.

    Company page values take precedence over the website title.
    """
    updates: dict[str, str] = {"website": website, "productDescription": description}
    if site is not None:
        name = company_name_from_title(site.title)
        if name:
            updates["companyName"] = name
        if site.prices:
            updates["pricingRange"] = ", ".join(site.prices)
    if company is not None:
        if company.name:
            updates["companyName"] = company.name
        if company.industry:
            updates["industry"] = company.industry
        if company.employees:
            updates["teamSize"] = company.employees

    session = update_profile(session, updates)
    summary = render_snapshot(description, site, company)
    if not summary:
        return session
    return session.model_copy(update={"scraped_summary": summary})


# ---------------------------------------------------------------------------
# Attachments
# ---------------------------------------------------------------------------


def note_attachments(session: Session, attachments: list[Attachment]) -> Session:
    """Append ``[Files attached: ...]`` to additionalContext."""
    if not attachments:
        return session
    existing = get_value(session.profile, "additionalContext") or ""
    names = ", ".join(a.name for a in attachments)
    return update_profile(
        session, {"additionalContext": f"{existing}\n[Files attached: {names}]"}
    )


def attachment_context(attachments: list[Attachment]) -> str:
    """Prompt block describing the attached files; empty without attachments."""
    if not attachments:
        return ""
    lines = ["", "", "═══ USER ATTACHED FILES ═══"]
    for i, file in enumerate(attachments, 1):
        lines.append(
            f'File {i}: "{file.name}" ({file.content_type}, {round(file.size / 1024)} KB)'
        )
        if file.content_type.startswith("image/"):
            lines.append("  → Image file: screenshots, diagrams or analytics the user wants to share")
        elif "pdf" in file.content_type:
            lines.append("  → PDF document: may contain reports, slides or documentation")
        else:
            lines.append("  → Document file: may contain business data, reports or context")
    lines.append(
        "NOTE: Acknowledge the files and ask the user to briefly explain what they "
        "contain and why they shared them."
    )
    return "\n".join(lines)
