"""Unit tests for revenue_architect.interview.snapshot — snapshot seeding and attachments."""

from __future__ import annotations

from revenue_architect.interview.snapshot import (
    Attachment,
    CompanySnapshot,
    SiteSnapshot,
    apply_snapshot,
    attachment_context,
    company_name_from_title,
    note_attachments,
)
from revenue_architect.session import Session


def _site() -> SiteSnapshot:
    return SiteSnapshot(
        url="https://acme.example",
        title="Acme Analytics | Revenue intelligence for CFOs",
        description="Close the books in days, not weeks.",
        h1s=["Finance analytics for B2B SaaS"],
        paragraphs=["Connect your ERP in minutes.", "Trusted by 200 finance teams."],
        prices=["€49/mo", "€99/mo"],
        ctas=["Book a demo"],
    )


class TestCompanyNameFromTitle:
    def test_first_segment(self):
        assert company_name_from_title("Acme Analytics | Home") == "Acme Analytics"
        assert company_name_from_title("Acme – Revenue intelligence") == "Acme"

    def test_too_short(self):
        assert company_name_from_title("A") is None

    def test_too_long(self):
        assert company_name_from_title("x" * 60) is None


class TestApplySnapshot:
    """Verify how a snapshot seeds a new session."""

    def test_site_only(self):
        session = apply_snapshot(
            Session(), website="https://acme.example", description="Analytics for CFOs", site=_site()
        )
        profile = session.profile
        assert profile.company_name == "Acme Analytics"
        assert profile.website == "https://acme.example"
        assert profile.product_description == "Analytics for CFOs"
        assert profile.pricing_range == "€49/mo, €99/mo"
        assert 'USER DESCRIPTION: "Analytics for CFOs"' in session.scraped_summary
        assert "PRICING: €49/mo, €99/mo" in session.scraped_summary
        assert "  2. Trusted by 200 finance teams." in session.scraped_summary

    def test_company_page_wins_over_title(self):
        company = CompanySnapshot(
            name="Acme Analytics GmbH", employees="11-50", industry="Software"
        )
        session = apply_snapshot(Session(), site=_site(), company=company)
        assert session.profile.company_name == "Acme Analytics GmbH"
        assert session.profile.team_size == "11-50"
        assert session.profile.industry == "Software"
        assert "LINKEDIN: Acme Analytics GmbH, 11-50 empl, Software" in session.scraped_summary

    def test_nothing_supplied(self):
        session = Session()
        assert apply_snapshot(session) is session


class TestAttachments:
    """Verify attachment notes and the prompt block."""

    def test_note_attachments(self):
        files = [Attachment(name="deck.pdf", type="application/pdf"), Attachment(name="chart.png")]
        session = note_attachments(Session(), files)
        assert session.profile.additional_context == "[Files attached: deck.pdf, chart.png]"

        session = note_attachments(session, [Attachment(name="notes.docx")])
        assert session.profile.additional_context.endswith("\n[Files attached: notes.docx]")

    def test_no_attachments(self):
        session = Session()
        assert note_attachments(session, []) is session
        assert attachment_context([]) == ""

    def test_attachment_context(self):
        files = [
            Attachment.model_validate({"name": "deck.pdf", "type": "application/pdf", "size": 20480}),
            Attachment.model_validate({"name": "funnel.png", "type": "image/png", "size": 1024}),
        ]
        block = attachment_context(files)
        assert 'File 1: "deck.pdf" (application/pdf, 20 KB)' in block
        assert "PDF document" in block
        assert "Image file" in block
        assert block.rstrip().endswith("why they shared them.")
