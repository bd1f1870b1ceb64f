"""Shared fixtures and markers for the test suite."""

from pathlib import Path

import pytest

from revenue_architect.benchmarks import BenchmarkLibrary, read_benchmark_file
from revenue_architect.profile import Profile
from revenue_architect.session import Session

BENCHMARKS_FILE = Path("data/benchmarks/saas-stages.json")


def pytest_configure(config):
    config.addinivalue_line(
        "markers",
        "integration: marks tests that require live services (Ollama)",
    )


def is_ollama_available() -> bool:
    """Check if the Ollama server is reachable and has a model."""
    try:
        import ollama

        models = ollama.list().get("models", [])
        return len(models) > 0
    except Exception:
        return False


@pytest.fixture
def library() -> BenchmarkLibrary:
    return read_benchmark_file(BENCHMARKS_FILE)


@pytest.fixture
def company_profile() -> Profile:
    """A seed-stage SaaS company after the company phase."""
    return Profile.model_validate({
        "companyName": "Acme Analytics",
        "website": "https://acme.example",
        "businessModel": "B2B SaaS subscription",
        "stage": "Seed",
        "revenue": "€20K MRR",
        "teamSize": "8",
        "funding": "Seed round, €1.2M",
    })


@pytest.fixture
def full_profile() -> Profile:
    """Every field that contributes to the confidence score is filled."""
    return Profile.model_validate({
        "companyName": "Acme Analytics",
        "businessModel": "B2B SaaS subscription",
        "stage": "Series A, scaling fast",
        "revenue": "€120K MRR",
        "teamSize": "35",
        "funding": "Series A",
        "icpTitle": "Head of Finance at 50-200 employee SaaS",
        "salesMotion": "Inbound plus founder-led sales",
        "channels": "SEO, LinkedIn, referrals",
        "avgDealSize": "€12,000",
        "salesProcess": "Demo, trial, proposal, close",
        "whoCloses": "Founder",
        "mainBottleneck": "Scaling beyond founder-led sales",
        "teamRoles": "20 engineering, 8 commercial",
        "pricingModel": "Per seat, annual",
        "revenueGrowth": "8% MoM",
        "competitiveLandscape": "Spreadsheets and two funded competitors",
        "icpCompanySize": "50-200 employees",
        "icpPainPoints": "Month-end close takes two weeks",
        "bestChannel": "Referrals",
        "salesCycle": "40 days",
        "winRate": "25%",
        "lostDealReasons": "Missing ERP integration",
        "churnRate": "2%",
        "crm": "HubSpot Pro",
        "tools": "Gong, Notion",
        "diagnosedProblems": ["Founder-dependent closing", "No outbound engine"],
        "userPriority": "Hire the first AE",
    })


@pytest.fixture
def sample_session(company_profile: Profile) -> Session:
    return Session(
        current_phase="company",
        phase_turns=2,
        total_turns=4,
        introduction_done=True,
        profile=company_profile,
    )
