"""Stage benchmark library and the scorecard/chart/dashboard builders.

The benchmark table is static reference data (median/good/bad per metric,
per stage) loaded once from JSON. Everything derived from it here is
recomputed on demand and never stored in the session.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from revenue_architect.config import settings
from revenue_architect.exceptions import BenchmarkDataError
from revenue_architect.parsing import parse_number, round_half_up
from revenue_architect.profile import Profile, get_value
from revenue_architect.stages import DEFAULT_STAGE

logger = logging.getLogger(__name__)

Assessment = Literal[
    "strong", "critical", "at_or_above_median", "below_median", "not_disclosed"
]

# ---------------------------------------------------------------------------
# Benchmark data
# ---------------------------------------------------------------------------


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="ignore", frozen=True
    )


class MetricBenchmark(_CamelModel):
    median: float | None = None
    good: float | None = None
    bad: float | None = None
    unit: str = ""
    currency: str = ""
    source: str = ""


class SpendRange(_CamelModel):
    min: float | None = None
    max: float | None = None


class BudgetGuidance(_CamelModel):
    tool_spend: SpendRange = Field(default_factory=SpendRange)
    marketing_spend: SpendRange = Field(default_factory=SpendRange)


class StagePlaybook(_CamelModel):
    focus: str = ""
    sales_approach: str = ""
    tech_stack: list[str] = Field(default_factory=list)
    key_metrics: list[str] = Field(default_factory=list)
    budget_guidance: BudgetGuidance = Field(default_factory=BudgetGuidance)
    anti_patterns: list[str] = Field(default_factory=list)
    recommended_actions: list[str] = Field(default_factory=list)


class StageBenchmarks(_CamelModel):
    label: str
    benchmarks: dict[str, MetricBenchmark] = Field(default_factory=dict)
    playbook: StagePlaybook | None = None


class BenchmarkLibrary(_CamelModel):
    stages: dict[str, StageBenchmarks] = Field(default_factory=dict)
    market_context: dict[str, Any] = Field(default_factory=dict, alias="marketContext2026")


def read_benchmark_file(path: Path) -> BenchmarkLibrary:
    """Parse and validate a benchmark JSON file; raise ``BenchmarkDataError``."""
    try:
        with open(path, encoding="utf-8") as f:
            raw = json.load(f)
        return BenchmarkLibrary.model_validate(raw)
    except (OSError, ValueError, ValidationError) as e:
        raise BenchmarkDataError(
            f"Could not load benchmarks from {path}", path=str(path), details={"error": str(e)}
        ) from e


def load_benchmarks(path: Path | None = None) -> BenchmarkLibrary:
    """Load the library, degrading to an empty one if the file is unusable."""
    path = path or settings.benchmarks_path
    try:
        library = read_benchmark_file(path)
    except BenchmarkDataError as e:
        logger.warning("%s (%s); continuing without benchmarks", e, e.details.get("error"))
        return BenchmarkLibrary()
    logger.info("Loaded benchmarks for %d stage(s) from %s", len(library.stages), path)
    return library


# Module-level library, populated on first use
_library: BenchmarkLibrary | None = None


def get_library() -> BenchmarkLibrary:
    global _library
    if _library is None:
        _library = load_benchmarks()
    return _library


def stage_benchmarks(library: BenchmarkLibrary, stage_key: str) -> StageBenchmarks | None:
    """Benchmarks for *stage_key*, falling back to the default stage."""
    return library.stages.get(stage_key) or library.stages.get(DEFAULT_STAGE)


# ---------------------------------------------------------------------------
# Tracked metrics
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class MetricDefinition:
    key: str
    label: str
    profile_field: str | None
    unit: str
    lower_is_better: bool


TRACKED_METRICS: tuple[MetricDefinition, ...] = (
    MetricDefinition("churnMonthly", "Monthly Churn", "churnRate", "%", True),
    MetricDefinition("cac", "CAC", "cac", "€", True),
    MetricDefinition("ltv", "LTV", "ltv", "€", False),
    MetricDefinition("salesCycleDays", "Sales Cycle", "salesCycle", "days", True),
    MetricDefinition("avgDealSize", "Avg Deal Size", "avgDealSize", "€", False),
    MetricDefinition("winRate", "Win Rate", "winRate", "%", False),
    MetricDefinition("netRevenueRetention", "Net Revenue Retention", "nrr", "%", False),
    MetricDefinition("burnMultiple", "Burn Multiple", None, "x", True),
    MetricDefinition("grossMargin", "Gross Margin", None, "%", False),
)


def user_value(profile: Profile, metric: MetricDefinition) -> float | None:
    if metric.profile_field is None:
        return None
    raw = get_value(profile, metric.profile_field)
    if not isinstance(raw, str):
        return None
    return parse_number(raw)


def _tracked(stage_data: StageBenchmarks | None):
    """Yield ``(metric, benchmark)`` for metrics with a configured median."""
    if stage_data is None:
        return
    for metric in TRACKED_METRICS:
        bm = stage_data.benchmarks.get(metric.key)
        if bm is not None and bm.median is not None:
            yield metric, bm


# ---------------------------------------------------------------------------
# Normalization
# ---------------------------------------------------------------------------


def reference_points(
    median: float, good: float | None, bad: float | None, lower_is_better: bool
) -> tuple[float, float]:
    """Resolve ``(good, bad)``, deriving missing ones from the median."""
    if good is None:
        good = median * 0.5 if lower_is_better else median * 2
    if bad is None:
        bad = median * 2 if lower_is_better else median * 0.5
    return good, bad


def normalize(value: float, good: float, bad: float, lower_is_better: bool) -> int:
    """Map *value* onto 0–100 where ``good`` is 100 and ``bad`` is 0."""
    if lower_is_better:
        if value <= good:
            return 100
        if value >= bad:
            return 0
        ratio = (bad - value) / (bad - good)
    else:
        if value >= good:
            return 100
        if value <= bad:
            return 0
        ratio = (value - bad) / (good - bad)
    return max(0, min(100, int(round_half_up(100 * ratio))))


def assess(
    value: float | None, median: float, good: float, bad: float, lower_is_better: bool
) -> Assessment:
    if value is None:
        return "not_disclosed"
    if lower_is_better:
        if value <= good:
            return "strong"
        if value >= bad:
            return "critical"
        return "at_or_above_median" if value <= median else "below_median"
    if value >= good:
        return "strong"
    if value <= bad:
        return "critical"
    return "at_or_above_median" if value >= median else "below_median"


def gauge(
    value: float | None, median: float, good: float, bad: float, lower_is_better: bool
) -> int | None:
    """Number of filled blocks (0–5) in the scorecard's visual bar."""
    if value is None:
        return None
    if lower_is_better:
        if value <= good:
            return 5
        if value >= bad:
            return 0
        ratio = median / max(value, 0.01)
    else:
        if value >= good:
            return 5
        if value <= bad:
            return 0
        ratio = value / max(median, 0.01)
    if ratio >= 1.3:
        return 4
    if ratio >= 1.0:
        return 3
    if ratio >= 0.7:
        return 2
    return 1


# ---------------------------------------------------------------------------
# Scorecard
# ---------------------------------------------------------------------------


class ScorecardRow(BaseModel):
    key: str
    label: str
    unit: str
    lower_is_better: bool
    user_value: float | None
    median: float
    good: float
    bad: float
    score: int | None
    assessment: Assessment
    gauge: int | None


def build_scorecard(profile: Profile, stage_data: StageBenchmarks | None) -> list[ScorecardRow]:
    """One row per tracked metric that has a stage median."""
    rows: list[ScorecardRow] = []
    for metric, bm in _tracked(stage_data):
        value = user_value(profile, metric)
        good, bad = reference_points(bm.median, bm.good, bm.bad, metric.lower_is_better)
        rows.append(ScorecardRow(
            key=metric.key,
            label=metric.label,
            unit=metric.unit,
            lower_is_better=metric.lower_is_better,
            user_value=value,
            median=bm.median,
            good=good,
            bad=bad,
            score=None if value is None else normalize(value, good, bad, metric.lower_is_better),
            assessment=assess(value, bm.median, good, bad, metric.lower_is_better),
            gauge=gauge(value, bm.median, good, bad, metric.lower_is_better),
        ))
    return rows


_ASSESSMENT_LABELS: dict[str, str] = {
    "strong": "Strong",
    "critical": "Critical",
    "at_or_above_median": "At/above median",
    "below_median": "Below median",
    "not_disclosed": "Not disclosed",
}


def _fmt(value: float, unit: str) -> str:
    number = f"{value:g}"
    return f"{number} {unit}" if unit == "days" else f"{number}{unit}"


def render_scorecard(rows: list[ScorecardRow], stage_label: str) -> str:
    """Markdown table handed to the narrative generator; empty if no rows."""
    if not rows:
        return ""
    lines = [
        f"## Benchmark Scorecard — {stage_label} Stage",
        "",
        "| Metric | Your Value | Stage Median | Good | Assessment | Visual |",
        "|--------|-----------|-------------|------|------------|--------|",
    ]
    for row in rows:
        value = _fmt(row.user_value, row.unit) if row.user_value is not None else "*Not disclosed*"
        visual = "—" if row.gauge is None else "●" * row.gauge + "○" * (5 - row.gauge)
        lines.append(
            f"| {row.label} | {value} | {_fmt(row.median, row.unit)} | "
            f"{_fmt(row.good, row.unit)} | {_ASSESSMENT_LABELS[row.assessment]} | {visual} |"
        )
    lines.append("")
    lines.append("> ● = filled towards the good threshold | ○ = room to grow")
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Chart series
# ---------------------------------------------------------------------------


class RadarSeries(BaseModel):
    labels: list[str] = Field(default_factory=list)
    user: list[int] = Field(default_factory=list)
    median: list[int] = Field(default_factory=list)
    good: list[int] = Field(default_factory=list)


class BarSeries(BaseModel):
    labels: list[str] = Field(default_factory=list)
    user: list[int | None] = Field(default_factory=list)
    median: list[int] = Field(default_factory=list)
    good: list[int] = Field(default_factory=list)
    units: list[str] = Field(default_factory=list)
    raw_user: list[float | None] = Field(default_factory=list)
    raw_median: list[float] = Field(default_factory=list)


class ChartSeries(BaseModel):
    stage_label: str
    radar: RadarSeries
    bar: BarSeries


def build_chart_series(profile: Profile, stage_data: StageBenchmarks | None) -> ChartSeries | None:
    """Normalized series for radar/bar charts; ``None`` without benchmarks.

    The bar chart covers every metric with a median; the radar only the
    metrics the user disclosed. "Good" is 100 on both by construction.
    """
    radar = RadarSeries()
    bar = BarSeries()

    for metric, bm in _tracked(stage_data):
        value = user_value(profile, metric)
        good, bad = reference_points(bm.median, bm.good, bm.bad, metric.lower_is_better)
        median_score = normalize(bm.median, good, bad, metric.lower_is_better)
        user_score = None if value is None else normalize(value, good, bad, metric.lower_is_better)

        bar.labels.append(metric.label)
        bar.units.append(metric.unit)
        bar.user.append(user_score)
        bar.median.append(median_score)
        bar.good.append(100)
        bar.raw_user.append(value)
        bar.raw_median.append(bm.median)

        if user_score is not None:
            radar.labels.append(metric.label)
            radar.user.append(user_score)
            radar.median.append(median_score)
            radar.good.append(100)

    if not bar.labels:
        return None
    return ChartSeries(stage_label=stage_data.label, radar=radar, bar=bar)


# ---------------------------------------------------------------------------
# 90-day dashboard
# ---------------------------------------------------------------------------

TARGET_PROGRESS = 0.6


class DashboardMetric(BaseModel):
    key: str
    label: str
    unit: str
    lower_is_better: bool
    current: float
    stage_median: float
    good: float
    bad: float
    target_90_day: float
    health_score: int


class Dashboard(BaseModel):
    company_name: str
    stage_label: str
    generated_at: datetime
    metrics: list[DashboardMetric]


def ninety_day_target(current: float, good: float, lower_is_better: bool) -> float:
    """Move 60% of the way from *current* towards *good*; never past it."""
    if lower_is_better:
        if current <= good:
            return current
        return round_half_up(current - (current - good) * TARGET_PROGRESS, 2)
    if current >= good:
        return current
    return round_half_up(current + (good - current) * TARGET_PROGRESS, 2)


def build_dashboard(profile: Profile, stage_data: StageBenchmarks | None) -> Dashboard | None:
    """Tracking view for disclosed metrics; ``None`` if there are none."""
    metrics: list[DashboardMetric] = []
    for metric, bm in _tracked(stage_data):
        value = user_value(profile, metric)
        if value is None:
            continue
        good, bad = reference_points(bm.median, bm.good, bm.bad, metric.lower_is_better)
        metrics.append(DashboardMetric(
            key=metric.key,
            label=metric.label,
            unit=metric.unit,
            lower_is_better=metric.lower_is_better,
            current=value,
            stage_median=bm.median,
            good=good,
            bad=bad,
            target_90_day=ninety_day_target(value, good, metric.lower_is_better),
            health_score=normalize(value, good, bad, metric.lower_is_better),
        ))

    if not metrics:
        return None
    return Dashboard(
        company_name=profile.company_name or "Company",
        stage_label=stage_data.label,
        generated_at=datetime.now(timezone.utc),
        metrics=metrics,
    )


def render_benchmarks(stage_data: StageBenchmarks | None) -> str:
    """Plain-text listing of a stage's reference values for prompts."""
    if stage_data is None or not stage_data.benchmarks:
        return "(No stage-specific benchmarks available)"
    lines = [f"Stage: {stage_data.label}"]
    for name, bm in stage_data.benchmarks.items():
        if bm.median is None:
            continue
        unit = "%" if bm.unit == "percent" else (f" {bm.currency}" if bm.currency else "")
        line = f"  {name}: median={bm.median:g}{unit}"
        if bm.good is not None:
            line += f", good={bm.good:g}{unit}"
        if bm.bad is not None:
            line += f", bad={bm.bad:g}{unit}"
        if bm.source:
            line += f" ({bm.source})"
        lines.append(line)
    return "\n".join(lines)
