"""Interviewee profile — a fixed record of business facts plus the merge rules.

The Profile has one attribute per catalog field. Attribute names are
snake_case; the camelCase catalog names are their aliases and are what
goes over the wire. ``_ATTR_BY_FIELD`` is the static name→attribute table
used by the generic operations below, so an unknown field name is a single
failed dict lookup.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from revenue_architect.catalog import FIELD_NAMES, LIST_FIELDS, label_for

FieldValue = str | list[str]


class Profile(BaseModel):
    """Structured facts learned about the interviewee's business."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
        coerce_numbers_to_str=True,
    )

    # Company DNA
    company_name: str = ""
    website: str = ""
    industry: str = ""
    business_model: str = ""
    stage: str = ""
    company_stage: str = ""
    revenue: str = ""
    revenue_growth: str = ""
    team_size: str = ""
    team_roles: str = ""
    funding: str = ""
    runway: str = ""
    product_description: str = ""
    pricing_model: str = ""
    pricing_range: str = ""
    competitive_landscape: str = ""
    differentiator: str = ""

    # Ideal customer profile
    icp_title: str = ""
    icp_company_size: str = ""
    icp_industry: str = ""
    icp_pain_points: str = ""
    icp_decision_process: str = ""
    icp_budget: str = ""

    # Go-to-market
    sales_motion: str = ""
    channels: str = ""
    best_channel: str = ""
    channel_roi: str = Field(default="", alias="channelROI")
    avg_deal_size: str = ""
    sales_cycle: str = ""
    cac: str = ""
    ltv: str = ""
    content_strategy: str = ""
    lead_gen_method: str = ""

    # Sales engine
    sales_process: str = ""
    process_stages: str = ""
    process_documented: str = ""
    who_closes: str = ""
    founder_involvement: str = ""
    win_rate: str = ""
    lost_deal_reasons: str = ""
    main_objections: str = ""
    main_bottleneck: str = ""
    secondary_bottleneck: str = ""
    churn_rate: str = ""
    churn_reasons: str = ""
    expansion_revenue: str = ""
    nrr: str = ""
    crm: str = ""
    tools: str = ""
    automation_level: str = ""
    onboarding_process: str = ""
    customer_success: str = ""

    # Diagnosis
    diagnosed_problems: list[str] = Field(default_factory=list)
    root_causes: list[str] = Field(default_factory=list)
    validated_problems: list[str] = Field(default_factory=list)
    user_priority: str = ""
    past_attempts: str = ""
    budget_level: str = ""
    growth_target: str = ""
    constraints: str = ""
    additional_context: str = ""

    # Operating model
    current_situation: str = ""
    org_structure: str = ""
    decision_making: str = ""
    key_dependencies: str = ""
    team_morale: str = ""
    systems_landscape: str = ""
    roadmap: str = ""
    planned_changes: str = ""
    team_enablement: str = ""

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        # Stored sessions may carry null for "not collected yet"
        if isinstance(data, Mapping):
            return {k: v for k, v in data.items() if v is not None}
        return data

    def to_wire(self) -> dict[str, FieldValue]:
        """Dump with camelCase field names."""
        return self.model_dump(by_alias=True)


_ATTR_BY_FIELD: Mapping[str, str] = {
    (info.alias or name): name for name, info in Profile.model_fields.items()
}


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------


def get_value(profile: Profile, name: str) -> FieldValue | None:
    """Return the value stored under catalog field *name*, or ``None``."""
    attr = _ATTR_BY_FIELD.get(name)
    if attr is None:
        return None
    return getattr(profile, attr)


def _has_content(value: FieldValue | None) -> bool:
    if isinstance(value, list):
        return len(value) > 0
    return bool(value and value.strip())


def is_present(profile: Profile, name: str) -> bool:
    """A scalar is present when non-blank, a list when non-empty."""
    return _has_content(get_value(profile, name))


def present_fields(profile: Profile) -> list[str]:
    """Catalog names of every present field, in catalog order."""
    return [name for name in _ATTR_BY_FIELD if is_present(profile, name)]


def missing_fields(profile: Profile, names: Iterable[str]) -> list[str]:
    """Subset of *names* that is not present, order preserved."""
    return [name for name in names if not is_present(profile, name)]


def format_value(value: FieldValue | None) -> str:
    """Render a field value as one line of text (lists joined with ``; ``)."""
    if value is None:
        return ""
    if isinstance(value, list):
        return "; ".join(value)
    return value.strip()


def confirmed_lines(profile: Profile) -> list[str]:
    """``Label: value`` for every present field."""
    return [
        f"{label_for(name)}: {format_value(get_value(profile, name))}"
        for name in present_fields(profile)
    ]


# ---------------------------------------------------------------------------
# Merge
# ---------------------------------------------------------------------------


def _clean_scalar(value: Any) -> str | None:
    """Trimmed text for strings and numbers; ``None`` for anything else."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        value = str(value)
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value or None


def _merge_list(existing: list[str], candidate: Any) -> list[str]:
    items = candidate if isinstance(candidate, (list, tuple)) else [candidate]
    merged = list(existing)
    seen = set(existing)
    for item in items:
        text = _clean_scalar(item)
        if text is not None and text not in seen:
            seen.add(text)
            merged.append(text)
    return merged


def apply_updates(profile: Profile, updates: Mapping[str, Any] | None) -> Profile:
    """Merge generator-proposed updates into *profile* and return a new Profile.

    - names outside the catalog are skipped
    - list fields: union with the existing items (exact-match dedup, prior
      order kept, new items appended in the order supplied)
    - scalar fields: a non-blank value replaces the previous one
    - ``None``/blank candidates never overwrite anything

    Applying the same ``updates`` twice gives the same result as once.
    """
    if not updates or not isinstance(updates, Mapping):
        return profile

    changes: dict[str, FieldValue] = {}
    for name, candidate in updates.items():
        if name not in FIELD_NAMES or candidate is None:
            continue
        attr = _ATTR_BY_FIELD[name]
        if name in LIST_FIELDS:
            current = changes.get(attr, getattr(profile, attr))
            merged = _merge_list(current, candidate)
            if merged != current:
                changes[attr] = merged
        else:
            text = _clean_scalar(candidate)
            if text is not None:
                changes[attr] = text

    if not changes:
        return profile
    return profile.model_copy(update=changes)
