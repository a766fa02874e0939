"""
Canonical record types produced by the loaders and consumed by the
transforms, KPI functions and dashboard entry points.

Records are frozen: once a workbook has been ingested its records are
never modified, only replaced wholesale by the next ingestion.
"""

from dataclasses import dataclass, fields
from typing import NamedTuple

import pandas as pd

from .config import ALL_MANAGERS, UNMATCHED_STATUS, VIEW_MODES


@dataclass(frozen=True)
class OpportunityRecord:
    """One row of the ADRM sheet."""

    time_cqn: str | None = None
    year_qtr: str | None = None
    region_l1_desc: str | None = None
    region_l2_desc: str | None = None
    region_l3_desc: str | None = None
    region_l4_desc: str | None = None
    region_l5_desc: str | None = None
    company_id: str | None = None
    company_name: str | None = None
    opp_desc: str | None = None
    opp_id: str | None = None
    opp_status: str | None = None
    opp_ofs_link: str | None = None
    source: str | None = None
    opp_owner: str | None = None
    bp_rev_party: str | None = None
    drm_category: str | None = None
    ml_cq_dynamic: str | None = None
    opp_phase: str | None = None
    quote_avg_net: float = 0.0
    local_ao_name: str | None = None
    qualification_summary: str | None = None
    compelling_event: str | None = None
    funding_score: str | None = None
    stakeholder_score: str | None = None
    customer_challenge: str | None = None
    business_value: str | None = None
    solution_and_differentiation: str | None = None
    competition: str | None = None
    partners_and_eco: str | None = None
    close_plan: str | None = None
    business_case: str | None = None
    bom_confirmed: str | None = None
    adrm: float = 0.0
    upside: float = 0.0
    total: float = 0.0
    adrm_upside: float = 0.0


@dataclass(frozen=True)
class ActivityRecord:
    """One row of the Actividades_2025 sheet."""

    activ_id: str | None = None
    activ_type: str | None = None
    acct_name: str | None = None
    opp_id: str | None = None
    opp_phase: str | None = None
    opp_description: str | None = None
    opp_acv_usd_k: float = 0.0
    activ_status: str | None = None
    activ_team_empl_name: str | None = None
    activ_initiative: str | None = None
    activ_initiative_category: str | None = None
    activ_lead_manager_name: str | None = None
    activ_team_manager_name: str | None = None
    opp_close_quarter: str | None = None
    activ_create_date_utc: pd.Timestamp | None = None
    sbb_region_l1: str | None = None
    sbb_region_l2: str | None = None
    sbb_region_l3: str | None = None
    sbb_region_l4: str | None = None
    sbb_region_l5: str | None = None


@dataclass(frozen=True)
class EnrichedActivityRecord(ActivityRecord):
    """ActivityRecord joined with its opportunity's total value and status."""

    adrm_total_value: float = 0.0
    opp_status: str = UNMATCHED_STATUS

    @classmethod
    def from_activity(
        cls, activity: ActivityRecord, total: float, status: str
    ) -> "EnrichedActivityRecord":
        values = {f.name: getattr(activity, f.name) for f in fields(ActivityRecord)}
        return cls(**values, adrm_total_value=total, opp_status=status)


@dataclass(frozen=True)
class ActivityDetailRecord:
    """One time-tracking row of the Activities_2025_Details sheet."""

    activ_team_empl_name: str | None = None
    opp_id: str | None = None
    activ_create_date_utc: pd.Timestamp | None = None
    time_recorded_hours: float = 0.0


@dataclass(frozen=True)
class MetricSet:
    """Headline metrics for one manager or employee selection."""

    unique_opps_count: int = 0
    supported_pipeline: float = 0.0
    booked_value: float = 0.0
    booked_opps_count: int = 0
    leanix_count: int = 0


@dataclass(frozen=True)
class Selection:
    """Snapshot of the filter state chosen in the UI.

    mode : "manager" or "employee".
    selected : manager or employee name, or None when nothing is chosen.
    manager_filter : narrows the employee list in employee mode;
        ALL_MANAGERS (or None) means unfiltered.
    """

    mode: str = "manager"
    selected: str | None = None
    manager_filter: str | None = ALL_MANAGERS

    def __post_init__(self):
        if self.mode not in VIEW_MODES:
            raise ValueError(f"Unknown view mode: {self.mode!r}")


class IngestionResult(NamedTuple):
    """The three record sequences read from one workbook."""

    opportunities: list[OpportunityRecord]
    activities: list[ActivityRecord]
    details: list[ActivityDetailRecord]
