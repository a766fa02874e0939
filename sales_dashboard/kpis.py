"""
KPI computation functions — pure functions with no side effects.

Provides manager/employee filtering, opportunity de-duplication, the
headline metric set, the monthly hours trend (least-squares fit) and the
opportunity-level breakdowns shown on the overview charts.
"""

import logging
from collections.abc import Iterable, Sequence

import pandas as pd

from .config import (
    BOOKED_STATUSES,
    LEANIX_INITIATIVE,
    TOP_OWNERS_LIMIT,
    UNASSIGNED_OWNER,
    UNKNOWN_ACCOUNT,
    UNKNOWN_REGION,
    UNKNOWN_STATUS,
    UNMATCHED_STATUS,
)
from .models import (
    ActivityDetailRecord,
    ActivityRecord,
    EnrichedActivityRecord,
    MetricSet,
    OpportunityRecord,
)
from .transforms import build_opportunity_lookup

logger = logging.getLogger(__name__)

TREND_COLUMNS = ["key", "month", "label", "hours", "index"]


def is_booked(status: str | None) -> bool:
    """True for 'Booked' or 'Won', in any letter case."""
    return bool(status) and status.lower() in BOOKED_STATUSES


def _name_field(mode: str) -> str:
    if mode == "manager":
        return "activ_team_manager_name"
    if mode == "employee":
        return "activ_team_empl_name"
    raise ValueError(f"Unknown view mode: {mode!r}")


def filter_activities(
    enriched: Iterable[EnrichedActivityRecord],
    mode: str,
    name: str | None,
) -> list[EnrichedActivityRecord]:
    """Activities whose team manager (mode='manager') or employee
    (mode='employee') equals `name`. No name selects nothing."""
    field = _name_field(mode)
    if not name:
        return []
    return [a for a in enriched if getattr(a, field) == name]


def dedupe_activity_log(
    filtered: Iterable[EnrichedActivityRecord],
) -> list[EnrichedActivityRecord]:
    """One row per opportunity for the activity log table.

    Keeps the first activity seen for each opportunity id, then orders by
    opportunity ACV descending (ties keep their original order).
    """
    seen = set()
    unique = []
    for activity in filtered:
        if activity.opp_id in seen:
            continue
        seen.add(activity.opp_id)
        unique.append(activity)
    return sorted(unique, key=lambda a: a.opp_acv_usd_k, reverse=True)


def compute_metrics(filtered: Sequence[EnrichedActivityRecord]) -> MetricSet:
    """Headline metrics over a filtered activity set.

    Logic
    -----
    - Opportunities are de-duplicated by id; the first activity seen for an
      id supplies its ACV, total value and status. Activities without an
      id are not counted.
    - supported_pipeline: sum of ACV (K USD) over unique opportunities.
    - booked_value / booked_opps_count: total value and count of unique
      opportunities whose status is Booked or Won.
    - leanix_count: distinct opportunity ids with at least one LeanIX
      activity, counted over the filtered set before de-duplication.
      Unlike the other metrics it is not taken from the first activity per
      id. LeanIX activities without an opportunity id are left out rather
      than counted together as one extra opportunity.
    """
    if not filtered:
        return MetricSet()

    unique_opps: dict[str, EnrichedActivityRecord] = {}
    for activity in filtered:
        if activity.opp_id and activity.opp_id not in unique_opps:
            unique_opps[activity.opp_id] = activity

    leanix_opps = {
        a.opp_id
        for a in filtered
        if a.activ_initiative == LEANIX_INITIATIVE and a.opp_id
    }

    booked = [a for a in unique_opps.values() if is_booked(a.opp_status)]

    return MetricSet(
        unique_opps_count=len(unique_opps),
        supported_pipeline=sum(a.opp_acv_usd_k for a in unique_opps.values()),
        booked_value=sum(a.adrm_total_value for a in booked),
        booked_opps_count=len(booked),
        leanix_count=len(leanix_opps),
    )


def filter_activity_details(
    details: Iterable[ActivityDetailRecord],
    enriched: Iterable[EnrichedActivityRecord],
    mode: str,
    name: str | None,
) -> list[ActivityDetailRecord]:
    """Time-tracking rows belonging to the current selection.

    Detail rows carry no manager, so in manager mode they are matched
    through the employees that have activities under that manager.
    """
    if not name:
        return []
    if mode == "manager":
        employees = {
            a.activ_team_empl_name
            for a in enriched
            if a.activ_team_manager_name == name and a.activ_team_empl_name
        }
        return [d for d in details if d.activ_team_empl_name in employees]
    if mode == "employee":
        return [d for d in details if d.activ_team_empl_name == name]
    raise ValueError(f"Unknown view mode: {mode!r}")


def fit_linear_trend(values: Sequence[float]) -> tuple[float, float] | None:
    """Ordinary least-squares fit of `values` against their 0-based index.

    Returns (slope, intercept), or None with fewer than two points or a
    zero denominator.
    """
    n = len(values)
    if n < 2:
        return None

    sum_x = sum_y = sum_xy = sum_x2 = 0.0
    for x, y in enumerate(values):
        sum_x += x
        sum_y += y
        sum_xy += x * y
        sum_x2 += x * x

    denominator = n * sum_x2 - sum_x * sum_x
    if denominator == 0:
        return None

    slope = (n * sum_xy - sum_x * sum_y) / denominator
    intercept = (sum_y - slope * sum_x) / n
    return slope, intercept


def monthly_hours_trend(details: Iterable[ActivityDetailRecord]) -> pd.DataFrame:
    """Sum recorded hours per calendar month and attach a linear trend.

    Returns
    -------
    DataFrame sorted by month with columns:
        key ("YYYY-MM", zero-based month), month (first day of month),
        label ("Jan 2025"), hours, index, and trend when at least two
        months are present. Trend values are clamped at zero.
    Rows without a parseable date are left out.
    """
    rows = []
    for detail in details:
        ts = detail.activ_create_date_utc
        if ts is None:
            continue
        rows.append({
            "key": f"{ts.year}-{ts.month - 1:02d}",
            "month": pd.Timestamp(year=ts.year, month=ts.month, day=1),
            "hours": detail.time_recorded_hours,
        })

    if not rows:
        return pd.DataFrame(columns=TREND_COLUMNS)

    df = pd.DataFrame(rows)
    monthly = (
        df.groupby("key", sort=True)
        .agg(month=("month", "first"), hours=("hours", "sum"))
        .reset_index()
    )
    monthly["label"] = monthly["month"].dt.strftime("%b %Y")
    monthly["index"] = range(len(monthly))
    monthly = monthly[TREND_COLUMNS]

    fit = fit_linear_trend(monthly["hours"].tolist())
    if fit is not None:
        slope, intercept = fit
        monthly["trend"] = [max(0.0, slope * i + intercept) for i in monthly["index"]]
        logger.info(
            "Fitted hours trend over %d months (slope=%.2f, intercept=%.2f)",
            len(monthly), slope, intercept,
        )

    return monthly


def top_opportunities_by_hours(
    details: Iterable[ActivityDetailRecord],
    activities: Iterable[ActivityRecord],
    opportunities: Iterable[OpportunityRecord],
) -> pd.DataFrame:
    """Total recorded hours per opportunity, highest first.

    Returns
    -------
    DataFrame with columns:
        opp_id, name, acct_name, description, hours, total_value, status, is_booked
    Account and description come from the first activity for the id;
    total and status from the ADRM sheet (0 / "N/A" when absent).
    """
    columns = [
        "opp_id", "name", "acct_name", "description",
        "hours", "total_value", "status", "is_booked",
    ]

    hours_by_opp: dict[str, float] = {}
    for detail in details:
        if detail.opp_id:
            hours_by_opp[detail.opp_id] = (
                hours_by_opp.get(detail.opp_id, 0.0) + detail.time_recorded_hours
            )
    if not hours_by_opp:
        return pd.DataFrame(columns=columns)

    opp_info: dict[str, ActivityRecord] = {}
    for activity in activities:
        if activity.opp_id and activity.opp_id not in opp_info:
            opp_info[activity.opp_id] = activity
    lookup = build_opportunity_lookup(opportunities)

    rows = []
    for opp_id, hours in hours_by_opp.items():
        info = opp_info.get(opp_id)
        acct_name = (info.acct_name if info else None) or UNKNOWN_ACCOUNT
        description = (info.opp_description if info else None) or f"Opp ID: {opp_id}"
        value = lookup.get(opp_id)
        status = value.status if value else UNMATCHED_STATUS
        rows.append({
            "opp_id": opp_id,
            "name": f"{acct_name} - {description}",
            "acct_name": acct_name,
            "description": description,
            "hours": hours,
            "total_value": value.total if value else 0.0,
            "status": status,
            "is_booked": is_booked(status),
        })

    df = pd.DataFrame(rows, columns=columns)
    return df.sort_values("hours", ascending=False, kind="stable").reset_index(drop=True)


def status_breakdown(opportunities: Iterable[OpportunityRecord]) -> pd.DataFrame:
    """Number of opportunities per status (blank -> "Unknown")."""
    statuses = [o.opp_status or UNKNOWN_STATUS for o in opportunities]
    if not statuses:
        return pd.DataFrame(columns=["status", "count"])
    counts = pd.Series(statuses).value_counts(sort=True)
    return counts.rename_axis("status").reset_index(name="count")


def region_value_breakdown(opportunities: Iterable[OpportunityRecord]) -> pd.DataFrame:
    """Total opportunity value per L3 region, highest first."""
    df = pd.DataFrame(
        [
            {"region": o.region_l3_desc or UNKNOWN_REGION, "total": o.total}
            for o in opportunities
        ],
        columns=["region", "total"],
    )
    if df.empty:
        return df
    summed = df.groupby("region", sort=False)["total"].sum()
    return summed.sort_values(ascending=False, kind="stable").reset_index()


def owner_opportunity_counts(
    opportunities: Iterable[OpportunityRecord],
    limit: int = TOP_OWNERS_LIMIT,
) -> pd.DataFrame:
    """Distinct opportunity ids per owner (blank -> "Unassigned"), top `limit`."""
    df = pd.DataFrame(
        [
            {"owner": o.opp_owner or UNASSIGNED_OWNER, "opp_id": o.opp_id or None}
            for o in opportunities
        ],
        columns=["owner", "opp_id"],
    )
    if df.empty:
        return pd.DataFrame(columns=["owner", "opportunities"])
    counts = df.groupby("owner", sort=False)["opp_id"].nunique()
    counts = counts.sort_values(ascending=False, kind="stable").head(limit)
    return counts.rename("opportunities").reset_index()
