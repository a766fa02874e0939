"""
Dashboard-ready output functions.

These are the primary entry points for the Streamlit front end. Each
function takes the ingested records plus an explicit Selection snapshot
and returns plain lists, dicts or DataFrames ready for rendering cards,
selectors, charts and tables.
"""

import logging
from collections.abc import Iterable, Sequence

from .config import ALL_MANAGERS
from .kpis import (
    compute_metrics,
    dedupe_activity_log,
    filter_activities,
    filter_activity_details,
    monthly_hours_trend,
    top_opportunities_by_hours,
)
from .models import (
    ActivityDetailRecord,
    ActivityRecord,
    EnrichedActivityRecord,
    OpportunityRecord,
    Selection,
)
from .transforms import enrich_activities

logger = logging.getLogger(__name__)


def get_manager_options(activities: Iterable[ActivityRecord]) -> list[str]:
    """Sorted distinct team-manager names for the manager selector."""
    return sorted({a.activ_team_manager_name for a in activities if a.activ_team_manager_name})


def get_manager_filter_options(activities: Iterable[ActivityRecord]) -> list[str]:
    """Manager filter shown in the employee view: "All Managers" first."""
    return [ALL_MANAGERS, *get_manager_options(activities)]


def get_employee_options(
    activities: Iterable[ActivityRecord],
    details: Iterable[ActivityDetailRecord],
    manager_filter: str | None = ALL_MANAGERS,
) -> list[str]:
    """Sorted distinct employee names visible under `manager_filter`.

    Without an active manager filter, employees that only appear in the
    time-tracking sheet are offered as well.
    """
    filtered = bool(manager_filter) and manager_filter != ALL_MANAGERS
    names = {
        a.activ_team_empl_name
        for a in activities
        if a.activ_team_empl_name
        and (not filtered or a.activ_team_manager_name == manager_filter)
    }
    if not filtered:
        names.update(d.activ_team_empl_name for d in details if d.activ_team_empl_name)
    return sorted(names)


def get_selector_options(
    enriched: Sequence[EnrichedActivityRecord],
    details: Sequence[ActivityDetailRecord],
    selection: Selection,
) -> list[str]:
    """Names offered by the main selector for the current view mode."""
    if selection.mode == "manager":
        return get_manager_options(enriched)
    return get_employee_options(enriched, details, selection.manager_filter)


def resolve_selection(options: Sequence[str], current: str | None) -> str | None:
    """Keep `current` while it is still offered, else fall back to the first option."""
    if current and current in options:
        return current
    return options[0] if options else None


def get_performance_view(
    opportunities: Sequence[OpportunityRecord],
    activities: Sequence[ActivityRecord],
    details: Sequence[ActivityDetailRecord],
    selection: Selection,
) -> dict:
    """Single entry point the Streamlit page calls to populate one view.

    Parameters
    ----------
    opportunities, activities, details : Ingested record sequences.
    selection : Current view mode, chosen name and manager filter.

    Returns
    -------
    Dict with structure:
    {
        "selection": Selection with `selected` resolved against the options,
        "options": [...],               # main selector names
        "manager_filter_options": [...],
        "enriched": [...],              # all enriched activities
        "activities": [...],            # filtered, not de-duplicated
        "metrics": MetricSet,
        "activity_log": [...],          # one row per opportunity, ACV desc
        "details": [...],               # filtered time-tracking rows
        "hours_trend": DataFrame,       # from monthly_hours_trend()
        "top_opportunities": DataFrame, # from top_opportunities_by_hours()
    }
    """
    enriched = enrich_activities(activities, opportunities)
    options = get_selector_options(enriched, details, selection)
    selected = resolve_selection(options, selection.selected)
    resolved = Selection(
        mode=selection.mode,
        selected=selected,
        manager_filter=selection.manager_filter,
    )

    filtered = filter_activities(enriched, resolved.mode, selected)
    filtered_details = filter_activity_details(details, enriched, resolved.mode, selected)

    if selected is None:
        logger.warning("No %s available for the current filter", resolved.mode)

    return {
        "selection": resolved,
        "options": options,
        "manager_filter_options": get_manager_filter_options(activities),
        "enriched": enriched,
        "activities": filtered,
        "metrics": compute_metrics(filtered),
        "activity_log": dedupe_activity_log(filtered),
        "details": filtered_details,
        "hours_trend": monthly_hours_trend(filtered_details),
        "top_opportunities": top_opportunities_by_hours(
            filtered_details, activities, opportunities
        ),
    }


def format_currency(value: float) -> str:
    """USD with thousands separators and no decimals, e.g. "$50,000"."""
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,.0f}"


def format_kilo_value(value: float) -> str:
    """Format a K-USD amount: "$1.5M" from 1000 upwards, otherwise "$250K"."""
    if value >= 1000:
        return f"${value / 1000:.1f}M"
    return f"${round(value):,}K"
