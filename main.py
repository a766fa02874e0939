"""
Sales Activity Dashboard — End-to-end analytics pipeline.

Runs the full data pipeline from a workbook to dashboard-ready outputs
and prints smoke-test summaries. Without an argument a simulated
workbook is generated.

Usage:
    python main.py [path/to/export.xlsx]
"""

import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent))

from sales_dashboard.dashboard import (
    format_currency,
    format_kilo_value,
    get_employee_options,
    get_manager_options,
    get_performance_view,
)
from sales_dashboard.errors import SalesDashboardError
from sales_dashboard.kpis import owner_opportunity_counts, region_value_breakdown, status_breakdown
from sales_dashboard.loaders import load_workbook_records
from sales_dashboard.models import Selection
from sales_dashboard.simulator import build_sample_workbook
from sales_dashboard.transforms import enrich_activities, records_to_frame

# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger(__name__)


def _print_view(title: str, view: dict) -> None:
    metrics = view["metrics"]
    print(f"\n{title}: {view['selection'].selected}")
    print(f"  #OPP                   {metrics.unique_opps_count}")
    print(f"  Supported Pipeline     {format_kilo_value(metrics.supported_pipeline)}")
    print(f"  Booked                 {format_currency(metrics.booked_value)}")
    print(f"  #Opp Booked            {metrics.booked_opps_count}")
    print(f"  #OPP LeanIX supported  {metrics.leanix_count}")

    log = records_to_frame(view["activity_log"])
    if not log.empty:
        cols = ["activ_team_empl_name", "opp_id", "acct_name", "opp_status", "opp_acv_usd_k"]
        print(log[cols].head(10).to_string(index=False))

    trend = view["hours_trend"]
    if not trend.empty:
        print("\n  Monthly hours:")
        print(trend.drop(columns=["month"]).to_string(index=False))


def main() -> int:
    """Run the full analytics pipeline and print smoke-test outputs."""

    print("=" * 70)
    print("  SALES ACTIVITY DASHBOARD — Manager & Employee Performance")
    print("  Analytics Pipeline Smoke Test")
    print("=" * 70)

    # ------------------------------------------------------------------
    # 1. Load source data
    # ------------------------------------------------------------------
    print("\n[ 1 ] LOADING SOURCE DATA")
    print("-" * 40)

    if len(sys.argv) > 1:
        source = Path(sys.argv[1])
        print(f"Workbook: {source}")
    else:
        source = build_sample_workbook()
        print("Workbook: simulated sample")

    try:
        opportunities, activities, details = load_workbook_records(source)
    except SalesDashboardError as e:
        logger.error("Failed to process file. %s", e)
        return 1

    print(f"\nOpportunities: {len(opportunities)} rows")
    print(f"Activities:    {len(activities)} rows")
    print(f"Time details:  {len(details)} rows")

    # ------------------------------------------------------------------
    # 2. Opportunity overview
    # ------------------------------------------------------------------
    print("\n[ 2 ] OPPORTUNITY OVERVIEW")
    print("-" * 40)

    if opportunities:
        print("\nStatus breakdown:")
        print(status_breakdown(opportunities).to_string(index=False))
        print("\nValue by region:")
        print(region_value_breakdown(opportunities).to_string(index=False))
        print("\nOpportunities per owner:")
        print(owner_opportunity_counts(opportunities).to_string(index=False))
    else:
        print("No ADRM opportunities in this workbook.")

    # ------------------------------------------------------------------
    # 3. Performance views
    # ------------------------------------------------------------------
    print("\n[ 3 ] PERFORMANCE VIEWS")
    print("-" * 40)

    enriched = enrich_activities(activities, opportunities)
    managers = get_manager_options(enriched)
    employees = get_employee_options(enriched, details)
    print(f"\nManagers:  {managers}")
    print(f"Employees: {employees}")

    if managers:
        view = get_performance_view(
            opportunities, activities, details, Selection(mode="manager", selected=managers[0])
        )
        _print_view("Manager", view)

    if employees:
        view = get_performance_view(
            opportunities, activities, details, Selection(mode="employee", selected=employees[0])
        )
        _print_view("Employee", view)

    print("\n" + "=" * 70)
    print("  Pipeline complete.")
    print("=" * 70)
    return 0


if __name__ == "__main__":
    sys.exit(main())
