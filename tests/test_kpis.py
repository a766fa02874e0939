"""Tests for selection filtering, headline metrics and the hours trend."""

import pandas as pd
import pytest

from sales_dashboard.kpis import (
    TREND_COLUMNS,
    compute_metrics,
    dedupe_activity_log,
    filter_activities,
    filter_activity_details,
    fit_linear_trend,
    is_booked,
    monthly_hours_trend,
    owner_opportunity_counts,
    region_value_breakdown,
    status_breakdown,
    top_opportunities_by_hours,
)
from sales_dashboard.models import (
    ActivityDetailRecord,
    EnrichedActivityRecord,
    MetricSet,
    OpportunityRecord,
)
from sales_dashboard.transforms import enrich_activities


@pytest.fixture
def enriched(activities, opportunities) -> list[EnrichedActivityRecord]:
    return enrich_activities(activities, opportunities)


def _detail(month: str, hours: float, name: str = "Carlos") -> ActivityDetailRecord:
    return ActivityDetailRecord(name, "A", pd.Timestamp(month), hours)


class TestIsBooked:
    @pytest.mark.parametrize("status", ["Booked", "booked", "WON", "won", "Won"])
    def test_booked(self, status) -> None:
        assert is_booked(status)

    @pytest.mark.parametrize("status", ["Lost", "Open", "N/A", "", None])
    def test_not_booked(self, status) -> None:
        assert not is_booked(status)


class TestFilterActivities:
    def test_by_manager(self, enriched) -> None:
        assert [a.activ_id for a in filter_activities(enriched, "manager", "Laura")] == ["1", "2", "3"]

    def test_by_employee(self, enriched) -> None:
        assert [a.activ_id for a in filter_activities(enriched, "employee", "Ana")] == ["2", "3"]

    def test_no_name_selects_nothing(self, enriched) -> None:
        assert filter_activities(enriched, "manager", None) == []

    def test_unknown_mode(self, enriched) -> None:
        with pytest.raises(ValueError):
            filter_activities(enriched, "team", "Laura")


class TestComputeMetrics:
    def test_manager_metrics(self, enriched) -> None:
        metrics = compute_metrics(filter_activities(enriched, "manager", "Laura"))
        assert metrics == MetricSet(
            unique_opps_count=2,
            supported_pipeline=300.0,
            booked_value=50000.0,
            booked_opps_count=1,
            leanix_count=1,
        )

    def test_employee_metrics_use_first_activity_per_opp(self, enriched) -> None:
        metrics = compute_metrics(filter_activities(enriched, "employee", "Ana"))
        assert metrics.unique_opps_count == 2
        assert metrics.supported_pipeline == 1199.0
        assert metrics.booked_value == 50000.0
        assert metrics.leanix_count == 0

    def test_lowercase_won_counts_as_booked(self, enriched) -> None:
        metrics = compute_metrics(filter_activities(enriched, "manager", "Miguel"))
        assert metrics.booked_value == 7000.0
        assert metrics.booked_opps_count == 1

    def test_empty_selection(self) -> None:
        assert compute_metrics([]) == MetricSet()

    def test_leanix_counted_before_dedupe(self) -> None:
        filtered = [
            EnrichedActivityRecord(opp_id="X", opp_acv_usd_k=10.0, activ_initiative="BTP"),
            EnrichedActivityRecord(opp_id="X", opp_acv_usd_k=99.0, activ_initiative="LeanIX"),
        ]
        metrics = compute_metrics(filtered)
        assert metrics.unique_opps_count == 1
        assert metrics.supported_pipeline == 10.0
        assert metrics.leanix_count == 1

    def test_activities_without_opp_id_not_counted(self) -> None:
        filtered = [
            EnrichedActivityRecord(opp_acv_usd_k=10.0, activ_initiative="LeanIX"),
            EnrichedActivityRecord(opp_id="Y", opp_acv_usd_k=5.0),
        ]
        metrics = compute_metrics(filtered)
        assert metrics.unique_opps_count == 1
        assert metrics.supported_pipeline == 5.0
        assert metrics.leanix_count == 0


class TestActivityLog:
    def test_one_row_per_opp_sorted_by_acv(self, enriched) -> None:
        log = dedupe_activity_log(filter_activities(enriched, "manager", "Laura"))
        assert [(a.opp_id, a.opp_acv_usd_k) for a in log] == [("B", 200.0), ("A", 100.0)]

    def test_ties_keep_original_order(self) -> None:
        log = dedupe_activity_log([
            EnrichedActivityRecord(activ_id="1", opp_id="P", opp_acv_usd_k=50.0),
            EnrichedActivityRecord(activ_id="2", opp_id="Q", opp_acv_usd_k=50.0),
            EnrichedActivityRecord(activ_id="3", opp_id="R", opp_acv_usd_k=80.0),
        ])
        assert [a.activ_id for a in log] == ["3", "1", "2"]


class TestFilterDetails:
    def test_manager_mode_goes_through_employees(self, details, enriched) -> None:
        filtered = filter_activity_details(details, enriched, "manager", "Laura")
        assert [(d.activ_team_empl_name, d.time_recorded_hours) for d in filtered] == [
            ("Carlos", 4.0),
            ("Carlos", 6.0),
            ("Ana", 20.0),
        ]

    def test_employee_mode(self, details, enriched) -> None:
        filtered = filter_activity_details(details, enriched, "employee", "Elena")
        assert [d.opp_id for d in filtered] == ["C"]

    def test_manager_without_activities(self, details, enriched) -> None:
        assert filter_activity_details(details, enriched, "manager", "Nobody") == []


class TestLinearTrend:
    def test_two_points(self) -> None:
        assert fit_linear_trend([10.0, 20.0]) == (10.0, 10.0)

    def test_flat_series(self) -> None:
        assert fit_linear_trend([4.0, 4.0, 4.0]) == (0.0, 4.0)

    @pytest.mark.parametrize("values", [[], [5.0]])
    def test_too_few_points(self, values) -> None:
        assert fit_linear_trend(values) is None


class TestMonthlyHoursTrend:
    def test_buckets_by_month(self, details) -> None:
        trend = monthly_hours_trend(details)

        assert trend["key"].tolist() == ["2025-00", "2025-01"]
        assert trend["label"].tolist() == ["Jan 2025", "Feb 2025"]
        assert trend["hours"].tolist() == [10.0, 25.0]
        assert trend["index"].tolist() == [0, 1]
        assert trend["trend"].tolist() == [10.0, 25.0]
        assert trend["month"].iloc[0] == pd.Timestamp("2025-01-01")

    def test_single_month_has_no_trend(self) -> None:
        trend = monthly_hours_trend([_detail("2025-03-02", 4.0), _detail("2025-03-20", 1.5)])
        assert trend["hours"].tolist() == [5.5]
        assert "trend" not in trend.columns

    def test_trend_clamped_at_zero(self) -> None:
        trend = monthly_hours_trend([
            _detail("2025-01-10", 30.0),
            _detail("2025-02-10", 0.0),
            _detail("2025-03-10", 0.0),
        ])
        assert trend["trend"].tolist() == pytest.approx([25.0, 10.0, 0.0])

    def test_orders_across_years(self) -> None:
        trend = monthly_hours_trend([
            _detail("2025-11-03", 2.0),
            _detail("2024-12-15", 3.0),
            _detail("2025-02-01", 1.0),
        ])
        assert trend["key"].tolist() == ["2024-11", "2025-01", "2025-10"]
        assert trend["label"].tolist() == ["Dec 2024", "Feb 2025", "Nov 2025"]

    def test_undated_rows_only(self) -> None:
        trend = monthly_hours_trend([ActivityDetailRecord("Marta", "Z", None, 3.0)])
        assert trend.empty
        assert list(trend.columns) == TREND_COLUMNS


class TestTopOpportunities:
    def test_hours_per_opportunity(self, details, activities, opportunities) -> None:
        top = top_opportunities_by_hours(details, activities, opportunities)

        assert top["opp_id"].tolist() == ["B", "A", "C", "Z"]
        assert top["hours"].tolist() == [20.0, 10.0, 5.0, 3.0]
        first = top.iloc[0]
        assert first["name"] == "Mapfre - Analytics"
        assert first["total_value"] == 10000.0
        assert first["status"] == "Lost"
        assert not first["is_booked"]
        assert top["is_booked"].tolist() == [False, True, True, False]

    def test_unknown_opportunity(self, details, activities, opportunities) -> None:
        top = top_opportunities_by_hours(details, activities, opportunities)
        unknown = top[top["opp_id"] == "Z"].iloc[0]
        assert unknown["name"] == "Unknown Account - Opp ID: Z"
        assert unknown["total_value"] == 0.0
        assert unknown["status"] == "N/A"

    def test_no_details(self, activities, opportunities) -> None:
        top = top_opportunities_by_hours([], activities, opportunities)
        assert top.empty
        assert "hours" in top.columns


class TestBreakdowns:
    def test_status_breakdown(self) -> None:
        df = status_breakdown([
            OpportunityRecord(opp_id="1", opp_status="Won"),
            OpportunityRecord(opp_id="2", opp_status="Won"),
            OpportunityRecord(opp_id="3", opp_status="Lost"),
            OpportunityRecord(opp_id="4"),
        ])
        assert dict(zip(df["status"], df["count"])) == {"Won": 2, "Lost": 1, "Unknown": 1}
        assert df["status"].iloc[0] == "Won"

    def test_region_breakdown(self) -> None:
        df = region_value_breakdown([
            OpportunityRecord(region_l3_desc="Spain", total=50000.0),
            OpportunityRecord(region_l3_desc="Portugal", total=10000.0),
            OpportunityRecord(region_l3_desc="Spain", total=5000.0),
            OpportunityRecord(total=1000.0),
        ])
        assert df["region"].tolist() == ["Spain", "Portugal", "Unknown"]
        assert df["total"].tolist() == [55000.0, 10000.0, 1000.0]

    def test_owner_counts_distinct_ids(self, opportunities) -> None:
        df = owner_opportunity_counts(
            [*opportunities, OpportunityRecord(opp_id="A", opp_owner="Andrea")]
        )
        assert dict(zip(df["owner"], df["opportunities"])) == {"Andrea": 2, "Luis": 1}
        assert df["owner"].iloc[0] == "Andrea"

    def test_owner_counts_limit(self, opportunities) -> None:
        df = owner_opportunity_counts(opportunities, limit=1)
        assert df["owner"].tolist() == ["Andrea"]

    def test_empty_opportunities(self) -> None:
        assert status_breakdown([]).empty
        assert region_value_breakdown([]).empty
        assert owner_opportunity_counts([]).empty
