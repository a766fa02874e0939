"""Tests for header mapping of raw rows into records."""

from datetime import datetime

import pandas as pd

from sales_dashboard.loaders.schema import (
    coerce_field,
    map_activity_detail_row,
    map_activity_row,
    map_opportunity_row,
)
from sales_dashboard.models import OpportunityRecord


class TestOpportunityRow:
    def test_maps_trimmed_headers_and_coerces(self) -> None:
        record = map_opportunity_row({
            " Opp ID ": 1001,
            "Opp Status": "Won",
            "Total": "12,500",
            "ADRM": 10000,
            "Internal Notes": "dropped",
            None: "no header",
        })
        assert record.opp_id == "1001"
        assert record.opp_status == "Won"
        assert record.total == 12500.0
        assert record.adrm == 10000.0

    def test_missing_fields_keep_defaults(self) -> None:
        record = map_opportunity_row({"Opp ID": "X-1"})
        assert record == OpportunityRecord(opp_id="X-1")
        assert record.upside == 0.0
        assert record.opp_owner is None

    def test_headers_are_case_sensitive(self) -> None:
        record = map_opportunity_row({"opp id": "X-1"})
        assert record.opp_id is None


class TestActivityRow:
    def test_names_trimmed_and_date_parsed(self) -> None:
        record = map_activity_row({
            "Activ ID": 50001.0,
            "Opp ID": "1001",
            "Opp ACV USD K": "150",
            "Activ Team Empl Name *": "Carlos Ruiz ",
            "Activ Team Manager Name *": " Laura Gomez",
            "Activ Create Date UTC": datetime(2025, 1, 10),
        })
        assert record.activ_id == "50001"
        assert record.opp_id == "1001"
        assert record.opp_acv_usd_k == 150.0
        assert record.activ_team_empl_name == "Carlos Ruiz"
        assert record.activ_team_manager_name == "Laura Gomez"
        assert record.activ_create_date_utc == pd.Timestamp("2025-01-10")

    def test_header_without_marker_is_ignored(self) -> None:
        record = map_activity_row({"Activ Team Empl Name": "Carlos"})
        assert record.activ_team_empl_name is None


class TestDetailRow:
    def test_maps_detail_columns(self) -> None:
        record = map_activity_detail_row({
            "Empl Name": "Ana Torres ",
            "Opp ID": 1002,
            "DATE UTC [mmm D, YYYY]": "Feb 2, 2025",
            "Time Recorded Hours": "6",
        })
        assert record.activ_team_empl_name == "Ana Torres"
        assert record.opp_id == "1002"
        assert record.activ_create_date_utc == pd.Timestamp("2025-02-02")
        assert record.time_recorded_hours == 6.0

    def test_bad_date_becomes_none(self) -> None:
        record = map_activity_detail_row({"DATE UTC [mmm D, YYYY]": "garbage"})
        assert record.activ_create_date_utc is None


def test_free_text_fields_become_strings() -> None:
    assert coerce_field("opp_phase", 3) == "3"
    assert coerce_field("opp_phase", None) is None
