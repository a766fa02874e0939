"""Pytest fixtures for sales dashboard tests."""

import io
from datetime import datetime

import openpyxl
import pandas as pd
import pytest

from sales_dashboard.models import (
    ActivityDetailRecord,
    ActivityRecord,
    OpportunityRecord,
)


def build_workbook(sheets: dict[str, list[list]]) -> bytes:
    """Build .xlsx bytes from sheet name -> rows (first row is the header)."""
    wb = openpyxl.Workbook()
    wb.remove(wb.active)
    for name, rows in sheets.items():
        ws = wb.create_sheet(name)
        for row in rows:
            ws.append(row)
    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


@pytest.fixture
def make_workbook():
    """Factory fixture wrapping build_workbook."""
    return build_workbook


@pytest.fixture
def opportunity_rows() -> list[list]:
    """ADRM sheet with padded headers, an unmapped column and a duplicate id."""
    return [
        [" Opp ID ", "Opp Status", "Opp Owner", "Region L3 Desc", "Total", "ADRM", "Upside", "Internal Notes"],
        [1001, "Won", "Andrea Ramos", "Spain", 50000, 40000, "10,000", "ignore me"],
        [1002, "Lost", "Luis Ortega", "Portugal", "12,500", 12500, None, None],
        [1003, "Open", "Andrea Ramos", None, "n/a", None, None, None],
        [1001, "Booked", "Andrea Ramos", "Spain", 55000, 45000, 10000, None],
    ]


@pytest.fixture
def activity_rows() -> list[list]:
    return [
        ["Activ ID", "Opp ID", "Acct Name", "Opp Description", "Opp ACV USD K",
         "Activ Team Empl Name *", "Activ Team Manager Name *", "Activ Initiative *",
         "Activ Create Date UTC"],
        [1, "1001", "Repsol", "ERP rollout", 300, "Carlos Ruiz ", " Laura Gomez", "LeanIX",
         datetime(2025, 1, 10)],
        [2, "1002", "Mapfre", "Analytics", "150", "Ana Torres", "Laura Gomez", "BTP",
         datetime(2025, 2, 3)],
        [3, "9999", "Inditex", "Unlisted", 75.5, "Elena Vidal", "Miguel Santos", None,
         "not a date"],
    ]


@pytest.fixture
def detail_rows() -> list[list]:
    return [
        ["Empl Name", "Opp ID", "DATE UTC [mmm D, YYYY]", "Time Recorded Hours"],
        ["Carlos Ruiz", 1001, "Jan 5, 2025", 4],
        ["Carlos Ruiz ", 1001, "Jan 20, 2025", "6"],
        ["Ana Torres", 1002, "Feb 2, 2025", 20],
        ["Marta Gil", 1003, "garbage", 3],
    ]


@pytest.fixture
def workbook_bytes(opportunity_rows, activity_rows, detail_rows) -> bytes:
    return build_workbook({
        "ADRM": opportunity_rows,
        "Actividades_2025": activity_rows,
        "Activities_2025_Details": detail_rows,
    })


@pytest.fixture
def opportunities() -> list[OpportunityRecord]:
    return [
        OpportunityRecord(opp_id="A", opp_status="Booked", total=50000.0, opp_owner="Andrea"),
        OpportunityRecord(opp_id="B", opp_status="Lost", total=10000.0, opp_owner="Luis"),
        OpportunityRecord(opp_id="C", opp_status="won", total=7000.0, opp_owner="Andrea"),
    ]


@pytest.fixture
def activities() -> list[ActivityRecord]:
    return [
        ActivityRecord(activ_id="1", opp_id="A", opp_acv_usd_k=100.0, acct_name="Repsol",
                       opp_description="ERP", activ_team_empl_name="Carlos",
                       activ_team_manager_name="Laura", activ_initiative="LeanIX"),
        ActivityRecord(activ_id="2", opp_id="A", opp_acv_usd_k=999.0, acct_name="Repsol",
                       opp_description="ERP", activ_team_empl_name="Ana",
                       activ_team_manager_name="Laura"),
        ActivityRecord(activ_id="3", opp_id="B", opp_acv_usd_k=200.0, acct_name="Mapfre",
                       opp_description="Analytics", activ_team_empl_name="Ana",
                       activ_team_manager_name="Laura"),
        ActivityRecord(activ_id="4", opp_id="C", opp_acv_usd_k=50.0, acct_name="Inditex",
                       opp_description="Cloud", activ_team_empl_name="Elena",
                       activ_team_manager_name="Miguel", activ_initiative="LeanIX"),
    ]


@pytest.fixture
def details() -> list[ActivityDetailRecord]:
    return [
        ActivityDetailRecord("Carlos", "A", pd.Timestamp("2025-01-05"), 4.0),
        ActivityDetailRecord("Carlos", "A", pd.Timestamp("2025-01-20"), 6.0),
        ActivityDetailRecord("Ana", "B", pd.Timestamp("2025-02-02"), 20.0),
        ActivityDetailRecord("Elena", "C", pd.Timestamp("2025-02-10"), 5.0),
        ActivityDetailRecord("Marta", "Z", None, 3.0),
    ]