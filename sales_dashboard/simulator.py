"""
Simulated workbook generator for the sales activity dashboard.

Produces a three-sheet export (ADRM, Actividades_2025,
Activities_2025_Details) with the raw headers the loaders expect,
including the quirks of the real export: numeric opportunity ids,
stray whitespace around names, thousands separators in text cells and
activities that reference opportunities missing from ADRM.
All values are synthetic.
"""

import io
from pathlib import Path

import numpy as np
import pandas as pd

from .config import ACTIVITY_DETAIL_SHEET, ACTIVITY_SHEET, LEANIX_INITIATIVE, OPPORTUNITY_SHEET

# ---------------------------------------------------------------------------
# Reference data
# ---------------------------------------------------------------------------
_TEAMS = {
    "Laura Gomez": ["Carlos Ruiz", "Ana Torres", "Pablo Diaz"],
    "Miguel Santos": ["Elena Vidal", "Javier Moreno"],
    "Sofia Navarro": ["Lucia Herrera", "Diego Castro", "Marta Gil"],
}

_ACCOUNTS = [
    "Iberdrola", "Repsol", "Telefonica", "Mapfre", "Inditex", "Ferrovial",
    "Acciona", "Naturgy", "Grifols", "Mercadona", "Indra", "Cepsa",
]

_REGIONS = [
    ("EMEA", "MEE", "Spain", "Spain Central", "Madrid"),
    ("EMEA", "MEE", "Spain", "Spain East", "Barcelona"),
    ("EMEA", "MEE", "Portugal", "Portugal", "Lisbon"),
]

_STATUSES = ["Won", "Booked", "Lost", "Open", "Qualified"]
_STATUS_WEIGHTS = [0.15, 0.15, 0.15, 0.35, 0.20]

_ACTIVITY_TYPES = ["Demo", "Workshop", "Solution Design", "Discovery Call", "RFP Support"]
_INITIATIVES = [LEANIX_INITIATIVE, "Signavio", "BTP", "Cloud ERP", "Analytics"]
_OWNERS = ["Andrea Ramos", "Luis Ortega", "Carmen Vega", "Raul Pena", "Isabel Cano"]


def generate_opportunities(rng: np.random.Generator, n_opps: int = 40) -> pd.DataFrame:
    """ADRM sheet rows with raw export headers."""
    rows = []
    for i in range(n_opps):
        region = _REGIONS[rng.integers(len(_REGIONS))]
        account = _ACCOUNTS[rng.integers(len(_ACCOUNTS))]
        adrm = float(round(rng.uniform(20_000, 400_000), -3))
        upside = float(round(adrm * rng.uniform(0, 0.5), -3))
        total = adrm + upside
        rows.append({
            "Year - Qtr": f"2025 - Q{rng.integers(1, 5)}",
            "Region L1 Desc": region[0],
            "Region L2 Desc": region[1],
            "Region L3 Desc": region[2],
            "Region L4 Desc": region[3],
            "Region L5 Desc": region[4],
            "Company Name": account,
            "Opp Desc": f"{account} transformation {i + 1}",
            "Opp ID": 7_000_100 + i,
            "Opp Status": rng.choice(_STATUSES, p=_STATUS_WEIGHTS),
            "Opp Owner": _OWNERS[rng.integers(len(_OWNERS))],
            "Opp Phase": rng.choice(["Qualify", "Develop", "Close"]),
            "Quote Avg Net": total * 0.9,
            "ADRM": adrm,
            # Thousands separators as text, as some exports deliver them
            "Upside": f"{upside:,.0f}",
            "Total": total,
            "ADRM + Upside": total,
        })
    return pd.DataFrame(rows)


def generate_activities(
    rng: np.random.Generator,
    opportunities: pd.DataFrame,
    n_activities: int = 150,
) -> pd.DataFrame:
    """Actividades_2025 sheet rows linked to the generated opportunities."""
    opp_ids = opportunities["Opp ID"].tolist()
    descriptions = dict(zip(opportunities["Opp ID"], opportunities["Opp Desc"]))
    accounts = dict(zip(opportunities["Opp ID"], opportunities["Company Name"]))
    managers = list(_TEAMS)

    rows = []
    for i in range(n_activities):
        manager = managers[rng.integers(len(managers))]
        team = _TEAMS[manager]
        employee = team[rng.integers(len(team))]
        # ~10% of activities point at opportunities absent from ADRM
        if rng.random() < 0.1:
            opp_id = 9_000_000 + int(rng.integers(1000))
        else:
            opp_id = opp_ids[rng.integers(len(opp_ids))]
        created = pd.Timestamp("2025-01-01") + pd.Timedelta(days=int(rng.integers(0, 300)))
        rows.append({
            "Activ ID": 50_000 + i,
            "Activ Type": _ACTIVITY_TYPES[rng.integers(len(_ACTIVITY_TYPES))],
            "Acct Name": accounts.get(opp_id, _ACCOUNTS[rng.integers(len(_ACCOUNTS))]),
            # Ids as text on this sheet
            "Opp ID": str(opp_id),
            "Opp Description": descriptions.get(opp_id, f"Unlisted opportunity {opp_id}"),
            "Opp ACV USD K": float(round(rng.uniform(10, 900), 1)),
            "Activ Status": rng.choice(["Completed", "Open"]),
            "Activ Team Empl Name *": employee + (" " if rng.random() < 0.2 else ""),
            "Activ Initiative *": _INITIATIVES[rng.integers(len(_INITIATIVES))],
            "Activ Team Manager Name *": manager,
            "Activ Create Date UTC": created.to_pydatetime(),
        })
    return pd.DataFrame(rows)


def generate_activity_details(
    rng: np.random.Generator,
    activities: pd.DataFrame,
    n_details: int = 400,
) -> pd.DataFrame:
    """Activities_2025_Details rows: hours booked per employee and opportunity."""
    pairs = activities[["Activ Team Empl Name *", "Opp ID"]].to_records(index=False)
    rows = []
    for _ in range(n_details):
        employee, opp_id = pairs[rng.integers(len(pairs))]
        day = pd.Timestamp("2025-01-01") + pd.Timedelta(days=int(rng.integers(0, 300)))
        rows.append({
            "Empl Name": str(employee).strip(),
            "Opp ID": int(opp_id),
            "DATE UTC [mmm D, YYYY]": f"{day:%b} {day.day}, {day.year}",
            "Time Recorded Hours": float(round(rng.uniform(0.5, 8), 1)),
        })
    return pd.DataFrame(rows)


def build_sample_workbook(path: str | Path | None = None, seed: int = 42) -> bytes:
    """Write the three simulated sheets to an .xlsx workbook.

    Returns the workbook bytes; also writes them to `path` when given.
    """
    rng = np.random.default_rng(seed)
    opportunities = generate_opportunities(rng)
    activities = generate_activities(rng, opportunities)
    details = generate_activity_details(rng, activities)

    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        opportunities.to_excel(writer, sheet_name=OPPORTUNITY_SHEET, index=False)
        activities.to_excel(writer, sheet_name=ACTIVITY_SHEET, index=False)
        details.to_excel(writer, sheet_name=ACTIVITY_DETAIL_SHEET, index=False)

    data = buffer.getvalue()
    if path is not None:
        Path(path).write_bytes(data)
    return data
