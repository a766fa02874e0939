"""
Configuration: sheet names, header mappings, metric constants, AI settings.

The three *_COLUMN_MAP tables map each raw spreadsheet header (after
whitespace trimming) to the canonical field name of the matching record
type in models.py. Headers are case-sensitive; anything not listed is
ignored by the loaders.
"""

import os

from dotenv import load_dotenv

load_dotenv()

# ---------------------------------------------------------------------------
# Workbook layout
# ---------------------------------------------------------------------------
OPPORTUNITY_SHEET = "ADRM"
ACTIVITY_SHEET = "Actividades_2025"
ACTIVITY_DETAIL_SHEET = "Activities_2025_Details"

EXPECTED_SHEETS = (OPPORTUNITY_SHEET, ACTIVITY_SHEET, ACTIVITY_DETAIL_SHEET)

# ---------------------------------------------------------------------------
# Header mappings
# ---------------------------------------------------------------------------
OPPORTUNITY_COLUMN_MAP: dict[str, str] = {
    "Time CQn": "time_cqn",
    "Year - Qtr": "year_qtr",
    "Region L1 Desc": "region_l1_desc",
    "Region L2 Desc": "region_l2_desc",
    "Region L3 Desc": "region_l3_desc",
    "Region L4 Desc": "region_l4_desc",
    "Region L5 Desc": "region_l5_desc",
    "Company ID": "company_id",
    "Company Name": "company_name",
    "Opp Desc": "opp_desc",
    "Opp ID": "opp_id",
    "Opp Status": "opp_status",
    "Opp OFS Link": "opp_ofs_link",
    "Source": "source",
    "Opp Owner": "opp_owner",
    "BP Rev Party": "bp_rev_party",
    "DRM Category": "drm_category",
    "ML CQ Dynamic": "ml_cq_dynamic",
    "Opp Phase": "opp_phase",
    "Quote Avg Net": "quote_avg_net",
    "Local AO Name": "local_ao_name",
    "Qualification Summary": "qualification_summary",
    "Compelling Event": "compelling_event",
    "Funding Score": "funding_score",
    "Stakeholder Score": "stakeholder_score",
    "Customer Challenge": "customer_challenge",
    "Business Value": "business_value",
    "Solution & Differentiation": "solution_and_differentiation",
    "Competition": "competition",
    "Partners & Eco": "partners_and_eco",
    "Close Plan": "close_plan",
    "Business Case": "business_case",
    "BOM Confirmed": "bom_confirmed",
    "ADRM": "adrm",
    "Upside": "upside",
    "Total": "total",
    "ADRM + Upside": "adrm_upside",
}

# Trailing " *" on some headers is part of the export format
ACTIVITY_COLUMN_MAP: dict[str, str] = {
    "Activ ID": "activ_id",
    "Activ Type": "activ_type",
    "Acct Name": "acct_name",
    "Opp ID": "opp_id",
    "Opp Phase": "opp_phase",
    "Opp Description": "opp_description",
    "Opp ACV USD K": "opp_acv_usd_k",
    "Activ Status": "activ_status",
    "Activ Team Empl Name *": "activ_team_empl_name",
    "Activ Initiative *": "activ_initiative",
    "Activ Initiative Category *": "activ_initiative_category",
    "Activ Lead Manager Name": "activ_lead_manager_name",
    "Activ Team Manager Name *": "activ_team_manager_name",
    "Opp Close Quarter": "opp_close_quarter",
    "Activ Create Date UTC": "activ_create_date_utc",
    "SBB Region L1": "sbb_region_l1",
    "SBB Region L2": "sbb_region_l2",
    "SBB Region L3": "sbb_region_l3",
    "SBB Region L4": "sbb_region_l4",
    "SBB Region L5": "sbb_region_l5",
}

ACTIVITY_DETAIL_COLUMN_MAP: dict[str, str] = {
    "Empl Name": "activ_team_empl_name",
    "Opp ID": "opp_id",
    "DATE UTC [mmm D, YYYY]": "activ_create_date_utc",
    "Time Recorded Hours": "time_recorded_hours",
}

# ---------------------------------------------------------------------------
# Field coercion groups
# ---------------------------------------------------------------------------
NUMERIC_FIELDS = {
    "quote_avg_net", "adrm", "upside", "total", "adrm_upside",
    "opp_acv_usd_k",
    "time_recorded_hours",
}

IDENTIFIER_FIELDS = {"opp_id", "activ_id", "company_id"}

# Join / group-by keys: trimmed so trailing spaces do not split groups
NAME_FIELDS = {"activ_team_empl_name", "activ_team_manager_name"}

DATE_FIELDS = {"activ_create_date_utc"}

# ---------------------------------------------------------------------------
# Metric constants
# ---------------------------------------------------------------------------
BOOKED_STATUSES = {"booked", "won"}
LEANIX_INITIATIVE = "LeanIX"

UNMATCHED_STATUS = "N/A"
UNKNOWN_STATUS = "Unknown"
UNKNOWN_REGION = "Unknown"
UNASSIGNED_OWNER = "Unassigned"
UNKNOWN_ACCOUNT = "Unknown Account"

ALL_MANAGERS = "All Managers"
VIEW_MODES = ("manager", "employee")

TOP_OWNERS_LIMIT = 15

# ---------------------------------------------------------------------------
# AI insights (Gemini REST API)
# ---------------------------------------------------------------------------
# Checked in order at call time
GEMINI_API_KEY_VARS = ("GEMINI_API_KEY", "API_KEY")
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")
GEMINI_URL = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"
GEMINI_TIMEOUT = 120
