"""Data ingestion loaders for the sales activity workbook."""

from .schema import map_activity_detail_row, map_activity_row, map_opportunity_row
from .utils import parse_number
from .workbook import load_sheet_records, load_workbook_records

__all__ = [
    "load_workbook_records",
    "load_sheet_records",
    "map_opportunity_row",
    "map_activity_row",
    "map_activity_detail_row",
    "parse_number",
]
