"""
Loader for the sales activity workbook export.

Sheets (all optional, matched by exact name):
    ADRM                     -> OpportunityRecord
    Actividades_2025         -> ActivityRecord
    Activities_2025_Details  -> ActivityDetailRecord

Each sheet carries its header in row 1 and one record per following row.
Both .xlsx (openpyxl) and legacy .xls (pandas + xlrd) exports are read;
the format is detected from the file signature, not the file name.
"""

import io
import logging
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any, BinaryIO

import openpyxl
import pandas as pd

from ..config import (
    ACTIVITY_DETAIL_SHEET,
    ACTIVITY_SHEET,
    EXPECTED_SHEETS,
    OPPORTUNITY_SHEET,
)
from ..errors import NoUsableDataError, UnreadableFileError
from ..models import IngestionResult
from .schema import map_activity_detail_row, map_activity_row, map_opportunity_row

logger = logging.getLogger(__name__)

WorkbookSource = str | Path | bytes | bytearray | BinaryIO

# OLE2 compound document header used by BIFF (.xls) workbooks
XLS_SIGNATURE = b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1"


def _describe(source: WorkbookSource) -> str:
    if isinstance(source, (str, Path)):
        return str(source)
    return getattr(source, "name", None) or "<in-memory workbook>"


def _read_signature(source: WorkbookSource) -> bytes:
    if isinstance(source, (bytes, bytearray)):
        return bytes(source[:8])
    if isinstance(source, (str, Path)):
        try:
            with open(source, "rb") as fh:
                return fh.read(8)
        except OSError:
            # the workbook reader reports the missing file
            return b""
    pos = source.tell()
    head = source.read(8)
    source.seek(pos)
    return head


def is_legacy_xls(source: WorkbookSource) -> bool:
    """True when `source` holds a BIFF .xls workbook rather than .xlsx."""
    return _read_signature(source) == XLS_SIGNATURE


def _is_blank(value: Any) -> bool:
    if value is None or value is pd.NaT:
        return True
    if isinstance(value, str):
        return value == ""
    return isinstance(value, float) and pd.isna(value)


def open_workbook(source: WorkbookSource):
    """Open an .xlsx workbook with cached formula values.

    Raises UnreadableFileError if the source is not a valid xlsx container.
    """
    if isinstance(source, (bytes, bytearray)):
        source = io.BytesIO(source)
    elif isinstance(source, Path):
        source = str(source)
    try:
        return openpyxl.load_workbook(source, data_only=True)
    except Exception as exc:
        logger.exception("Failed to open workbook: %s", _describe(source))
        raise UnreadableFileError(str(exc)) from exc


def iter_sheet_rows(ws) -> list[dict[Any, Any]]:
    """Return the data rows of a sheet as header -> value dicts.

    Assumptions
    -----------
    - Row 1 holds the column headers.
    - Empty cells are left out of the row dict; fully blank rows are skipped.
    - Columns without a header are ignored.
    """
    rows = ws.iter_rows(values_only=True)
    header = next(rows, None)
    if header is None:
        return []

    records = []
    for values in rows:
        row = {
            h: v
            for h, v in zip(header, values)
            if h is not None and not _is_blank(v)
        }
        if row:
            records.append(row)
    return records


def frame_to_rows(df: pd.DataFrame) -> list[dict[Any, Any]]:
    """Same row contract as iter_sheet_rows, for a sheet read by pandas."""
    records = []
    for record in df.to_dict(orient="records"):
        row = {h: v for h, v in record.items() if not _is_blank(v)}
        if row:
            records.append(row)
    return records


def read_xlsx_sheets(source: WorkbookSource) -> dict[str, list[dict[Any, Any]]]:
    """Raw rows of every expected sheet present in an .xlsx workbook."""
    wb = open_workbook(source)
    try:
        return {
            name: iter_sheet_rows(wb[name])
            for name in EXPECTED_SHEETS
            if name in wb.sheetnames
        }
    except Exception as exc:
        logger.exception("Failed to read workbook: %s", _describe(source))
        raise UnreadableFileError(str(exc)) from exc
    finally:
        wb.close()


def read_xls_sheets(source: WorkbookSource) -> dict[str, list[dict[Any, Any]]]:
    """Raw rows of every expected sheet present in a legacy .xls workbook."""
    data = io.BytesIO(source) if isinstance(source, (bytes, bytearray)) else source
    try:
        frames = pd.read_excel(data, sheet_name=None, engine="xlrd", dtype=object)
    except Exception as exc:
        logger.exception("Failed to read .xls workbook: %s", _describe(source))
        raise UnreadableFileError(str(exc)) from exc
    return {name: frame_to_rows(df) for name, df in frames.items() if name in EXPECTED_SHEETS}


def load_sheet_records(
    sheets: Mapping[str, list[dict[Any, Any]]],
    sheet_name: str,
    mapper: Callable[[dict], Any],
) -> list:
    """Map every raw row of `sheet_name` through `mapper`, preserving row order.

    A missing sheet yields an empty list.
    """
    if sheet_name not in sheets:
        logger.warning("Sheet '%s' not found, skipping", sheet_name)
        return []

    records = [mapper(row) for row in sheets[sheet_name]]
    logger.info("Loaded %d rows from sheet '%s'", len(records), sheet_name)
    return records


def load_workbook_records(source: WorkbookSource) -> IngestionResult:
    """Read opportunities, activities and time details from one workbook.

    Parameters
    ----------
    source : Path to an .xlsx/.xls file, its raw bytes, or a binary file
             object (e.g. a Streamlit upload).

    Returns
    -------
    IngestionResult(opportunities, activities, details), each in sheet row order.

    Raises
    ------
    UnreadableFileError : the file is not a readable workbook.
    NoUsableDataError : none of the three sheets produced a record.
    """
    if is_legacy_xls(source):
        sheets = read_xls_sheets(source)
    else:
        sheets = read_xlsx_sheets(source)

    opportunities = load_sheet_records(sheets, OPPORTUNITY_SHEET, map_opportunity_row)
    activities = load_sheet_records(sheets, ACTIVITY_SHEET, map_activity_row)
    details = load_sheet_records(sheets, ACTIVITY_DETAIL_SHEET, map_activity_detail_row)

    if not opportunities and not activities and not details:
        raise NoUsableDataError()

    logger.info(
        "Ingested %d opportunities, %d activities, %d detail rows from %s",
        len(opportunities), len(activities), len(details), _describe(source),
    )
    return IngestionResult(opportunities, activities, details)
