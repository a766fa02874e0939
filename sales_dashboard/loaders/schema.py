"""
Schema mapping: translate one raw spreadsheet row into a canonical record.

A raw row is a mapping of header -> cell value as read from the sheet.
Headers are trimmed and looked up in the fixed column maps from config;
unknown headers are dropped and missing ones leave the record default.
"""

from collections.abc import Mapping
from typing import Any

from ..config import (
    ACTIVITY_COLUMN_MAP,
    ACTIVITY_DETAIL_COLUMN_MAP,
    DATE_FIELDS,
    IDENTIFIER_FIELDS,
    NAME_FIELDS,
    NUMERIC_FIELDS,
    OPPORTUNITY_COLUMN_MAP,
)
from ..models import ActivityDetailRecord, ActivityRecord, OpportunityRecord
from .utils import clean_name, normalise_date, parse_number, to_identifier, to_text


def coerce_field(field: str, value: Any) -> Any:
    """Apply the coercion rule that belongs to a canonical field."""
    if field in NUMERIC_FIELDS:
        return parse_number(value)
    if field in IDENTIFIER_FIELDS:
        return to_identifier(value)
    if field in NAME_FIELDS:
        return clean_name(value)
    if field in DATE_FIELDS:
        return normalise_date(value)
    return to_text(value)


def map_row(row: Mapping[Any, Any], column_map: Mapping[str, str], record_type: type):
    """Build a `record_type` instance from a raw row using `column_map`."""
    values: dict[str, Any] = {}
    for header, value in row.items():
        if header is None:
            continue
        field = column_map.get(str(header).strip())
        if field is None:
            continue
        values[field] = coerce_field(field, value)
    return record_type(**values)


def map_opportunity_row(row: Mapping[Any, Any]) -> OpportunityRecord:
    return map_row(row, OPPORTUNITY_COLUMN_MAP, OpportunityRecord)


def map_activity_row(row: Mapping[Any, Any]) -> ActivityRecord:
    return map_row(row, ACTIVITY_COLUMN_MAP, ActivityRecord)


def map_activity_detail_row(row: Mapping[Any, Any]) -> ActivityDetailRecord:
    return map_row(row, ACTIVITY_DETAIL_COLUMN_MAP, ActivityDetailRecord)
