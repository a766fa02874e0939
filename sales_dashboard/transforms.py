"""
Data transforms: join activity records onto their opportunities and
flatten record sequences into DataFrames for display.
"""

import logging
from collections.abc import Iterable, Sequence
from dataclasses import asdict, fields
from typing import NamedTuple

import pandas as pd

from .config import UNKNOWN_STATUS, UNMATCHED_STATUS
from .models import ActivityRecord, EnrichedActivityRecord, OpportunityRecord

logger = logging.getLogger(__name__)


class OpportunityInfo(NamedTuple):
    total: float
    status: str


def build_opportunity_lookup(
    opportunities: Iterable[OpportunityRecord],
) -> dict[str, OpportunityInfo]:
    """Map opportunity id -> (total, status) in a single scan.

    When an id appears more than once the last row wins. Rows without an
    id are skipped; a blank status is stored as "Unknown".
    """
    lookup: dict[str, OpportunityInfo] = {}
    for opp in opportunities:
        if not opp.opp_id:
            continue
        lookup[opp.opp_id] = OpportunityInfo(opp.total, opp.opp_status or UNKNOWN_STATUS)
    return lookup


def enrich_activities(
    activities: Sequence[ActivityRecord],
    opportunities: Iterable[OpportunityRecord],
) -> list[EnrichedActivityRecord]:
    """Left-join opportunity total and status onto every activity.

    Output order matches `activities`. Activities whose opportunity id is
    not in the ADRM sheet get a total of 0 and status "N/A".
    """
    lookup = build_opportunity_lookup(opportunities)

    enriched = []
    matched = 0
    for activity in activities:
        info = lookup.get(activity.opp_id) if activity.opp_id is not None else None
        if info is None:
            enriched.append(
                EnrichedActivityRecord.from_activity(activity, 0.0, UNMATCHED_STATUS)
            )
        else:
            matched += 1
            enriched.append(
                EnrichedActivityRecord.from_activity(activity, info.total, info.status)
            )

    logger.info(
        "Enriched %d activities (%d matched an opportunity)", len(enriched), matched
    )
    return enriched


def records_to_frame(records: Sequence, record_type: type | None = None) -> pd.DataFrame:
    """Flatten dataclass records into a DataFrame, one column per field.

    `record_type` fixes the column set when `records` is empty.
    """
    if not records:
        if record_type is None:
            return pd.DataFrame()
        return pd.DataFrame(columns=[f.name for f in fields(record_type)])
    return pd.DataFrame([asdict(r) for r in records])
