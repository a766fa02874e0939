"""
AI insights for the opportunity pipeline.

Builds a plain-text statistical summary of the ADRM opportunities, embeds
it in a fixed analyst prompt and sends it to the Gemini generateContent
REST endpoint. The response text (markdown) is returned as-is.
"""

import logging
import os
from collections import Counter
from collections.abc import Sequence

import requests

from .config import (
    GEMINI_API_KEY_VARS,
    GEMINI_MODEL,
    GEMINI_TIMEOUT,
    GEMINI_URL,
    UNKNOWN_STATUS,
)
from .dashboard import format_currency
from .errors import InsightsUnavailableError
from .models import OpportunityRecord

logger = logging.getLogger(__name__)

PROMPT_TEMPLATE = """\
You are a senior sales analyst providing insights for a management dashboard.
Analyze the following summary of a sales opportunity pipeline from a sheet called "ADRM".

Data Summary:
{summary}

Based on this summary, provide three sharp, actionable insights and one strategic recommendation for the sales leadership.
Focus on pipeline health, potential risks, regional performance, or opportunity owner trends.
Format your response as clean, readable markdown with headings for "Key Insights" and "Recommendation".
"""


def build_pipeline_summary(opportunities: Sequence[OpportunityRecord]) -> str:
    """Bullet-list summary: counts, value totals, owners and status mix."""
    count = len(opportunities)
    total_value = sum(o.total for o in opportunities)
    total_adrm = sum(o.adrm for o in opportunities)
    total_upside = sum(o.upside for o in opportunities)
    owners = len({o.opp_owner for o in opportunities})
    avg_value = total_value / count if count else 0.0

    statuses = Counter(o.opp_status or UNKNOWN_STATUS for o in opportunities)
    breakdown = ", ".join(f"{status}: {n}" for status, n in statuses.items())

    lines = [
        f"- Total Opportunities: {count}",
        f"- Total Pipeline Value (Total): {format_currency(total_value)}",
        f"- Total ADRM Value: {format_currency(total_adrm)}",
        f"- Total Upside Value: {format_currency(total_upside)}",
        f"- Average Opportunity Value: {format_currency(avg_value)}",
        f"- Unique Opportunity Owners: {owners}",
        f"- Opportunity Status Breakdown: {breakdown}",
    ]
    return "\n".join(lines)


def build_insights_prompt(summary: str) -> str:
    return PROMPT_TEMPLATE.format(summary=summary)


def _api_key() -> str | None:
    for var in GEMINI_API_KEY_VARS:
        value = os.getenv(var)
        if value:
            return value
    return None


def _response_text(data: dict) -> str:
    parts = (
        data.get("candidates", [{}])[0]
        .get("content", {})
        .get("parts", [])
    )
    return "".join(p.get("text", "") for p in parts).strip()


def get_dashboard_insights(
    opportunities: Sequence[OpportunityRecord],
    api_key: str | None = None,
    model: str = GEMINI_MODEL,
) -> str:
    """Ask the text-generation service for pipeline insights.

    Raises InsightsUnavailableError when no API key is configured, the
    request fails, or the reply carries no text.
    """
    api_key = api_key or _api_key()
    if not api_key:
        raise InsightsUnavailableError(
            f"{GEMINI_API_KEY_VARS[0]} environment variable not set."
        )

    prompt = build_insights_prompt(build_pipeline_summary(opportunities))
    payload = {"contents": [{"parts": [{"text": prompt}]}]}

    try:
        response = requests.post(
            GEMINI_URL.format(model=model),
            params={"key": api_key},
            json=payload,
            timeout=GEMINI_TIMEOUT,
        )
        response.raise_for_status()
        text = _response_text(response.json())
    except (requests.exceptions.RequestException, ValueError, IndexError, AttributeError) as exc:
        logger.exception("Error calling Gemini API")
        raise InsightsUnavailableError(
            "Could not retrieve AI insights. The API may be unavailable or the request failed."
        ) from exc

    if not text:
        raise InsightsUnavailableError("Empty response from AI model.")

    logger.info("Received %d characters of AI insights", len(text))
    return text
