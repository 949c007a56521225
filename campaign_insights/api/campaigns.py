"""
FastAPI router module for campaign analytics.

Each endpoint is a direct pipeline: verify the caller, fetch from the upstream
analytics API, run the analytics transformer, respond. Domain errors propagate
to the handlers in api/errors.py.

Key Endpoints:
- GET /api/campaigns - Every campaign's lifetime counts as short-keyed rows,
  optionally merged with status and mailbox list (details=true)
- GET /api/campaigns/analytics - One campaign's report for a date window, with
  open/reply/bounce rates and delivered count

API Contract:
- GET /api/campaigns -> [{id, name, leads, contacted, open, reply, bounced,
  unsubscribed, completed, sent, opportunities, opportunity_value}, ...]
- GET /api/campaigns/analytics -> {"Campaign Name": ..., "Open Rate (%)": "50.00", ...}
"""

import logging
from typing import List, Union

from fastapi import APIRouter, Query

from campaign_insights.core.dependencies import AnalyticsClientDep, CurrentIdentityDep
from campaign_insights.models.schemas import (
    AnalyticsFilter,
    DateRange,
    DetailedSummaryRow,
    DetailRow,
    SummaryRow,
)
from campaign_insights.services.analytics import (
    build_detail_report,
    gather_all,
    summarize,
    summarize_with_details,
)


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/campaigns")


# =============================================================================
# GET /api/campaigns - Campaign List
# =============================================================================


# exclude_unset drops status/email_list when no lookup filled them in
@router.get("", response_model=List[DetailedSummaryRow], response_model_exclude_unset=True)
async def list_campaigns(
    client: AnalyticsClientDep,
    identity: CurrentIdentityDep,
    details: bool = Query(
        default=False,
        description="Merge each campaign's status and mailbox list (one extra lookup per campaign)",
    ),
) -> Union[List[DetailedSummaryRow], List[SummaryRow]]:
    """
    List every campaign with its lifetime counts.

    Args:
        client: Upstream analytics client.
        identity: Authenticated caller.
        details: When true, each row also carries `status` and `email_list`
            from the campaign-detail lookup.

    Returns:
        Rows in the order the upstream returned the campaigns.

    Raises:
        UpstreamUnavailableError: Upstream fetch or a detail lookup failed (502).
    """
    logger.info(f"GET /api/campaigns by {identity.subject} (details={details})")
    records = await client.fetch_analytics()
    if details:
        return await summarize_with_details(records, client.fetch_campaign_detail)
    return summarize(records)


# =============================================================================
# GET /api/campaigns/analytics - Campaign Detail Report
# =============================================================================


@router.get("/analytics", response_model=DetailRow)
async def get_campaign_analytics(
    client: AnalyticsClientDep,
    identity: CurrentIdentityDep,
    id: str = Query(..., min_length=1, description="Campaign identifier"),
    start_date: str = Query(..., min_length=1, description="Window start, passed to the upstream verbatim"),
    end_date: str = Query(..., min_length=1, description="Window end, passed to the upstream verbatim"),
) -> DetailRow:
    """
    Report one campaign's activity over a date window.

    Two upstream fetches are issued concurrently: one filtered to the window
    and one unfiltered (lifetime totals). The transformer pairs them by
    campaign identifier.

    Raises:
        NotFoundError: Either fetch returned no records (404).
        PairingMismatchError: The fetches describe different campaigns (502).
        UpstreamUnavailableError: An upstream fetch failed (502).
    """
    logger.info(
        f"GET /api/campaigns/analytics by {identity.subject}: "
        f"id={id}, start_date={start_date}, end_date={end_date}"
    )
    date_scoped, unscoped = await gather_all((
        client.fetch_analytics(AnalyticsFilter(id=id, start_date=start_date, end_date=end_date)),
        client.fetch_analytics(AnalyticsFilter(id=id)),
    ))
    return build_detail_report(
        date_scoped,
        unscoped,
        DateRange(start=start_date, end=end_date),
    )
