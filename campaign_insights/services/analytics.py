"""
Analytics transformer service for the Campaign Insights backend.

This module reshapes upstream campaign analytics into the rows the dashboard
renders. It is a set of pure functions of their explicit arguments: no
configuration, no I/O of its own, no retries. The only awaitable entry point,
summarize_with_details, awaits the lookup callable it is given.

Key Functions:
- safe_ratio: The single percentage primitive used for every derived rate
- summarize: Unscoped records -> short-keyed summary rows
- summarize_with_details: Summary rows merged with per-campaign detail lookups
- build_detail_report: Date-scoped + lifetime records -> one display-labeled report

Derived Metrics:
- open_rate = open_count / contacted_count * 100     (lifetime record)
- reply_rate = reply_count / emails_sent_count * 100  (date-scoped record)
- bounce_rate = bounced_count / emails_sent_count * 100  (date-scoped record)
- delivered = emails_sent_count - bounced_count       (date-scoped record)

Zero-denominator policy:
    A rate whose denominator is zero or missing, or whose result is not
    finite, is defined as 0. This is a reporting decision for the dashboard
    (a campaign that has sent nothing has a 0% bounce rate), not error
    suppression. No other failure is absorbed here.
"""

import asyncio
import logging
import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Awaitable, Callable, Iterable, List, Optional, Sequence, Union

from campaign_insights.core.exceptions import NotFoundError, PairingMismatchError
from campaign_insights.models.schemas import (
    CampaignDetail,
    DateRange,
    DetailedSummaryRow,
    DetailRow,
    RawCampaignRecord,
    SummaryRow,
)


logger = logging.getLogger(__name__)

# Decimal places kept on every derived rate
RATE_PRECISION: int = 2
RATE_QUANTUM: Decimal = Decimal(1).scaleb(-RATE_PRECISION)

Number = Union[int, float]

# Async lookup of campaign metadata by identifier; None when the campaign is unknown
DetailLookup = Callable[[str], Awaitable[Optional[CampaignDetail]]]


# =============================================================================
# Rate Primitive
# =============================================================================


def safe_ratio(numerator: Optional[Number], denominator: Optional[Number]) -> float:
    """
    Compute numerator / denominator as a percentage rounded to two decimals.

    Every rate on every response goes through this function.

    Args:
        numerator: Count being measured (e.g. bounced emails).
        denominator: Base count (e.g. emails sent).

    Returns:
        The percentage rounded half-up to RATE_PRECISION decimals, or 0.0
        when the denominator is zero, negative or missing, the numerator is
        missing, or the result is not finite.

    Example:
        >>> safe_ratio(50, 200)
        25.0
        >>> safe_ratio(1, 800)
        0.13
        >>> safe_ratio(7, 0)
        0.0
    """
    if numerator is None or denominator is None or denominator <= 0:
        return 0.0
    ratio = numerator / denominator * 100
    if not math.isfinite(ratio):
        return 0.0
    return float(_quantize_rate(ratio))


def format_rate(rate: float) -> str:
    """Render a rate with exactly two decimal places ("5.00"), ties rounded up."""
    return f"{_quantize_rate(rate):.{RATE_PRECISION}f}"


def _quantize_rate(rate: float) -> Decimal:
    # Decimal(float) is the exact binary value, so 0.125 is a true tie and rounds to 0.13
    return Decimal(rate).quantize(RATE_QUANTUM, rounding=ROUND_HALF_UP)


# =============================================================================
# Concurrent Fan-out
# =============================================================================


async def gather_all(awaitables: Iterable[Awaitable[Any]]) -> List[Any]:
    """
    Await every awaitable concurrently and return the results in input order.

    If one fails, the others are cancelled and awaited before the error is
    re-raised, so nothing is still running once the caller sees the failure.
    """
    tasks = [asyncio.ensure_future(awaitable) for awaitable in awaitables]
    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


# =============================================================================
# Campaign List
# =============================================================================


def _to_summary_row(record: RawCampaignRecord) -> SummaryRow:
    return SummaryRow(
        id=record.campaign_id,
        name=record.campaign_name,
        leads=record.leads_count,
        contacted=record.contacted_count,
        open=record.open_count,
        reply=record.reply_count,
        bounced=record.bounced_count,
        unsubscribed=record.unsubscribed_count,
        completed=record.completed_count,
        sent=record.emails_sent_count,
        opportunities=record.total_opportunities,
        opportunity_value=record.total_opportunity_value,
    )


def summarize(records: Sequence[RawCampaignRecord]) -> List[SummaryRow]:
    """
    Project raw campaign records onto short-keyed summary rows.

    Order and length are preserved: output[i].id == records[i].campaign_id.
    No filtering, no aggregation across records. Missing counts stay None.

    Args:
        records: Records from one unscoped analytics fetch.

    Returns:
        One SummaryRow per record, in input order.
    """
    return [_to_summary_row(record) for record in records]


async def summarize_with_details(
    records: Sequence[RawCampaignRecord],
    detail_lookup: DetailLookup,
) -> List[DetailedSummaryRow]:
    """
    Summarize records and merge each campaign's status and mailbox list.

    One lookup is issued per record. Lookups are independent and run
    concurrently; all of them are joined before any row is returned. The
    output follows the order of `records` whatever order the lookups finish in.

    Args:
        records: Records from one unscoped analytics fetch.
        detail_lookup: Async callable returning the CampaignDetail for an
            identifier, or None when the campaign is unknown.

    Returns:
        One DetailedSummaryRow per record, in input order. `status` and
        `email_list` are None for records whose lookup returned None.

    Raises:
        Whatever the lookup raises (typically UpstreamUnavailableError).
        The remaining lookups are cancelled and no partial result is produced.
    """
    details = await gather_all(detail_lookup(record.campaign_id) for record in records)

    rows: List[DetailedSummaryRow] = []
    for record, detail in zip(records, details):
        summary = _to_summary_row(record)
        if detail is None:
            logger.debug(f"No campaign detail for {record.campaign_id}")
            rows.append(DetailedSummaryRow(**summary.model_dump()))
        else:
            rows.append(
                DetailedSummaryRow(
                    **summary.model_dump(),
                    status=detail.status,
                    email_list=detail.email_list,
                )
            )
    return rows


# =============================================================================
# Campaign Detail Report
# =============================================================================


def _find_baseline(
    campaign_id: str,
    unscoped: Sequence[RawCampaignRecord],
) -> Optional[RawCampaignRecord]:
    return next(
        (record for record in unscoped if record.campaign_id == campaign_id),
        None,
    )


def _delivered(record: RawCampaignRecord) -> Optional[int]:
    # Not floored at zero; a negative value flags inconsistent upstream counts
    if record.emails_sent_count is None or record.bounced_count is None:
        return None
    return record.emails_sent_count - record.bounced_count


def build_detail_report(
    date_scoped: Sequence[RawCampaignRecord],
    unscoped: Sequence[RawCampaignRecord],
    date_range: DateRange,
) -> DetailRow:
    """
    Build the analytics report for one campaign over a date window.

    The first date-scoped record is paired by campaign identifier with its
    lifetime (unscoped) counterpart. Counts, delivered, reply rate and bounce
    rate describe the window. Open rate is computed on the lifetime record:
    the window's open counts are too sparse to be a meaningful rate, so the
    report shows the campaign's overall open performance next to the
    windowed activity. Status and mailbox list also come from the lifetime
    record.

    Args:
        date_scoped: Records for the requested campaign filtered to the window.
        unscoped: Records for the same campaign with no date filter.
        date_range: Requested window, echoed verbatim on the report.

    Returns:
        DetailRow with display labels and two-decimal rate strings.

    Raises:
        NotFoundError: If either sequence is empty.
        PairingMismatchError: If no unscoped record shares the date-scoped
            record's campaign identifier.

    Example:
        >>> report = build_detail_report(
        ...     [RawCampaignRecord(campaign_id="A", emails_sent_count=100,
        ...                        bounced_count=10, reply_count=5)],
        ...     [RawCampaignRecord(campaign_id="A", open_count=30, contacted_count=60)],
        ...     DateRange(start="2025-01-01", end="2025-01-31"),
        ... )
        >>> report.delivered, report.bounce_rate, report.open_rate
        (90, '10.00', '50.00')
    """
    if not date_scoped:
        raise NotFoundError("No analytics found for the requested date range")
    if not unscoped:
        raise NotFoundError("No lifetime analytics found for the requested campaign")

    window = date_scoped[0]
    baseline = _find_baseline(window.campaign_id, unscoped)
    if baseline is None:
        logger.warning(
            f"Pairing mismatch: no lifetime record for campaign {window.campaign_id} "
            f"among {len(unscoped)} unscoped records"
        )
        raise PairingMismatchError(window.campaign_id)

    open_rate = safe_ratio(baseline.open_count, baseline.contacted_count)
    reply_rate = safe_ratio(window.reply_count, window.emails_sent_count)
    bounce_rate = safe_ratio(window.bounced_count, window.emails_sent_count)

    return DetailRow(
        campaign_name=window.campaign_name,
        campaign_id=window.campaign_id,
        leads_count=window.leads_count,
        contacted_count=window.contacted_count,
        open_count=window.open_count,
        reply_count=window.reply_count,
        bounced_count=window.bounced_count,
        unsubscribed_count=window.unsubscribed_count,
        completed_count=window.completed_count,
        emails_sent_count=window.emails_sent_count,
        new_leads_contacted_count=window.new_leads_contacted_count,
        delivered=_delivered(window),
        open_rate=format_rate(open_rate),
        reply_rate=format_rate(reply_rate),
        bounce_rate=format_rate(bounce_rate),
        status=baseline.campaign_status,
        email_list=baseline.email_list,
        date_range=date_range,
    )
