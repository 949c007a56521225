"""
Analytics Transformer Test Module

Tests for campaign_insights/services/analytics.py:
- safe_ratio: zero/missing denominators are defined as 0, two-decimal rounding
- summarize: order- and length-preserving rename, missing counts stay None
- summarize_with_details: concurrent lookups joined, input order kept, misses absent
- build_detail_report: pairing, derived metrics, NotFound/PairingMismatch
"""

import asyncio
from typing import Callable, Dict, List, Optional

import pytest

from campaign_insights.core.exceptions import (
    NotFoundError,
    PairingMismatchError,
    UpstreamUnavailableError,
)
from campaign_insights.models.schemas import (
    CampaignDetail,
    DateRange,
    RawCampaignRecord,
)
from campaign_insights.services.analytics import (
    build_detail_report,
    format_rate,
    safe_ratio,
    summarize,
    summarize_with_details,
)


DATE_RANGE = DateRange(start="2025-01-01", end="2025-01-31")


# =============================================================================
# safe_ratio
# =============================================================================


class TestSafeRatio:
    """Zero-denominator policy and rounding of the shared rate primitive."""

    @pytest.mark.parametrize("numerator", [0, 1, 50, 10_000])
    def test_zero_denominator_is_defined_as_zero(self, numerator: int) -> None:
        assert safe_ratio(numerator, 0) == 0

    def test_zero_over_zero_is_zero(self) -> None:
        assert safe_ratio(0, 0) == 0

    def test_missing_operands_are_zero(self) -> None:
        assert safe_ratio(None, 100) == 0
        assert safe_ratio(5, None) == 0

    def test_negative_denominator_is_zero(self) -> None:
        assert safe_ratio(5, -10) == 0

    def test_percentage(self) -> None:
        assert safe_ratio(50, 200) == 25.00

    def test_rounds_to_two_decimals(self) -> None:
        assert safe_ratio(1, 3) == 33.33
        assert safe_ratio(2, 3) == 66.67

    def test_exact_ties_round_up(self) -> None:
        # 1 / 800 * 100 is exactly 0.125
        assert safe_ratio(1, 800) == 0.13

    def test_infinite_result_is_zero(self) -> None:
        assert safe_ratio(float("inf"), 10) == 0

    def test_format_rate_always_two_decimals(self) -> None:
        assert format_rate(0.0) == "0.00"
        assert format_rate(25.0) == "25.00"
        assert format_rate(33.33) == "33.33"

    def test_format_rate_rounds_ties_up(self) -> None:
        assert format_rate(0.125) == "0.13"
        assert format_rate(safe_ratio(1, 800)) == "0.13"


# =============================================================================
# summarize
# =============================================================================


class TestSummarize:
    """Pure 1:1 projection onto short keys."""

    def test_renames_fields(self, raw_record_factory: Callable[..., RawCampaignRecord]) -> None:
        record = raw_record_factory("cmp-1")

        row = summarize([record])[0]

        assert row.id == "cmp-1"
        assert row.name == "Campaign cmp-1"
        assert row.leads == record.leads_count
        assert row.contacted == record.contacted_count
        assert row.open == record.open_count
        assert row.reply == record.reply_count
        assert row.bounced == record.bounced_count
        assert row.unsubscribed == record.unsubscribed_count
        assert row.completed == record.completed_count
        assert row.sent == record.emails_sent_count
        assert row.opportunities == record.total_opportunities
        assert row.opportunity_value == record.total_opportunity_value

    @pytest.mark.parametrize("count", [0, 1, 7])
    def test_preserves_order_and_length(
        self,
        raw_record_factory: Callable[..., RawCampaignRecord],
        count: int,
    ) -> None:
        records = [raw_record_factory(f"cmp-{i}") for i in reversed(range(count))]

        rows = summarize(records)

        assert len(rows) == count
        assert [row.id for row in rows] == [record.campaign_id for record in records]

    def test_missing_counts_stay_none(self) -> None:
        record = RawCampaignRecord(campaign_id="cmp-sparse", campaign_name="Sparse")

        row = summarize([record])[0]

        assert row.sent is None
        assert row.open is None
        assert row.opportunity_value is None

    def test_accepts_id_alias(self) -> None:
        record = RawCampaignRecord.model_validate({"id": "cmp-alias", "emails_sent_count": 3})

        assert summarize([record])[0].id == "cmp-alias"


# =============================================================================
# summarize_with_details
# =============================================================================


class TestSummarizeWithDetails:
    """Fan-out lookups, joined, merged in input order."""

    pytestmark = pytest.mark.asyncio

    async def test_returns_rows_in_input_order_when_lookups_finish_out_of_order(
        self,
        raw_record_factory: Callable[..., RawCampaignRecord],
    ) -> None:
        records = [raw_record_factory(f"cmp-{i}") for i in range(5)]
        # Earlier records take longer, so lookups complete in reverse order
        delays: Dict[str, float] = {r.campaign_id: 0.01 * (5 - i) for i, r in enumerate(records)}
        completed: List[str] = []
        requested: List[str] = []

        async def lookup(campaign_id: str) -> Optional[CampaignDetail]:
            requested.append(campaign_id)
            await asyncio.sleep(delays[campaign_id])
            completed.append(campaign_id)
            return CampaignDetail(status=f"status-{campaign_id}", email_list=[f"{campaign_id}@x.com"])

        rows = await summarize_with_details(records, lookup)

        assert sorted(requested) == sorted(r.campaign_id for r in records)
        assert completed == [r.campaign_id for r in reversed(records)]
        assert [row.id for row in rows] == [r.campaign_id for r in records]
        assert [row.status for row in rows] == [f"status-{r.campaign_id}" for r in records]
        assert rows[2].email_list == ["cmp-2@x.com"]

    async def test_lookup_miss_leaves_status_absent(
        self,
        raw_record_factory: Callable[..., RawCampaignRecord],
    ) -> None:
        records = [raw_record_factory("known"), raw_record_factory("unknown")]

        async def lookup(campaign_id: str) -> Optional[CampaignDetail]:
            if campaign_id == "known":
                return CampaignDetail(status="active", email_list=["a@x.com"])
            return None

        rows = await summarize_with_details(records, lookup)

        assert len(rows) == 2
        assert rows[0].status == "active"
        assert rows[1].status is None
        assert rows[1].email_list is None
        assert "status" not in rows[1].model_fields_set
        assert rows[1].sent == records[1].emails_sent_count

    async def test_lookup_failure_propagates(
        self,
        raw_record_factory: Callable[..., RawCampaignRecord],
    ) -> None:
        records = [raw_record_factory("ok"), raw_record_factory("broken")]

        async def lookup(campaign_id: str) -> Optional[CampaignDetail]:
            if campaign_id == "broken":
                raise UpstreamUnavailableError("boom")
            return CampaignDetail(status="active")

        with pytest.raises(UpstreamUnavailableError):
            await summarize_with_details(records, lookup)

    async def test_lookup_failure_cancels_remaining_lookups(
        self,
        raw_record_factory: Callable[..., RawCampaignRecord],
    ) -> None:
        records = [raw_record_factory("slow-1"), raw_record_factory("bad"), raw_record_factory("slow-2")]
        events: List[str] = []

        async def lookup(campaign_id: str) -> Optional[CampaignDetail]:
            if campaign_id == "bad":
                raise UpstreamUnavailableError("boom")
            try:
                await asyncio.sleep(0.05)
            except asyncio.CancelledError:
                events.append(f"cancelled {campaign_id}")
                raise
            events.append(f"finished {campaign_id}")
            return CampaignDetail(status="active")

        with pytest.raises(UpstreamUnavailableError):
            await summarize_with_details(records, lookup)
        events.append("caller got error")
        await asyncio.sleep(0.1)

        assert sorted(events[:2]) == ["cancelled slow-1", "cancelled slow-2"]
        assert events[2:] == ["caller got error"]

    async def test_empty_input_issues_no_lookups(self) -> None:
        calls: List[str] = []

        async def lookup(campaign_id: str) -> Optional[CampaignDetail]:
            calls.append(campaign_id)
            return None

        assert await summarize_with_details([], lookup) == []
        assert calls == []


# =============================================================================
# build_detail_report
# =============================================================================


class TestBuildDetailReport:
    """Pairing of date-scoped and lifetime records and the derived metrics."""

    @pytest.fixture
    def window(self) -> RawCampaignRecord:
        return RawCampaignRecord(
            campaign_id="A",
            campaign_name="Launch",
            emails_sent_count=100,
            bounced_count=10,
            reply_count=5,
            open_count=0,
            contacted_count=0,
        )

    @pytest.fixture
    def baseline(self) -> RawCampaignRecord:
        return RawCampaignRecord(
            campaign_id="A",
            open_count=30,
            contacted_count=60,
            campaign_status="active",
            email_list=["a@x.com"],
        )

    def test_derived_metrics(self, window: RawCampaignRecord, baseline: RawCampaignRecord) -> None:
        report = build_detail_report([window], [baseline], DATE_RANGE)

        assert report.delivered == 90
        assert report.bounce_rate == "10.00"
        assert report.reply_rate == "5.00"
        assert report.open_rate == "50.00"
        assert report.status == "active"
        assert report.email_list == ["a@x.com"]

    def test_open_rate_uses_lifetime_counts(
        self,
        window: RawCampaignRecord,
        baseline: RawCampaignRecord,
    ) -> None:
        # The window has no opens at all; the rate still reflects lifetime opens
        report = build_detail_report([window], [baseline], DATE_RANGE)

        assert report.open_count == 0
        assert report.open_rate == "50.00"

    def test_counts_come_from_window_record(
        self,
        window: RawCampaignRecord,
        baseline: RawCampaignRecord,
    ) -> None:
        report = build_detail_report([window], [baseline], DATE_RANGE)

        assert report.campaign_id == "A"
        assert report.campaign_name == "Launch"
        assert report.emails_sent_count == 100
        assert report.bounced_count == 10

    def test_date_range_echoed_verbatim(
        self,
        window: RawCampaignRecord,
        baseline: RawCampaignRecord,
    ) -> None:
        date_range = DateRange(start="01/02/2025", end="not-a-date")

        report = build_detail_report([window], [baseline], date_range)

        assert report.date_range == date_range

    def test_pairs_by_identifier_not_position(self, window: RawCampaignRecord, baseline: RawCampaignRecord) -> None:
        other = RawCampaignRecord(campaign_id="B", open_count=1, contacted_count=1, campaign_status="paused")

        report = build_detail_report([window], [other, baseline], DATE_RANGE)

        assert report.status == "active"
        assert report.open_rate == "50.00"

    def test_uses_first_date_scoped_record(self, window: RawCampaignRecord, baseline: RawCampaignRecord) -> None:
        later = RawCampaignRecord(campaign_id="B", emails_sent_count=1)

        report = build_detail_report([window, later], [baseline], DATE_RANGE)

        assert report.campaign_id == "A"

    def test_zero_sent_gives_zero_rates(self, baseline: RawCampaignRecord) -> None:
        window = RawCampaignRecord(campaign_id="A", emails_sent_count=0, bounced_count=0, reply_count=0)
        baseline = baseline.model_copy(update={"contacted_count": 0, "open_count": 0})

        report = build_detail_report([window], [baseline], DATE_RANGE)

        assert report.reply_rate == "0.00"
        assert report.bounce_rate == "0.00"
        assert report.open_rate == "0.00"
        assert report.delivered == 0

    def test_bounce_rate_tie_rounds_up(self, baseline: RawCampaignRecord) -> None:
        window = RawCampaignRecord(campaign_id="A", emails_sent_count=800, bounced_count=1)

        report = build_detail_report([window], [baseline], DATE_RANGE)

        assert report.bounce_rate == "0.13"
        assert report.delivered == 799

    def test_negative_delivered_is_passed_through(self, baseline: RawCampaignRecord) -> None:
        window = RawCampaignRecord(campaign_id="A", emails_sent_count=5, bounced_count=8)

        report = build_detail_report([window], [baseline], DATE_RANGE)

        assert report.delivered == -3

    def test_missing_sent_count_leaves_delivered_none(self, baseline: RawCampaignRecord) -> None:
        window = RawCampaignRecord(campaign_id="A", bounced_count=2)

        report = build_detail_report([window], [baseline], DATE_RANGE)

        assert report.delivered is None
        assert report.bounce_rate == "0.00"

    def test_pairing_mismatch(self, window: RawCampaignRecord) -> None:
        stranger = RawCampaignRecord(campaign_id="Z", open_count=1, contacted_count=2)

        with pytest.raises(PairingMismatchError) as exc_info:
            build_detail_report([window], [stranger], DATE_RANGE)

        assert exc_info.value.campaign_id == "A"

    def test_empty_date_scoped_is_not_found(self, baseline: RawCampaignRecord) -> None:
        with pytest.raises(NotFoundError):
            build_detail_report([], [baseline], DATE_RANGE)

    def test_empty_unscoped_is_not_found(self, window: RawCampaignRecord) -> None:
        with pytest.raises(NotFoundError):
            build_detail_report([window], [], DATE_RANGE)

    def test_serializes_with_display_labels(
        self,
        window: RawCampaignRecord,
        baseline: RawCampaignRecord,
    ) -> None:
        payload = build_detail_report([window], [baseline], DATE_RANGE).model_dump(by_alias=True)

        assert payload["Campaign ID"] == "A"
        assert payload["Delivered Count"] == 90
        assert payload["Open Rate (%)"] == "50.00"
        assert payload["Reply Rate (%)"] == "5.00"
        assert payload["Bounce Rate (%)"] == "10.00"
        assert payload["Status"] == "active"
        assert payload["Date Range"] == {"start": "2025-01-01", "end": "2025-01-31"}
