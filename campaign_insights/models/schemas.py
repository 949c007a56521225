"""
Pydantic request/response models for the Campaign Insights backend.

This module provides the data shapes that flow between the upstream analytics
API, the analytics transformer, and the dashboard:

- RawCampaignRecord: One campaign's analytics as returned by the upstream API
- CampaignDetail: Status and sending-mailbox list from the campaign lookup
- AnalyticsFilter: Query parameters for an upstream analytics fetch
- SummaryRow / DetailedSummaryRow: Short-keyed rows for the campaign list
- DetailRow: Display-labeled report for one campaign over a date window
- Identity / LoginRequest / AccessToken: Authentication shapes

Counts on RawCampaignRecord are Optional on purpose. A field the upstream
omitted stays None all the way to the response so contract violations are
visible to the caller instead of being computed on as zero.

All models use Pydantic v2 syntax.
"""

from typing import Any, Dict, List, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from campaign_insights.models.enums import AuthScheme, TokenType


# =============================================================================
# Upstream Shapes
# =============================================================================


class RawCampaignRecord(BaseModel):
    """
    Campaign analytics record as returned by GET /campaigns/analytics.

    The upstream sends more fields than are listed here (link clicks,
    evergreen flag, ...); they are ignored. The identifier is accepted as
    either `campaign_id` or `id`.
    """
    model_config = ConfigDict(
        extra='ignore',
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "campaign_id": "5f1c1a9e-7a3b-4d2e-9a51-0c6f3b1e2d44",
                "campaign_name": "Q3 Founders Outreach",
                "campaign_status": "active",
                "leads_count": 1200,
                "contacted_count": 950,
                "open_count": 410,
                "reply_count": 38,
                "bounced_count": 21,
                "unsubscribed_count": 4,
                "completed_count": 600,
                "emails_sent_count": 2100,
                "new_leads_contacted_count": 120,
                "total_opportunities": 6,
                "total_opportunity_value": 18000.0
            }
        }
    )

    campaign_id: str = Field(
        ...,
        validation_alias=AliasChoices('campaign_id', 'id'),
        description="Campaign identifier"
    )
    campaign_name: Optional[str] = Field(default=None, description="Campaign display name")
    campaign_status: Optional[Union[str, int]] = Field(
        default=None,
        description="Campaign status as reported by the upstream"
    )
    email_list: Optional[List[str]] = Field(
        default=None,
        description="Sending mailboxes associated with the campaign"
    )

    leads_count: Optional[int] = Field(default=None, ge=0)
    contacted_count: Optional[int] = Field(default=None, ge=0)
    open_count: Optional[int] = Field(default=None, ge=0)
    reply_count: Optional[int] = Field(default=None, ge=0)
    bounced_count: Optional[int] = Field(default=None, ge=0)
    unsubscribed_count: Optional[int] = Field(default=None, ge=0)
    completed_count: Optional[int] = Field(default=None, ge=0)
    emails_sent_count: Optional[int] = Field(default=None, ge=0)
    new_leads_contacted_count: Optional[int] = Field(default=None, ge=0)
    total_opportunities: Optional[int] = Field(default=None, ge=0)
    total_opportunity_value: Optional[float] = Field(default=None, ge=0)


class CampaignDetail(BaseModel):
    """Campaign metadata from GET /campaigns/{id}."""
    model_config = ConfigDict(extra='ignore')

    status: Optional[Union[str, int]] = None
    email_list: Optional[List[str]] = None


class AnalyticsFilter(BaseModel):
    """
    Filter for an upstream analytics fetch.

    Unset fields are not sent. An empty filter returns every campaign with
    lifetime totals.
    """
    id: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None

    def to_params(self) -> Dict[str, str]:
        """Query parameters for the fields that are set."""
        return self.model_dump(exclude_none=True)


# =============================================================================
# Campaign List Rows
# =============================================================================


class SummaryRow(BaseModel):
    """
    Short-keyed projection of one RawCampaignRecord for the campaign list.

    1:1 rename, no derived fields.
    """
    id: str
    name: Optional[str] = None
    leads: Optional[int] = None
    contacted: Optional[int] = None
    open: Optional[int] = None
    reply: Optional[int] = None
    bounced: Optional[int] = None
    unsubscribed: Optional[int] = None
    completed: Optional[int] = None
    sent: Optional[int] = None
    opportunities: Optional[int] = None
    opportunity_value: Optional[float] = None


class DetailedSummaryRow(SummaryRow):
    """SummaryRow merged with the campaign-detail lookup. Absent on a miss."""
    status: Optional[Union[str, int]] = None
    email_list: Optional[List[str]] = None


# =============================================================================
# Campaign Detail Report
# =============================================================================


class DateRange(BaseModel):
    """Requested report window, echoed back verbatim."""
    start: str
    end: str


class DetailRow(BaseModel):
    """
    Display-labeled analytics report for one campaign over a date window.

    Counts come from the date-scoped record; status and mailbox list come
    from the lifetime record. Rates are percentages rendered with exactly two
    decimals ("10.00"). Serialized with the dashboard's display labels.
    """
    model_config = ConfigDict(populate_by_name=True)

    campaign_name: Optional[str] = Field(default=None, alias="Campaign Name")
    campaign_id: str = Field(..., alias="Campaign ID")
    leads_count: Optional[int] = Field(default=None, alias="Leads Count")
    contacted_count: Optional[int] = Field(default=None, alias="Contacted Count")
    open_count: Optional[int] = Field(default=None, alias="Open Count")
    reply_count: Optional[int] = Field(default=None, alias="Reply Count")
    bounced_count: Optional[int] = Field(default=None, alias="Bounced Count")
    unsubscribed_count: Optional[int] = Field(default=None, alias="Unsubscribed Count")
    completed_count: Optional[int] = Field(default=None, alias="Completed Count")
    emails_sent_count: Optional[int] = Field(default=None, alias="Emails Sent Count")
    new_leads_contacted_count: Optional[int] = Field(default=None, alias="New Leads Contacted Count")
    delivered: Optional[int] = Field(default=None, alias="Delivered Count")
    open_rate: str = Field(..., alias="Open Rate (%)")
    reply_rate: str = Field(..., alias="Reply Rate (%)")
    bounce_rate: str = Field(..., alias="Bounce Rate (%)")
    status: Optional[Union[str, int]] = Field(default=None, alias="Status")
    email_list: Optional[List[str]] = Field(default=None, alias="Email List")
    date_range: DateRange = Field(..., alias="Date Range")


# =============================================================================
# Authentication
# =============================================================================


class Identity(BaseModel):
    """Authenticated caller attached to a request by the credential verifier."""
    subject: str
    email: Optional[str] = None
    scheme: AuthScheme
    claims: Dict[str, Any] = Field(default_factory=dict)


class LoginRequest(BaseModel):
    """Email/password body for POST /api/auth/login."""
    model_config = ConfigDict(str_strip_whitespace=True)

    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class AccessToken(BaseModel):
    """Self-issued bearer token returned by the login endpoint."""
    access_token: str
    token_type: TokenType = TokenType.BEARER
    expires_in: int = Field(..., description="Token lifetime in seconds")
