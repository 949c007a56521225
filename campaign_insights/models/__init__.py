"""
Package initialization file for Campaign Insights models.

Re-exports the Pydantic schemas and enumerations so other modules can import
them from campaign_insights.models directly:

    from campaign_insights.models import RawCampaignRecord, SummaryRow, DetailRow
"""

# =============================================================================
# Enums
# =============================================================================

from campaign_insights.models.enums import (
    AuthScheme,
    TokenType,
)

# =============================================================================
# Schemas
# =============================================================================

from campaign_insights.models.schemas import (
    # Upstream shapes
    RawCampaignRecord,
    CampaignDetail,
    AnalyticsFilter,
    # Campaign list rows
    SummaryRow,
    DetailedSummaryRow,
    # Campaign detail report
    DateRange,
    DetailRow,
    # Authentication
    Identity,
    LoginRequest,
    AccessToken,
)

__all__ = [
    'AuthScheme',
    'TokenType',
    'RawCampaignRecord',
    'CampaignDetail',
    'AnalyticsFilter',
    'SummaryRow',
    'DetailedSummaryRow',
    'DateRange',
    'DetailRow',
    'Identity',
    'LoginRequest',
    'AccessToken',
]
