"""
Domain exception taxonomy for the Campaign Insights backend.

Every failure that can cross a layer boundary is one of these exceptions.
Services raise them; the HTTP layer (campaign_insights/api/errors.py) maps
them to status codes. Nothing below the HTTP layer knows about status codes.

Taxonomy:
    UnauthenticatedError: No credential was presented.
    InvalidTokenError: A credential was presented but rejected
        (malformed, expired, bad signature, wrong audience or issuer).
    UpstreamUnavailableError: A collaborator fetch failed (network error,
        upstream 5xx, rate limit, unexpected payload).
    NotFoundError: No data exists for the requested scope.
    PairingMismatchError: The date-scoped and unscoped analytics disagree on
        the campaign identifier. Signals an upstream consistency problem.
"""

from typing import Optional


class CampaignInsightsError(Exception):
    """Base class for all Campaign Insights domain errors."""

    default_detail: str = "Campaign Insights error"

    def __init__(self, detail: Optional[str] = None) -> None:
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class UnauthenticatedError(CampaignInsightsError):
    default_detail = "Authentication credentials were not provided"


class InvalidTokenError(CampaignInsightsError):
    default_detail = "Invalid or expired token"


class UpstreamUnavailableError(CampaignInsightsError):
    default_detail = "Upstream analytics service unavailable"


class NotFoundError(CampaignInsightsError):
    default_detail = "No analytics found for the requested scope"


class PairingMismatchError(CampaignInsightsError):
    """
    Raised when a date-scoped record has no unscoped counterpart.

    Attributes:
        campaign_id: Identifier of the date-scoped record that could not be paired.
    """

    default_detail = "Date-scoped and lifetime analytics describe different campaigns"

    def __init__(self, campaign_id: Optional[str] = None, detail: Optional[str] = None) -> None:
        self.campaign_id = campaign_id
        if detail is None and campaign_id is not None:
            detail = f"No lifetime analytics found for campaign {campaign_id}"
        super().__init__(detail)
