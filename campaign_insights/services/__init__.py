"""
Campaign Insights Services Module

Business logic and collaborator services consumed by the API layer
(campaign_insights/api/).

Services:
- analytics: Pure analytics transformer (summaries, detail report, safe_ratio)
- upstream: Async client for the upstream campaign analytics API
- credentials: Pluggable bearer-token verification and login token issuing
"""

# =============================================================================
# Analytics Transformer Exports
# =============================================================================

from campaign_insights.services.analytics import (
    safe_ratio,
    format_rate,
    summarize,
    summarize_with_details,
    build_detail_report,
    gather_all,
    DetailLookup,
)

# =============================================================================
# Upstream Client Exports
# =============================================================================

from campaign_insights.services.upstream import AnalyticsApiClient

# =============================================================================
# Credential Exports
# =============================================================================

from campaign_insights.services.credentials import (
    CredentialVerifier,
    NoAuthVerifier,
    IdTokenVerifier,
    SelfIssuedTokenVerifier,
    TokenIssuer,
    build_credential_verifier,
    build_token_issuer,
)

__all__ = [
    # analytics
    'safe_ratio',
    'format_rate',
    'summarize',
    'summarize_with_details',
    'build_detail_report',
    'gather_all',
    'DetailLookup',
    # upstream
    'AnalyticsApiClient',
    # credentials
    'CredentialVerifier',
    'NoAuthVerifier',
    'IdTokenVerifier',
    'SelfIssuedTokenVerifier',
    'TokenIssuer',
    'build_credential_verifier',
    'build_token_issuer',
]
