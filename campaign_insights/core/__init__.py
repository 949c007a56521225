"""
Core infrastructure package for the Campaign Insights backend.

Provides:
- Configuration management via pydantic-settings
- The domain exception taxonomy
- FastAPI dependency injection utilities

Re-exports allow short imports:

    from campaign_insights.core import get_settings, NotFoundError, AnalyticsClientDep
"""

from campaign_insights.core.config import Settings, get_settings
from campaign_insights.core.exceptions import (
    CampaignInsightsError,
    UnauthenticatedError,
    InvalidTokenError,
    UpstreamUnavailableError,
    NotFoundError,
    PairingMismatchError,
)
from campaign_insights.core.dependencies import (
    get_settings_dependency,
    get_analytics_client,
    get_credential_verifier,
    get_token_issuer,
    get_current_identity,
    SettingsDep,
    AnalyticsClientDep,
    CredentialVerifierDep,
    TokenIssuerDep,
    CurrentIdentityDep,
)

__all__ = [
    # Configuration (from config.py)
    'Settings',
    'get_settings',
    # Exceptions (from exceptions.py)
    'CampaignInsightsError',
    'UnauthenticatedError',
    'InvalidTokenError',
    'UpstreamUnavailableError',
    'NotFoundError',
    'PairingMismatchError',
    # Dependency injection (from dependencies.py)
    'get_settings_dependency',
    'get_analytics_client',
    'get_credential_verifier',
    'get_token_issuer',
    'get_current_identity',
    'SettingsDep',
    'AnalyticsClientDep',
    'CredentialVerifierDep',
    'TokenIssuerDep',
    'CurrentIdentityDep',
]
