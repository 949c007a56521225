"""
FastAPI dependency injection module for the Campaign Insights backend.

Collaborators are built once in the application lifespan (see main.py) and
stored on `app.state`. These dependencies hand them to endpoint handlers so
handlers never reach for module-level globals, and tests can replace any of
them through `app.dependency_overrides`.

Key Dependencies Provided:
- get_settings_dependency: The Settings object the app was created with
- get_analytics_client: The shared AnalyticsApiClient
- get_credential_verifier: The CredentialVerifier selected at startup
- get_token_issuer: The login TokenIssuer, or None when the scheme has none
- get_current_identity: Verifies the request's bearer token

Type aliases (SettingsDep, AnalyticsClientDep, ...) keep handler signatures short:

    @router.get("/campaigns")
    async def list_campaigns(client: AnalyticsClientDep, identity: CurrentIdentityDep):
        ...
"""

from typing import Annotated, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from campaign_insights.core.config import Settings
from campaign_insights.models.schemas import Identity
from campaign_insights.services.credentials import CredentialVerifier, TokenIssuer
from campaign_insights.services.upstream import AnalyticsApiClient


# auto_error=False so a missing header reaches the verifier, which decides
# whether anonymous access is allowed
bearer_scheme = HTTPBearer(auto_error=False)


# =============================================================================
# Application State Dependencies
# =============================================================================

def get_settings_dependency(request: Request) -> Settings:
    """Return the Settings the running app was created with."""
    return request.app.state.settings


def get_analytics_client(request: Request) -> AnalyticsApiClient:
    """Return the AnalyticsApiClient opened in the lifespan."""
    return request.app.state.analytics_client


def get_credential_verifier(request: Request) -> CredentialVerifier:
    """Return the CredentialVerifier selected at startup."""
    return request.app.state.credential_verifier


def get_token_issuer(request: Request) -> Optional[TokenIssuer]:
    """Return the login TokenIssuer, or None when logins are not supported."""
    return request.app.state.token_issuer


SettingsDep = Annotated[Settings, Depends(get_settings_dependency)]
AnalyticsClientDep = Annotated[AnalyticsApiClient, Depends(get_analytics_client)]
CredentialVerifierDep = Annotated[CredentialVerifier, Depends(get_credential_verifier)]
TokenIssuerDep = Annotated[Optional[TokenIssuer], Depends(get_token_issuer)]


# =============================================================================
# Authentication Dependencies
# =============================================================================

async def get_current_identity(
    verifier: CredentialVerifierDep,
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(bearer_scheme)],
) -> Identity:
    """
    Verify the request's bearer token and return the caller's Identity.

    Raises:
        UnauthenticatedError: No bearer token presented (mapped to 401).
        InvalidTokenError: Token rejected by the verifier (mapped to 403).
        UpstreamUnavailableError: Identity provider keys could not be fetched.
    """
    token = credentials.credentials if credentials else None
    return await verifier.verify(token)


CurrentIdentityDep = Annotated[Identity, Depends(get_current_identity)]
