"""
FastAPI router module for dashboard login.

Only meaningful when AUTH_SCHEME=self_issued: the dashboard posts an email and
password and receives a signed bearer token to send on campaign requests.
Under the other schemes tokens come from elsewhere (an external identity
provider, or nowhere), so the endpoint answers 404.

Key Endpoints:
- POST /api/auth/login - Exchange email/password for an access token
- GET /api/auth/me - Echo the identity attached to the presented token
"""

import logging

from fastapi import APIRouter, HTTPException, status

from campaign_insights.core.dependencies import CurrentIdentityDep, TokenIssuerDep
from campaign_insights.models.schemas import AccessToken, Identity, LoginRequest


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth")


@router.post("/login", response_model=AccessToken)
async def login(credentials: LoginRequest, issuer: TokenIssuerDep) -> AccessToken:
    """
    Issue a self-issued access token for a dashboard account.

    Raises:
        HTTPException 404: Logins are not supported by the configured scheme.
        HTTPException 401: Unknown email or wrong password.
    """
    if issuer is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Login is not available for the configured authentication scheme",
        )

    if not issuer.authenticate(credentials.email, credentials.password):
        logger.warning(f"Failed login for {credentials.email}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    logger.info(f"Issued access token for {credentials.email}")
    return issuer.issue(credentials.email)


@router.get("/me", response_model=Identity)
async def read_current_identity(identity: CurrentIdentityDep) -> Identity:
    """Return the identity the presented credential resolves to."""
    return identity
