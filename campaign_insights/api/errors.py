"""
HTTP mapping for the domain exception taxonomy.

Services raise CampaignInsightsError subclasses; this module is the one place
that turns them into status codes. Response bodies keep the dashboard's
original error contract: {"error": "<message>"}.

| Exception                 | Status |
|---------------------------|--------|
| UnauthenticatedError      | 401    |
| InvalidTokenError         | 403    |
| NotFoundError             | 404    |
| PairingMismatchError      | 502    |
| UpstreamUnavailableError  | 502    |
"""

import logging
from typing import Dict, Type

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from campaign_insights.core.exceptions import (
    CampaignInsightsError,
    InvalidTokenError,
    NotFoundError,
    PairingMismatchError,
    UnauthenticatedError,
    UpstreamUnavailableError,
)


logger = logging.getLogger(__name__)

STATUS_BY_ERROR: Dict[Type[CampaignInsightsError], int] = {
    UnauthenticatedError: status.HTTP_401_UNAUTHORIZED,
    InvalidTokenError: status.HTTP_403_FORBIDDEN,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    PairingMismatchError: status.HTTP_502_BAD_GATEWAY,
    UpstreamUnavailableError: status.HTTP_502_BAD_GATEWAY,
}


def status_for(exc: CampaignInsightsError) -> int:
    """Status code for a domain error; unknown subclasses are server errors."""
    for error_type in type(exc).__mro__:
        if error_type in STATUS_BY_ERROR:
            return STATUS_BY_ERROR[error_type]
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def campaign_insights_error_handler(
    request: Request,
    exc: CampaignInsightsError,
) -> JSONResponse:
    status_code = status_for(exc)
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.detail}")
    else:
        logger.info(f"{request.method} {request.url.path} rejected ({status_code}): {exc.detail}")

    headers = None
    if isinstance(exc, UnauthenticatedError):
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(
        status_code=status_code,
        content={"error": exc.detail},
        headers=headers,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install the domain error handler on the application."""
    app.add_exception_handler(CampaignInsightsError, campaign_insights_error_handler)
