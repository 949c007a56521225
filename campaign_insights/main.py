"""
FastAPI application entry point for the Campaign Insights API.

This module builds the application: it configures logging and CORS, selects
the credential verifier, opens the upstream HTTP client for the lifetime of
the process, registers routers and the domain error handlers.

Configuration is read once, here, and passed explicitly to every collaborator
through `app.state`:

    app.state.settings             Settings
    app.state.credential_verifier  CredentialVerifier for the configured scheme
    app.state.token_issuer         TokenIssuer or None
    app.state.analytics_client     AnalyticsApiClient (opened in the lifespan)

Run locally:
    uvicorn campaign_insights.main:create_app --factory --port 5001
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from campaign_insights import __version__
from campaign_insights.api import api_router, register_exception_handlers
from campaign_insights.core.config import Settings, get_settings
from campaign_insights.services.credentials import build_credential_verifier, build_token_issuer
from campaign_insights.services.upstream import AnalyticsApiClient


logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def create_app(
    settings: Optional[Settings] = None,
    upstream_transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """
    Build the Campaign Insights application.

    Args:
        settings: Configuration to run with. Defaults to get_settings(),
            i.e. environment variables, .env and the secrets directory.
        upstream_transport: Optional httpx transport for the upstream client.
            Tests pass an httpx.MockTransport here.

    Returns:
        The configured FastAPI application.
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """
        On startup: open the shared upstream HTTP client.
        On shutdown: close it.
        """
        logger.info(
            f"Campaign Insights API starting (auth_scheme={settings.auth_scheme.value}, "
            f"upstream={settings.upstream_base_url})"
        )
        http_client = AnalyticsApiClient.build_http_client(settings, transport=upstream_transport)
        app.state.analytics_client = AnalyticsApiClient(http_client)
        try:
            yield
        finally:
            logger.info("Campaign Insights API shutting down")
            await http_client.aclose()

    app = FastAPI(
        title="Campaign Insights API",
        version=__version__,
        description=(
            "Proxies email-campaign analytics to the dashboard, "
            "adding open, reply and bounce rates and delivered counts."
        ),
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.credential_verifier = build_credential_verifier(settings)
    app.state.token_issuer = build_token_issuer(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    register_exception_handlers(app)
    app.include_router(api_router)

    @app.get("/health")
    async def health_check():
        """Health check endpoint for monitoring and load balancer probes."""
        return {"status": "healthy"}

    @app.get("/")
    async def root():
        """API name, version and documentation links."""
        return {
            "name": "Campaign Insights API",
            "version": __version__,
            "docs": "/docs",
            "openapi": "/openapi.json",
        }

    return app


def run() -> None:
    """Console entry point: serve with uvicorn using the configured host and port."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "campaign_insights.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
    )


if __name__ == "__main__":
    run()
