"""
Settings and environment management module for the Campaign Insights backend.

This module provides centralized configuration management using pydantic-settings,
which loads settings from environment variables, a .env file and, optionally,
a directory of mounted secret files.

Key Features:
- Environment variable validation and type coercion
- Sensible defaults for local development
- Singleton pattern via @lru_cache, built once at process start
- Startup-time validation of the selected authentication scheme

Environment Variables:
- UPSTREAM_API_KEY: Bearer key for the campaign analytics API (Required)
- UPSTREAM_BASE_URL: Analytics API base URL (default: https://api.instantly.ai/api/v2)
- AUTH_SCHEME: none | id_token | self_issued (default: none)
- JWT_SECRET: Signing secret for self-issued tokens (Required for self_issued)
- ID_TOKEN_JWKS_URL / ID_TOKEN_AUDIENCE: Identity provider keys and audience (Required for id_token)
- DASHBOARD_USERS: JSON object mapping email to passlib password hash
- CAMPAIGN_INSIGHTS_SECRETS_DIR: Directory of secret files, one file per field name

The Settings instance is stored on the FastAPI app at startup and handed to
the upstream client and the credential verifier explicitly. The analytics
transformer never reads configuration.

Usage:
    from campaign_insights.core.config import get_settings

    settings = get_settings()
    base_url = settings.upstream_base_url
"""

import os
from functools import lru_cache
from typing import Dict, List, Optional

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from campaign_insights.models.enums import AuthScheme


# Environment variable naming a directory of mounted secrets (Docker/Kubernetes style)
SECRETS_DIR_ENV_VAR: str = "CAMPAIGN_INSIGHTS_SECRETS_DIR"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Attributes:
        upstream_api_key: Bearer key for the upstream analytics API. Required.
        upstream_base_url: Base URL of the upstream analytics API.
        upstream_timeout_seconds: Timeout applied to every upstream request.
        auth_scheme: Which CredentialVerifier guards the campaign routes.
        jwt_secret: HMAC secret for self-issued tokens.
        jwt_algorithm: Signing algorithm for self-issued tokens.
        access_token_expire_minutes: Lifetime of self-issued tokens.
        id_token_jwks_url: JWKS endpoint of the external identity provider.
        id_token_audience: Expected `aud` claim of external ID tokens.
        id_token_issuer: Expected `iss` claim of external ID tokens, if checked.
        dashboard_users: Email to password-hash map for the login endpoint.
        cors_allow_origins: Origins allowed by the CORS middleware.
        log_level: Root logging level.
        host: Bind address when run directly.
        port: Bind port when run directly.
    """

    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        extra='ignore',
        case_sensitive=False,
    )

    # =========================================================================
    # Upstream Analytics API
    # =========================================================================

    upstream_api_key: str
    upstream_base_url: str = 'https://api.instantly.ai/api/v2'
    upstream_timeout_seconds: float = Field(default=30.0, gt=0)

    # =========================================================================
    # Authentication
    # =========================================================================

    auth_scheme: AuthScheme = AuthScheme.NONE

    # Self-issued tokens (AUTH_SCHEME=self_issued)
    jwt_secret: Optional[str] = None
    jwt_algorithm: str = 'HS256'
    access_token_expire_minutes: int = Field(default=60, gt=0)

    # External identity provider (AUTH_SCHEME=id_token)
    id_token_jwks_url: Optional[str] = None
    id_token_audience: Optional[str] = None
    id_token_issuer: Optional[str] = None

    # Login accounts for the self-issued scheme, e.g.
    # DASHBOARD_USERS='{"ops@example.com": "$pbkdf2-sha256$29000$..."}'
    dashboard_users: Dict[str, str] = Field(default_factory=dict)

    # =========================================================================
    # HTTP Server
    # =========================================================================

    cors_allow_origins: List[str] = Field(default_factory=lambda: ['*'])
    log_level: str = 'INFO'
    host: str = '0.0.0.0'
    port: int = 5001

    @model_validator(mode='after')
    def check_auth_scheme_settings(self) -> 'Settings':
        """Fail at startup when the selected scheme is missing its settings."""
        if self.auth_scheme == AuthScheme.SELF_ISSUED and not self.jwt_secret:
            raise ValueError('JWT_SECRET is required when AUTH_SCHEME=self_issued')
        if self.auth_scheme == AuthScheme.ID_TOKEN:
            missing = [
                name for name, value in (
                    ('ID_TOKEN_JWKS_URL', self.id_token_jwks_url),
                    ('ID_TOKEN_AUDIENCE', self.id_token_audience),
                )
                if not value
            ]
            if missing:
                raise ValueError(
                    f"{', '.join(missing)} required when AUTH_SCHEME=id_token"
                )
        return self


@lru_cache()
def get_settings() -> Settings:
    """
    Get the application settings singleton.

    Secrets are read from the directory named by CAMPAIGN_INSIGHTS_SECRETS_DIR
    when it is set, in addition to environment variables and .env.

    Returns:
        Settings: The application settings instance.

    Raises:
        pydantic.ValidationError: If required values are missing or the
            authentication scheme is inconsistently configured.

    Note:
        To refresh settings in tests, clear the cache:
        >>> get_settings.cache_clear()
    """
    secrets_dir = os.environ.get(SECRETS_DIR_ENV_VAR)
    if secrets_dir:
        return Settings(_secrets_dir=secrets_dir)
    return Settings()
