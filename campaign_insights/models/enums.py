"""
Enumeration definitions for the Campaign Insights backend.

All enums inherit from both `str` and `Enum` so they serialize cleanly in
Pydantic models and can be read directly from environment variables by
pydantic-settings.
"""

from enum import Enum


class AuthScheme(str, Enum):
    """
    Credential verification scheme, selected once at startup.

    - NONE: No authentication. Every request gets an anonymous identity.
    - ID_TOKEN: Externally-issued ID tokens (RS256) verified against the
      identity provider's published JWKS.
    - SELF_ISSUED: HS256 access tokens issued by this service's login endpoint.
    """
    NONE = "none"
    ID_TOKEN = "id_token"
    SELF_ISSUED = "self_issued"


class TokenType(str, Enum):
    """Token type returned by the login endpoint (OAuth2 convention)."""
    BEARER = "bearer"
