"""
Credential verification and token issuing for the Campaign Insights backend.

A CredentialVerifier turns the bearer token presented on a request into an
Identity, or raises UnauthenticatedError (no token) / InvalidTokenError
(token rejected). Exactly one verifier is built at startup from
Settings.auth_scheme; request handling never branches on the scheme.

Schemes:
- NoAuthVerifier (none): every request is the anonymous identity.
- IdTokenVerifier (id_token): RS256 ID tokens issued by an external identity
  provider, verified against its JWKS with audience and issuer checks.
- SelfIssuedTokenVerifier (self_issued): HS256 access tokens minted by
  TokenIssuer after an email/password login.

Tokens are never logged.
"""

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Mapping, Optional, Protocol

import jwt
from jwt.exceptions import PyJWKClientConnectionError, PyJWKClientError
from passlib.context import CryptContext

from campaign_insights.core.config import Settings
from campaign_insights.core.exceptions import (
    InvalidTokenError,
    UnauthenticatedError,
    UpstreamUnavailableError,
)
from campaign_insights.models.enums import AuthScheme
from campaign_insights.models.schemas import AccessToken, Identity


logger = logging.getLogger(__name__)

ANONYMOUS_SUBJECT: str = "anonymous"

# Algorithms accepted from external identity providers
ID_TOKEN_ALGORITHMS = ["RS256"]

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


class CredentialVerifier(Protocol):
    """Capability that maps a presented bearer token to an Identity."""

    scheme: AuthScheme

    async def verify(self, token: Optional[str]) -> Identity:
        ...


# =============================================================================
# No Authentication
# =============================================================================


class NoAuthVerifier:
    """Accepts every request, with or without a token."""

    scheme = AuthScheme.NONE

    async def verify(self, token: Optional[str]) -> Identity:
        return Identity(subject=ANONYMOUS_SUBJECT, scheme=self.scheme)


# =============================================================================
# Self-Issued Tokens
# =============================================================================


def _identity_from_claims(payload: Mapping[str, Any], scheme: AuthScheme) -> Identity:
    return Identity(
        subject=str(payload["sub"]),
        email=payload.get("email"),
        scheme=scheme,
        claims=dict(payload),
    )


class SelfIssuedTokenVerifier:
    """Verifies HS256 tokens signed with this service's JWT secret."""

    scheme = AuthScheme.SELF_ISSUED

    def __init__(self, secret: str, algorithm: str = "HS256"):
        self._secret = secret
        self._algorithm = algorithm

    async def verify(self, token: Optional[str]) -> Identity:
        if not token:
            raise UnauthenticatedError()
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require": ["sub", "exp"]},
            )
        except jwt.ExpiredSignatureError as e:
            logger.warning("Rejected expired self-issued token")
            raise InvalidTokenError("Token has expired") from e
        except jwt.InvalidTokenError as e:
            logger.warning(f"Rejected self-issued token: {e}")
            raise InvalidTokenError() from e
        return _identity_from_claims(payload, self.scheme)


class TokenIssuer:
    """
    Issues self-issued access tokens after an email/password check.

    Accounts come from Settings.dashboard_users (email -> passlib hash).
    Hashes can be generated with:

        python -c "from passlib.hash import pbkdf2_sha256; print(pbkdf2_sha256.hash('secret'))"
    """

    def __init__(
        self,
        secret: str,
        users: Mapping[str, str],
        algorithm: str = "HS256",
        expire_minutes: int = 60,
    ):
        self._secret = secret
        self._algorithm = algorithm
        self._expire_minutes = expire_minutes
        # Emails are matched case-insensitively
        self._users: Dict[str, str] = {email.lower(): pw_hash for email, pw_hash in users.items()}

    def authenticate(self, email: str, password: str) -> bool:
        """Return True if the email is a known account and the password matches."""
        password_hash = self._users.get(email.lower())
        if password_hash is None:
            # Spend the same time as a real check so unknown emails are not distinguishable
            pwd_context.dummy_verify()
            return False
        try:
            return pwd_context.verify(password, password_hash)
        except ValueError:
            logger.error(f"Stored password hash for {email} is not a recognised format")
            return False

    def issue(self, email: str) -> AccessToken:
        """Mint a signed access token for an authenticated account."""
        now = datetime.now(timezone.utc)
        expires_in = self._expire_minutes * 60
        payload = {
            "sub": email.lower(),
            "email": email.lower(),
            "iat": now,
            "exp": now + timedelta(seconds=expires_in),
        }
        token = jwt.encode(payload, self._secret, algorithm=self._algorithm)
        return AccessToken(access_token=token, expires_in=expires_in)


# =============================================================================
# Externally-Issued ID Tokens
# =============================================================================


class IdTokenVerifier:
    """
    Verifies ID tokens issued by an external identity provider.

    The signing key is selected from the provider's JWKS by the token's `kid`
    header. PyJWKClient caches fetched keys; the fetch itself is blocking, so
    it runs in a worker thread.
    """

    scheme = AuthScheme.ID_TOKEN

    def __init__(
        self,
        jwks_url: str,
        audience: str,
        issuer: Optional[str] = None,
        jwks_client: Optional[jwt.PyJWKClient] = None,
    ):
        self._audience = audience
        self._issuer = issuer
        self._jwks_client = jwks_client or jwt.PyJWKClient(jwks_url, cache_keys=True)

    async def verify(self, token: Optional[str]) -> Identity:
        if not token:
            raise UnauthenticatedError()

        try:
            signing_key = await asyncio.to_thread(
                self._jwks_client.get_signing_key_from_jwt, token
            )
        except PyJWKClientConnectionError as e:
            logger.error(f"Could not fetch identity provider keys: {e}")
            raise UpstreamUnavailableError("Identity provider unavailable") from e
        except (PyJWKClientError, jwt.InvalidTokenError) as e:
            logger.warning(f"Rejected ID token before signature check: {e}")
            raise InvalidTokenError() from e

        try:
            payload = jwt.decode(
                token,
                signing_key.key,
                algorithms=ID_TOKEN_ALGORITHMS,
                audience=self._audience,
                issuer=self._issuer,
                options={"require": ["sub", "exp", "iat"]},
            )
        except jwt.ExpiredSignatureError as e:
            logger.warning("Rejected expired ID token")
            raise InvalidTokenError("Token has expired") from e
        except jwt.InvalidTokenError as e:
            logger.warning(f"Rejected ID token: {e}")
            raise InvalidTokenError() from e
        return _identity_from_claims(payload, self.scheme)


# =============================================================================
# Factory
# =============================================================================


def build_credential_verifier(settings: Settings) -> CredentialVerifier:
    """
    Build the verifier for the configured scheme.

    Settings validation guarantees the scheme's required values are present.
    """
    if settings.auth_scheme == AuthScheme.SELF_ISSUED:
        return SelfIssuedTokenVerifier(settings.jwt_secret, settings.jwt_algorithm)
    if settings.auth_scheme == AuthScheme.ID_TOKEN:
        return IdTokenVerifier(
            jwks_url=settings.id_token_jwks_url,
            audience=settings.id_token_audience,
            issuer=settings.id_token_issuer,
        )
    return NoAuthVerifier()


def build_token_issuer(settings: Settings) -> Optional[TokenIssuer]:
    """Build the login token issuer, or None when the scheme does not issue tokens."""
    if settings.auth_scheme != AuthScheme.SELF_ISSUED:
        return None
    return TokenIssuer(
        secret=settings.jwt_secret,
        users=settings.dashboard_users,
        algorithm=settings.jwt_algorithm,
        expire_minutes=settings.access_token_expire_minutes,
    )
