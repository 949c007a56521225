"""
Pytest Configuration and Shared Fixtures for Campaign Insights Tests.

This module provides fixtures shared by all backend tests:
- Sample upstream analytics payloads matching the Instantly v2 schema
- A fake upstream API served through httpx.MockTransport, recording requests
- Settings factories for each authentication scheme
- FastAPI TestClient fixtures wired to the fake upstream

Dependencies:
- pytest
- pytest-asyncio
- httpx (MockTransport)
"""

from typing import Any, Callable, Dict, Generator, List, Optional

import httpx
import pytest
from fastapi.testclient import TestClient
from passlib.hash import pbkdf2_sha256

from campaign_insights.core.config import Settings
from campaign_insights.main import create_app
from campaign_insights.models.enums import AuthScheme
from campaign_insights.models.schemas import RawCampaignRecord


# ============================================================
# CONSTANTS
# ============================================================

UPSTREAM_BASE_URL = "https://upstream.test/api/v2"
UPSTREAM_API_KEY = "test-upstream-key"
JWT_SECRET = "test-jwt-secret-with-at-least-32-bytes!!"
DASHBOARD_EMAIL = "ops@example.com"
DASHBOARD_PASSWORD = "correct horse battery staple"


# ============================================================
# PYTEST HOOKS
# ============================================================

def pytest_configure(config) -> None:
    """
    Register custom markers.

    - integration: tests that exercise the full app through TestClient
    """
    config.addinivalue_line(
        'markers',
        'integration: marks tests that run the full FastAPI app'
    )


# ============================================================
# SAMPLE DATA FIXTURES
# ============================================================

def make_raw_record(campaign_id: str = "cmp-1", **overrides: Any) -> Dict[str, Any]:
    """
    Build one upstream analytics record as a JSON-ready dict.

    Defaults describe a healthy campaign; pass overrides to change any field.
    """
    record: Dict[str, Any] = {
        "campaign_id": campaign_id,
        "campaign_name": f"Campaign {campaign_id}",
        "campaign_status": "active",
        "campaign_is_evergreen": False,
        "leads_count": 500,
        "contacted_count": 400,
        "open_count": 200,
        "reply_count": 20,
        "link_click_count": 12,
        "bounced_count": 8,
        "unsubscribed_count": 3,
        "completed_count": 150,
        "emails_sent_count": 800,
        "new_leads_contacted_count": 40,
        "total_opportunities": 5,
        "total_opportunity_value": 12500.0,
    }
    record.update(overrides)
    return record


@pytest.fixture
def raw_record_factory() -> Callable[..., RawCampaignRecord]:
    """Factory building validated RawCampaignRecord models."""
    def _factory(campaign_id: str = "cmp-1", **overrides: Any) -> RawCampaignRecord:
        return RawCampaignRecord.model_validate(make_raw_record(campaign_id, **overrides))
    return _factory


# ============================================================
# FAKE UPSTREAM API
# ============================================================

class FakeAnalyticsApi:
    """
    In-memory stand-in for the upstream analytics API.

    Serves:
        GET /api/v2/campaigns/analytics  -> `lifetime` records, or the
            `windowed` records when start_date/end_date are present,
            filtered by `id` when given.
        GET /api/v2/campaigns/{id}       -> `campaigns[id]` or 404.

    Every request is appended to `requests` for assertions. Set
    `analytics_status` / `detail_status` to force an error status.
    """

    def __init__(self) -> None:
        self.lifetime: List[Dict[str, Any]] = []
        self.windowed: List[Dict[str, Any]] = []
        self.campaigns: Dict[str, Dict[str, Any]] = {}
        self.requests: List[httpx.Request] = []
        self.analytics_status: int = 200
        self.detail_status: Optional[int] = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path == "/api/v2/campaigns/analytics":
            if self.analytics_status != 200:
                return httpx.Response(self.analytics_status, json={"message": "upstream error"})
            params = request.url.params
            windowed = "start_date" in params or "end_date" in params
            records = self.windowed if windowed else self.lifetime
            if "id" in params:
                records = [r for r in records if r["campaign_id"] == params["id"]]
            return httpx.Response(200, json=records)
        if path.startswith("/api/v2/campaigns/"):
            if self.detail_status is not None:
                return httpx.Response(self.detail_status, json={"message": "upstream error"})
            campaign_id = path.rsplit("/", 1)[-1]
            if campaign_id not in self.campaigns:
                return httpx.Response(404, json={"message": "Campaign not found"})
            return httpx.Response(200, json=self.campaigns[campaign_id])
        return httpx.Response(404, json={"message": "no route"})

    @property
    def transport(self) -> httpx.MockTransport:
        # Look the handler up per request so a test can swap it after the app is built
        return httpx.MockTransport(lambda request: self.handler(request))


@pytest.fixture
def fake_api() -> FakeAnalyticsApi:
    """Fresh fake upstream API per test."""
    return FakeAnalyticsApi()


# ============================================================
# SETTINGS FIXTURES
# ============================================================

@pytest.fixture
def settings_factory() -> Callable[..., Settings]:
    """
    Factory building Settings without touching the process environment.

    Passing values directly takes precedence over environment variables, and
    `_env_file=None` keeps a developer's .env out of the tests.
    """
    def _factory(**overrides: Any) -> Settings:
        values: Dict[str, Any] = {
            "upstream_api_key": UPSTREAM_API_KEY,
            "upstream_base_url": UPSTREAM_BASE_URL,
            "auth_scheme": AuthScheme.NONE,
        }
        values.update(overrides)
        return Settings(_env_file=None, **values)
    return _factory


@pytest.fixture
def self_issued_settings(settings_factory: Callable[..., Settings]) -> Settings:
    """Settings for the self-issued token scheme with one dashboard account."""
    return settings_factory(
        auth_scheme=AuthScheme.SELF_ISSUED,
        jwt_secret=JWT_SECRET,
        dashboard_users={DASHBOARD_EMAIL: pbkdf2_sha256.hash(DASHBOARD_PASSWORD)},
    )


# ============================================================
# APPLICATION FIXTURES
# ============================================================

@pytest.fixture
def client(
    settings_factory: Callable[..., Settings],
    fake_api: FakeAnalyticsApi,
) -> Generator[TestClient, None, None]:
    """TestClient for an unauthenticated app backed by the fake upstream."""
    app = create_app(settings_factory(), upstream_transport=fake_api.transport)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def secured_client(
    self_issued_settings: Settings,
    fake_api: FakeAnalyticsApi,
) -> Generator[TestClient, None, None]:
    """TestClient for an app using the self-issued token scheme."""
    app = create_app(self_issued_settings, upstream_transport=fake_api.transport)
    with TestClient(app) as test_client:
        yield test_client
