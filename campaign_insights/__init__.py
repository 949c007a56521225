"""
Campaign Insights Backend Package.

FastAPI service that proxies a third-party email-campaign analytics API to
the campaign dashboard, reshaping responses and adding derived metrics.

Subpackages:
    - api: FastAPI route handlers and error mapping
    - core: Configuration, exceptions and dependencies
    - models: Pydantic schemas and enums
    - services: Analytics transformer, upstream client, credential verifiers
"""

__version__ = "1.0.0"
