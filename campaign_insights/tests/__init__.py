'''
Campaign Insights Backend Test Suite

Test Modules:
-------------
- test_analytics.py: Analytics transformer
  - safe_ratio zero-denominator policy and rounding
  - summarize order/length preservation
  - summarize_with_details fan-out, ordering, lookup misses
  - build_detail_report pairing, derived metrics, NotFound/PairingMismatch

- test_upstream.py: Upstream API client (httpx.MockTransport)
- test_credentials.py: Credential verifiers and login token issuing
- test_config.py: Settings loading and scheme validation
- test_api.py: End-to-end HTTP contract via TestClient

Running Tests:
--------------
    pip install -e ".[test]"
    pytest -v
'''

__all__ = []
