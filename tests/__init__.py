"""
Test suite for the merchant-payments load harness.

This package contains:
- performance/: The Locust harness itself (scenarios, provisioning, thresholds)
- unit/: Fast isolated tests of harness modules
- integration/: Tests against the stub API, in-process and on a live socket
"""
