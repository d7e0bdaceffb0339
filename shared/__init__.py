"""
Shared utilities for the platform plugin client.

This package aggregates common building blocks consumed by the client:

- config: Client configuration via pydantic-settings
- logging: Structured logging with trace and install correlation
- metrics: Prometheus metrics helpers
- errors: Canonical error types

Do not import from platform_client into shared/.
"""
