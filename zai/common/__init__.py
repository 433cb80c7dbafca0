"""
Shared utilities for the ZAI SDK.

This package aggregates common building blocks consumed by the core
transport and the resource facades:

- config: Client settings via pydantic-settings
- logging: Structured logging with trace correlation
- tracing: OpenTelemetry span helpers
- errors: Canonical error types and responses

Do not import from zai.core or zai.resources into zai.common.
"""
