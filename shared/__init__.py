"""
Shared utilities for the Travel Itinerary API.

This package aggregates common building blocks consumed by all services:

- config: Service configuration via pydantic-settings
- logging: Structured logging with request correlation
- errors: Canonical error types and responses
- retry: Retry decorator with capped exponential backoff
- base_service: FastAPI service base with health and error handling
- test_helpers: Fake Redis clients and test data factories

Any cross-service logic should live here to avoid import cycles across
service packages. Do not import from service_* packages into shared/.
"""
