"""
Shared fixtures for itineraries service tests.
"""

import pytest

from shared.config import BaseConfig
from shared.test_helpers import FailingRedis, FakeClock, FakeRedis
from service_itineraries.app.cache import EntityCache, InvalidationCoordinator, KeyValueStore, QueryResultCache
from service_itineraries.app.components import build_components


@pytest.fixture
def settings():
    return BaseConfig(cache_enabled=True, cache_operation_timeout=0.5)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def fake_redis(clock):
    return FakeRedis(clock)


@pytest.fixture
def kv_store(fake_redis):
    return KeyValueStore(fake_redis, scan_batch_size=2)


@pytest.fixture
def failing_store():
    return KeyValueStore(FailingRedis())


@pytest.fixture
def entity_cache(kv_store):
    return EntityCache(kv_store)


@pytest.fixture
def list_cache(kv_store):
    return QueryResultCache(kv_store)


@pytest.fixture
def invalidator(entity_cache, list_cache):
    return InvalidationCoordinator(entity_cache, list_cache)


@pytest.fixture
def components(kv_store, settings):
    return build_components(kv_store, settings)


@pytest.fixture
def degraded_components(failing_store, settings):
    return build_components(failing_store, settings)
