"""Tests for the Redis-backed product listing cache."""
import json
from unittest.mock import MagicMock

import redis

from stockapp.schemas.product import ProductCreate
from stockapp.services.inventory_service import InventoryService
from stockapp.utils.cache import CacheService, cache_service


class InMemoryRedis:
    """The handful of Redis commands the cache uses, backed by a dict."""

    def __init__(self):
        self.data = {}

    def get(self, key):
        return self.data.get(key)

    def setex(self, key, ttl, value):
        self.data[key] = value

    def incr(self, key):
        self.data[key] = str(int(self.data.get(key, 0)) + 1)
        return int(self.data[key])


def test_get_returns_decoded_value():
    client = MagicMock()
    client.get.return_value = json.dumps([{"name": "Widget"}])
    cache = CacheService(client=client, ttl=60, enabled=True)

    assert cache.get_products("3") == [{"name": "Widget"}]
    client.get.assert_called_once_with("products:all:3")


def test_set_uses_ttl():
    client = MagicMock()
    cache = CacheService(client=client, ttl=60, enabled=True)

    assert cache.set_products("3", [{"name": "Widget"}]) is True
    client.setex.assert_called_once_with("products:all:3", 60, json.dumps([{"name": "Widget"}]))


def test_version_starts_at_zero_and_increments():
    cache = CacheService(client=InMemoryRedis(), ttl=60, enabled=True)

    assert cache.products_version() == "0"
    assert cache.invalidate_products() is True
    assert cache.products_version() == "1"


def test_listing_stored_before_a_write_is_never_served_after_it():
    """Test a listing computed before a write lands under the old generation."""
    cache = CacheService(client=InMemoryRedis(), ttl=60, enabled=True)

    version_seen_by_reader = cache.products_version()
    cache.invalidate_products()
    cache.set_products(version_seen_by_reader, [{"name": "Stale"}])

    assert cache.get_products(cache.products_version()) is None


def test_redis_failure_behaves_like_a_miss():
    client = MagicMock()
    client.get.side_effect = redis.ConnectionError("down")
    client.incr.side_effect = redis.ConnectionError("down")
    cache = CacheService(client=client, enabled=True)

    version = cache.products_version()
    assert version is None
    assert cache.get_products(version) is None
    assert cache.set_products(version, []) is False
    assert cache.invalidate_products() is False
    client.setex.assert_not_called()


def test_disabled_cache_never_touches_redis():
    client = MagicMock()
    cache = CacheService(client=client, enabled=False)

    assert cache.products_version() is None
    assert cache.get_products("0") is None
    assert cache.set_products("0", []) is False
    assert cache.invalidate_products() is False
    client.get.assert_not_called()
    client.setex.assert_not_called()
    client.incr.assert_not_called()


def test_listing_served_from_cache(db_session):
    cache = MagicMock()
    cache.get_products.return_value = [{"name": "Cached"}]
    service = InventoryService(db_session, cache=cache)

    assert service.list_products_cached() == [{"name": "Cached"}]
    cache.get_products.assert_called_once_with(cache.products_version.return_value)
    cache.set_products.assert_not_called()


def test_listing_cached_on_miss(db_session):
    cache = MagicMock()
    cache.products_version.return_value = "7"
    cache.get_products.return_value = None
    service = InventoryService(db_session, cache=cache)

    assert service.list_products_cached() == []
    cache.set_products.assert_called_once_with("7", [])


def test_listing_reflects_product_created_after_it_was_cached(db_session):
    cache = CacheService(client=InMemoryRedis(), ttl=60, enabled=True)
    service = InventoryService(db_session, cache=cache)

    assert service.list_products_cached() == []

    service.create_product(
        ProductCreate(name="Widget", quantity=5, unit_cost=2.50, min_stock_level=1)
    )

    names = [p["name"] for p in service.list_products_cached()]
    assert names == ["Widget"]


def test_product_writes_invalidate_listing(client, create_product, monkeypatch):
    """Test every product write clears the cached listing."""
    calls = []
    monkeypatch.setattr(cache_service, "invalidate_products", lambda: calls.append("invalidate"))

    product = create_product("Widget", quantity=5)
    client.put(f"/api/products/{product['id']}", json={"minStockLevel": 1})
    client.post(
        "/api/sales",
        json={"productId": product["id"], "quantitySold": 1, "unitPrice": 1.00}
    )
    client.post(
        "/api/purchases",
        json={"productId": product["id"], "quantityPurchased": 1, "unitPrice": 1.00}
    )
    client.delete(f"/api/products/{product['id']}")

    assert len(calls) == 5
