from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from storefront.dependencies.catalog import get_cache, get_catalog_client, get_now
from storefront.main import app
from storefront.services.cache import TTLCache
from storefront.services.catalog_client import CatalogError

NOW = datetime(2026, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    def __init__(self, start: float = 1_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class StubCatalogClient:
    """Stands in for CatalogClient; serves raw upstream-shaped documents."""

    def __init__(self, products=None, discounts=None, categories=None):
        self.products = list(products or [])
        self.discounts = list(discounts or [])
        self.categories = list(categories or [])
        self.fail = False
        self.calls = {
            "list_discounts": 0,
            "list_products": 0,
            "get_product": 0,
            "get_discount": 0,
            "list_categories": 0,
            "get_category": 0,
        }

    def _check(self, name):
        self.calls[name] += 1
        if self.fail:
            raise CatalogError("upstream down")

    def list_discounts(self):
        self._check("list_discounts")
        return list(self.discounts)

    def get_discount(self, discount_id):
        self._check("get_discount")
        for doc in self.discounts:
            if str(doc.get("_id", doc.get("id"))) == str(discount_id):
                return doc
        return None

    def list_products(self, filters=None):
        self._check("list_products")
        filters = filters or {}
        docs = list(self.products)
        if filters.get("category_id"):
            docs = [d for d in docs if d.get("categoryId") == filters["category_id"]]
        if filters.get("limit"):
            docs = docs[: filters["limit"]]
        return docs

    def get_product(self, product_id):
        self._check("get_product")
        for doc in self.products:
            if str(doc.get("_id", doc.get("id"))) == str(product_id):
                return doc
        return None

    def list_categories(self):
        self._check("list_categories")
        return list(self.categories)

    def get_category(self, category_id):
        self._check("get_category")
        for doc in self.categories:
            if str(doc.get("_id", doc.get("id"))) == str(category_id):
                return doc
        return None


DISCOUNT_DOCS = [
    {
        "_id": "d-20",
        "name": "Spring sale",
        "percentage": 20,
        "validFrom": "2026-02-01T00:00:00Z",
        "validTo": "2026-03-31T23:59:59Z",
        "type": "seasonal",
        "isActive": True,
    },
    {
        "_id": "d-expired",
        "percentage": 40,
        "validFrom": "2025-01-01T00:00:00Z",
        "validTo": "2025-02-01T00:00:00Z",
    },
    {
        "_id": 77,
        "percentage": 10,
        "isActive": False,
    },
]

CATEGORY_DOCS = [
    {"_id": "shirts", "name": "Shirts", "slug": "shirts"},
    {"_id": "jackets", "name": "Jackets", "imageUrl": "/img/jackets.png"},
]

PRODUCT_DOCS = [
    {"_id": "p-ref", "name": "Shirt", "price": 1000, "discountId": "d-20", "categoryId": "shirts"},
    {"_id": "p-old", "name": "Jacket", "price": 800, "oldPrice": 1000, "categoryId": "jackets"},
    {"_id": "p-plain", "name": "Socks", "price": 300, "categoryId": "socks"},
    {"_id": "p-legacy", "name": "Hat", "price": 2999, "discount": 15, "isNewProduct": True},
    {"_id": "p-inactive", "name": "Belt", "price": 500, "discountId": 77},
]


@pytest.fixture()
def now():
    return NOW


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def cache(clock):
    return TTLCache(ttl_seconds=300, clock=clock)


@pytest.fixture()
def catalog():
    return StubCatalogClient(products=PRODUCT_DOCS, discounts=DISCOUNT_DOCS, categories=CATEGORY_DOCS)


@pytest.fixture()
def api(catalog, cache):
    app.dependency_overrides[get_catalog_client] = lambda: catalog
    app.dependency_overrides[get_cache] = lambda: cache
    app.dependency_overrides[get_now] = lambda: NOW
    try:
        with TestClient(app) as client:
            yield client
    finally:
        app.dependency_overrides.clear()
