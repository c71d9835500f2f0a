from unittest.mock import MagicMock

from fastapi.testclient import TestClient

import storefront.dependencies.catalog as catalog_dependencies
from storefront.dependencies.catalog import get_catalog_client
from storefront.main import app


def test_list_products(api):
    res = api.get("/products/")

    assert res.status_code == 200
    body = res.json()
    assert len(body) == 5
    by_id = {item["product"]["id"]: item for item in body}
    assert by_id["p-old"]["pricing"]["discounted_price"] == 800
    assert by_id["p-old"]["pricing"]["original_price"] == 1000
    assert by_id["p-plain"]["pricing"]["has_discount"] is False


def test_list_products_has_discount_filter(api):
    res = api.get("/products/", params={"has_discount": "true"})

    assert res.status_code == 200
    assert sorted(item["product"]["id"] for item in res.json()) == ["p-legacy", "p-old", "p-ref"]


def test_get_product(api):
    res = api.get("/products/p-ref")

    assert res.status_code == 200
    body = res.json()
    assert body["label"] == "Spring sale"
    assert body["pricing"]["resolved_discount"]["id"] == "d-20"
    assert body["pricing"]["resolved_discount"]["type"] == "seasonal"


def test_get_product_404(api):
    res = api.get("/products/unknown")
    assert res.status_code == 404
    assert res.json()["detail"] == "Product not found"


def test_pricing_endpoint(api):
    res = api.get("/products/p-legacy/pricing")

    assert res.status_code == 200
    body = res.json()
    assert body["has_discount"] is True
    assert body["discounted_price"] == 2549
    assert body["savings_amount"] == 450
    assert body["savings_percentage"] == 15


def test_countdown_for_referenced_discount(api):
    res = api.get("/products/p-ref/countdown")

    assert res.status_code == 200
    body = res.json()
    assert body["percentage"] == 20
    assert body["label"] == "Spring sale"
    assert body["countdown"]["expired"] is False
    # 2026-03-01T12:00 -> 2026-03-31T23:59:59
    assert body["countdown"]["days"] == 30


def test_countdown_404_without_discount(api):
    res = api.get("/products/p-plain/countdown")
    assert res.status_code == 404


def test_discounts_endpoints(api):
    listing = api.get("/discounts/")
    assert listing.status_code == 200
    assert [d["id"] for d in listing.json()] == ["d-20", "d-expired", "77"]

    single = api.get("/discounts/77")
    assert single.status_code == 200
    assert single.json()["is_active"] is False

    assert api.get("/discounts/zzz").status_code == 404


def test_discount_window_defaults_when_dates_missing(api):
    res = api.get("/discounts/77/window")

    assert res.status_code == 200
    body = res.json()
    assert body["start_date"].startswith("2026-03-01T12:00:00")
    assert body["end_date"].startswith("2026-03-08T12:00:00")


def test_health(api):
    res = api.get("/health")
    assert res.status_code == 200
    assert res.json()["status"] == "ok"


def test_metrics_and_cache_invalidation(api, catalog):
    api.get("/discounts/")
    api.get("/discounts/")

    metrics = api.get("/metrics").json()
    assert metrics["cache"]["hits"] >= 1
    assert metrics["cache"]["entries"] >= 1
    assert metrics["requests_count"] >= 2

    res = api.post("/cache/invalidate")
    assert res.status_code == 200
    assert res.json()["entries_dropped"] >= 1

    api.get("/discounts/")
    assert catalog.calls["list_discounts"] == 2


def test_upstream_outage_still_renders_prices(api, catalog, cache, clock):
    api.get("/products/p-ref")
    clock.advance(600)
    catalog.fail = True

    res = api.get("/products/p-ref")

    assert res.status_code == 200
    assert res.json()["pricing"]["discounted_price"] == 800


def test_categories_endpoints(api):
    listing = api.get("/categories/")
    assert listing.status_code == 200
    assert [c["name"] for c in listing.json()] == ["Shirts", "Jackets"]

    assert api.get("/categories/jackets").json()["image"] == "/img/jackets.png"
    assert api.get("/categories/zzz").status_code == 404


def test_products_carry_category_name(api):
    assert api.get("/products/p-ref").json()["product"]["category"] == "Shirts"


def test_inline_discount_window_is_respected(api, catalog):
    catalog.products.append(
        {
            "_id": "p-inline",
            "price": 1000,
            "discount": {"percentage": 30, "startDate": "2025-01-01T00:00:00Z", "endDate": "2025-01-31T00:00:00Z"},
        }
    )

    assert api.get("/products/p-inline/pricing").json()["has_discount"] is False
    assert api.get("/products/p-inline/countdown").status_code == 404


def test_shutdown_closes_shared_client(monkeypatch):
    client_cls = MagicMock()
    monkeypatch.setattr(catalog_dependencies, "CatalogClient", client_cls)
    get_catalog_client.cache_clear()

    get_catalog_client()
    with TestClient(app):
        pass

    client_cls.return_value.close.assert_called_once_with()
    assert get_catalog_client.cache_info().currsize == 0
