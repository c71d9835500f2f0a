from datetime import datetime
from typing import Iterable, List, Optional

from storefront.schemas.category import Category
from storefront.schemas.discount import DiscountRecord
from storefront.schemas.product import PricedProduct, Product, ProductQuery
from storefront.services.cache import TTLCache, make_key
from storefront.services.catalog_client import CatalogClient
from storefront.services.data_mapper import (
    map_category_document,
    map_category_documents,
    map_discount_document,
    map_discount_documents,
    map_product_document,
    map_product_documents,
)
from storefront.services.pricing_service.calculate_price import price_product, price_products


# --------------------------
# DISCOUNTS
# --------------------------
def list_discounts(client: CatalogClient, cache: TTLCache) -> List[DiscountRecord]:
    return cache.get(
        "discounts",
        lambda: map_discount_documents(client.list_discounts()),
    )


def get_discount(client: CatalogClient, cache: TTLCache, discount_id: str) -> Optional[DiscountRecord]:
    for record in list_discounts(client, cache):
        if record.id == str(discount_id):
            return record

    def fetch():
        doc = client.get_discount(discount_id)
        return map_discount_document(doc) if doc is not None else None

    return cache.get(make_key("discount", {"id": str(discount_id)}), fetch, default_factory=lambda: None)


# --------------------------
# CATEGORIES
# --------------------------
def list_categories(client: CatalogClient, cache: TTLCache) -> List[Category]:
    return cache.get(
        "categories",
        lambda: map_category_documents(client.list_categories()),
    )


def get_category(client: CatalogClient, cache: TTLCache, category_id: str) -> Optional[Category]:
    for category in list_categories(client, cache):
        if category.id == str(category_id):
            return category

    def fetch():
        doc = client.get_category(category_id)
        return map_category_document(doc) if doc is not None else None

    return cache.get(make_key("category", {"id": str(category_id)}), fetch, default_factory=lambda: None)


# --------------------------
# PRODUCTS
# --------------------------
def list_products(
    client: CatalogClient,
    cache: TTLCache,
    query: Optional[ProductQuery] = None,
) -> List[Product]:
    options = (query or ProductQuery()).model_dump(exclude_none=True)
    return cache.get(
        make_key("products", options),
        lambda: map_product_documents(client.list_products(options)),
    )


def get_product(client: CatalogClient, cache: TTLCache, product_id: str) -> Optional[Product]:
    def fetch():
        doc = client.get_product(product_id)
        return map_product_document(doc) if doc is not None else None

    return cache.get(make_key("product", {"id": product_id}), fetch, default_factory=lambda: None)


# --------------------------
# ENRICHMENT
# --------------------------
def enrich_products_with_categories(
    products: Iterable[Product],
    categories: Iterable[Category],
) -> List[Product]:
    """Copies of `products` with the category name filled in where the id is known."""
    names = {c.id: c.name for c in categories if c.name}
    enriched = []
    for product in products:
        name = names.get(product.category_id) if product.category_id else None
        if name and name != product.category:
            product = product.model_copy(update={"category": name})
        enriched.append(product)
    return enriched


def enrich_products_with_discounts(
    products: Iterable[Product],
    discounts: Iterable[DiscountRecord],
    now: Optional[datetime] = None,
) -> List[PricedProduct]:
    """Resolve and price every product against one discount list."""
    return price_products(products, discounts, now)


# --------------------------
# PRICED VIEWS
# --------------------------
def get_priced_product(
    client: CatalogClient,
    cache: TTLCache,
    product_id: str,
    now: Optional[datetime] = None,
) -> Optional[PricedProduct]:
    product = get_product(client, cache, product_id)
    if product is None:
        return None
    product = enrich_products_with_categories([product], list_categories(client, cache))[0]
    return price_product(product, list_discounts(client, cache), now)


def list_priced_products(
    client: CatalogClient,
    cache: TTLCache,
    query: Optional[ProductQuery] = None,
    now: Optional[datetime] = None,
) -> List[PricedProduct]:
    query = query or ProductQuery()
    products = enrich_products_with_categories(
        list_products(client, cache, query),
        list_categories(client, cache),
    )
    priced = enrich_products_with_discounts(products, list_discounts(client, cache), now)

    # upstream hasDiscount only knows about its own fields; filter on what we computed
    if query.has_discount is not None:
        priced = [p for p in priced if p.pricing.has_discount == query.has_discount]
    return priced
