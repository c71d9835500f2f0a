from datetime import datetime
from functools import lru_cache

from storefront.services.cache import TTLCache, catalog_cache
from storefront.services.catalog_client import CatalogClient
from storefront.services.pricing_service.dates import utc_now


@lru_cache()
def get_catalog_client() -> CatalogClient:
    return CatalogClient()


def close_catalog_client() -> None:
    """Close the shared client's session, if one was ever created."""
    if get_catalog_client.cache_info().currsize:
        get_catalog_client().close()
        get_catalog_client.cache_clear()


def get_cache() -> TTLCache:
    return catalog_cache


def get_now() -> datetime:
    return utc_now()
