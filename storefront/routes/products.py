import logging
from datetime import datetime
from time import perf_counter
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from storefront.dependencies.catalog import get_cache, get_catalog_client, get_now
from storefront.schemas.discount import DiscountCountdownResponse, PricingResult
from storefront.schemas.product import PricedProduct, ProductQuery
from storefront.services.cache import TTLCache
from storefront.services.catalog_client import CatalogClient
from storefront.services.pricing_service.countdown import countdown, derive_window
from storefront.services.product_service import get_priced_product, list_priced_products

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/products", tags=["Products & Pricing"])

SLOW_PRICING_MS = 30.0


def _priced_or_404(product_id: str, client: CatalogClient, cache: TTLCache, now: datetime) -> PricedProduct:
    start = perf_counter()
    priced = get_priced_product(client, cache, product_id, now)
    duration_ms = (perf_counter() - start) * 1000.0
    if duration_ms > SLOW_PRICING_MS:
        logger.warning("Pricing product %s took %.2f ms", product_id, duration_ms)

    if priced is None:
        raise HTTPException(status_code=404, detail="Product not found")
    return priced


# LIST
@router.get("/", response_model=List[PricedProduct])
def list_all(
    category_id: Optional[str] = None,
    is_new: Optional[bool] = None,
    has_discount: Optional[bool] = None,
    limit: Optional[int] = Query(default=None, gt=0),
    client: CatalogClient = Depends(get_catalog_client),
    cache: TTLCache = Depends(get_cache),
    now: datetime = Depends(get_now),
):
    query = ProductQuery(category_id=category_id, is_new=is_new, has_discount=has_discount, limit=limit)
    return list_priced_products(client, cache, query, now)


# GET BY ID
@router.get("/{product_id}", response_model=PricedProduct)
def get(
    product_id: str,
    client: CatalogClient = Depends(get_catalog_client),
    cache: TTLCache = Depends(get_cache),
    now: datetime = Depends(get_now),
):
    return _priced_or_404(product_id, client, cache, now)


# PRICING ONLY
@router.get("/{product_id}/pricing", response_model=PricingResult)
def pricing(
    product_id: str,
    client: CatalogClient = Depends(get_catalog_client),
    cache: TTLCache = Depends(get_cache),
    now: datetime = Depends(get_now),
):
    return _priced_or_404(product_id, client, cache, now).pricing


# COUNTDOWN BANNER
@router.get("/{product_id}/countdown", response_model=DiscountCountdownResponse)
def discount_countdown(
    product_id: str,
    client: CatalogClient = Depends(get_catalog_client),
    cache: TTLCache = Depends(get_cache),
    now: datetime = Depends(get_now),
):
    priced = _priced_or_404(product_id, client, cache, now)
    discount = priced.pricing.resolved_discount
    if not priced.pricing.has_discount or discount is None:
        raise HTTPException(status_code=404, detail="No active discount for this product")

    window = derive_window(discount, now)
    return DiscountCountdownResponse(
        product_id=product_id,
        label=discount.label,
        percentage=discount.percentage,
        type=discount.type,
        window=window,
        countdown=countdown(window, now),
    )
