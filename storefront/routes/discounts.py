from datetime import datetime
from typing import List

from fastapi import APIRouter, Depends, HTTPException

from storefront.dependencies.catalog import get_cache, get_catalog_client, get_now
from storefront.schemas.discount import DiscountRecord, DiscountWindow
from storefront.services.cache import TTLCache
from storefront.services.catalog_client import CatalogClient
from storefront.services.pricing_service.countdown import derive_window
from storefront.services.product_service import get_discount, list_discounts

router = APIRouter(prefix="/discounts", tags=["Discounts"])


@router.get("/", response_model=List[DiscountRecord])
def list_all(
    client: CatalogClient = Depends(get_catalog_client),
    cache: TTLCache = Depends(get_cache),
):
    return list_discounts(client, cache)


@router.get("/{discount_id}", response_model=DiscountRecord)
def get(
    discount_id: str,
    client: CatalogClient = Depends(get_catalog_client),
    cache: TTLCache = Depends(get_cache),
):
    record = get_discount(client, cache, discount_id)
    if record is None:
        raise HTTPException(status_code=404, detail="Discount not found")
    return record


@router.get("/{discount_id}/window", response_model=DiscountWindow)
def window(
    discount_id: str,
    client: CatalogClient = Depends(get_catalog_client),
    cache: TTLCache = Depends(get_cache),
    now: datetime = Depends(get_now),
):
    record = get_discount(client, cache, discount_id)
    if record is None:
        raise HTTPException(status_code=404, detail="Discount not found")
    return derive_window(record, now)
