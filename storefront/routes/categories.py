from typing import List

from fastapi import APIRouter, Depends, HTTPException

from storefront.dependencies.catalog import get_cache, get_catalog_client
from storefront.schemas.category import Category
from storefront.services.cache import TTLCache
from storefront.services.catalog_client import CatalogClient
from storefront.services.product_service import get_category, list_categories

router = APIRouter(prefix="/categories", tags=["Categories"])


@router.get("/", response_model=List[Category])
def list_all(
    client: CatalogClient = Depends(get_catalog_client),
    cache: TTLCache = Depends(get_cache),
):
    return list_categories(client, cache)


@router.get("/{category_id}", response_model=Category)
def get(
    category_id: str,
    client: CatalogClient = Depends(get_catalog_client),
    cache: TTLCache = Depends(get_cache),
):
    category = get_category(client, cache, category_id)
    if category is None:
        raise HTTPException(status_code=404, detail="Category not found")
    return category
