"""HTTP client for the upstream catalog API (products, discounts, categories)."""

import logging
from typing import Any, Dict, List, Optional

import requests

from storefront.core.config import settings

logger = logging.getLogger(__name__)


class CatalogError(Exception):
    """The catalog API could not be reached or returned something unusable."""


class CatalogClient:
    """Thin wrapper around a requests session.

    Not-found answers come back as None; every other failure is raised as
    CatalogError so the cache layer can decide what to serve instead.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = (base_url or settings.API_BASE_URL).rstrip("/")
        self.timeout = settings.REQUEST_TIMEOUT_SECONDS if timeout is None else timeout
        self._session = session or requests.Session()

    def _get(self, path: str, params: Optional[Dict[str, Any]] = None, allow_missing: bool = False) -> Any:
        url = f"{self.base_url}{path}"
        try:
            resp = self._session.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as exc:
            raise CatalogError(f"GET {url} failed: {exc}") from exc

        if allow_missing and resp.status_code == 404:
            return None

        if resp.status_code >= 400:
            raise CatalogError(f"GET {url} returned {resp.status_code}")

        try:
            return resp.json()
        except ValueError as exc:
            raise CatalogError(f"GET {url} returned invalid JSON") from exc

    def _get_list(self, path: str, params: Optional[Dict[str, Any]] = None) -> List[Any]:
        data = self._get(path, params=params)
        # some endpoints wrap the list: {"products": [...]} / {"data": [...]}
        if isinstance(data, dict):
            for key in (("data", "items", "products", "discounts", "categories")):
                if isinstance(data.get(key), list):
                    return data[key]
        if not isinstance(data, list):
            raise CatalogError(f"GET {path} did not return a list")
        return data

    # ---------- Discounts ----------

    def list_discounts(self) -> List[Dict[str, Any]]:
        logger.info("Fetching discounts from %s", self.base_url)
        return self._get_list("/api/discounts")

    def get_discount(self, discount_id: str) -> Optional[Dict[str, Any]]:
        return self._get(f"/api/discounts/{discount_id}", allow_missing=True)

    # ---------- Products ----------

    def list_products(self, filters: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        params: Dict[str, Any] = {}
        filters = filters or {}
        if filters.get("category_id"):
            params["categoryId"] = filters["category_id"]
        if filters.get("is_new"):
            params["isNew"] = "true"
        if filters.get("has_discount"):
            params["hasDiscount"] = "true"
        if filters.get("limit"):
            params["limit"] = str(filters["limit"])
        params["includeDiscounts"] = "true"

        logger.info("Fetching products from %s with %s", self.base_url, params)
        return self._get_list("/api/products", params=params)

    def get_product(self, product_id: str) -> Optional[Dict[str, Any]]:
        return self._get(f"/api/products/{product_id}", allow_missing=True)

    # ---------- Categories ----------

    def list_categories(self) -> List[Dict[str, Any]]:
        logger.info("Fetching categories from %s", self.base_url)
        return self._get_list("/api/categories")

    def get_category(self, category_id: str) -> Optional[Dict[str, Any]]:
        return self._get(f"/api/categories/{category_id}", allow_missing=True)

    def close(self) -> None:
        self._session.close()

    def __enter__(self) -> "CatalogClient":
        return self

    def __exit__(self, *args: object) -> None:
        self.close()
