import logging
from typing import Any, Iterable, List, Optional

from pydantic import ValidationError

from storefront.schemas.category import Category
from storefront.schemas.discount import DiscountRecord
from storefront.schemas.product import Product

logger = logging.getLogger(__name__)


# --------------------------
# IDS
# --------------------------
def document_id(value: Any) -> Optional[str]:
    """
    Upstream ids come as strings, numbers, {"$oid": ...} or populated
    sub-documents carrying their own _id.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, dict):
        if "$oid" in value:
            return document_id(value["$oid"])
        return document_id(value.get("_id", value.get("id")))
    text = str(value).strip()
    return text or None


def _string_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    ids = (document_id(item) for item in value)
    return [item for item in ids if item]


# --------------------------
# PRODUCTS
# --------------------------
def map_product_document(doc: Any) -> Optional[Product]:
    if not isinstance(doc, dict):
        logger.warning("Skipping product document of type %s", type(doc).__name__)
        return None

    product_id = document_id(doc.get("_id", doc.get("id")))
    if not product_id:
        logger.warning("Skipping product document without id: %r", doc.get("name"))
        return None

    category_id = document_id(doc.get("categoryId"))
    category_name = None
    # populated by includeCategories, under either key
    for category in (doc.get("category"), doc.get("categoryId")):
        if isinstance(category, dict):
            category_id = category_id or document_id(category)
            category_name = category_name or category.get("name") or None

    try:
        return Product(
            id=product_id,
            name=str(doc.get("name") or ""),
            category_id=category_id,
            category=category_name,
            is_new=doc.get("isNewProduct") is True or doc.get("isNew") is True,
            price=doc.get("price"),
            old_price=doc.get("oldPrice"),
            discount_id=document_id(doc.get("discountId")),
            discount=doc.get("discount"),
        )
    except ValidationError as exc:
        logger.warning("Skipping product %s: %s", product_id, exc)
        return None


def map_product_documents(docs: Iterable[Any]) -> List[Product]:
    products = (map_product_document(doc) for doc in docs)
    return [p for p in products if p is not None]


# --------------------------
# DISCOUNTS
# --------------------------
def map_discount_document(doc: Any) -> Optional[DiscountRecord]:
    if not isinstance(doc, dict):
        logger.warning("Skipping discount document of type %s", type(doc).__name__)
        return None

    valid_to = doc.get("validTo")
    if valid_to is None:
        valid_to = doc.get("expiresAt")

    try:
        return DiscountRecord(
            id=document_id(doc.get("_id", doc.get("id"))),
            name=doc.get("name") or None,
            percentage=doc.get("percentage"),
            valid_from=doc.get("validFrom"),
            valid_to=valid_to,
            is_active=doc.get("isActive") is not False,
            type=doc.get("type"),
            code=str(doc.get("code") or ""),
            min_purchase=doc.get("minPurchase") or 0,
            applicable_products=_string_list(doc.get("applicableProducts")),
            applicable_categories=_string_list(doc.get("applicableCategories")),
        )
    except ValidationError as exc:
        logger.warning("Skipping discount %r: %s", doc.get("_id", doc.get("id")), exc)
        return None


def map_discount_documents(docs: Iterable[Any]) -> List[DiscountRecord]:
    records = (map_discount_document(doc) for doc in docs)
    return [r for r in records if r is not None]


# --------------------------
# CATEGORIES
# --------------------------
def map_category_document(doc: Any) -> Optional[Category]:
    if not isinstance(doc, dict):
        logger.warning("Skipping category document of type %s", type(doc).__name__)
        return None

    category_id = document_id(doc.get("_id", doc.get("id")))
    if not category_id:
        logger.warning("Skipping category document without id: %r", doc.get("name"))
        return None

    try:
        return Category(
            id=category_id,
            name=str(doc.get("name") or ""),
            description=doc.get("description") or None,
            slug=doc.get("slug") or None,
            image=doc.get("image") or doc.get("imageUrl") or None,
            parent_id=document_id(doc.get("parentId")),
            is_active=doc.get("isActive") is not False,
        )
    except ValidationError as exc:
        logger.warning("Skipping category %s: %s", category_id, exc)
        return None


def map_category_documents(docs: Iterable[Any]) -> List[Category]:
    categories = (map_category_document(doc) for doc in docs)
    return [c for c in categories if c is not None]
