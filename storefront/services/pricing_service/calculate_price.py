from datetime import datetime
from decimal import Decimal
from typing import Any, Iterable, List, Optional, Union

from storefront.schemas.discount import DiscountRecord, PricingResult
from storefront.schemas.product import PricedProduct, Product
from storefront.services.pricing_service.dates import as_utc, utc_now
from storefront.services.pricing_service.resolver import resolve
from storefront.services.pricing_service.rounding import round_half_up, to_decimal
from storefront.services.pricing_service.validity import is_valid

Number = Union[int, float]


# ===================== PRICING =====================


def _no_discount(original_price: Number) -> PricingResult:
    return PricingResult(
        has_discount=False,
        discount_percent=0,
        original_price=original_price,
        discounted_price=original_price,
        savings_amount=0,
        savings_percentage=0,
        resolved_discount=None,
    )


def _plain(value: Decimal) -> Number:
    return int(value) if value == value.to_integral_value() else float(value)


def compute_pricing(
    original_price: Number,
    discount: Optional[DiscountRecord],
    now: Optional[datetime] = None,
    sale_price: Optional[Number] = None,
) -> PricingResult:
    """
    Derive the displayed prices for one unit.

    price=2999, 15% -> discounted 2549, savings 450 (15%)

    `sale_price` is a price the product is already sold at; when given it is
    shown as-is instead of being rebuilt from the percentage.
    """
    now = as_utc(now) if now is not None else utc_now()

    if original_price is None or original_price < 0:
        original_price = 0

    if not is_valid(discount, now):
        return _no_discount(original_price)

    percentage = min(max(to_decimal(discount.percentage), Decimal(0)), Decimal(100))
    original = to_decimal(original_price)

    if sale_price is not None:
        discounted = min(max(to_decimal(sale_price), Decimal(0)), original)
        discounted_price = _plain(discounted)
    else:
        discounted = Decimal(round_half_up(original * (1 - percentage / 100)))
        discounted_price = int(discounted)

    savings = max(Decimal(0), original - discounted)
    savings_amount = _plain(savings)
    if original_price > 0:
        savings_percentage = round_half_up(savings / original * 100)
    else:
        savings_percentage = 0

    return PricingResult(
        has_discount=True,
        discount_percent=float(percentage),
        original_price=original_price,
        discounted_price=discounted_price,
        savings_amount=savings_amount,
        savings_percentage=savings_percentage,
        resolved_discount=discount,
    )


def original_price_of(product: Any) -> Number:
    """The "was" price when the product carries one above its current price."""
    price = getattr(product, "price", 0) or 0
    old_price = getattr(product, "old_price", None)
    if old_price is not None and old_price > price:
        return old_price
    return price


# ===================== PRODUCTS =====================


def price_product(
    product: Product,
    discounts: Optional[Iterable[DiscountRecord]] = None,
    now: Optional[datetime] = None,
) -> PricedProduct:
    now = as_utc(now) if now is not None else utc_now()
    discount = resolve(product, discounts, now)
    # an old_price markdown is already baked into price
    sale_price = product.price if discount is not None and discount.source == "inferred" else None
    pricing = compute_pricing(original_price_of(product), discount, now, sale_price=sale_price)
    label = pricing.resolved_discount.label if pricing.resolved_discount else None
    return PricedProduct(product=product, pricing=pricing, label=label)


def price_products(
    products: Iterable[Product],
    discounts: Optional[Iterable[DiscountRecord]] = None,
    now: Optional[datetime] = None,
) -> List[PricedProduct]:
    """Price a whole listing against one snapshot of the discount list."""
    records = list(discounts or [])
    now = as_utc(now) if now is not None else utc_now()
    return [price_product(product, records, now) for product in products]
