import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Iterable, Mapping, Optional

from pydantic import ValidationError

from storefront.core.config import settings
from storefront.schemas.discount import DiscountRecord, EmbeddedDiscount
from storefront.services.pricing_service.dates import as_utc, utc_now
from storefront.services.pricing_service.rounding import round_half_up
from storefront.services.pricing_service.validity import is_valid

logger = logging.getLogger(__name__)


# ===================== INPUT NORMALIZATION =====================


@dataclass(frozen=True)
class ResolvedDiscountInput:
    """Every discount signal a product can carry, in one shape."""

    discount_id: Optional[str] = None
    embedded: Optional[EmbeddedDiscount] = None
    numeric: Optional[float] = None
    price: float = 0.0
    old_price: Optional[float] = None


def _field(product: Any, *names: str) -> Any:
    for name in names:
        if isinstance(product, Mapping):
            if name in product:
                return product[name]
        elif hasattr(product, name):
            return getattr(product, name)
    return None


def _number(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def to_resolution_input(product: Any) -> ResolvedDiscountInput:
    """
    Accepts a Product, a raw dict (snake_case or upstream camelCase keys)
    or any object exposing the same attributes.
    """
    if product is None:
        return ResolvedDiscountInput()

    raw_id = _field(product, "discount_id", "discountId")
    discount_id = str(raw_id) if raw_id not in (None, "") else None

    embedded: Optional[EmbeddedDiscount] = None
    numeric: Optional[float] = None
    raw_discount = _field(product, "discount")
    if isinstance(raw_discount, EmbeddedDiscount):
        embedded = raw_discount
    elif isinstance(raw_discount, Mapping):
        try:
            embedded = EmbeddedDiscount.model_validate(
                {
                    "name": raw_discount.get("name"),
                    "percentage": raw_discount.get("percentage"),
                    "start_date": raw_discount.get("start_date", raw_discount.get("startDate")),
                    "end_date": raw_discount.get("end_date", raw_discount.get("endDate")),
                    "type": raw_discount.get("type"),
                }
            )
        except ValidationError:
            logger.debug("Ignoring malformed inline discount %r", raw_discount)
    else:
        numeric = _number(raw_discount)

    return ResolvedDiscountInput(
        discount_id=discount_id,
        embedded=embedded,
        numeric=numeric,
        price=_number(_field(product, "price")) or 0.0,
        old_price=_number(_field(product, "old_price", "oldPrice")),
    )


# ===================== SYNTHETIC RECORDS =====================


def _synthesize(
    percentage: float,
    now: datetime,
    source: str,
    name: Optional[str] = None,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    kind: Any = None,
) -> DiscountRecord:
    return DiscountRecord(
        id=None,
        name=name,
        percentage=percentage,
        valid_from=start or now,
        valid_to=end or now + timedelta(days=settings.DEFAULT_DISCOUNT_DAYS),
        type=kind,
        is_active=True,
        synthetic=True,
        source=source,
    )


# ===================== RESOLUTION TIERS =====================


def _match_reference(
    data: ResolvedDiscountInput,
    discounts: Iterable[DiscountRecord],
    now: datetime,
) -> Optional[DiscountRecord]:
    if data.discount_id is None:
        return None
    for record in discounts:
        if record is None or record.id is None:
            continue
        if str(record.id) == data.discount_id:
            if is_valid(record, now):
                return record
            logger.debug("Discount %s referenced but not currently valid", record.id)
            return None
    return None


def _from_embedded(data: ResolvedDiscountInput, now: datetime) -> Optional[DiscountRecord]:
    embedded = data.embedded
    if embedded is None or not embedded.percentage > 0:
        return None
    return _synthesize(
        embedded.percentage,
        now,
        source="embedded",
        name=embedded.name,
        start=embedded.start_date,
        end=embedded.end_date,
        kind=embedded.type,
    )


def _from_numeric(data: ResolvedDiscountInput, now: datetime) -> Optional[DiscountRecord]:
    if data.numeric is None or not data.numeric > 0:
        return None
    return _synthesize(data.numeric, now, source="numeric")


def _from_price_delta(data: ResolvedDiscountInput, now: datetime) -> Optional[DiscountRecord]:
    if data.old_price is None or not data.old_price > data.price:
        return None
    percentage = round_half_up((data.old_price - data.price) / data.old_price * 100)
    if percentage <= 0:
        return None
    return _synthesize(percentage, now, source="inferred")


def resolve(
    product: Any,
    discounts: Optional[Iterable[DiscountRecord]] = None,
    now: Optional[datetime] = None,
) -> Optional[DiscountRecord]:
    """
    Find the single discount that applies to a product.

    First match wins:
      1. discount_id pointing at a currently valid record in `discounts`
      2. inline discount object with a positive percentage
      3. inline bare percentage
      4. old_price above price
    Malformed data never raises; a tier that cannot be read is skipped.
    """
    now = as_utc(now) if now is not None else utc_now()
    records = list(discounts or [])

    try:
        data = product if isinstance(product, ResolvedDiscountInput) else to_resolution_input(product)
    except (AttributeError, TypeError, ValueError):
        logger.debug("Could not read discount fields from %r", product, exc_info=True)
        return None

    tiers = (
        lambda: _match_reference(data, records, now),
        lambda: _from_embedded(data, now),
        lambda: _from_numeric(data, now),
        lambda: _from_price_delta(data, now),
    )
    for tier in tiers:
        try:
            found = tier()
        except (AttributeError, TypeError, ValueError, ValidationError, ZeroDivisionError):
            logger.debug("Discount tier failed for %r", product, exc_info=True)
            continue
        if found is not None:
            return found
    return None
