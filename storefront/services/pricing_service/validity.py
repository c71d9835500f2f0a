from datetime import datetime
from typing import Optional

from storefront.schemas.discount import DiscountRecord
from storefront.services.pricing_service.dates import as_utc, utc_now


def is_valid(discount: Optional[DiscountRecord], now: Optional[datetime] = None) -> bool:
    """
    True when the discount may be applied at `now`.

    - missing or explicitly inactive -> False
    - both dates known -> valid_from <= now <= valid_to, and percentage > 0
    - otherwise the percentage alone decides
    """
    if discount is None:
        return False

    if discount.is_active is False:
        return False

    if discount.valid_from is not None and discount.valid_to is not None:
        now = as_utc(now) if now is not None else utc_now()
        return discount.valid_from <= now <= discount.valid_to and discount.percentage > 0

    return discount.percentage > 0
