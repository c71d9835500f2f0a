from datetime import datetime, timedelta
from typing import Any, Mapping, Optional

from storefront.core.config import settings
from storefront.schemas.discount import CountdownState, DiscountWindow
from storefront.services.pricing_service.dates import as_utc, parse_instant, utc_now

MIN_WINDOW = timedelta(days=1)


def _read(discount: Any, *names: str) -> Any:
    for name in names:
        if isinstance(discount, Mapping):
            if discount.get(name) is not None:
                return discount[name]
        else:
            value = getattr(discount, name, None)
            if value is not None:
                return value
    return None


def derive_window(discount: Any, now: Optional[datetime] = None) -> DiscountWindow:
    """
    Start/end instants for a discount countdown banner.

    Reads valid_from/valid_to from records, start_date/end_date from inline
    discounts (camelCase keys too). Missing or unparsable values fall back
    to now and now + DEFAULT_DISCOUNT_DAYS; an end at or before the start is
    moved to start + 1 day.
    """
    now = as_utc(now) if now is not None else utc_now()

    start = None
    end = None
    if discount is not None:
        start = parse_instant(_read(discount, "valid_from", "validFrom", "start_date", "startDate"))
        end = parse_instant(_read(discount, "valid_to", "validTo", "end_date", "endDate"))

    if start is None:
        start = now
    if end is None:
        end = now + timedelta(days=settings.DEFAULT_DISCOUNT_DAYS)
    if end <= start:
        end = start + MIN_WINDOW

    return DiscountWindow(start_date=start, end_date=end)


def countdown(window: DiscountWindow, now: Optional[datetime] = None) -> CountdownState:
    now = as_utc(now) if now is not None else utc_now()

    total = (window.end_date - window.start_date).total_seconds()
    remaining = (window.end_date - now).total_seconds()
    if remaining <= 0:
        return CountdownState(expired=True)

    elapsed = (now - window.start_date).total_seconds()
    elapsed_percent = max(0.0, min(100.0, elapsed / total * 100)) if total > 0 else 0.0

    whole = int(remaining)
    days, rest = divmod(whole, 86400)
    hours, rest = divmod(rest, 3600)
    minutes, seconds = divmod(rest, 60)

    return CountdownState(
        days=days,
        hours=hours,
        minutes=minutes,
        seconds=seconds,
        remaining_percent=100.0 - elapsed_percent,
        expired=False,
    )
