from datetime import datetime
from typing import Annotated, Any, List, Optional, Union

from pydantic import AliasChoices, BaseModel, BeforeValidator, Field, field_validator

from storefront.enums.discount_types import DiscountType
from storefront.services.pricing_service.dates import parse_instant

# Name the upstream admin gives a discount when nobody typed one in.
GENERIC_DISCOUNT_NAME = "discount"


def _coerce_percentage(value: Any) -> float:
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def _coerce_type(value: Any) -> DiscountType:
    try:
        return DiscountType(value)
    except (TypeError, ValueError):
        return DiscountType.sale


# Upstream data is not trusted: bad dates become None, bad numbers 0,
# unknown types "sale".
Instant = Annotated[Optional[datetime], BeforeValidator(parse_instant)]
Percentage = Annotated[float, BeforeValidator(_coerce_percentage)]
Kind = Annotated[DiscountType, BeforeValidator(_coerce_type)]


# ---------- Discount records ----------

class DiscountRecord(BaseModel):
    id: Optional[str] = None
    name: Optional[str] = None
    percentage: Percentage = 0.0
    valid_from: Instant = None
    valid_to: Instant = None
    is_active: bool = True
    type: Kind = DiscountType.sale
    code: str = ""
    min_purchase: float = 0.0
    applicable_products: List[str] = []
    applicable_categories: List[str] = []

    # in-memory records built from inline product fields
    synthetic: bool = False
    source: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, value: Any) -> Optional[str]:
        if value is None or value == "":
            return None
        return str(value)

    @property
    def label(self) -> str:
        if self.name and self.name.strip().lower() != GENERIC_DISCOUNT_NAME:
            return self.name
        return f"{self.percentage:g}% {GENERIC_DISCOUNT_NAME}"


class EmbeddedDiscount(BaseModel):
    """Discount object carried inline on a product document."""

    name: Optional[str] = None
    percentage: Percentage = 0.0
    # upstream sends startDate / endDate
    start_date: Instant = Field(default=None, validation_alias=AliasChoices("start_date", "startDate"))
    end_date: Instant = Field(default=None, validation_alias=AliasChoices("end_date", "endDate"))
    type: Kind = DiscountType.sale

    @field_validator("name", mode="before")
    @classmethod
    def _stringify_name(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        return str(value)


# ---------- Pricing output ----------

class PricingResult(BaseModel):
    has_discount: bool
    discount_percent: float = 0
    original_price: Union[int, float]
    discounted_price: Union[int, float]
    savings_amount: Union[int, float] = 0
    savings_percentage: int = 0
    resolved_discount: Optional[DiscountRecord] = None


class DiscountWindow(BaseModel):
    start_date: datetime
    end_date: datetime


class CountdownState(BaseModel):
    days: int = 0
    hours: int = 0
    minutes: int = 0
    seconds: int = 0
    remaining_percent: float = 0.0
    expired: bool = False


class DiscountCountdownResponse(BaseModel):
    product_id: str
    label: str
    percentage: float
    type: DiscountType
    window: DiscountWindow
    countdown: CountdownState
