from typing import Any, Optional, Union

from pydantic import BaseModel, Field, ValidationError, field_validator

from storefront.schemas.discount import EmbeddedDiscount, PricingResult


def _to_number(value: Any) -> Optional[Union[int, float]]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


class Product(BaseModel):
    id: str = Field(min_length=1)
    name: str = ""
    category_id: Optional[str] = None
    # category display name, filled from the category list
    category: Optional[str] = None
    is_new: bool = False

    price: Union[int, float] = 0
    old_price: Optional[Union[int, float]] = None
    discount_id: Optional[str] = None
    discount: Optional[Union[float, EmbeddedDiscount]] = None

    @field_validator("id", "discount_id", "category_id", mode="before")
    @classmethod
    def _stringify_ids(cls, value: Any) -> Optional[str]:
        if value is None or value == "":
            return None
        return str(value)

    @field_validator("price", mode="before")
    @classmethod
    def _price(cls, value: Any) -> Union[int, float]:
        number = _to_number(value)
        return 0 if number is None else number

    @field_validator("old_price", mode="before")
    @classmethod
    def _old_price(cls, value: Any) -> Optional[Union[int, float]]:
        return _to_number(value)

    @field_validator("discount", mode="before")
    @classmethod
    def _discount_shape(cls, value: Any) -> Optional[Union[float, EmbeddedDiscount]]:
        """
        Inline discounts arrive as a bare percentage, an object, or nothing.
        Any other shape is dropped.
        """
        if value is None or isinstance(value, bool):
            return None
        if isinstance(value, (int, float)):
            return float(value)
        if isinstance(value, EmbeddedDiscount):
            return value
        if isinstance(value, dict):
            try:
                return EmbeddedDiscount.model_validate(value)
            except ValidationError:
                return None
        return None


class ProductQuery(BaseModel):
    category_id: Optional[str] = None
    is_new: Optional[bool] = None
    has_discount: Optional[bool] = None
    limit: Optional[int] = Field(default=None, gt=0)


class PricedProduct(BaseModel):
    product: Product
    pricing: PricingResult
    label: Optional[str] = None
