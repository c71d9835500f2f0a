from enum import Enum

class DiscountType(str, Enum):
    sale = "sale"
    seasonal = "seasonal"
    special = "special"
    coupon = "coupon"
