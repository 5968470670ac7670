"""Discount arithmetic for redisplay.

The backend computes the charged discount; these helpers reproduce its rules
so the UI can show a total, and keep every displayed amount inside
``[0, subtotal]``.
"""

from decimal import ROUND_HALF_UP, Decimal

from storefront.domain.models import DiscountType

ZERO = Decimal("0")
CENTS = Decimal("0.01")


def clamp_discount(amount: Decimal, subtotal: Decimal) -> Decimal:
    """Bound a discount to ``[0, subtotal]``."""
    return min(max(amount, ZERO), max(subtotal, ZERO))


def compute_discount(
    discount_type: DiscountType,
    value: Decimal,
    subtotal: Decimal,
    max_discount_amount: Decimal | None = None,
) -> Decimal:
    if discount_type is DiscountType.PERCENTAGE:
        amount = subtotal * value / Decimal(100)
        if max_discount_amount is not None:
            amount = min(amount, max_discount_amount)
    else:
        amount = min(value, subtotal)
    return clamp_discount(amount.quantize(CENTS, rounding=ROUND_HALF_UP), subtotal)


def total_after_discount(subtotal: Decimal, discount_amount: Decimal) -> Decimal:
    return max(subtotal - discount_amount, ZERO)
