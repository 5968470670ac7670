"""Promo engine: local normalization, backend validation."""

import logging
from decimal import Decimal

from storefront.clients.interfaces import StorefrontApi
from storefront.domain import DiscountType, PromoApplication, PromoCode
from storefront.domain.discounts import clamp_discount
from storefront.domain.errors import BlankPromoCodeError, PromoRejectedError

logger = logging.getLogger(__name__)


class PromoEngine:
    """Validates promo codes against an order context.

    The discount returned by the backend is what gets charged; it is only
    bounded here so the displayed total never goes negative.
    """

    def __init__(self, api: StorefrontApi) -> None:
        self._api = api

    async def apply(
        self,
        code: str,
        event_id: str,
        subtotal: Decimal,
        product_ids: list[str] | tuple[str, ...] = (),
    ) -> PromoApplication:
        """Return the application for ``code``.

        Raises:
            BlankPromoCodeError: If the code is empty; no request is made.
            PromoRejectedError: If the backend declares the code unusable.
            ApiError: If the validation request itself fails.
        """
        try:
            promo_code = PromoCode.from_input(code)
        except ValueError:
            raise BlankPromoCodeError() from None

        result = await self._api.validate_promo(
            promo_code.value, event_id, subtotal, list(product_ids)
        )
        if not result.valid or result.discount_type is None:
            logger.info("Promo %s rejected for event %s", promo_code, event_id)
            raise PromoRejectedError(result.error or None)

        amount = clamp_discount(result.discount_amount, subtotal)
        if (
            result.discount_type is DiscountType.PERCENTAGE
            and result.max_discount_amount is not None
        ):
            amount = min(amount, result.max_discount_amount)

        return PromoApplication(
            code=(result.code or promo_code.value).upper(),
            discount_type=result.discount_type,
            discount_value=result.discount_value,
            discount_amount=amount,
            description=result.description,
            max_discount_amount=result.max_discount_amount,
        )
