"""Layaway (installment) orders: listing, top-ups and cancellation."""

import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from storefront.clients.interfaces import StorefrontApi
from storefront.domain import LayawayOrder, LayawayStatus, PaymentProvider, PaymentStatus
from storefront.domain.errors import InvalidTopUpAmountError
from storefront.services.payment_dispatcher import redirect_url_from, require_phone_number

logger = logging.getLogger(__name__)

MPESA_PROMPT_MESSAGE = "Check your phone for the M-Pesa payment prompt"


def _display_amount(amount: Decimal) -> str:
    if amount == amount.to_integral_value():
        return f"{amount.to_integral_value():,}"
    return f"{amount.quantize(Decimal('0.01')):,}"


@dataclass(frozen=True)
class TopUpResult:
    """Outcome of a layaway top-up request."""

    status: PaymentStatus
    redirect_url: str | None = None
    message: str = ""


class LayawayService:
    """Service for listing, topping up and cancelling layaway orders."""

    def __init__(self, api: StorefrontApi, origin: str) -> None:
        self._api = api
        self._origin = origin.rstrip("/")

    async def list_orders(self, status: LayawayStatus | None = None) -> list[LayawayOrder]:
        return await self._api.get_layaway_orders(
            page=1, limit=50, status=status.value if status else None
        )

    async def top_up(
        self,
        order: LayawayOrder,
        amount: Decimal | str | int,
        provider: PaymentProvider,
        phone_number: str | None = None,
    ) -> TopUpResult:
        """Pay part of the balance.

        Raises:
            InvalidTopUpAmountError: If the order is closed or the amount is
                not in ``(0, balance_due]``.
            InvalidPhoneNumberError: If MPESA is chosen without a valid phone.
            ProviderError: If a redirect provider returns no URL.
            ApiError: If the top-up request fails.
        """
        if not order.accepts_top_up:
            raise InvalidTopUpAmountError("This order can no longer be topped up")
        try:
            value = Decimal(str(amount))
        except InvalidOperation:
            raise InvalidTopUpAmountError() from None
        if not value.is_finite() or value <= 0:
            raise InvalidTopUpAmountError()
        balance = order.balance_due
        if value > balance:
            raise InvalidTopUpAmountError(
                f"Amount exceeds balance due. Maximum: KES {_display_amount(balance)}"
            )

        body = {
            "amount": float(value),
            "paymentProvider": provider.value,
            "successUrl": f"{self._origin}/layaway?success=true",
            "cancelUrl": f"{self._origin}/layaway?cancelled=true",
        }
        if provider is PaymentProvider.MPESA:
            body["phoneNumber"] = require_phone_number(phone_number).value

        result = await self._api.top_up_layaway_order(order.id, body)
        logger.info("Top-up of %s requested for layaway order %s", value, order.id)
        if provider is PaymentProvider.MPESA:
            return TopUpResult(status=PaymentStatus.PROCESSING, message=MPESA_PROMPT_MESSAGE)
        url = redirect_url_from(provider, result.get("paymentData") or {})
        return TopUpResult(status=PaymentStatus.REDIRECTED, redirect_url=url)

    async def cancel_order(self, order_id: str) -> str:
        message = await self._api.cancel_layaway_order(order_id)
        logger.info("Layaway order %s cancelled", order_id)
        return message
