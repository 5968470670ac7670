"""Verification of redirect-provider callbacks."""

import logging
from dataclasses import dataclass

from storefront.clients.interfaces import StorefrontApi
from storefront.domain import PaymentStatus
from storefront.domain.errors import ApiError, MissingPaymentReferenceError

logger = logging.getLogger(__name__)

SETTLED_REDIRECT_PATH = "/my-tickets"


@dataclass(frozen=True)
class CallbackResult:
    status: PaymentStatus
    message: str = ""


async def verify_paystack_callback(api: StorefrontApi, reference: str | None) -> CallbackResult:
    """Confirm a Paystack payment by its reference.

    Raises:
        MissingPaymentReferenceError: If the callback carried no reference.
    """
    if not reference:
        raise MissingPaymentReferenceError()
    try:
        success = await api.verify_paystack(reference)
    except ApiError as exc:
        logger.warning("Paystack verification errored for %s: %s", reference, exc.message)
        return CallbackResult(status=PaymentStatus.FAILED, message=exc.message)
    if not success:
        logger.info("Paystack reference %s not verified", reference)
        return CallbackResult(status=PaymentStatus.FAILED, message="Payment verification failed")
    return CallbackResult(status=PaymentStatus.SUCCESS, message="Payment successful")
