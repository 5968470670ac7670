"""Payment dispatch: routes an order to one provider's initiation protocol.

    IDLE --dispatch--> DISPATCHING --> PROCESSING   (MPESA, hand off to poller)
                                   --> REDIRECTED   (STRIPE / PAYSTACK)
                                   --> FAILED       (initiation or provider error)

Only one dispatch per order may be in flight. The guard is taken before the
first network call and released on every exit path.
"""

import logging
from typing import Any, assert_never

from storefront.clients.interfaces import StorefrontApi
from storefront.domain import (
    MpesaPayload,
    PaymentProvider,
    PaymentSession,
    PaymentStatus,
    PhoneNumber,
    ProviderConfig,
    RedirectPayload,
)
from storefront.domain.errors import (
    ApiError,
    DispatchInProgressError,
    DomainError,
    InvalidPhoneNumberError,
    ProviderError,
)
from storefront.domain.models import ProviderPayload

logger = logging.getLogger(__name__)


def require_phone_number(raw: str | None) -> PhoneNumber:
    try:
        return PhoneNumber.from_input(raw)
    except ValueError:
        raise InvalidPhoneNumberError() from None


def build_payload(
    provider: PaymentProvider, order_id: str, origin: str, phone_number: str | None = None
) -> ProviderPayload:
    """Local input for a provider; raises InvalidPhoneNumberError for MPESA."""
    match provider:
        case PaymentProvider.MPESA:
            return MpesaPayload(phone_number=require_phone_number(phone_number).value)
        case PaymentProvider.STRIPE:
            return RedirectPayload(
                success_url=f"{origin}/payment-success?orderId={order_id}",
                cancel_url=f"{origin}/payment-cancel",
            )
        case PaymentProvider.PAYSTACK:
            return RedirectPayload(
                success_url=f"{origin}/paystack/callback",
                cancel_url=f"{origin}/payment-cancel",
            )
        case _:
            assert_never(provider)


def payload_body(payload: ProviderPayload) -> dict[str, Any]:
    match payload:
        case MpesaPayload(phone_number=phone_number):
            return {"phoneNumber": phone_number}
        case RedirectPayload(success_url=success_url, cancel_url=cancel_url):
            return {"successUrl": success_url, "cancelUrl": cancel_url}
        case _:
            assert_never(payload)


def redirect_url_from(provider: PaymentProvider, response: dict[str, Any]) -> str:
    """URL the browser must be sent to; raises ProviderError when absent."""
    match provider:
        case PaymentProvider.STRIPE:
            url = response.get("url")
            if not url:
                raise ProviderError("Failed to get Stripe checkout URL")
            return url
        case PaymentProvider.PAYSTACK:
            url = (response.get("data") or {}).get("authorization_url")
            if not url:
                raise ProviderError("Failed to get Paystack authorization URL")
            return url
        case PaymentProvider.MPESA:
            raise ValueError("MPESA settles on-page and has no redirect")
        case _:
            assert_never(provider)


def select_provider(
    preferred: PaymentProvider, configs: list[ProviderConfig]
) -> PaymentProvider:
    """Keep ``preferred`` if enabled, else fall back to the first enabled one."""
    enabled = [c.provider for c in configs if c.is_enabled]
    if enabled and preferred not in enabled:
        return enabled[0]
    return preferred


async def resolve_provider(api: StorefrontApi, preferred: PaymentProvider) -> PaymentProvider:
    """select_provider over the public config; keeps ``preferred`` if it cannot load."""
    try:
        configs = await api.get_public_payment_config()
    except ApiError as exc:
        logger.warning("Payment config unavailable: %s", exc.message)
        return preferred
    return select_provider(preferred, configs)


class PaymentDispatcher:
    """Owns the PaymentSession of each order it dispatches."""

    def __init__(self, api: StorefrontApi, origin: str) -> None:
        self._api = api
        self._origin = origin.rstrip("/")
        self._in_flight: set[str] = set()
        self._sessions: dict[str, PaymentSession] = {}

    def session_for(self, order_id: str) -> PaymentSession | None:
        return self._sessions.get(order_id)

    def record(self, session: PaymentSession) -> PaymentSession:
        self._sessions[session.order_id] = session
        return session

    def is_in_flight(self, order_id: str) -> bool:
        session = self._sessions.get(order_id)
        return order_id in self._in_flight or (
            session is not None and session.status.is_in_flight
        )

    def reset(self, order_id: str) -> PaymentSession | None:
        """Return a FAILED or TIMEOUT attempt to IDLE so it can be retried."""
        session = self._sessions.get(order_id)
        if session is not None and session.status in (PaymentStatus.FAILED, PaymentStatus.TIMEOUT):
            return self.record(session.transition_to(PaymentStatus.IDLE, message=""))
        return session

    async def dispatch(
        self,
        order_id: str,
        provider: PaymentProvider,
        phone_number: str | None = None,
    ) -> PaymentSession:
        """Initiate payment for ``order_id``.

        Raises:
            DispatchInProgressError: If the order already has a dispatch or
                settlement in progress. No request is made.
            InvalidPhoneNumberError: If MPESA is chosen without a valid phone.

        Initiation and provider failures do not raise; they come back as a
        FAILED session carrying the message to show.
        """
        if self.is_in_flight(order_id):
            raise DispatchInProgressError(order_id)
        payload = build_payload(provider, order_id, self._origin, phone_number)

        self._in_flight.add(order_id)
        session = self.record(
            PaymentSession(
                order_id=order_id,
                provider=provider,
                status=PaymentStatus.DISPATCHING,
                payload=payload,
            )
        )
        try:
            response = await self._api.initiate_payment(order_id, payload_body(payload))
            if provider is PaymentProvider.MPESA:
                logger.info(
                    "STK push sent for order %s to %s",
                    order_id,
                    PhoneNumber(payload.phone_number).masked(),
                )
                session = self.record(session.transition_to(PaymentStatus.PROCESSING))
            else:
                url = redirect_url_from(provider, response)
                logger.info("Redirecting order %s to %s", order_id, provider.value)
                session = self.record(
                    session.transition_to(PaymentStatus.REDIRECTED, redirect_url=url)
                )
        except DomainError as exc:
            logger.warning(
                "Payment initiation failed for order %s via %s: %s",
                order_id,
                provider.value,
                exc.message,
            )
            session = self.record(
                session.transition_to(PaymentStatus.FAILED, message=exc.message)
            )
        finally:
            self._in_flight.discard(order_id)
            if self._sessions[order_id].status is PaymentStatus.DISPATCHING:
                self.record(self._sessions[order_id].transition_to(PaymentStatus.IDLE))
        return session
