"""Checkout flows owning the cart and payment state of one checkout screen.

A flow is created when the screen opens and ``close()``d when it goes away;
closing cancels any settlement polling so no state is written afterwards.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from datetime import datetime
from decimal import Decimal

from django.utils import timezone

from storefront.clients.interfaces import StorefrontApi
from storefront.domain import (
    CatalogSnapshot,
    Event,
    ItemKind,
    Order,
    PaymentProvider,
    PaymentSession,
    PaymentStatus,
    TicketTier,
)
from storefront.domain import cart as cart_model
from storefront.domain.cart import CartState
from storefront.domain.errors import (
    CartLockedError,
    DispatchInProgressError,
    ItemNotFoundError,
)
from storefront.domain.gates import ensure_purchasable
from storefront.services.order_builder import (
    build_adoption_request,
    build_checkout_request,
    clamp_adoption_quantity,
)
from storefront.services.payment_dispatcher import PaymentDispatcher, require_phone_number
from storefront.services.promo_service import PromoEngine
from storefront.services.settlement_poller import SettledCallback, SettlementPoller

logger = logging.getLogger(__name__)

SETTLEMENT_MESSAGES = {
    PaymentStatus.SUCCESS: "Payment successful!",
    PaymentStatus.TIMEOUT: "We could not confirm your payment yet. Please retry or check your orders.",
}


class PaymentFlow(ABC):
    """Shared order -> dispatch -> settlement machinery.

    What is being bought is frozen once the order exists; retries pay for
    that same order.
    """

    settled_path = "/my-tickets"

    def __init__(
        self,
        api: StorefrontApi,
        origin: str,
        on_settled: Callable[[str], object] | None = None,
        poller_factory: Callable[..., SettlementPoller] = SettlementPoller,
    ) -> None:
        self._api = api
        self._dispatcher = PaymentDispatcher(api, origin)
        self._on_settled = on_settled
        self._poller_factory = poller_factory
        self._poller: SettlementPoller | None = None
        self._poll_task: asyncio.Task | None = None
        self._submitting = False
        self._closed = False
        self.order: Order | None = None

    @property
    def payment(self) -> PaymentSession | None:
        if self.order is None:
            return None
        return self._dispatcher.session_for(self.order.id)

    @property
    def is_busy(self) -> bool:
        return self._submitting or (
            self.order is not None and self._dispatcher.is_in_flight(self.order.id)
        )

    @abstractmethod
    async def _create_order(self, provider: PaymentProvider) -> Order:
        """Create the upstream order for what is currently selected."""
        ...

    def _ensure_editable(self) -> None:
        if self.order is not None:
            raise CartLockedError(self.order.id)

    def _validate(self, provider: PaymentProvider, phone_number: str | None) -> None:
        if provider is PaymentProvider.MPESA:
            require_phone_number(phone_number)

    async def submit(
        self, provider: PaymentProvider, phone_number: str | None = None
    ) -> PaymentSession:
        """Create the order (first attempt only) and dispatch its payment.

        Local validation runs before any request. A later submit after
        FAILED or TIMEOUT reuses the same order.
        """
        if self.is_busy:
            raise DispatchInProgressError(self.order.id if self.order else "")
        if self.payment is not None and self.payment.status is PaymentStatus.SUCCESS:
            return self.payment
        self._validate(provider, phone_number)

        self._submitting = True
        try:
            if self.order is None:
                self.order = await self._create_order(provider)
                logger.info("Created order %s", self.order.id)
            else:
                self._dispatcher.reset(self.order.id)
        finally:
            self._submitting = False
        return await self._dispatch(provider, phone_number)

    async def retry(
        self, provider: PaymentProvider, phone_number: str | None = None
    ) -> PaymentSession:
        """Start a fresh payment attempt for the existing order."""
        if self.order is None:
            return await self.submit(provider, phone_number)
        self._validate(provider, phone_number)
        self._dispatcher.reset(self.order.id)
        return await self._dispatch(provider, phone_number)

    async def _dispatch(
        self, provider: PaymentProvider, phone_number: str | None
    ) -> PaymentSession:
        session = await self._dispatcher.dispatch(self.order.id, provider, phone_number)
        if session.status is PaymentStatus.PROCESSING and not self._closed:
            self._start_polling()
        return session

    def _start_polling(self) -> None:
        on_settled: SettledCallback | None = None
        if self._on_settled is not None:
            path = self.settled_path
            on_settled = lambda _order_id: self._on_settled(path)  # noqa: E731
        self._poller = self._poller_factory(
            self._api, self.order.id, on_settled, on_status=self._record_settlement
        )
        self._poll_task = asyncio.create_task(self._poller.run())

    def _record_settlement(self, status: PaymentStatus) -> None:
        if self._closed or self.payment is None:
            return
        self._dispatcher.record(
            self.payment.transition_to(status, message=SETTLEMENT_MESSAGES.get(status, ""))
        )

    async def wait_for_settlement(self) -> PaymentSession | None:
        if self._poll_task is not None:
            await self._poll_task
        return self.payment

    def close(self) -> None:
        """Discard the flow; any running poller stops without further writes."""
        self._closed = True
        if self._poller is not None:
            self._poller.cancel()
        if self._poll_task is not None and not self._poll_task.done():
            self._poll_task.cancel()


class CheckoutSession(PaymentFlow):
    """Cart of tickets and products for one event, plus its payment."""

    def __init__(
        self,
        api: StorefrontApi,
        event: Event,
        catalog: CatalogSnapshot,
        origin: str,
        on_settled: Callable[[str], object] | None = None,
        clock: Callable[[], datetime] = timezone.now,
        poller_factory: Callable[..., SettlementPoller] = SettlementPoller,
    ) -> None:
        super().__init__(api, origin, on_settled=on_settled, poller_factory=poller_factory)
        self.event = event
        self.catalog = catalog
        self.cart = CartState()
        self._clock = clock
        self._promos = PromoEngine(api)

    def add_ticket(self, tier_id: str, quantity: int = 1) -> CartState:
        """Raises TierUnavailableError when the tier is not on sale.

        Raises CartLockedError once the order has been created.
        """
        self._ensure_editable()
        tier = self.catalog.find_tier(tier_id)
        if tier is None:
            raise ItemNotFoundError(tier_id)
        ensure_purchasable(tier, self._clock())
        self.cart = cart_model.add_line(self.cart, self.catalog, tier_id, ItemKind.TIER, quantity)
        return self.cart

    def remove_ticket(self, tier_id: str) -> CartState:
        self._ensure_editable()
        self.cart = cart_model.remove_line(self.cart, tier_id, ItemKind.TIER)
        return self.cart

    def add_product(self, product_id: str, quantity: int = 1) -> CartState:
        self._ensure_editable()
        self.cart = cart_model.add_line(
            self.cart, self.catalog, product_id, ItemKind.PRODUCT, quantity
        )
        return self.cart

    def remove_product(self, product_id: str) -> CartState:
        self._ensure_editable()
        self.cart = cart_model.remove_line(self.cart, product_id, ItemKind.PRODUCT)
        return self.cart

    @property
    def subtotal(self) -> Decimal:
        return cart_model.subtotal(self.cart, self.catalog)

    @property
    def discount(self) -> Decimal:
        return cart_model.discount(self.cart, self.catalog)

    @property
    def total(self) -> Decimal:
        return cart_model.total(self.cart, self.catalog)

    async def apply_promo(self, code: str) -> CartState:
        """Validate ``code`` for the current cart; replaces any applied promo."""
        self._ensure_editable()
        promo = await self._promos.apply(
            code,
            self.event.id,
            self.subtotal,
            [line.item_id for line in self.cart.product_lines],
        )
        self.cart = cart_model.apply_promo(self.cart, promo)
        return self.cart

    def remove_promo(self) -> CartState:
        self._ensure_editable()
        self.cart = cart_model.remove_promo(self.cart)
        return self.cart

    def _validate(self, provider: PaymentProvider, phone_number: str | None) -> None:
        build_checkout_request(self.cart, self.event.id, provider)
        super()._validate(provider, phone_number)

    async def _create_order(self, provider: PaymentProvider) -> Order:
        request = build_checkout_request(self.cart, self.event.id, provider)
        return await self._api.checkout(request)


class AdoptionCheckout(PaymentFlow):
    """Lottery adoption of one tier; quantity stays within 1..10."""

    settled_path = "/my-orders"

    def __init__(
        self,
        api: StorefrontApi,
        event_id: str,
        tier: TicketTier,
        origin: str,
        on_settled: Callable[[str], object] | None = None,
        poller_factory: Callable[..., SettlementPoller] = SettlementPoller,
    ) -> None:
        super().__init__(api, origin, on_settled=on_settled, poller_factory=poller_factory)
        self.event_id = event_id
        self.tier = tier
        self.quantity = 1

    def set_quantity(self, quantity: int) -> int:
        self._ensure_editable()
        self.quantity = clamp_adoption_quantity(quantity)
        return self.quantity

    def increment(self) -> int:
        return self.set_quantity(self.quantity + 1)

    def decrement(self) -> int:
        return self.set_quantity(self.quantity - 1)

    @property
    def total(self) -> Decimal:
        return self.tier.price.amount * self.quantity

    async def _create_order(self, provider: PaymentProvider) -> Order:
        request = build_adoption_request(self.event_id, self.tier.id, self.quantity, provider)
        return await self._api.adopt(request)
