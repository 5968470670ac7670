"""Interface to the upstream ticketing API.

Services depend only on this; the HTTP implementation lives in
http_client.py and tests substitute an in-memory fake.
"""

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Any

from storefront.domain import (
    AdoptionRequest,
    Event,
    LayawayOrder,
    LotteryStats,
    Order,
    OrderRequest,
    Product,
    PromoValidation,
    ProviderConfig,
    TicketTier,
    WaitlistEntry,
)


class StorefrontApi(ABC):
    """Async client for the storefront REST endpoints."""

    async def __aenter__(self) -> "StorefrontApi":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Release network resources."""

    @property
    @abstractmethod
    def is_authenticated(self) -> bool:
        """True when a bearer token is available."""
        ...

    # Catalog

    @abstractmethod
    async def get_event(self, event_id: str) -> Event:
        """GET /events/{id}"""
        ...

    @abstractmethod
    async def get_event_tiers(self, event_id: str) -> dict[str, tuple[TicketTier, ...]]:
        """GET /events/{id}/tiers, grouped by category."""
        ...

    @abstractmethod
    async def get_products(self, event_id: str | None = None) -> tuple[Product, ...]:
        """GET /products?eventId="""
        ...

    # Orders

    @abstractmethod
    async def checkout(self, request: OrderRequest) -> Order:
        """POST /orders/checkout"""
        ...

    @abstractmethod
    async def adopt(self, request: AdoptionRequest) -> Order:
        """POST /orders/adopt"""
        ...

    @abstractmethod
    async def validate_promo(
        self, code: str, event_id: str, subtotal: Decimal, product_ids: list[str]
    ) -> PromoValidation:
        """POST /promo/validate"""
        ...

    # Payments

    @abstractmethod
    async def initiate_payment(self, order_id: str, body: dict[str, Any]) -> dict[str, Any]:
        """POST /payments/initiate/{orderId}; the response shape is provider specific."""
        ...

    @abstractmethod
    async def get_payment_status(self, order_id: str) -> bool:
        """GET /payments/status/{orderId}; returns the ``paid`` flag."""
        ...

    @abstractmethod
    async def verify_paystack(self, reference: str) -> bool:
        """GET /payments/paystack/verify/{reference}"""
        ...

    @abstractmethod
    async def get_public_payment_config(self) -> list[ProviderConfig]:
        """GET /payments/config/public"""
        ...

    # Lottery

    @abstractmethod
    async def enter_lottery(self, event_id: str) -> None:
        """POST /lottery/enter/{eventId}"""
        ...

    @abstractmethod
    async def check_lottery_eligibility(self, event_id: str) -> bool:
        """GET /lottery/eligible/{eventId}"""
        ...

    @abstractmethod
    async def get_lottery_stats(self, event_id: str) -> LotteryStats:
        """GET /lottery/event/{id}/stats"""
        ...

    # Waitlist and access

    @abstractmethod
    async def join_waitlist(self, entry: WaitlistEntry) -> None:
        """POST /waitlist"""
        ...

    @abstractmethod
    async def verify_event_access(self, event_id: str, code: str) -> bool:
        """POST /events/{id}/verify-access"""
        ...

    # Layaway

    @abstractmethod
    async def get_layaway_orders(
        self, page: int = 1, limit: int = 50, status: str | None = None
    ) -> list[LayawayOrder]:
        """GET /orders/layaway"""
        ...

    @abstractmethod
    async def top_up_layaway_order(self, order_id: str, body: dict[str, Any]) -> dict[str, Any]:
        """POST /orders/layaway/{id}/top-up"""
        ...

    @abstractmethod
    async def cancel_layaway_order(self, order_id: str) -> str:
        """POST /orders/layaway/{id}/cancel; returns the server message."""
        ...
