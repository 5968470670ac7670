"""Pytest configuration and shared fixtures."""

import asyncio
from datetime import datetime, timezone
from decimal import Decimal
from functools import partial

import pytest
from rest_framework.test import APIClient

from storefront.clients.interfaces import StorefrontApi
from storefront.domain import (
    Capacity,
    CatalogSnapshot,
    Event,
    LotteryStats,
    Money,
    Order,
    Product,
    PromoValidation,
    TicketTier,
    Visibility,
)
from storefront.services.settlement_poller import SettlementPoller

NOW = datetime(2026, 6, 1, 12, 0, tzinfo=timezone.utc)


class FakeStorefrontApi(StorefrontApi):
    """In-memory StorefrontApi recording every call it receives.

    Scripted responses are plain attributes; an attribute holding an
    exception instance is raised instead of returned. Order creation and
    payment initiation yield to the loop once so concurrent callers interleave.
    """

    def __init__(self) -> None:
        self.calls: list[tuple] = []
        self.authenticated = True
        self.event = Event(id="evt-1", title="Summer Fest")
        self.tiers: dict[str, tuple[TicketTier, ...]] = {}
        self.products: tuple[Product, ...] = ()
        self.order = Order(id="ord-1", total_amount=Money(Decimal("0")))
        self.promo_result = PromoValidation(valid=False)
        self.initiate_result: dict | Exception = {}
        self.status_results: list[bool | Exception] = []
        self.paystack_result: bool | Exception = True
        self.payment_configs: list = []
        self.eligible: bool | Exception = True
        self.stats: LotteryStats | Exception = LotteryStats()
        self.enter_result: Exception | None = None
        self.waitlist_result: Exception | None = None
        self.access_result: bool | Exception = False
        self.layaway_orders: list = []
        self.top_up_result: dict | Exception = {}
        self.cancel_message = "Order cancelled"

    def _record(self, name: str, *args):
        self.calls.append((name, *args))

    def calls_to(self, name: str) -> list[tuple]:
        return [call for call in self.calls if call[0] == name]

    @staticmethod
    def _reply(value):
        if isinstance(value, Exception):
            raise value
        return value

    @property
    def is_authenticated(self) -> bool:
        return self.authenticated

    async def get_event(self, event_id):
        self._record("get_event", event_id)
        return self._reply(self.event)

    async def get_event_tiers(self, event_id):
        self._record("get_event_tiers", event_id)
        return self._reply(self.tiers)

    async def get_products(self, event_id=None):
        self._record("get_products", event_id)
        return self._reply(self.products)

    async def checkout(self, request):
        self._record("checkout", request)
        await asyncio.sleep(0)
        return self._reply(self.order)

    async def adopt(self, request):
        self._record("adopt", request)
        return self._reply(self.order)

    async def validate_promo(self, code, event_id, subtotal, product_ids):
        self._record("validate_promo", code, event_id, subtotal, product_ids)
        return self._reply(self.promo_result)

    async def initiate_payment(self, order_id, body):
        self._record("initiate_payment", order_id, body)
        await asyncio.sleep(0)
        return self._reply(self.initiate_result)

    async def get_payment_status(self, order_id):
        self._record("get_payment_status", order_id)
        if not self.status_results:
            return False
        return self._reply(self.status_results.pop(0))

    async def verify_paystack(self, reference):
        self._record("verify_paystack", reference)
        return self._reply(self.paystack_result)

    async def get_public_payment_config(self):
        self._record("get_public_payment_config")
        return self._reply(self.payment_configs)

    async def enter_lottery(self, event_id):
        self._record("enter_lottery", event_id)
        self._reply(self.enter_result)

    async def check_lottery_eligibility(self, event_id):
        self._record("check_lottery_eligibility", event_id)
        return self._reply(self.eligible)

    async def get_lottery_stats(self, event_id):
        self._record("get_lottery_stats", event_id)
        return self._reply(self.stats)

    async def join_waitlist(self, entry):
        self._record("join_waitlist", entry)
        self._reply(self.waitlist_result)

    async def verify_event_access(self, event_id, code):
        self._record("verify_event_access", event_id, code)
        return self._reply(self.access_result)

    async def get_layaway_orders(self, page=1, limit=50, status=None):
        self._record("get_layaway_orders", page, limit, status)
        return self._reply(self.layaway_orders)

    async def top_up_layaway_order(self, order_id, body):
        self._record("top_up_layaway_order", order_id, body)
        return self._reply(self.top_up_result)

    async def cancel_layaway_order(self, order_id):
        self._record("cancel_layaway_order", order_id)
        return self._reply(self.cancel_message)


class FakeSleep:
    """Stands in for asyncio.sleep; records delays and yields once.

    ``hook`` is called with the running count of sleeps before yielding.
    """

    def __init__(self) -> None:
        self.delays: list[float] = []
        self.hook = None

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)
        if self.hook is not None:
            self.hook(len(self.delays))
        await asyncio.sleep(0)


def make_tier(
    tier_id: str = "tier-ga",
    price: str = "1000",
    remaining: int = 100,
    max_qty: int = 10,
    category: str = "General",
    sales_start: datetime | None = None,
    sales_end: datetime | None = None,
) -> TicketTier:
    return TicketTier(
        id=tier_id,
        name=tier_id.upper(),
        category=category,
        price=Money(Decimal(price)),
        remaining_quantity=Capacity(remaining),
        max_qty_per_order=max_qty,
        sales_start=sales_start,
        sales_end=sales_end,
    )


def make_product(product_id: str = "prod-shirt", price: str = "500", stock: int = 5) -> Product:
    return Product(
        id=product_id, name=product_id.upper(), price=Money(Decimal(price)), stock=Capacity(stock)
    )


@pytest.fixture
def api_client() -> APIClient:
    return APIClient()


@pytest.fixture
def fake_api() -> FakeStorefrontApi:
    return FakeStorefrontApi()


@pytest.fixture
def fake_sleep() -> FakeSleep:
    return FakeSleep()


@pytest.fixture
def poller_factory(fake_sleep):
    return partial(SettlementPoller, sleep=fake_sleep)


@pytest.fixture
def event() -> Event:
    return Event(id="evt-1", title="Summer Fest")


@pytest.fixture
def private_event() -> Event:
    return Event(id="evt-private", title="Members Night", visibility=Visibility.PRIVATE)


@pytest.fixture
def catalog() -> CatalogSnapshot:
    return CatalogSnapshot(
        tiers_by_category={
            "General": (make_tier("tier-ga", "1000", max_qty=4),),
            "VIP": (make_tier("tier-vip", "5000", remaining=3, category="VIP"),),
        },
        products=(make_product("prod-shirt", "500", stock=2),),
    )
