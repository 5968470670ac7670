"""Tests for the httpx StorefrontApi client against a mock transport."""

import json
from decimal import Decimal

import httpx
import pytest

from storefront.clients import HttpStorefrontApi
from storefront.clients.serializers import render_checkout
from storefront.domain import (
    DiscountType,
    LayawayStatus,
    OrderRequest,
    PaymentProvider,
    PaymentStatus,
    Visibility,
)
from storefront.domain.errors import ApiError
from storefront.services.settlement_poller import SettlementPoller
from storefront.stores import InMemoryTokenStore

BASE_URL = "https://api.example.com/api"


class Recorder:
    """Mock transport handler serving canned JSON per (method, path)."""

    def __init__(self, routes: dict[tuple[str, str], httpx.Response]) -> None:
        self.routes = routes
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.routes.get(
            (request.method, request.url.path),
            httpx.Response(404, json={"message": "Not found"}),
        )


def make_api(routes, token: str | None = None) -> tuple[HttpStorefrontApi, Recorder]:
    recorder = Recorder(routes)
    api = HttpStorefrontApi(
        base_url=BASE_URL,
        token_store=InMemoryTokenStore(token),
        transport=httpx.MockTransport(recorder),
    )
    return api, recorder


class TestRequestHandling:
    """Tests for authentication and error mapping."""

    @pytest.mark.asyncio
    async def test_bearer_token_sent(self):
        """Signed-in requests carry the bearer token."""
        api, recorder = make_api(
            {("GET", "/api/lottery/eligible/evt-1"): httpx.Response(200, json={"eligible": True})},
            token="tok-123",
        )
        async with api:
            assert api.is_authenticated
            assert await api.check_lottery_eligibility("evt-1") is True
        assert recorder.requests[0].headers["Authorization"] == "Bearer tok-123"

    @pytest.mark.asyncio
    async def test_no_token_no_header(self):
        """Signed-out requests carry no Authorization header."""
        api, recorder = make_api(
            {("GET", "/api/payments/status/ord-1"): httpx.Response(200, json={"paid": False})}
        )
        async with api:
            assert not api.is_authenticated
            assert await api.get_payment_status("ord-1") is False
        assert "Authorization" not in recorder.requests[0].headers

    @pytest.mark.asyncio
    async def test_error_body_message_raised(self):
        """Non-2xx responses raise ApiError with the body's message."""
        api, _ = make_api(
            {
                ("POST", "/api/lottery/enter/evt-1"): httpx.Response(
                    409, json={"message": "Already entered"}
                )
            }
        )
        async with api:
            with pytest.raises(ApiError) as exc:
                await api.enter_lottery("evt-1")
        assert exc.value.message == "Already entered"
        assert exc.value.status_code == 409

    @pytest.mark.asyncio
    async def test_error_without_message(self):
        """Errors without a JSON message fall back to 'Request failed'."""
        api, _ = make_api(
            {("GET", "/api/events/evt-1"): httpx.Response(500, text="Internal Server Error")}
        )
        async with api:
            with pytest.raises(ApiError, match="Request failed"):
                await api.get_event("evt-1")

    @pytest.mark.asyncio
    async def test_network_failure(self):
        """Transport errors become a user-safe ApiError."""

        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        api = HttpStorefrontApi(base_url=BASE_URL, transport=httpx.MockTransport(refuse))
        async with api:
            with pytest.raises(ApiError, match="Unable to reach the server"):
                await api.get_payment_status("ord-1")

    @pytest.mark.asyncio
    async def test_malformed_payload(self):
        """Payloads missing required fields are reported, not half-parsed."""
        api, _ = make_api({("GET", "/api/events/evt-1"): httpx.Response(200, json={"title": "x"})})
        async with api:
            with pytest.raises(ApiError, match="Unexpected response from server"):
                await api.get_event("evt-1")


class TestCatalogEndpoints:
    """Tests for event, tier and product parsing."""

    @pytest.mark.asyncio
    async def test_event_parsed(self):
        """Event visibility and flags are parsed into the domain model."""
        api, _ = make_api(
            {
                ("GET", "/api/events/evt-1"): httpx.Response(
                    200,
                    json={
                        "id": "evt-1",
                        "title": "Members Night",
                        "visibility": "PRIVATE",
                        "lottery_enabled": True,
                        "start_date": "2026-07-01T18:00:00Z",
                    },
                )
            }
        )
        async with api:
            event = await api.get_event("evt-1")
        assert event.visibility is Visibility.PRIVATE
        assert event.lottery_enabled is True
        assert event.is_private

    @pytest.mark.asyncio
    async def test_tiers_grouped_by_category(self):
        """Tier groups keep their category on every tier."""
        api, _ = make_api(
            {
                ("GET", "/api/events/evt-1/tiers"): httpx.Response(
                    200,
                    json={
                        "VIP": [
                            {
                                "id": "tier-vip",
                                "name": "VIP",
                                "price": "5000.00",
                                "remaining_quantity": 3,
                                "max_qty_per_order": 2,
                            }
                        ],
                        "General": [],
                    },
                )
            }
        )
        async with api:
            tiers = await api.get_event_tiers("evt-1")
        (vip,) = tiers["VIP"]
        assert vip.category == "VIP"
        assert vip.price.amount == Decimal("5000.00")
        assert vip.remaining_quantity.value == 3
        assert tiers["General"] == ()

    @pytest.mark.asyncio
    async def test_products_filtered_by_event(self):
        """The event filter is passed as a query parameter."""
        api, recorder = make_api(
            {
                ("GET", "/api/products"): httpx.Response(
                    200, json=[{"id": "p1", "name": "Shirt", "price": 500, "stock": 4}]
                )
            }
        )
        async with api:
            (product,) = await api.get_products("evt-1")
        assert recorder.requests[0].url.params["eventId"] == "evt-1"
        assert product.event_id is None
        assert product.stock.value == 4


class TestOrderEndpoints:
    """Tests for checkout, promo and payment bodies."""

    @pytest.mark.asyncio
    async def test_checkout_body_and_order(self):
        """Checkout posts the camelCase body and returns the created order."""
        api, recorder = make_api(
            {
                ("POST", "/api/orders/checkout"): httpx.Response(
                    201, json={"order": {"id": "ord-9", "total_amount": 2200}}
                )
            }
        )
        request = OrderRequest(
            event_id="evt-1",
            tickets=(("tier-ga", 2),),
            products=(("prod-shirt", 1),),
            payment_provider=PaymentProvider.MPESA,
            promo_code="TAKE300",
        )
        async with api:
            order = await api.checkout(request)
        assert order.id == "ord-9"
        assert order.total_amount.amount == Decimal("2200")
        assert json.loads(recorder.requests[0].content) == {
            "eventId": "evt-1",
            "items": [{"tierId": "tier-ga", "quantity": 2}],
            "products": [{"productId": "prod-shirt", "quantity": 1}],
            "paymentProvider": "MPESA",
            "promoCode": "TAKE300",
        }

    def test_checkout_body_omits_empty_promo(self):
        """No promoCode key is sent without a promo."""
        body = render_checkout(
            OrderRequest(
                event_id="evt-1",
                tickets=(("tier-ga", 1),),
                products=(),
                payment_provider=PaymentProvider.STRIPE,
            )
        )
        assert "promoCode" not in body
        assert body["products"] == []

    @pytest.mark.asyncio
    async def test_promo_validation_parsed(self):
        """Promo validation responses map onto PromoValidation."""
        api, recorder = make_api(
            {
                ("POST", "/api/promo/validate"): httpx.Response(
                    200,
                    json={
                        "valid": True,
                        "code": "SAVE10",
                        "discount_type": "PERCENTAGE",
                        "discount_value": 10,
                        "discount_amount": 250,
                        "max_discount_amount": None,
                    },
                )
            }
        )
        async with api:
            result = await api.validate_promo("SAVE10", "evt-1", Decimal("2500"), ["p1"])
        assert result.valid is True
        assert result.discount_type is DiscountType.PERCENTAGE
        assert result.discount_amount == Decimal("250")
        assert json.loads(recorder.requests[0].content) == {
            "code": "SAVE10",
            "eventId": "evt-1",
            "subtotal": 2500.0,
            "productIds": ["p1"],
        }

    @pytest.mark.asyncio
    async def test_lottery_stats_parsed(self):
        """Lottery stats use the API's camelCase keys."""
        api, _ = make_api(
            {
                ("GET", "/api/lottery/event/evt-1/stats"): httpx.Response(
                    200, json={"totalEntries": 120, "availableTickets": 40, "totalWinners": 0}
                )
            }
        )
        async with api:
            stats = await api.get_lottery_stats("evt-1")
        assert (stats.total_entries, stats.available_tickets) == (120, 40)

    @pytest.mark.asyncio
    async def test_public_payment_config(self):
        """Provider configs are parsed with their enabled flag."""
        api, _ = make_api(
            {
                ("GET", "/api/payments/config/public"): httpx.Response(
                    200,
                    json=[
                        {"provider": "MPESA", "is_enabled": False},
                        {"provider": "PAYSTACK", "is_enabled": True},
                    ],
                )
            }
        )
        async with api:
            configs = await api.get_public_payment_config()
        assert [(c.provider, c.is_enabled) for c in configs] == [
            (PaymentProvider.MPESA, False),
            (PaymentProvider.PAYSTACK, True),
        ]


class TestLayawayEndpoints:
    """Tests for layaway listing and cancellation."""

    @pytest.mark.asyncio
    async def test_list_accepts_wrapped_payload(self):
        """Listings may arrive wrapped in a data envelope."""
        api, recorder = make_api(
            {
                ("GET", "/api/orders/layaway"): httpx.Response(
                    200,
                    json={
                        "data": [
                            {
                                "id": "lay-1",
                                "total_amount": 10000,
                                "amount_paid": 2500,
                                "payment_status": "PARTIAL",
                                "event": {"title": "Summer Fest"},
                            }
                        ]
                    },
                )
            }
        )
        async with api:
            (order,) = await api.get_layaway_orders(status="PARTIAL")
        assert order.payment_status is LayawayStatus.PARTIAL
        assert order.event_title == "Summer Fest"
        assert order.balance_due == Decimal("7500")
        params = recorder.requests[0].url.params
        assert (params["page"], params["limit"], params["status"]) == ("1", "50", "PARTIAL")

    @pytest.mark.asyncio
    async def test_cancel_default_message(self):
        """Cancellation without a message reads 'Order cancelled'."""
        api, _ = make_api(
            {("POST", "/api/orders/layaway/lay-1/cancel"): httpx.Response(200, json={})}
        )
        async with api:
            assert await api.cancel_layaway_order("lay-1") == "Order cancelled"


class TestPaymentStatus:
    """Tests for payment status checks."""

    @pytest.mark.asyncio
    async def test_non_object_body_is_api_error(self):
        """A status reply that is not a JSON object is reported as ApiError."""
        api, _ = make_api(
            {("GET", "/api/payments/status/ord-1"): httpx.Response(200, json=["pending"])}
        )
        async with api:
            with pytest.raises(ApiError, match="Unexpected response from server"):
                await api.get_payment_status("ord-1")

    @pytest.mark.asyncio
    async def test_poller_survives_malformed_status(self, fake_sleep):
        """A malformed status reply consumes its tick and polling carries on."""
        replies = [httpx.Response(200, json=["pending"]), httpx.Response(200, json={"paid": True})]

        def serve(request):
            return replies.pop(0)

        api = HttpStorefrontApi(base_url=BASE_URL, transport=httpx.MockTransport(serve))
        async with api:
            poller = SettlementPoller(api, "ord-1", sleep=fake_sleep)
            assert await poller.run() is PaymentStatus.SUCCESS
        assert poller.attempts == 2
