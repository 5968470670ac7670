"""httpx implementation of the StorefrontApi."""

import logging
from decimal import Decimal
from typing import Any

import httpx

from storefront.clients import serializers as wire
from storefront.clients.interfaces import StorefrontApi
from storefront.conf import get_api_settings
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
from storefront.domain.errors import ApiError
from storefront.stores.interfaces import TokenStore
from storefront.stores.memory_store import InMemoryTokenStore

logger = logging.getLogger(__name__)


def _object(data: Any) -> dict[str, Any]:
    """Empty bodies read as ``{}``; any other non-object is a malformed reply."""
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ApiError("Unexpected response from server")
    return data


class HttpStorefrontApi(StorefrontApi):
    """JSON-over-HTTP client with bearer authentication.

    Non-2xx responses raise ApiError carrying the body's ``message``.
    """

    def __init__(
        self,
        base_url: str | None = None,
        token_store: TokenStore | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        api_settings = get_api_settings()
        self._tokens = token_store or InMemoryTokenStore()
        self._client = httpx.AsyncClient(
            base_url=base_url or api_settings.base_url,
            timeout=timeout if timeout is not None else api_settings.timeout,
            headers={"Content-Type": "application/json"},
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    @property
    def is_authenticated(self) -> bool:
        return bool(self._tokens.get_token())

    def _auth_headers(self) -> dict[str, str]:
        token = self._tokens.get_token()
        return {"Authorization": f"Bearer {token}"} if token else {}

    async def _request(
        self,
        method: str,
        path: str,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        try:
            response = await self._client.request(
                method, path, json=json, params=params, headers=self._auth_headers()
            )
        except httpx.HTTPError as exc:
            logger.error("API %s %s failed: %s", method, path, exc)
            raise ApiError("Unable to reach the server") from exc

        try:
            data = response.json()
        except ValueError:
            data = None

        if response.is_error:
            message = data.get("message") if isinstance(data, dict) else None
            logger.warning(
                "API %s %s returned %s: %s", method, path, response.status_code, message
            )
            raise ApiError(message, status_code=response.status_code)
        return data

    async def get_event(self, event_id: str) -> Event:
        data = await self._request("GET", f"/events/{event_id}")
        return wire.parse(wire.EventSerializer, data)

    async def get_event_tiers(self, event_id: str) -> dict[str, tuple[TicketTier, ...]]:
        data = await self._request("GET", f"/events/{event_id}/tiers")
        if not isinstance(data, dict):
            raise ApiError("Unexpected response from server")
        return {
            category: tuple(
                wire.parse(
                    wire.TicketTierSerializer,
                    [{**raw, "category": category} for raw in tiers or []],
                    many=True,
                )
            )
            for category, tiers in data.items()
        }

    async def get_products(self, event_id: str | None = None) -> tuple[Product, ...]:
        params = {"eventId": event_id} if event_id else None
        data = await self._request("GET", "/products", params=params)
        return tuple(wire.parse(wire.ProductSerializer, data, many=True))

    async def checkout(self, request: OrderRequest) -> Order:
        data = await self._request("POST", "/orders/checkout", json=wire.render_checkout(request))
        return wire.parse(wire.OrderSerializer, _object(data).get("order"))

    async def adopt(self, request: AdoptionRequest) -> Order:
        data = await self._request("POST", "/orders/adopt", json=wire.render_adoption(request))
        return wire.parse(wire.OrderSerializer, _object(data).get("order"))

    async def validate_promo(
        self, code: str, event_id: str, subtotal: Decimal, product_ids: list[str]
    ) -> PromoValidation:
        data = await self._request(
            "POST",
            "/promo/validate",
            json={
                "code": code,
                "eventId": event_id,
                "subtotal": float(subtotal),
                "productIds": list(product_ids),
            },
        )
        return wire.parse(wire.PromoValidationSerializer, data)

    async def initiate_payment(self, order_id: str, body: dict[str, Any]) -> dict[str, Any]:
        data = await self._request("POST", f"/payments/initiate/{order_id}", json=body)
        return data if isinstance(data, dict) else {}

    async def get_payment_status(self, order_id: str) -> bool:
        data = await self._request("GET", f"/payments/status/{order_id}")
        return bool(_object(data).get("paid"))

    async def verify_paystack(self, reference: str) -> bool:
        data = await self._request("GET", f"/payments/paystack/verify/{reference}")
        return bool(_object(data).get("success"))

    async def get_public_payment_config(self) -> list[ProviderConfig]:
        data = await self._request("GET", "/payments/config/public")
        return wire.parse(wire.ProviderConfigSerializer, data, many=True)

    async def enter_lottery(self, event_id: str) -> None:
        await self._request("POST", f"/lottery/enter/{event_id}")

    async def check_lottery_eligibility(self, event_id: str) -> bool:
        data = await self._request("GET", f"/lottery/eligible/{event_id}")
        return bool(_object(data).get("eligible"))

    async def get_lottery_stats(self, event_id: str) -> LotteryStats:
        data = await self._request("GET", f"/lottery/event/{event_id}/stats")
        return wire.parse(wire.LotteryStatsSerializer, data)

    async def join_waitlist(self, entry: WaitlistEntry) -> None:
        await self._request(
            "POST",
            "/waitlist",
            json={"eventId": entry.event_id, "tierId": entry.tier_id, "email": entry.email},
        )

    async def verify_event_access(self, event_id: str, code: str) -> bool:
        data = await self._request("POST", f"/events/{event_id}/verify-access", json={"code": code})
        return bool(_object(data).get("valid"))

    async def get_layaway_orders(
        self, page: int = 1, limit: int = 50, status: str | None = None
    ) -> list[LayawayOrder]:
        params: dict[str, Any] = {"page": page, "limit": limit}
        if status:
            params["status"] = status
        data = await self._request("GET", "/orders/layaway", params=params)
        if isinstance(data, dict):
            data = data.get("data") or []
        return wire.parse(wire.LayawayOrderSerializer, data or [], many=True)

    async def top_up_layaway_order(self, order_id: str, body: dict[str, Any]) -> dict[str, Any]:
        data = await self._request("POST", f"/orders/layaway/{order_id}/top-up", json=body)
        return data if isinstance(data, dict) else {}

    async def cancel_layaway_order(self, order_id: str) -> str:
        data = await self._request("POST", f"/orders/layaway/{order_id}/cancel")
        return _object(data).get("message") or "Order cancelled"
