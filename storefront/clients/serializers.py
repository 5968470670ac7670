"""Serializers between upstream API JSON and storefront domain models.

Inbound serializers validate a response payload and ``save()`` it into a
domain object. Outbound serializers render request bodies in the API's
camelCase shape.
"""

import logging

from rest_framework import serializers

from storefront.domain import (
    AdoptionRequest,
    Capacity,
    DiscountType,
    Event,
    LayawayOrder,
    LayawayStatus,
    LotteryStats,
    Money,
    Order,
    OrderRequest,
    PaymentProvider,
    Product,
    PromoValidation,
    ProviderConfig,
    TicketTier,
    Visibility,
)
from storefront.domain.errors import ApiError

logger = logging.getLogger(__name__)


def _money_field(**kwargs) -> serializers.DecimalField:
    return serializers.DecimalField(
        max_digits=None, decimal_places=None, min_value=0, coerce_to_string=False, **kwargs
    )


def parse(serializer_class, data, many: bool = False):
    """Validate an upstream payload and return the domain object(s)."""
    serializer = serializer_class(data=data, many=many)
    if not serializer.is_valid():
        logger.warning(
            "Unexpected %s payload: %s", serializer_class.__name__, serializer.errors
        )
        raise ApiError("Unexpected response from server")
    return serializer.save()


class EventSerializer(serializers.Serializer):
    id = serializers.CharField()
    title = serializers.CharField(allow_blank=True, default="")
    visibility = serializers.ChoiceField(
        choices=[v.value for v in Visibility], default=Visibility.PUBLIC.value
    )
    lottery_enabled = serializers.BooleanField(default=False)
    allows_layaway = serializers.BooleanField(default=False)
    start_date = serializers.DateTimeField(allow_null=True, default=None)

    def create(self, validated_data) -> Event:
        return Event(
            id=validated_data["id"],
            title=validated_data["title"],
            visibility=Visibility(validated_data["visibility"]),
            lottery_enabled=validated_data["lottery_enabled"],
            allows_layaway=validated_data["allows_layaway"],
            start_date=validated_data["start_date"],
        )


class TicketTierSerializer(serializers.Serializer):
    id = serializers.CharField()
    name = serializers.CharField()
    category = serializers.CharField(allow_blank=True, default="")
    price = _money_field()
    remaining_quantity = serializers.IntegerField(min_value=0)
    max_qty_per_order = serializers.IntegerField(min_value=1, default=10)
    sales_start = serializers.DateTimeField(allow_null=True, default=None)
    sales_end = serializers.DateTimeField(allow_null=True, default=None)
    tickets_per_unit = serializers.IntegerField(min_value=1, default=1)

    def create(self, validated_data) -> TicketTier:
        return TicketTier(
            id=validated_data["id"],
            name=validated_data["name"],
            category=validated_data["category"],
            price=Money(validated_data["price"]),
            remaining_quantity=Capacity(validated_data["remaining_quantity"]),
            max_qty_per_order=validated_data["max_qty_per_order"],
            sales_start=validated_data["sales_start"],
            sales_end=validated_data["sales_end"],
            tickets_per_unit=validated_data["tickets_per_unit"],
        )


class ProductSerializer(serializers.Serializer):
    id = serializers.CharField()
    name = serializers.CharField()
    price = _money_field()
    stock = serializers.IntegerField(min_value=0, default=0)
    event_id = serializers.CharField(allow_null=True, default=None)

    def create(self, validated_data) -> Product:
        return Product(
            id=validated_data["id"],
            name=validated_data["name"],
            price=Money(validated_data["price"]),
            stock=Capacity(validated_data["stock"]),
            event_id=validated_data["event_id"],
        )


class OrderSerializer(serializers.Serializer):
    id = serializers.CharField()
    total_amount = _money_field(default=0)
    status = serializers.CharField(default="PENDING")

    def create(self, validated_data) -> Order:
        return Order(
            id=validated_data["id"],
            total_amount=Money(validated_data["total_amount"]),
            status=validated_data["status"],
        )


class PromoValidationSerializer(serializers.Serializer):
    valid = serializers.BooleanField()
    code = serializers.CharField(allow_blank=True, default="")
    discount_type = serializers.ChoiceField(
        choices=[d.value for d in DiscountType], allow_null=True, default=None
    )
    discount_value = serializers.DecimalField(
        max_digits=None, decimal_places=None, coerce_to_string=False, default=0
    )
    discount_amount = serializers.DecimalField(
        max_digits=None, decimal_places=None, coerce_to_string=False, default=0
    )
    max_discount_amount = _money_field(allow_null=True, default=None)
    description = serializers.CharField(allow_blank=True, allow_null=True, default="")
    error = serializers.CharField(allow_blank=True, allow_null=True, default="")

    def create(self, validated_data) -> PromoValidation:
        discount_type = validated_data["discount_type"]
        return PromoValidation(
            valid=validated_data["valid"],
            code=validated_data["code"],
            discount_type=DiscountType(discount_type) if discount_type else None,
            discount_value=validated_data["discount_value"],
            discount_amount=validated_data["discount_amount"],
            max_discount_amount=validated_data["max_discount_amount"],
            description=validated_data["description"] or "",
            error=validated_data["error"] or "",
        )


class LotteryStatsSerializer(serializers.Serializer):
    totalEntries = serializers.IntegerField(source="total_entries", default=0)
    availableTickets = serializers.IntegerField(source="available_tickets", default=0)
    totalWinners = serializers.IntegerField(source="total_winners", default=0)

    def create(self, validated_data) -> LotteryStats:
        return LotteryStats(**validated_data)


class ProviderConfigSerializer(serializers.Serializer):
    provider = serializers.ChoiceField(choices=[p.value for p in PaymentProvider])
    is_enabled = serializers.BooleanField(default=False)

    def create(self, validated_data) -> ProviderConfig:
        return ProviderConfig(
            provider=PaymentProvider(validated_data["provider"]),
            is_enabled=validated_data["is_enabled"],
        )


class LayawayOrderSerializer(serializers.Serializer):
    id = serializers.CharField()
    total_amount = _money_field()
    amount_paid = _money_field(default=0)
    payment_status = serializers.ChoiceField(choices=[s.value for s in LayawayStatus])
    event = serializers.DictField(allow_null=True, default=None)

    def create(self, validated_data) -> LayawayOrder:
        return LayawayOrder(
            id=validated_data["id"],
            total_amount=Money(validated_data["total_amount"]),
            amount_paid=Money(validated_data["amount_paid"]),
            payment_status=LayawayStatus(validated_data["payment_status"]),
            event_title=(validated_data["event"] or {}).get("title", ""),
        )


class CheckoutPayloadSerializer(serializers.Serializer):
    """Renders an OrderRequest as the POST /orders/checkout body."""

    eventId = serializers.CharField(source="event_id")
    items = serializers.SerializerMethodField()
    products = serializers.SerializerMethodField()
    paymentProvider = serializers.CharField(source="payment_provider.value")
    promoCode = serializers.CharField(source="promo_code", allow_null=True)

    def get_items(self, request: OrderRequest) -> list[dict]:
        return [{"tierId": tier_id, "quantity": qty} for tier_id, qty in request.tickets]

    def get_products(self, request: OrderRequest) -> list[dict]:
        return [{"productId": product_id, "quantity": qty} for product_id, qty in request.products]

    def to_representation(self, instance):
        data = super().to_representation(instance)
        if not data.get("promoCode"):
            data.pop("promoCode", None)
        return data


class AdoptionPayloadSerializer(serializers.Serializer):
    """Renders an AdoptionRequest as the POST /orders/adopt body."""

    eventId = serializers.CharField(source="event_id")
    tierId = serializers.CharField(source="tier_id")
    quantity = serializers.IntegerField()
    paymentProvider = serializers.CharField(source="payment_provider.value")


def render_checkout(request: OrderRequest) -> dict:
    return dict(CheckoutPayloadSerializer(request).data)


def render_adoption(request: AdoptionRequest) -> dict:
    return dict(AdoptionPayloadSerializer(request).data)
