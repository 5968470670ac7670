"""Builds order requests from a cart snapshot.

Prices are never recomputed here; the backend prices the order.
"""

from storefront.domain import AdoptionRequest, OrderRequest, PaymentProvider
from storefront.domain.cart import CartState
from storefront.domain.errors import EmptyCartError

MAX_ADOPTION_QUANTITY = 10


def build_checkout_request(
    cart: CartState, event_id: str, provider: PaymentProvider
) -> OrderRequest:
    """Raises EmptyCartError when the cart has neither tickets nor products."""
    if cart.is_empty:
        raise EmptyCartError()
    return OrderRequest(
        event_id=event_id,
        tickets=tuple((line.item_id, line.quantity) for line in cart.ticket_lines),
        products=tuple((line.item_id, line.quantity) for line in cart.product_lines),
        payment_provider=provider,
        promo_code=cart.promo.code if cart.promo else None,
    )


def clamp_adoption_quantity(quantity: int) -> int:
    return min(max(quantity, 1), MAX_ADOPTION_QUANTITY)


def build_adoption_request(
    event_id: str, tier_id: str, quantity: int, provider: PaymentProvider
) -> AdoptionRequest:
    return AdoptionRequest(
        event_id=event_id,
        tier_id=tier_id,
        quantity=clamp_adoption_quantity(quantity),
        payment_provider=provider,
    )
