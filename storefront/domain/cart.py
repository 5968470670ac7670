"""Cart model as an immutable state plus pure transition functions.

Every transition returns a new ``CartState``; callers keep the latest one.
Quantities are clamped to ``[0, cap]`` where cap is the tier's
``max_qty_per_order`` or the product's stock. A line at 0 is removed.
Sale windows and remaining stock are checked by the gates, not here.
"""

from dataclasses import dataclass, replace
from decimal import Decimal

from storefront.domain.discounts import ZERO, clamp_discount, total_after_discount
from storefront.domain.errors import ItemNotFoundError
from storefront.domain.models import CartLine, CatalogSnapshot, ItemKind, PromoApplication


@dataclass(frozen=True)
class CartState:
    """Immutable cart contents with the applied promo, if any."""

    lines: tuple[CartLine, ...] = ()
    promo: PromoApplication | None = None

    @property
    def is_empty(self) -> bool:
        return not self.lines

    @property
    def ticket_lines(self) -> tuple[CartLine, ...]:
        return tuple(line for line in self.lines if line.kind is ItemKind.TIER)

    @property
    def product_lines(self) -> tuple[CartLine, ...]:
        return tuple(line for line in self.lines if line.kind is ItemKind.PRODUCT)

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self.lines)

    def quantity_of(self, item_id: str, kind: ItemKind) -> int:
        for line in self.lines:
            if line.item_id == item_id and line.kind is kind:
                return line.quantity
        return 0


def line_cap(catalog: CatalogSnapshot, item_id: str, kind: ItemKind) -> int:
    """Largest quantity a single order may hold for the item."""
    if kind is ItemKind.TIER:
        tier = catalog.find_tier(item_id)
        if tier is None:
            raise ItemNotFoundError(item_id)
        return tier.max_qty_per_order
    product = catalog.find_product(item_id)
    if product is None:
        raise ItemNotFoundError(item_id)
    return product.stock.value


def _unit_price(catalog: CatalogSnapshot, line: CartLine) -> Decimal:
    if line.kind is ItemKind.TIER:
        item = catalog.find_tier(line.item_id)
    else:
        item = catalog.find_product(line.item_id)
    if item is None:
        raise ItemNotFoundError(line.item_id)
    return item.price.amount


def _with_quantity(state: CartState, item_id: str, kind: ItemKind, quantity: int) -> CartState:
    lines = []
    found = False
    for line in state.lines:
        if line.item_id == item_id and line.kind is kind:
            found = True
            if quantity > 0:
                lines.append(replace(line, quantity=quantity))
        else:
            lines.append(line)
    if not found and quantity > 0:
        lines.append(CartLine(item_id=item_id, kind=kind, quantity=quantity))
    return replace(state, lines=tuple(lines))


def add_line(
    state: CartState,
    catalog: CatalogSnapshot,
    item_id: str,
    kind: ItemKind,
    delta: int = 1,
) -> CartState:
    cap = line_cap(catalog, item_id, kind)
    quantity = min(max(state.quantity_of(item_id, kind) + delta, 0), cap)
    return _with_quantity(state, item_id, kind, quantity)


def remove_line(state: CartState, item_id: str, kind: ItemKind) -> CartState:
    return _with_quantity(state, item_id, kind, max(state.quantity_of(item_id, kind) - 1, 0))


def apply_promo(state: CartState, promo: PromoApplication) -> CartState:
    return replace(state, promo=promo)


def remove_promo(state: CartState) -> CartState:
    return replace(state, promo=None)


def subtotal(state: CartState, catalog: CatalogSnapshot) -> Decimal:
    """Sum of price x quantity, recomputed from ``catalog`` on every call."""
    return sum((_unit_price(catalog, line) * line.quantity for line in state.lines), ZERO)


def discount(state: CartState, catalog: CatalogSnapshot) -> Decimal:
    if state.promo is None:
        return ZERO
    return clamp_discount(state.promo.discount_amount, subtotal(state, catalog))


def total(state: CartState, catalog: CatalogSnapshot) -> Decimal:
    return total_after_discount(subtotal(state, catalog), discount(state, catalog))
