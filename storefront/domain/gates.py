"""Sale-window gate for ticket tiers."""

from datetime import datetime

from storefront.domain.errors import TierUnavailableError
from storefront.domain.models import SaleWindowState, TicketTier

LOW_STOCK_THRESHOLD = 10


def sale_window_state(tier: TicketTier, now: datetime) -> SaleWindowState:
    """Classify a tier; a missing bound leaves that side of the window open."""
    if tier.sales_start is not None and now < tier.sales_start:
        return SaleWindowState.UPCOMING
    if tier.sales_end is not None and now > tier.sales_end:
        return SaleWindowState.ENDED
    if tier.remaining_quantity.value <= 0:
        return SaleWindowState.SOLD_OUT
    return SaleWindowState.AVAILABLE


def ensure_purchasable(tier: TicketTier, now: datetime) -> None:
    """Raises TierUnavailableError unless the tier can go into a cart."""
    state = sale_window_state(tier, now)
    if state is not SaleWindowState.AVAILABLE:
        raise TierUnavailableError(tier.id, state)


def sale_status_label(tier: TicketTier, now: datetime) -> str:
    state = sale_window_state(tier, now)
    if state is SaleWindowState.UPCOMING:
        return "Coming Soon"
    if state is SaleWindowState.ENDED:
        return "Ended"
    if state is SaleWindowState.SOLD_OUT:
        return "Sold Out"
    if tier.remaining_quantity.value < LOW_STOCK_THRESHOLD:
        return f"Only {tier.remaining_quantity.value} left!"
    return "Available"
