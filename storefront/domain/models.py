"""Domain models for the storefront.

These are pure domain objects. Wire formats live in
storefront/clients/serializers.py; nothing here talks to the network.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from decimal import Decimal
from enum import Enum

from storefront.domain.value_objects import Capacity, Money


class Visibility(str, Enum):
    PUBLIC = "PUBLIC"
    PRIVATE = "PRIVATE"


class ItemKind(str, Enum):
    """What a cart line points at."""

    TIER = "TIER"
    PRODUCT = "PRODUCT"


class DiscountType(str, Enum):
    PERCENTAGE = "PERCENTAGE"
    FIXED_AMOUNT = "FIXED_AMOUNT"


class PaymentProvider(str, Enum):
    MPESA = "MPESA"
    STRIPE = "STRIPE"
    PAYSTACK = "PAYSTACK"


class PaymentStatus(str, Enum):
    """Lifecycle of one payment attempt.

    DISPATCHING and REDIRECTED belong to the dispatcher; the rest are the
    states the settlement poller drives.
    """

    IDLE = "IDLE"
    DISPATCHING = "DISPATCHING"
    PROCESSING = "PROCESSING"
    REDIRECTED = "REDIRECTED"
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"
    TIMEOUT = "TIMEOUT"

    @property
    def is_terminal(self) -> bool:
        return self in (PaymentStatus.SUCCESS, PaymentStatus.FAILED, PaymentStatus.TIMEOUT)

    @property
    def is_in_flight(self) -> bool:
        return self in (PaymentStatus.DISPATCHING, PaymentStatus.PROCESSING)


class SaleWindowState(str, Enum):
    AVAILABLE = "AVAILABLE"
    UPCOMING = "UPCOMING"
    ENDED = "ENDED"
    SOLD_OUT = "SOLD_OUT"


class AccessState(str, Enum):
    LOCKED = "LOCKED"
    UNLOCKED = "UNLOCKED"


class LayawayStatus(str, Enum):
    PENDING = "PENDING"
    PARTIAL = "PARTIAL"
    PAID = "PAID"
    FAILED = "FAILED"


@dataclass(frozen=True)
class Event:
    """Domain representation of an Event as the storefront sees it."""

    id: str
    title: str
    visibility: Visibility = Visibility.PUBLIC
    lottery_enabled: bool = False
    allows_layaway: bool = False
    start_date: datetime | None = None

    @property
    def is_private(self) -> bool:
        return self.visibility is Visibility.PRIVATE


@dataclass(frozen=True)
class TicketTier:
    """Purchasable ticket class. Snapshot per catalog fetch."""

    id: str
    name: str
    category: str
    price: Money
    remaining_quantity: Capacity
    max_qty_per_order: int
    sales_start: datetime | None = None
    sales_end: datetime | None = None
    tickets_per_unit: int = 1

    def __post_init__(self) -> None:
        if self.max_qty_per_order <= 0:
            raise ValueError("max_qty_per_order must be positive")


@dataclass(frozen=True)
class Product:
    """Add-on product. ``event_id`` None means purchasable with any event."""

    id: str
    name: str
    price: Money
    stock: Capacity
    event_id: str | None = None


@dataclass(frozen=True)
class CatalogSnapshot:
    """Read-only view of an event's tiers (by category) and products."""

    tiers_by_category: dict[str, tuple[TicketTier, ...]] = field(default_factory=dict)
    products: tuple[Product, ...] = ()

    @property
    def tiers(self) -> tuple[TicketTier, ...]:
        return tuple(t for group in self.tiers_by_category.values() for t in group)

    def find_tier(self, tier_id: str) -> TicketTier | None:
        return next((t for t in self.tiers if t.id == tier_id), None)

    def find_product(self, product_id: str) -> Product | None:
        return next((p for p in self.products if p.id == product_id), None)


@dataclass(frozen=True)
class CartLine:
    """Domain representation of one cart line."""

    item_id: str
    kind: ItemKind
    quantity: int


@dataclass(frozen=True)
class PromoApplication:
    """A promo code accepted by the backend for the current cart."""

    code: str
    discount_type: DiscountType
    discount_value: Decimal
    discount_amount: Decimal
    description: str = ""
    max_discount_amount: Decimal | None = None


@dataclass(frozen=True)
class PromoValidation:
    """Backend verdict on a promo code for one order context."""

    valid: bool
    code: str = ""
    discount_type: DiscountType | None = None
    discount_value: Decimal = Decimal("0")
    discount_amount: Decimal = Decimal("0")
    description: str = ""
    max_discount_amount: Decimal | None = None
    error: str = ""


@dataclass(frozen=True)
class OrderRequest:
    """One checkout attempt. Never mutated after submission."""

    event_id: str
    tickets: tuple[tuple[str, int], ...]
    products: tuple[tuple[str, int], ...]
    payment_provider: PaymentProvider
    promo_code: str | None = None


@dataclass(frozen=True)
class AdoptionRequest:
    """Lottery adoption: buyer pays for tickets gifted to future entrants."""

    event_id: str
    tier_id: str
    quantity: int
    payment_provider: PaymentProvider


@dataclass(frozen=True)
class Order:
    """Domain representation of an order created upstream."""

    id: str
    total_amount: Money
    status: str = "PENDING"


@dataclass(frozen=True)
class LayawayOrder:
    """Order paid in installments until ``amount_paid`` covers the total."""

    id: str
    total_amount: Money
    amount_paid: Money
    payment_status: LayawayStatus
    event_title: str = ""

    @property
    def balance_due(self) -> Decimal:
        return max(self.total_amount.amount - self.amount_paid.amount, Decimal("0"))

    @property
    def accepts_top_up(self) -> bool:
        return self.payment_status not in (LayawayStatus.PAID, LayawayStatus.FAILED)


@dataclass(frozen=True)
class MpesaPayload:
    """On-page payment: the buyer confirms on their phone."""

    phone_number: str


@dataclass(frozen=True)
class RedirectPayload:
    """Hosted payment page with return URLs."""

    success_url: str
    cancel_url: str


ProviderPayload = MpesaPayload | RedirectPayload


@dataclass(frozen=True)
class PaymentSession:
    """State of one payment attempt for an order."""

    order_id: str
    provider: PaymentProvider
    status: PaymentStatus = PaymentStatus.IDLE
    payload: ProviderPayload | None = None
    redirect_url: str | None = None
    message: str = ""

    def transition_to(self, status: PaymentStatus, **changes) -> "PaymentSession":
        return replace(self, status=status, **changes)


@dataclass(frozen=True)
class LotteryStats:
    """Domain representation of an event's lottery counters."""

    total_entries: int = 0
    available_tickets: int = 0
    total_winners: int = 0


@dataclass(frozen=True)
class WaitlistEntry:
    """Domain representation of a waitlist signup."""

    event_id: str
    tier_id: str
    email: str


@dataclass(frozen=True)
class ProviderConfig:
    """Whether a payment provider is enabled for checkout."""

    provider: PaymentProvider
    is_enabled: bool
