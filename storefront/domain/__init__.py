from storefront.domain.models import (
    AccessState,
    AdoptionRequest,
    CartLine,
    CatalogSnapshot,
    DiscountType,
    Event,
    ItemKind,
    LayawayOrder,
    LayawayStatus,
    LotteryStats,
    MpesaPayload,
    Order,
    OrderRequest,
    PaymentProvider,
    PaymentSession,
    PaymentStatus,
    Product,
    PromoApplication,
    PromoValidation,
    ProviderConfig,
    RedirectPayload,
    SaleWindowState,
    TicketTier,
    Visibility,
    WaitlistEntry,
)
from storefront.domain.value_objects import Capacity, Money, PhoneNumber, PromoCode

__all__ = [
    "AccessState",
    "AdoptionRequest",
    "CartLine",
    "CatalogSnapshot",
    "DiscountType",
    "Event",
    "ItemKind",
    "LayawayOrder",
    "LayawayStatus",
    "LotteryStats",
    "MpesaPayload",
    "Order",
    "OrderRequest",
    "PaymentProvider",
    "PaymentSession",
    "PaymentStatus",
    "Product",
    "PromoApplication",
    "PromoValidation",
    "ProviderConfig",
    "RedirectPayload",
    "SaleWindowState",
    "TicketTier",
    "Visibility",
    "WaitlistEntry",
    "Money",
    "Capacity",
    "PhoneNumber",
    "PromoCode",
]
