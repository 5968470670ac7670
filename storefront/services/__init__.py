from storefront.services.access_gate import AccessGate
from storefront.services.catalog_service import CatalogService
from storefront.services.checkout import AdoptionCheckout, CheckoutSession
from storefront.services.layaway_service import LayawayService
from storefront.services.lottery_gate import LotteryGate
from storefront.services.payment_dispatcher import PaymentDispatcher
from storefront.services.promo_service import PromoEngine
from storefront.services.settlement_poller import SettlementPoller
from storefront.services.waitlist_service import WaitlistClient

__all__ = [
    "AccessGate",
    "AdoptionCheckout",
    "CatalogService",
    "CheckoutSession",
    "LayawayService",
    "LotteryGate",
    "PaymentDispatcher",
    "PromoEngine",
    "SettlementPoller",
    "WaitlistClient",
]
