"""Catalog loading and sale-window classification for an event view."""

import asyncio
import logging
from datetime import datetime

from django.utils import timezone

from storefront.clients.interfaces import StorefrontApi
from storefront.domain import CatalogSnapshot, Event, SaleWindowState
from storefront.domain.gates import sale_window_state

logger = logging.getLogger(__name__)


class CatalogService:
    """Service for reading an event's purchasable catalog."""

    def __init__(self, api: StorefrontApi) -> None:
        self._api = api

    async def load(self, event_id: str) -> tuple[Event, CatalogSnapshot]:
        """Fetch event, tiers and products concurrently.

        Products bound to another event are dropped; products with no event
        are kept since they can be bought alongside any event.
        """
        event, tiers, products = await asyncio.gather(
            self._api.get_event(event_id),
            self._api.get_event_tiers(event_id),
            self._api.get_products(event_id),
        )
        products = tuple(p for p in products if p.event_id in (None, event.id))
        logger.info(
            "Loaded catalog for event %s: %d tiers, %d products",
            event.id,
            sum(len(group) for group in tiers.values()),
            len(products),
        )
        return event, CatalogSnapshot(tiers_by_category=tiers, products=products)

    @staticmethod
    def tier_states(
        catalog: CatalogSnapshot, now: datetime | None = None
    ) -> dict[str, SaleWindowState]:
        now = now or timezone.now()
        return {tier.id: sale_window_state(tier, now) for tier in catalog.tiers}
