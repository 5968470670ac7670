"""Waitlist client for sold-out tiers."""

import logging

from storefront.clients.interfaces import StorefrontApi
from storefront.domain import WaitlistEntry

logger = logging.getLogger(__name__)

CONFIRMATION_MESSAGE = (
    "You have been added to the waitlist! We will notify you if tickets become available."
)


class WaitlistClient:
    """Service for joining the waitlist of a sold-out tier."""

    def __init__(self, api: StorefrontApi) -> None:
        self._api = api

    async def join(self, event_id: str, tier_id: str, email: str) -> str:
        """Submit the entry and return the confirmation to display.

        Duplicate entries are the backend's concern.
        """
        await self._api.join_waitlist(
            WaitlistEntry(event_id=event_id, tier_id=tier_id, email=email.strip())
        )
        logger.info("Waitlist entry submitted for event %s tier %s", event_id, tier_id)
        return CONFIRMATION_MESSAGE
