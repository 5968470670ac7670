"""Lottery eligibility gate.

Entering flips eligibility to False right away and then refetches stats and
eligibility from the backend. Until that refetch lands the local flag is an
optimistic guess.
"""

import asyncio
import logging

from storefront.clients.interfaces import StorefrontApi
from storefront.domain import Event, LotteryStats
from storefront.domain.errors import ApiError, AuthenticationRequiredError

logger = logging.getLogger(__name__)


class LotteryGate:
    """Service for lottery stats, eligibility and entry on one event."""

    def __init__(self, api: StorefrontApi, event: Event) -> None:
        self._api = api
        self._event = event
        self.eligible = True
        self.stats: LotteryStats | None = None

    @property
    def resume_path(self) -> str:
        return f"/events/{self._event.id}"

    async def refresh(self) -> None:
        """Load stats, and eligibility when signed in. Once per event view."""
        if not self._event.lottery_enabled:
            return
        self.stats = await self._api.get_lottery_stats(self._event.id)
        if self._api.is_authenticated:
            try:
                self.eligible = await self._api.check_lottery_eligibility(self._event.id)
            except ApiError as exc:
                logger.warning(
                    "Eligibility check failed for event %s: %s", self._event.id, exc.message
                )

    async def enter(self) -> LotteryStats | None:
        """Enter the lottery.

        Raises:
            AuthenticationRequiredError: If signed out; carries the path to
                resume at after signing in.
            ApiError: If the backend refuses the entry.
        """
        if not self._api.is_authenticated:
            raise AuthenticationRequiredError(self.resume_path)

        await self._api.enter_lottery(self._event.id)
        self.eligible = False
        logger.info("Entered lottery for event %s", self._event.id)
        await self.reconcile()
        return self.stats

    async def reconcile(self) -> None:
        """Replace optimistic state with what the backend reports."""
        stats, eligible = await asyncio.gather(
            self._api.get_lottery_stats(self._event.id),
            self._api.check_lottery_eligibility(self._event.id),
            return_exceptions=True,
        )
        if isinstance(stats, ApiError):
            logger.warning("Stats refetch failed for event %s: %s", self._event.id, stats.message)
        elif isinstance(stats, BaseException):
            raise stats
        else:
            self.stats = stats
        if isinstance(eligible, ApiError):
            logger.warning(
                "Eligibility refetch failed for event %s: %s", self._event.id, eligible.message
            )
        elif isinstance(eligible, BaseException):
            raise eligible
        else:
            self.eligible = eligible
