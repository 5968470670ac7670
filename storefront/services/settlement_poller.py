"""Settlement polling for on-page (MPESA) payments.

    PROCESSING --tick--> PROCESSING
    PROCESSING --paid--> SUCCESS --(2s)--> on_settled()
    PROCESSING --30 ticks without paid--> TIMEOUT

The poller is advisory: the backend decides whether an order is paid. A failed
status check is logged and still consumes its tick.
"""

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable

from storefront.clients.interfaces import StorefrontApi
from storefront.domain import PaymentStatus
from storefront.domain.errors import ApiError

logger = logging.getLogger(__name__)

POLL_INTERVAL_SECONDS = 1.0
MAX_POLL_ATTEMPTS = 30
SETTLED_REDIRECT_DELAY_SECONDS = 2.0

SettledCallback = Callable[[str], Awaitable[None] | None]


class CancellationToken:
    """One-way flag checked by the poller between awaits."""

    def __init__(self) -> None:
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


class SettlementPoller:
    """Polls payment status for one order until paid, timed out or cancelled.

    ``sleep`` is injectable so the tick schedule can be driven without
    waiting on the wall clock. ``on_status`` hears about SUCCESS before the
    redirect delay starts, and about TIMEOUT.
    """

    def __init__(
        self,
        api: StorefrontApi,
        order_id: str,
        on_settled: SettledCallback | None = None,
        *,
        interval: float = POLL_INTERVAL_SECONDS,
        max_attempts: int = MAX_POLL_ATTEMPTS,
        settled_delay: float = SETTLED_REDIRECT_DELAY_SECONDS,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        on_status: Callable[[PaymentStatus], None] | None = None,
    ) -> None:
        self._api = api
        self.order_id = order_id
        self._on_settled = on_settled
        self._interval = interval
        self._max_attempts = max_attempts
        self._settled_delay = settled_delay
        self._sleep = sleep
        self._on_status = on_status
        self._token = CancellationToken()
        self._task: asyncio.Task | None = None
        self.status = PaymentStatus.PROCESSING
        self.attempts = 0

    @property
    def cancelled(self) -> bool:
        return self._token.cancelled

    async def run(self) -> PaymentStatus:
        while self.attempts < self._max_attempts:
            await self._sleep(self._interval)
            if self._token.cancelled:
                return self.status

            self.attempts += 1
            try:
                paid = await self._api.get_payment_status(self.order_id)
            except ApiError as exc:
                logger.warning(
                    "Status check %d/%d for order %s failed: %s",
                    self.attempts,
                    self._max_attempts,
                    self.order_id,
                    exc.message,
                )
                continue

            if self._token.cancelled:
                return self.status
            if paid:
                self._set_status(PaymentStatus.SUCCESS)
                logger.info("Order %s settled after %d checks", self.order_id, self.attempts)
                await self._notify_settled()
                return self.status

        if self._token.cancelled:
            return self.status
        self._set_status(PaymentStatus.TIMEOUT)
        logger.info("Order %s not settled after %d checks", self.order_id, self.attempts)
        return self.status

    def _set_status(self, status: PaymentStatus) -> None:
        if self._token.cancelled:
            return
        self.status = status
        if self._on_status is not None:
            self._on_status(status)

    async def _notify_settled(self) -> None:
        if self._on_settled is None:
            return
        await self._sleep(self._settled_delay)
        if self._token.cancelled:
            return
        result = self._on_settled(self.order_id)
        if inspect.isawaitable(result):
            await result

    def start(self) -> asyncio.Task:
        """Run in a background task on the current event loop."""
        self._task = asyncio.create_task(self.run())
        return self._task

    def cancel(self) -> None:
        """Stop polling; nothing is written or called back afterwards."""
        self._token.cancel()
        if self._task is not None and not self._task.done():
            self._task.cancel()
