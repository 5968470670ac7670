"""Private-event access gate.

The unlock flag is a per-browser convenience; the backend still decides what
data a private event serves.
"""

import logging

from storefront.clients.interfaces import StorefrontApi
from storefront.domain import AccessState, Event
from storefront.domain.errors import ApiError
from storefront.stores.interfaces import UnlockStore

logger = logging.getLogger(__name__)

INVALID_CODE_MESSAGE = "Invalid access code. Please try again."
VERIFY_FAILED_MESSAGE = "Failed to verify code. Please try again."


class AccessGate:
    """Service deciding whether a private event is unlocked for this visitor."""

    def __init__(self, api: StorefrontApi, event: Event, store: UnlockStore) -> None:
        self._api = api
        self._event = event
        self._store = store
        self.error = ""
        if event.is_private and not store.get(event.id):
            self.state = AccessState.LOCKED
        else:
            self.state = AccessState.UNLOCKED

    @property
    def is_locked(self) -> bool:
        return self.state is AccessState.LOCKED

    async def verify(self, code: str) -> AccessState:
        """Submit an access code; the error never says what was wrong with it."""
        if not self.is_locked:
            return self.state
        code = (code or "").strip()
        if not code:
            self.error = INVALID_CODE_MESSAGE
            return self.state

        try:
            valid = await self._api.verify_event_access(self._event.id, code)
        except ApiError as exc:
            logger.warning("Access verification failed for event %s: %s", self._event.id, exc.message)
            self.error = VERIFY_FAILED_MESSAGE
            return self.state

        if not valid:
            self.error = INVALID_CODE_MESSAGE
            return self.state

        self._store.set(self._event.id, True)
        self.state = AccessState.UNLOCKED
        self.error = ""
        logger.info("Event %s unlocked", self._event.id)
        return self.state
