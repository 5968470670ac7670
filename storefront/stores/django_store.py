"""Django session implementation of the client-local stores.

With the signed-cookie session engine the data lives in the browser, keyed by
the same fixed names the storefront has always used.
"""

from django.contrib.sessions.backends.base import SessionBase

from storefront.stores.interfaces import TokenStore, UnlockStore

UNLOCKED_EVENTS_KEY = "unlocked_events"
TOKEN_KEY = "token"


class SessionUnlockStore(UnlockStore):
    """Keeps ``unlocked_events`` as a JSON map of event id -> bool."""

    def __init__(self, session: SessionBase) -> None:
        self._session = session

    def get(self, event_id: str) -> bool:
        unlocked = self._session.get(UNLOCKED_EVENTS_KEY) or {}
        return bool(unlocked.get(str(event_id), False))

    def set(self, event_id: str, unlocked: bool) -> None:
        events = dict(self._session.get(UNLOCKED_EVENTS_KEY) or {})
        events[str(event_id)] = unlocked
        self._session[UNLOCKED_EVENTS_KEY] = events


class SessionTokenStore(TokenStore):
    def __init__(self, session: SessionBase) -> None:
        self._session = session

    def get_token(self) -> str | None:
        return self._session.get(TOKEN_KEY)

    def set_token(self, token: str | None) -> None:
        if token is None:
            self._session.pop(TOKEN_KEY, None)
        else:
            self._session[TOKEN_KEY] = token
