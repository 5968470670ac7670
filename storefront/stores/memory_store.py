"""In-process stores, used when no browser session is available."""

from storefront.stores.interfaces import TokenStore, UnlockStore


class InMemoryUnlockStore(UnlockStore):
    def __init__(self) -> None:
        self._unlocked: dict[str, bool] = {}

    def get(self, event_id: str) -> bool:
        return self._unlocked.get(str(event_id), False)

    def set(self, event_id: str, unlocked: bool) -> None:
        self._unlocked[str(event_id)] = unlocked


class InMemoryTokenStore(TokenStore):
    def __init__(self, token: str | None = None) -> None:
        self._token = token

    def get_token(self) -> str | None:
        return self._token

    def set_token(self, token: str | None) -> None:
        self._token = token
