"""Store interfaces for client-local persisted state.

Stores must be swappable; gate and client logic only see these interfaces.
"""

from abc import ABC, abstractmethod


class UnlockStore(ABC):
    """Per-browser record of private events unlocked with an access code."""

    @abstractmethod
    def get(self, event_id: str) -> bool:
        """Return True if the event was unlocked before."""
        ...

    @abstractmethod
    def set(self, event_id: str, unlocked: bool) -> None:
        """Persist the unlock flag for an event."""
        ...


class TokenStore(ABC):
    """Holds the bearer token used to authenticate upstream API calls."""

    @abstractmethod
    def get_token(self) -> str | None:
        """Return the current token, or None when signed out."""
        ...

    @abstractmethod
    def set_token(self, token: str | None) -> None:
        """Replace the token; None clears it."""
        ...
