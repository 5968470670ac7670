from storefront.stores.interfaces import TokenStore, UnlockStore
from storefront.stores.memory_store import InMemoryTokenStore, InMemoryUnlockStore

__all__ = [
    "TokenStore",
    "UnlockStore",
    "InMemoryTokenStore",
    "InMemoryUnlockStore",
]
