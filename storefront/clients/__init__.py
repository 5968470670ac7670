from storefront.clients.http_client import HttpStorefrontApi
from storefront.clients.interfaces import StorefrontApi

__all__ = ["HttpStorefrontApi", "StorefrontApi"]
