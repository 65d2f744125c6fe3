"""
Shopify Admin API clients.
"""

from .rest_client import ShopifyRestClient

__all__ = [
    "ShopifyRestClient",
]
