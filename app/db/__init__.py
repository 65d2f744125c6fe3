"""
Acceso a la API de Shopify.

Este paquete agrupa los clientes HTTP hacia Shopify y la instancia compartida
que usa el webhook durante la vida del proceso.
"""

from app.db.shopify_client import close_shopify_client, get_shopify_client

__all__ = [
    "get_shopify_client",
    "close_shopify_client",
]
