"""
Cliente API compartido para Shopify.

Este módulo mantiene una única instancia de ShopifyRestClient por proceso,
creada a demanda y cerrada en el shutdown de la aplicación.
"""

import logging
from typing import Optional

from app.core.config import Settings
from app.db.shopify_clients.rest_client import ShopifyRestClient

logger = logging.getLogger(__name__)

# Instancia global del cliente REST
_rest_client: Optional[ShopifyRestClient] = None


def get_shopify_client(settings: Optional[Settings] = None) -> ShopifyRestClient:
    """
    Obtiene la instancia global del cliente REST.

    Args:
        settings: Configuración usada solo al crear la instancia

    Returns:
        ShopifyRestClient: Cliente REST configurado
    """
    global _rest_client
    if _rest_client is None:
        _rest_client = ShopifyRestClient(settings=settings)
    return _rest_client


async def close_shopify_client() -> None:
    """
    Cierra y descarta la instancia global del cliente REST.
    """
    global _rest_client
    if _rest_client is not None:
        try:
            await _rest_client.close()
        except Exception as e:
            logger.error(f"Error closing Shopify client: {e}")
        _rest_client = None
