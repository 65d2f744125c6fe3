"""
Registro de la suscripción ``orders/create`` en Shopify.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from app.api.v1.schemas.shopify_schemas import ShopifyWebhookSubscription
from app.db.shopify_clients.rest_client import ShopifyRestClient

logger = logging.getLogger(__name__)

ORDER_CREATE_TOPIC = "orders/create"
ORDER_CREATE_PATH = "/api/orders-create"


@dataclass
class RegistrationResult:
    """Resultado del registro del webhook."""

    subscription: Optional[ShopifyWebhookSubscription]
    created: bool
    address: str


def build_webhook_address(base_url: str) -> str:
    """
    Construye la URL pública del endpoint a partir de la URL base del servicio.

    Args:
        base_url: URL base, con o sin esquema y barra final

    Returns:
        str: URL completa del endpoint orders-create
    """
    base_url = base_url.strip().rstrip("/")
    if not base_url:
        raise ValueError("La URL base del servicio es obligatoria")
    if not base_url.startswith(("http://", "https://")):
        base_url = f"https://{base_url}"
    return f"{base_url}{ORDER_CREATE_PATH}"


async def register_order_create_webhook(
    client: ShopifyRestClient, base_url: str, dry_run: bool = False
) -> RegistrationResult:
    """
    Crea la suscripción ``orders/create`` si no existe ya para la misma dirección.

    Args:
        client: Cliente REST de Shopify
        base_url: URL base pública del servicio
        dry_run: Si es True solo consulta, sin crear nada

    Returns:
        RegistrationResult: Suscripción existente o creada
    """
    address = build_webhook_address(base_url)

    existing = await client.list_webhooks(topic=ORDER_CREATE_TOPIC)
    for subscription in existing:
        if subscription.topic == ORDER_CREATE_TOPIC and subscription.address.rstrip("/") == address:
            logger.info(f"Webhook ya existe: {ORDER_CREATE_TOPIC} -> {address}")
            return RegistrationResult(subscription=subscription, created=False, address=address)

    other_addresses = [subscription.address for subscription in existing]
    if other_addresses:
        logger.warning(f"Otras suscripciones {ORDER_CREATE_TOPIC} existentes: {other_addresses}")

    if dry_run:
        logger.info(f"[dry-run] Se crearía webhook {ORDER_CREATE_TOPIC} -> {address}")
        return RegistrationResult(subscription=None, created=False, address=address)

    subscription = await client.create_webhook(ORDER_CREATE_TOPIC, address)
    logger.info(f"✅ Webhook creado: {ORDER_CREATE_TOPIC} -> {address} (id={subscription.id})")
    return RegistrationResult(subscription=subscription, created=True, address=address)
