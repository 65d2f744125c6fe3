#!/usr/bin/env python3
"""
Script para registrar el webhook orders/create de Shopify.

Crea la suscripción que envía cada pedido nuevo al endpoint
``/api/orders-create`` de este servicio, si aún no existe.

Uso:
    python configure_webhooks.py --base-url https://mi-servicio.example.com
    python configure_webhooks.py --base-url https://mi-servicio.example.com --dry-run
"""

import argparse
import asyncio
import logging
import sys
from typing import Optional

from app.core.config import Settings, get_missing_settings, get_settings
from app.core.logging_config import setup_logging
from app.db.shopify_clients.rest_client import ShopifyRestClient
from app.services.webhook_registration import register_order_create_webhook
from app.utils.error_handler import ShopifyAPIException

logger = logging.getLogger("configure_webhooks")


def parse_args(argv=None, settings: Optional[Settings] = None) -> argparse.Namespace:
    settings = settings or get_settings()
    parser = argparse.ArgumentParser(description="Registra el webhook orders/create en Shopify")
    parser.add_argument(
        "--base-url",
        default=settings.API_BASE_URL,
        help="URL pública del servicio (por defecto API_BASE_URL)",
    )
    parser.add_argument("--dry-run", action="store_true", help="Solo muestra lo que se haría")
    return parser.parse_args(argv)


async def main(argv=None) -> int:
    settings = get_settings()
    args = parse_args(argv, settings)
    setup_logging(settings)

    if not args.base_url:
        logger.error("Falta --base-url (o API_BASE_URL en .env)")
        return 2

    missing = [name for name in get_missing_settings(settings) if name != "SHOPIFY_WEBHOOK_SECRET"]
    if missing:
        logger.error(f"Configuración faltante: {missing}")
        return 2

    logger.info(f"🔧 Configurando webhook para {settings.SHOPIFY_SHOP_URL} (API {settings.SHOPIFY_API_VERSION})")

    try:
        async with ShopifyRestClient(settings=settings) as client:
            result = await register_order_create_webhook(client, args.base_url, dry_run=args.dry_run)
    except ShopifyAPIException as e:
        logger.error(f"❌ Error registrando webhook: {e}")
        return 1

    status = "creado" if result.created else "sin cambios"
    logger.info(f"✨ orders/create -> {result.address} ({status})")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
