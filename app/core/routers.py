"""
Configuración centralizada de routers para la aplicación FastAPI.

Este módulo registra el router del webhook y los endpoints base de
información y health check.
"""

import logging
from datetime import datetime, timezone

from fastapi import FastAPI

from app.api.v1.endpoints.webhooks import router as webhooks_router
from app.core.config import get_missing_settings, get_settings
from app.version import VERSION

logger = logging.getLogger(__name__)


def create_root_endpoints(app: FastAPI) -> None:
    """
    Crea endpoints raíz de la aplicación.

    Args:
        app: Instancia de FastAPI
    """

    @app.get("/", tags=["Root"], summary="API Info")
    async def root():
        settings = get_settings()
        return {
            "message": settings.APP_NAME,
            "description": "Copia los note attributes de entrega del draft order al pedido creado",
            "version": VERSION,
            "status": "running",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "endpoints": {
                "health": "/health",
                "orders_create_webhook": "/api/orders-create",
            },
        }

    @app.get("/ping", tags=["Root"], summary="Simple Ping")
    async def ping():
        return {"message": "pong", "timestamp": datetime.now(timezone.utc).isoformat()}


def create_health_endpoints(app: FastAPI) -> None:
    """
    Crea el endpoint de health check.

    Args:
        app: Instancia de FastAPI
    """

    @app.get("/health", tags=["Health"], summary="Health Check")
    async def health_check():
        """
        Reporta qué configuraciones faltan (nunca sus valores).

        Returns:
            Dict con estado de salud
        """
        settings = get_settings()
        missing = get_missing_settings(settings)
        return {
            "status": "healthy" if not missing else "degraded",
            "version": VERSION,
            "environment": settings.ENVIRONMENT,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "configuration": {
                "webhook_secret": bool(settings.SHOPIFY_WEBHOOK_SECRET),
                "access_token": bool(settings.SHOPIFY_ACCESS_TOKEN),
                "shop_url": "SHOPIFY_SHOP_URL" not in missing,
                "api_version": settings.SHOPIFY_API_VERSION,
                "tag_filter": bool(settings.ORDER_TAG_MARKER),
            },
            "missing": missing,
        }


def configure_all_routers(app: FastAPI) -> None:
    """
    Configura todos los routers de la aplicación.

    Args:
        app: Instancia de FastAPI
    """
    create_root_endpoints(app)
    create_health_endpoints(app)
    app.include_router(webhooks_router, prefix="/api", tags=["Webhooks"])
    logger.debug("Routers configurados")
