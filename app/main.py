"""
Draft Order Reconciler - FastAPI Application Entry Point

Servicio que recibe el webhook orders/create de Shopify y copia al pedido
los note attributes de entrega (Zapiet) del draft order que lo originó.

Versión: Definida en pyproject.toml (ver app.version.VERSION)
"""

import logging

import uvicorn
from fastapi import FastAPI

from app.core.config import get_settings
from app.core.lifespan import lifespan
from app.core.routers import configure_all_routers
from app.version import VERSION, version_info

settings = get_settings()
logger = logging.getLogger(__name__)


def create_application() -> FastAPI:
    """
    Factory para crear y configurar la aplicación FastAPI.

    Returns:
        FastAPI: Instancia configurada de la aplicación
    """
    logger.info("🏗️ Creando aplicación FastAPI...")

    docs_enabled = settings.DEBUG or not settings.is_production
    app = FastAPI(
        title=settings.APP_NAME,
        description="Reconciliación de note attributes entre draft orders y pedidos de Shopify",
        version=VERSION,
        debug=settings.DEBUG,
        lifespan=lifespan,
        docs_url="/docs" if docs_enabled else None,
        redoc_url=None,
        openapi_url="/openapi.json" if docs_enabled else None,
    )

    configure_all_routers(app)

    app.state.app_info = {
        "name": settings.APP_NAME,
        "environment": settings.ENVIRONMENT,
        **version_info(),
    }

    logger.info("✅ Aplicación FastAPI creada y configurada")
    return app


# Instancia principal que usa el servidor ASGI
app = create_application()


if __name__ == "__main__":
    """
    Ejecutar la aplicación directamente para desarrollo.

    Para producción se recomienda usar:
    uvicorn app.main:app --host 0.0.0.0 --port 8080
    """
    logger.info("🚀 Iniciando aplicación desde main.py...")

    try:
        uvicorn.run(
            "app.main:app",
            host=settings.HOST,
            port=settings.PORT,
            reload=settings.DEBUG,
            log_level=settings.LOG_LEVEL.lower(),
            workers=1 if settings.DEBUG else settings.WORKERS,
        )
    except KeyboardInterrupt:
        logger.info("🛑 Aplicación detenida por el usuario")
