"""
Gestión del ciclo de vida de la aplicación FastAPI.

Este módulo maneja los eventos de startup y shutdown: configuración de
logging, verificación de configuración y apertura/cierre del cliente HTTP
hacia Shopify.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.core.config import get_missing_settings, get_settings
from app.core.logging_config import setup_logging
from app.db.shopify_client import close_shopify_client, get_shopify_client
from app.utils.error_handler import ConfigurationException

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Gestión del ciclo de vida de la aplicación.

    Args:
        app: Instancia de FastAPI
    """
    # === STARTUP ===
    settings = get_settings()
    startup_configure_logging()
    logger.info(f"🚀 Iniciando {settings.APP_NAME}...")

    startup_verify_configuration()
    await startup_initialize_client()

    logger.info("🎉 Aplicación iniciada correctamente")

    yield

    # === SHUTDOWN ===
    logger.info(f"🛑 Cerrando {settings.APP_NAME}...")
    await close_shopify_client()
    logger.info("✅ Shutdown completado")


def startup_configure_logging():
    """Configura el sistema de logging."""
    try:
        setup_logging()
    except Exception as e:
        print(f"Error configurando logging: {e}")
        raise


def startup_verify_configuration():
    """
    Verifica la configuración requerida.

    En producción una configuración incompleta impide el arranque; en otros
    entornos solo se advierte (el webhook responderá 401 sin secreto).
    """
    settings = get_settings()
    missing = get_missing_settings(settings)

    if not missing:
        logger.info("✅ Configuración verificada")
        return

    message = f"Variables de configuración faltantes: {missing}"
    if settings.is_production:
        logger.error(message)
        raise ConfigurationException(message, setting=missing[0])

    logger.warning(f"⚠️ {message}")


async def startup_initialize_client():
    """Inicializa el cliente HTTP compartido para Shopify."""
    client = get_shopify_client(get_settings())
    await client.initialize()
    logger.info("✅ Cliente Shopify inicializado")
