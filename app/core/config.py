"""
Configuración centralizada de la aplicación.

Este módulo maneja todas las variables de entorno y configuraciones
de la aplicación usando Pydantic Settings para validación automática.
Los nombres heredados del despliegue serverless (WEBHOOK_SECRET,
SHOP_DOMAIN, ADMIN_API_TOKEN) se aceptan como alias.
"""

from functools import lru_cache
from typing import Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

PLACEHOLDER_SHOP_URL = "your-shop.myshopify.com"


class Settings(BaseSettings):
    """
    Configuración de la aplicación usando Pydantic Settings.

    Todas las configuraciones se cargan desde variables de entorno
    con valores por defecto apropiados para desarrollo.
    """

    # === CONFIGURACIÓN BÁSICA DE LA APP ===
    APP_NAME: str = "Draft Order Reconciler"
    ENVIRONMENT: str = Field(default="development", validation_alias=AliasChoices("ENVIRONMENT", "ENV"))
    DEBUG: bool = False

    # === CONFIGURACIÓN DEL SERVIDOR ===
    HOST: str = "0.0.0.0"
    PORT: int = 8080
    WORKERS: int = 1

    # === CONFIGURACIÓN DE LOGGING ===
    LOG_LEVEL: str = "INFO"
    LOG_FILE_PATH: Optional[str] = None
    LOG_MAX_SIZE_MB: int = 10
    LOG_BACKUP_COUNT: int = 5
    LOG_JSON: bool = False

    # === CONFIGURACIÓN DE SHOPIFY ===
    SHOPIFY_SHOP_URL: str = Field(
        default=PLACEHOLDER_SHOP_URL,
        validation_alias=AliasChoices("SHOPIFY_SHOP_URL", "SHOP_DOMAIN"),
    )
    SHOPIFY_ACCESS_TOKEN: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("SHOPIFY_ACCESS_TOKEN", "ADMIN_API_TOKEN"),
    )
    SHOPIFY_WEBHOOK_SECRET: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("SHOPIFY_WEBHOOK_SECRET", "WEBHOOK_SECRET"),
    )
    SHOPIFY_API_VERSION: str = "2025-01"
    # Segundos; None deja el timeout por defecto del transporte
    SHOPIFY_REQUEST_TIMEOUT: Optional[float] = None

    # === CONFIGURACIÓN DE ELEGIBILIDAD ===
    # Marcador buscado en los tags del pedido (sin distinguir mayúsculas).
    # Si no se define, todos los pedidos son elegibles.
    ORDER_TAG_MARKER: Optional[str] = None

    # URL pública del servicio, usada por configure_webhooks.py
    API_BASE_URL: Optional[str] = None

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        populate_by_name=True,
        extra="ignore",
    )

    @field_validator("SHOPIFY_SHOP_URL")
    @classmethod
    def validate_shopify_url(cls, v):
        """Normaliza el dominio de la tienda a una URL https sin barra final."""
        v = v.strip().rstrip("/")
        if not v.startswith("https://") and not v.startswith("http://"):
            v = f"https://{v}"
        return v

    @field_validator("ORDER_TAG_MARKER", mode="before")
    @classmethod
    def parse_tag_marker(cls, v):
        """Un marcador vacío equivale a no filtrar."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        """Valida que el nivel de log sea válido."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL debe ser uno de: {valid_levels}")
        return v.upper()

    @field_validator("ENVIRONMENT")
    @classmethod
    def validate_environment(cls, v):
        """Valida que el entorno sea válido."""
        valid_envs = ["development", "staging", "production", "testing"]
        if v.lower() not in valid_envs:
            raise ValueError(f"ENVIRONMENT debe ser uno de: {valid_envs}")
        return v.lower()

    @field_validator("PORT")
    @classmethod
    def validate_port(cls, v):
        """Valida que el puerto esté en rango válido."""
        if not 1 <= v <= 65535:
            raise ValueError("PORT debe estar entre 1 y 65535")
        return v

    @property
    def is_production(self) -> bool:
        """Verifica si está en entorno de producción."""
        return self.ENVIRONMENT == "production"

    @property
    def shopify_api_base_url(self) -> str:
        """Genera URL base de la API REST de Shopify."""
        return f"{self.SHOPIFY_SHOP_URL}/admin/api/{self.SHOPIFY_API_VERSION}"

    def get_shopify_headers(self) -> dict:
        """
        Obtiene headers para requests a Shopify.

        Returns:
            dict: Headers de autenticación
        """
        return {
            "X-Shopify-Access-Token": self.SHOPIFY_ACCESS_TOKEN or "",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }


@lru_cache()
def get_settings() -> Settings:
    """
    Obtiene instancia singleton de configuración.

    Returns:
        Settings: Instancia de configuración
    """
    return Settings()


def get_missing_settings(settings: Settings) -> list:
    """
    Lista las configuraciones requeridas para reconciliar pedidos que faltan.

    Args:
        settings: Configuración a revisar

    Returns:
        list: Nombres de las configuraciones faltantes
    """
    missing = []
    if not settings.SHOPIFY_WEBHOOK_SECRET:
        missing.append("SHOPIFY_WEBHOOK_SECRET")
    if not settings.SHOPIFY_ACCESS_TOKEN:
        missing.append("SHOPIFY_ACCESS_TOKEN")
    if settings.SHOPIFY_SHOP_URL.endswith(PLACEHOLDER_SHOP_URL):
        missing.append("SHOPIFY_SHOP_URL")
    return missing
