"""
Verificación de firmas HMAC de webhooks de Shopify.

Shopify firma el cuerpo crudo de cada webhook con HMAC-SHA256 usando el
secreto de la app y envía el resultado en base64 en el header
``X-Shopify-Hmac-Sha256``. Sin secreto o sin header la verificación falla.
"""

import base64
import hashlib
import hmac
import logging
from typing import Optional

logger = logging.getLogger(__name__)

SHOPIFY_HMAC_HEADER = "x-shopify-hmac-sha256"


def compute_shopify_hmac(body: bytes, secret: str) -> str:
    """
    Calcula la firma base64 que Shopify enviaría para ``body``.

    Args:
        body: Cuerpo crudo de la petición
        secret: Secreto compartido del webhook

    Returns:
        str: HMAC-SHA256 codificado en base64
    """
    digest = hmac.new(secret.encode("utf-8"), body, hashlib.sha256).digest()
    return base64.b64encode(digest).decode("utf-8")


def verify_shopify_hmac(body: bytes, signature_header: Optional[str], secret: Optional[str]) -> bool:
    """
    Verifica la firma HMAC del webhook.

    Ambas firmas se comparan como bytes UTF-8 de su forma base64, primero por
    longitud y luego en tiempo constante.

    Args:
        body: Cuerpo crudo de la petición, sin parsear
        signature_header: Valor del header X-Shopify-Hmac-Sha256
        secret: Secreto compartido del webhook

    Returns:
        bool: True si la firma es válida
    """
    if not secret or not signature_header:
        return False

    expected = compute_shopify_hmac(body, secret).encode("utf-8")
    received = signature_header.encode("utf-8")

    if len(expected) != len(received):
        return False

    return hmac.compare_digest(expected, received)
