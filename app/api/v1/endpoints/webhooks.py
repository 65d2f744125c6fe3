"""
Endpoint para el webhook ``orders/create`` de Shopify.

Acepta cualquier método: los que no son POST se confirman con 200 sin
efectos. El cuerpo se lee crudo para poder verificar la firma HMAC.
"""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse

from app.core.config import get_settings
from app.core.events import ReconcileOutcome
from app.db.shopify_client import get_shopify_client
from app.services.webhook_handler import OrderCreateWebhookHandler, WebhookRequest
from app.utils.error_handler import log_error

logger = logging.getLogger(__name__)

router = APIRouter()

WEBHOOK_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def get_order_create_handler() -> OrderCreateWebhookHandler:
    """
    Dependencia que construye el manejador con la configuración y el cliente compartidos.

    Returns:
        OrderCreateWebhookHandler: Manejador listo para usar
    """
    settings = get_settings()
    return OrderCreateWebhookHandler(settings=settings, client=get_shopify_client(settings))


@router.api_route("/orders-create", methods=WEBHOOK_METHODS, response_class=PlainTextResponse)
async def orders_create_webhook(
    request: Request,
    handler: OrderCreateWebhookHandler = Depends(get_order_create_handler),
) -> PlainTextResponse:
    """
    Recibe el webhook orders/create y reconcilia los note attributes del draft.

    Args:
        request: Request HTTP con el webhook
        handler: Manejador de reconciliación

    Returns:
        PlainTextResponse: 200, 400 o 401 con un motivo en texto plano
    """
    try:
        body = await request.body() if request.method == "POST" else b""
        response = await handler.handle(
            WebhookRequest(method=request.method, body=body, headers=dict(request.headers))
        )
        return PlainTextResponse(response.body, status_code=response.status_code)

    except Exception as e:
        log_error(e, {"path": request.url.path, "method": request.method})
        # Shopify espera 200 incluso en errores para evitar reintentos
        return PlainTextResponse(ReconcileOutcome.PROCESSING_FAILED.value, status_code=200)
