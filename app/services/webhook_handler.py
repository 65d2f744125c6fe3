"""
Manejador del webhook ``orders/create`` de Shopify.

Cuando Shopify crea un pedido a partir de un draft order, los note attributes
de entrega (Zapiet) que se guardaron en el draft no siempre llegan al pedido.
Este módulo verifica el webhook, lee el pedido y su draft, y copia al pedido
los atributos permitidos que falten o difieran.

Política de respuestas: 401 si la firma no es válida, 400 si el cuerpo no es
JSON, y 200 para todo lo demás (incluidos fallos contra Shopify) para que
Shopify no reintente indefinidamente. Cada resultado se emite como evento.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Mapping, Optional, Union

from app.core.config import Settings, get_settings
from app.core.events import (
    ErrorKind,
    EventSink,
    LoggingEventSink,
    ReconcileEvent,
    ReconcileOutcome,
)
from app.db.shopify_clients.rest_client import ShopifyRestClient
from app.services.note_attributes import (
    filter_note_attributes,
    merge_note_attributes,
    note_attributes_differ,
)
from app.services.order_eligibility import EligibilityPredicate, build_eligibility_predicate
from app.services.webhook_verification import SHOPIFY_HMAC_HEADER, verify_shopify_hmac
from app.utils.error_handler import AppException, ShopifyAPIException

logger = logging.getLogger(__name__)


@dataclass
class WebhookRequest:
    """Petición entrante independiente del framework HTTP."""

    method: str
    body: bytes = b""
    headers: Mapping[str, str] = field(default_factory=dict)

    def header(self, name: str) -> Optional[str]:
        """Busca un header sin distinguir mayúsculas."""
        wanted = name.lower()
        for key, value in self.headers.items():
            if key.lower() == wanted:
                return value
        return None


@dataclass
class WebhookResponse:
    """Respuesta al emisor del webhook."""

    outcome: ReconcileOutcome

    @property
    def status_code(self) -> int:
        return self.outcome.status_code

    @property
    def body(self) -> str:
        return self.outcome.value


class OrderCreateWebhookHandler:
    """
    Reconciliador de note attributes entre draft order y pedido.

    Recibe la configuración y el cliente de Shopify en el constructor, de modo
    que puede probarse con credenciales y clientes falsos.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        client: Optional[ShopifyRestClient] = None,
        eligibility: Optional[EligibilityPredicate] = None,
        event_sink: Optional[EventSink] = None,
        attribute_names: Optional[Iterable[str]] = None,
    ):
        """
        Inicializa el manejador.

        Args:
            settings: Configuración (secreto del webhook, marcador de tags)
            client: Cliente REST de Shopify
            eligibility: Predicado de elegibilidad; por defecto según ORDER_TAG_MARKER
            event_sink: Destino de los eventos; por defecto el log
            attribute_names: Nombres de atributos a copiar; por defecto los de Zapiet
        """
        self.settings = settings or get_settings()
        self.client = client or ShopifyRestClient(settings=self.settings)
        self.eligibility = eligibility or build_eligibility_predicate(self.settings.ORDER_TAG_MARKER)
        self.event_sink = event_sink or LoggingEventSink()
        self.attribute_names = frozenset(attribute_names) if attribute_names is not None else None

    async def handle(self, request: WebhookRequest) -> WebhookResponse:
        """
        Procesa una petición del webhook de principio a fin.

        Args:
            request: Petición con método, cuerpo crudo y headers

        Returns:
            WebhookResponse: Resultado terminal con su código HTTP
        """
        if request.method.upper() != "POST":
            return self._finish(ReconcileOutcome.NOT_POST)

        # 1) Autenticidad sobre el cuerpo crudo
        secret = self.settings.SHOPIFY_WEBHOOK_SECRET
        signature = request.header(SHOPIFY_HMAC_HEADER)
        if not secret or not signature:
            return self._finish(
                ReconcileOutcome.MISSING_CREDENTIALS,
                details={"secret_configured": bool(secret), "signature_present": bool(signature)},
            )
        if not verify_shopify_hmac(request.body, signature, secret):
            return self._finish(ReconcileOutcome.BAD_HMAC)

        # 2) Payload
        try:
            payload = json.loads(request.body.decode("utf-8"))
        except (UnicodeDecodeError, ValueError) as e:
            return self._finish(ReconcileOutcome.BAD_JSON, details={"error": str(e)})

        order_id = payload.get("id") if isinstance(payload, dict) else None
        if not order_id:
            return self._finish(ReconcileOutcome.NO_ORDER_ID)

        try:
            return await self._reconcile(order_id)
        except Exception as e:
            self._emit_error(ErrorKind.UNEXPECTED_ERROR, e, order_id=order_id)
            return self._finish(ReconcileOutcome.PROCESSING_FAILED, order_id=order_id)

    async def _reconcile(self, order_id: Union[int, str]) -> WebhookResponse:
        # 3) Pedido completo (tags, draft_order_id, note_attributes)
        try:
            order = await self.client.get_order(order_id)
        except ShopifyAPIException as e:
            self._emit_error(ErrorKind.ORDER_FETCH_ERROR, e, order_id=order_id)
            return self._finish(ReconcileOutcome.ORDER_FETCH_FAILED, order_id=order_id)

        if not self.eligibility(order):
            return self._finish(ReconcileOutcome.NOT_ELIGIBLE, order_id=order_id, details={"tags": order.tags})

        draft_id = order.draft_order_id
        if not draft_id:
            return self._finish(ReconcileOutcome.NO_DRAFT_LINK, order_id=order_id)

        # 4) Draft order de origen
        try:
            draft = await self.client.get_draft_order(draft_id)
        except ShopifyAPIException as e:
            self._emit_error(ErrorKind.DRAFT_FETCH_ERROR, e, order_id=order_id, draft_order_id=draft_id)
            return self._finish(ReconcileOutcome.DRAFT_FETCH_FAILED, order_id=order_id, draft_order_id=draft_id)

        draft_attributes = filter_note_attributes(draft.note_attributes, self.attribute_names)
        if not draft_attributes:
            return self._finish(ReconcileOutcome.NO_RELEVANT_ATTRIBUTES, order_id=order_id, draft_order_id=draft_id)

        # 5) Merge y escritura
        existing = order.note_attributes
        merged = merge_note_attributes(existing, draft_attributes)
        if not note_attributes_differ(existing, merged):
            return self._finish(ReconcileOutcome.NO_CHANGES, order_id=order_id, draft_order_id=draft_id)

        copied = [attribute.name for attribute in draft_attributes]
        try:
            await self.client.update_order_note_attributes(order_id, merged)
            updated = True
        except ShopifyAPIException as e:
            # No se reintenta ni se informa a Shopify
            self._emit_error(ErrorKind.ORDER_UPDATE_ERROR, e, order_id=order_id, draft_order_id=draft_id)
            updated = False

        return self._finish(
            ReconcileOutcome.DONE,
            order_id=order_id,
            draft_order_id=draft_id,
            details={"updated": updated, "copied_attributes": copied},
        )

    def _finish(self, outcome: ReconcileOutcome, **context) -> WebhookResponse:
        self._emit(ReconcileEvent.for_outcome(outcome, **context))
        return WebhookResponse(outcome=outcome)

    def _emit_error(self, error_kind: ErrorKind, exc: Exception, **context) -> None:
        details: Dict[str, Any] = {"error": str(exc), "exception_type": type(exc).__name__}
        if isinstance(exc, AppException):
            details.update(exc.details)
            details["error_code"] = exc.error_code.value
        exc_info = exc if error_kind is ErrorKind.UNEXPECTED_ERROR else None
        self._emit(ReconcileEvent.for_error(error_kind, details=details, exc_info=exc_info, **context))

    def _emit(self, event: ReconcileEvent) -> None:
        try:
            self.event_sink(event)
        except Exception as e:
            logger.error(f"Event sink failed for {event.kind}: {e}")
