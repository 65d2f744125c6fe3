"""
Eventos estructurados de reconciliación.

Cada petición al webhook termina con exactamente un evento de resultado
(``ReconcileOutcome``), y los errores absorbidos (lecturas o escritura fallidas
contra Shopify) emiten además un evento de error (``ErrorKind``) con su
contexto. Los eventos se entregan a un ``EventSink``: en producción el
``LoggingEventSink`` los escribe como una línea de log con campos ``extra``;
en tests se capturan con ``CollectingEventSink``.
"""

import logging
from dataclasses import asdict, dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Union

logger = logging.getLogger("app.webhooks.events")


class ReconcileOutcome(str, Enum):
    """
    Resultado terminal de una petición. El valor es el cuerpo de texto de la respuesta.
    """

    NOT_POST = "OK"
    MISSING_CREDENTIALS = "Missing secret or hmac"
    BAD_HMAC = "Bad HMAC"
    BAD_JSON = "Bad JSON"
    NO_ORDER_ID = "No order id"
    ORDER_FETCH_FAILED = "GET order failed"
    NOT_ELIGIBLE = "Order not eligible"
    NO_DRAFT_LINK = "No draft link"
    DRAFT_FETCH_FAILED = "GET draft failed"
    NO_RELEVANT_ATTRIBUTES = "No Zapiet attrs on draft"
    NO_CHANGES = "No changes needed"
    PROCESSING_FAILED = "Processing failed"
    DONE = "Done"

    @property
    def status_code(self) -> int:
        if self in (ReconcileOutcome.MISSING_CREDENTIALS, ReconcileOutcome.BAD_HMAC):
            return 401
        if self is ReconcileOutcome.BAD_JSON:
            return 400
        return 200

    @property
    def kind(self) -> str:
        return self.name.lower()


class ErrorKind(str, Enum):
    """Tipos de error absorbidos durante la reconciliación."""

    ORDER_FETCH_ERROR = "order_fetch_error"
    DRAFT_FETCH_ERROR = "draft_fetch_error"
    ORDER_UPDATE_ERROR = "order_update_error"
    UNEXPECTED_ERROR = "unexpected_error"


@dataclass
class ReconcileEvent:
    """Evento emitido por el manejador del webhook."""

    kind: str
    category: str = "outcome"
    status_code: int = 200
    order_id: Optional[Union[int, str]] = None
    draft_order_id: Optional[Union[int, str]] = None
    details: Dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    # Excepción original; el sink de logging adjunta su traceback
    exc_info: Optional[BaseException] = field(default=None, repr=False, compare=False)

    @classmethod
    def for_outcome(cls, outcome: ReconcileOutcome, **context) -> "ReconcileEvent":
        return cls(kind=outcome.kind, category="outcome", status_code=outcome.status_code, **context)

    @classmethod
    def for_error(cls, error_kind: ErrorKind, **context) -> "ReconcileEvent":
        return cls(kind=error_kind.value, category="error", **context)

    @property
    def is_error(self) -> bool:
        return self.category == "error"

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(replace(self, exc_info=None))
        data.pop("exc_info")
        data["timestamp"] = self.timestamp.isoformat()
        return data


EventSink = Callable[[ReconcileEvent], None]


_OUTCOME_LEVELS = {
    ReconcileOutcome.MISSING_CREDENTIALS.kind: logging.WARNING,
    ReconcileOutcome.BAD_HMAC.kind: logging.WARNING,
    ReconcileOutcome.BAD_JSON.kind: logging.WARNING,
    ReconcileOutcome.ORDER_FETCH_FAILED.kind: logging.WARNING,
    ReconcileOutcome.DRAFT_FETCH_FAILED.kind: logging.WARNING,
}


class LoggingEventSink:
    """
    Sink que escribe cada evento como una línea de log estructurada.
    """

    def __init__(self, target: Optional[logging.Logger] = None):
        self.logger = target or logger

    def __call__(self, event: ReconcileEvent) -> None:
        if event.is_error:
            level = logging.ERROR
        else:
            level = _OUTCOME_LEVELS.get(event.kind, logging.INFO)

        extra = {
            "event_kind": event.kind,
            "event_category": event.category,
            "order_id": event.order_id,
            "draft_order_id": event.draft_order_id,
            "status_code": event.status_code,
            "event_details": event.details,
        }
        context = ""
        if event.order_id is not None:
            context = f" (order={event.order_id}, draft={event.draft_order_id})"
        self.logger.log(
            level, f"orders/create {event.category}: {event.kind}{context}", extra=extra, exc_info=event.exc_info
        )


class CollectingEventSink:
    """
    Sink que acumula los eventos en memoria.
    """

    def __init__(self):
        self.events: List[ReconcileEvent] = []

    def __call__(self, event: ReconcileEvent) -> None:
        self.events.append(event)

    @property
    def kinds(self) -> List[str]:
        return [event.kind for event in self.events]

    @property
    def errors(self) -> List[ReconcileEvent]:
        return [event for event in self.events if event.is_error]

    def clear(self) -> None:
        self.events.clear()
