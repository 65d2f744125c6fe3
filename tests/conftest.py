"""Fixtures compartidos para los tests del webhook orders/create."""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from app.api.v1.schemas.shopify_schemas import NoteAttribute, ShopifyDraftOrder, ShopifyRestOrder
from app.core.config import Settings
from app.core.events import CollectingEventSink
from app.services.webhook_verification import compute_shopify_hmac

WEBHOOK_SECRET = "test-webhook-secret"


@pytest.fixture
def settings():
    """Configuración con credenciales falsas y sin filtro de tags."""
    return Settings(
        _env_file=None,
        ENVIRONMENT="testing",
        SHOPIFY_SHOP_URL="test-shop.myshopify.com",
        SHOPIFY_ACCESS_TOKEN="shpat_test_token",
        SHOPIFY_WEBHOOK_SECRET=WEBHOOK_SECRET,
        SHOPIFY_API_VERSION="2025-01",
        ORDER_TAG_MARKER=None,
    )


@pytest.fixture
def event_sink():
    return CollectingEventSink()


@pytest.fixture
def sign():
    """Firma un cuerpo como lo haría Shopify."""

    def _sign(body: bytes, secret: str = WEBHOOK_SECRET) -> str:
        return compute_shopify_hmac(body, secret)

    return _sign


@pytest.fixture
def make_body():
    def _make_body(payload) -> bytes:
        return json.dumps(payload).encode("utf-8")

    return _make_body


@pytest.fixture
def shopify_order():
    """Pedido creado desde un draft, con un atributo propio."""
    return ShopifyRestOrder(
        id=5551234,
        tags="Wholesale, SAMITA-Wholesale",
        draft_order_id=998877,
        note_attributes=[NoteAttribute(name="Gift", value="yes")],
    )


@pytest.fixture
def draft_order():
    """Draft con atributos de Zapiet y uno ajeno."""
    return ShopifyDraftOrder(
        id=998877,
        note_attributes=[
            NoteAttribute(name="Delivery-Date", value="2024-05-01"),
            NoteAttribute(name="Unrelated", value="x"),
        ],
    )


@pytest.fixture
def shopify_client(shopify_order, draft_order):
    """Cliente REST falso que devuelve el pedido y el draft de los fixtures."""
    client = MagicMock()
    client.get_order = AsyncMock(return_value=shopify_order)
    client.get_draft_order = AsyncMock(return_value=draft_order)
    client.update_order_note_attributes = AsyncMock(return_value={"order": {"id": shopify_order.id}})
    return client
