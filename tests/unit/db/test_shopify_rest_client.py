"""Tests para el cliente REST de Shopify con una sesión aiohttp falsa."""

import asyncio
import json

import aiohttp
import pytest

from app.api.v1.schemas.shopify_schemas import NoteAttribute
from app.db.shopify_clients.rest_client import ShopifyRestClient
from app.utils.error_handler import ErrorCode, ShopifyAPIException

BASE = "https://test-shop.myshopify.com/admin/api/2025-01"


class FakeResponse:
    def __init__(self, status=200, payload=None, text=None):
        self.status = status
        self._text = text if text is not None else (json.dumps(payload) if payload is not None else "")

    async def text(self):
        return self._text

    async def json(self, content_type=None):
        return json.loads(self._text)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False


class FakeSession:
    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []
        self.closed = False

    def request(self, method, url, json=None):
        self.calls.append({"method": method, "url": url, "json": json})
        response = self.responses.pop(0)
        if isinstance(response, BaseException):
            raise response
        return response

    async def close(self):
        self.closed = True


def make_client(settings, *responses):
    session = FakeSession(*responses)
    return ShopifyRestClient(settings=settings, session=session), session


class TestReadCalls:
    @pytest.mark.asyncio
    async def test_get_order_parses_model(self, settings):
        client, session = make_client(
            settings,
            FakeResponse(
                payload={
                    "order": {
                        "id": 5551234,
                        "tags": "Wholesale, SAMITA-Wholesale",
                        "draft_order_id": 998877,
                        "note_attributes": [{"name": "Gift", "value": "yes"}],
                        "line_items": [],
                    }
                }
            ),
        )

        order = await client.get_order(5551234)

        assert session.calls == [{"method": "GET", "url": f"{BASE}/orders/5551234.json", "json": None}]
        assert order.draft_order_id == 998877
        assert order.tag_list == ["Wholesale", "SAMITA-Wholesale"]
        assert order.note_attributes == [NoteAttribute(name="Gift", value="yes")]

    @pytest.mark.asyncio
    async def test_get_order_with_null_fields(self, settings):
        client, _ = make_client(
            settings,
            FakeResponse(payload={"order": {"id": 1, "tags": None, "draft_order_id": None, "note_attributes": None}}),
        )

        order = await client.get_order(1)

        assert order.tags == ""
        assert order.draft_order_id is None
        assert order.note_attributes == []

    @pytest.mark.asyncio
    async def test_get_draft_order(self, settings):
        client, session = make_client(
            settings,
            FakeResponse(payload={"draft_order": {"id": 7, "note_attributes": [{"name": "Delivery-Date", "value": 20240501}]}}),
        )

        draft = await client.get_draft_order(7)

        assert session.calls[0]["url"] == f"{BASE}/draft_orders/7.json"
        assert draft.note_attributes[0].value == "20240501"

    @pytest.mark.asyncio
    async def test_non_success_status_raises(self, settings):
        client, _ = make_client(settings, FakeResponse(status=404, text='{"errors":"Not Found"}'))

        with pytest.raises(ShopifyAPIException) as exc_info:
            await client.get_order(1)

        assert exc_info.value.api_response_code == 404
        assert exc_info.value.endpoint == "/orders/1.json"
        assert exc_info.value.response_body == '{"errors":"Not Found"}'

    @pytest.mark.asyncio
    async def test_missing_resource_key_raises(self, settings):
        client, _ = make_client(settings, FakeResponse(payload={"errors": "weird"}))

        with pytest.raises(ShopifyAPIException) as exc_info:
            await client.get_draft_order(7)

        assert exc_info.value.error_code == ErrorCode.SHOPIFY_INVALID_RESPONSE

    @pytest.mark.asyncio
    async def test_invalid_json_raises(self, settings):
        client, _ = make_client(settings, FakeResponse(text="<html>oops</html>"))

        with pytest.raises(ShopifyAPIException) as exc_info:
            await client.get_order(1)

        assert exc_info.value.error_code == ErrorCode.SHOPIFY_INVALID_RESPONSE

    @pytest.mark.asyncio
    async def test_network_error_raises(self, settings):
        client, _ = make_client(settings, aiohttp.ClientConnectionError("connection reset"))

        with pytest.raises(ShopifyAPIException) as exc_info:
            await client.get_order(1)

        assert exc_info.value.api_response_code is None
        assert exc_info.value.error_code == ErrorCode.SHOPIFY_CONNECTION_FAILED

    @pytest.mark.asyncio
    async def test_timeout_raises(self, settings):
        client, _ = make_client(settings, asyncio.TimeoutError())

        with pytest.raises(ShopifyAPIException):
            await client.get_order(1)


class TestWriteCalls:
    @pytest.mark.asyncio
    async def test_update_sends_full_list(self, settings):
        client, session = make_client(settings, FakeResponse(payload={"order": {"id": 5551234}}))
        merged = [NoteAttribute(name="Gift", value="yes"), NoteAttribute(name="Delivery-Date", value="2024-05-01")]

        await client.update_order_note_attributes(5551234, merged)

        call = session.calls[0]
        assert call["method"] == "PUT"
        assert call["url"] == f"{BASE}/orders/5551234.json"
        assert call["json"] == {
            "order": {
                "id": 5551234,
                "note_attributes": [
                    {"name": "Gift", "value": "yes"},
                    {"name": "Delivery-Date", "value": "2024-05-01"},
                ],
            }
        }

    @pytest.mark.asyncio
    async def test_update_with_empty_body(self, settings):
        client, _ = make_client(settings, FakeResponse(status=200, text=""))
        assert await client.update_order_note_attributes(1, []) == {}

    @pytest.mark.asyncio
    async def test_update_failure_raises(self, settings):
        client, _ = make_client(settings, FakeResponse(status=503, text="unavailable"))

        with pytest.raises(ShopifyAPIException) as exc_info:
            await client.update_order_note_attributes(1, [])

        assert exc_info.value.api_response_code == 503
        assert exc_info.value.method == "PUT"


class TestWebhookSubscriptions:
    @pytest.mark.asyncio
    async def test_list_webhooks_by_topic(self, settings):
        client, session = make_client(
            settings,
            FakeResponse(payload={"webhooks": [{"id": 1, "topic": "orders/create", "address": "https://a/api/orders-create"}]}),
        )

        webhooks = await client.list_webhooks(topic="orders/create")

        assert session.calls[0]["url"] == f"{BASE}/webhooks.json?topic=orders/create"
        assert webhooks[0].address == "https://a/api/orders-create"

    @pytest.mark.asyncio
    async def test_create_webhook(self, settings):
        client, session = make_client(
            settings,
            FakeResponse(status=201, payload={"webhook": {"id": 9, "topic": "orders/create", "address": "https://a/x"}}),
        )

        webhook = await client.create_webhook("orders/create", "https://a/x")

        assert webhook.id == 9
        assert session.calls[0]["json"] == {"webhook": {"topic": "orders/create", "address": "https://a/x", "format": "json"}}


class TestSessionLifecycle:
    @pytest.mark.asyncio
    async def test_injected_session_is_not_closed(self, settings):
        client, session = make_client(settings)

        await client.close()

        assert session.closed is False
        assert client.session is None
