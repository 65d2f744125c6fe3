"""
Shopify Admin REST client for orders, draft orders and webhook subscriptions.

Every call is a single attempt: no retries and no client-side rate limiting.
Any non-2xx response, network error, timeout or undecodable body is raised as
ShopifyAPIException so callers can decide whether to absorb it.
"""

import asyncio
import logging
import time
from typing import Any, Dict, List, Optional, Union

import aiohttp
from aiohttp import ClientTimeout

from app.api.v1.schemas.shopify_schemas import (
    NoteAttribute,
    ShopifyDraftOrder,
    ShopifyRestOrder,
    ShopifyWebhookSubscription,
)
from app.core.config import Settings, get_settings
from app.utils.error_handler import ErrorCode, ShopifyAPIException

logger = logging.getLogger(__name__)

ResourceId = Union[int, str]

# Longitud máxima del cuerpo de error que se guarda en la excepción
_MAX_ERROR_BODY = 500


class ShopifyRestClient:
    """
    Client for the Shopify Admin REST API.

    The session is created lazily on first use (or explicitly with
    ``initialize()``) and must be released with ``close()``; the client can
    also be used as an async context manager.
    """

    def __init__(self, settings: Optional[Settings] = None, session: Optional[aiohttp.ClientSession] = None):
        """Initialize the client from settings; an existing session may be injected."""
        self.settings = settings or get_settings()
        self.base_url = self.settings.shopify_api_base_url
        self.session = session
        self._owns_session = session is None

    async def initialize(self) -> None:
        """Create the HTTP session if it does not exist yet."""
        if self.session is not None and not self.session.closed:
            return

        session_kwargs: Dict[str, Any] = {"headers": self.settings.get_shopify_headers()}
        if self.settings.SHOPIFY_REQUEST_TIMEOUT:
            session_kwargs["timeout"] = ClientTimeout(total=self.settings.SHOPIFY_REQUEST_TIMEOUT)

        self.session = aiohttp.ClientSession(**session_kwargs)
        self._owns_session = True
        logger.info(f"Initialized Shopify REST client for {self.settings.SHOPIFY_SHOP_URL}")

    async def close(self) -> None:
        """Close the HTTP session if this client created it."""
        if self.session is not None and self._owns_session and not self.session.closed:
            await self.session.close()
            logger.info("Shopify REST client closed")
        self.session = None

    async def __aenter__(self) -> "ShopifyRestClient":
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def _request(self, method: str, path: str, payload: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Execute one REST call and return the decoded JSON body.

        Args:
            method: HTTP method
            path: Path relative to the versioned API base (e.g. ``/orders/1.json``)
            payload: JSON body for write calls

        Returns:
            Dict: Decoded JSON response ({} for empty bodies)

        Raises:
            ShopifyAPIException: On any non-2xx status, network error or bad JSON
        """
        await self.initialize()
        url = f"{self.base_url}{path}"
        start_time = time.monotonic()

        try:
            async with self.session.request(method, url, json=payload) as response:
                text = await response.text()
                duration_ms = (time.monotonic() - start_time) * 1000
                logger.debug(f"Shopify {method} {path} -> {response.status} ({duration_ms:.1f}ms)")

                if not 200 <= response.status < 300:
                    raise ShopifyAPIException(
                        f"HTTP {response.status} on {method} {path}",
                        api_response_code=response.status,
                        endpoint=path,
                        method=method,
                        response_body=text[:_MAX_ERROR_BODY],
                    )

                if not text.strip():
                    return {}

                try:
                    return await response.json(content_type=None)
                except ValueError as e:
                    raise ShopifyAPIException(
                        f"Invalid JSON from {method} {path}: {e}",
                        api_response_code=response.status,
                        endpoint=path,
                        method=method,
                        response_body=text[:_MAX_ERROR_BODY],
                        error_code=ErrorCode.SHOPIFY_INVALID_RESPONSE,
                    ) from e

        except aiohttp.ClientError as e:
            raise ShopifyAPIException(
                f"Network error on {method} {path}: {e}",
                endpoint=path,
                method=method,
                error_code=ErrorCode.SHOPIFY_CONNECTION_FAILED,
            ) from e
        except asyncio.TimeoutError as e:
            raise ShopifyAPIException(
                f"Timeout on {method} {path}",
                endpoint=path,
                method=method,
                error_code=ErrorCode.SHOPIFY_CONNECTION_FAILED,
            ) from e

    def _parse(self, model, data: Dict[str, Any], key: str, path: str):
        resource = data.get(key)
        if not isinstance(resource, dict):
            raise ShopifyAPIException(
                f"Response from {path} has no '{key}' object",
                api_response_code=200,
                endpoint=path,
                error_code=ErrorCode.SHOPIFY_INVALID_RESPONSE,
            )
        try:
            return model.model_validate(resource)
        except ValueError as e:
            raise ShopifyAPIException(
                f"Unexpected '{key}' shape from {path}: {e}",
                api_response_code=200,
                endpoint=path,
                error_code=ErrorCode.SHOPIFY_INVALID_RESPONSE,
            ) from e

    async def get_order(self, order_id: ResourceId) -> ShopifyRestOrder:
        """Fetch an order with its tags, draft_order_id and note_attributes."""
        path = f"/orders/{order_id}.json"
        data = await self._request("GET", path)
        return self._parse(ShopifyRestOrder, data, "order", path)

    async def get_draft_order(self, draft_order_id: ResourceId) -> ShopifyDraftOrder:
        """Fetch a draft order with its note_attributes."""
        path = f"/draft_orders/{draft_order_id}.json"
        data = await self._request("GET", path)
        return self._parse(ShopifyDraftOrder, data, "draft_order", path)

    async def update_order_note_attributes(
        self, order_id: ResourceId, note_attributes: List[NoteAttribute]
    ) -> Dict[str, Any]:
        """
        Replace the order's note_attributes with the given full list.

        Returns:
            Dict: Raw response body (callers do not rely on it)
        """
        payload = {
            "order": {
                "id": order_id,
                "note_attributes": [attribute.model_dump() for attribute in note_attributes],
            }
        }
        return await self._request("PUT", f"/orders/{order_id}.json", payload)

    async def list_webhooks(self, topic: Optional[str] = None) -> List[ShopifyWebhookSubscription]:
        """List webhook subscriptions, optionally filtered by topic."""
        path = "/webhooks.json"
        if topic:
            path = f"{path}?topic={topic}"
        data = await self._request("GET", path)
        return [ShopifyWebhookSubscription.model_validate(item) for item in data.get("webhooks", [])]

    async def create_webhook(self, topic: str, address: str, format: str = "json") -> ShopifyWebhookSubscription:
        """Create a webhook subscription."""
        path = "/webhooks.json"
        data = await self._request("POST", path, {"webhook": {"topic": topic, "address": address, "format": format}})
        return self._parse(ShopifyWebhookSubscription, data, "webhook", path)

    def __repr__(self):
        return (
            f"ShopifyRestClient("
            f"base_url='{self.base_url}', "
            f"initialized={self.session is not None})"
        )
