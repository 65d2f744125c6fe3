"""
Modelos Pydantic para datos de la API REST Admin de Shopify.

Solo se modelan los campos que usa la reconciliación de note attributes
entre draft orders y orders; el resto del payload se ignora.
"""

from decimal import Decimal
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class NoteAttribute(BaseModel):
    """Par nombre/valor de ``note_attributes``. La identidad es ``name``."""

    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = None
    value: Optional[str] = None

    @field_validator("name", "value", mode="before")
    @classmethod
    def coerce_scalar(cls, v):
        """Convierte números y booleanos a string."""
        if v is None or isinstance(v, str):
            return v
        if isinstance(v, bool):
            return str(v).lower()
        if isinstance(v, (int, float, Decimal)):
            return str(v)
        return v


class ShopifyRestOrder(BaseModel):
    """Modelo para ``GET /orders/{id}.json`` (clave ``order``)."""

    model_config = ConfigDict(extra="ignore")

    id: Union[int, str]
    tags: str = ""
    draft_order_id: Optional[Union[int, str]] = None
    note_attributes: List[NoteAttribute] = Field(default_factory=list)

    @field_validator("tags", mode="before")
    @classmethod
    def parse_tags(cls, v):
        """Los tags llegan como string separado por comas; acepta también lista o null."""
        if v is None:
            return ""
        if isinstance(v, list):
            return ", ".join(str(tag) for tag in v)
        return v

    @field_validator("note_attributes", mode="before")
    @classmethod
    def parse_note_attributes(cls, v):
        return v or []

    @property
    def tag_list(self) -> List[str]:
        return [tag.strip() for tag in self.tags.split(",") if tag.strip()]


class ShopifyDraftOrder(BaseModel):
    """Modelo para ``GET /draft_orders/{id}.json`` (clave ``draft_order``)."""

    model_config = ConfigDict(extra="ignore")

    id: Union[int, str]
    note_attributes: List[NoteAttribute] = Field(default_factory=list)

    @field_validator("note_attributes", mode="before")
    @classmethod
    def parse_note_attributes(cls, v):
        return v or []


class ShopifyWebhookSubscription(BaseModel):
    """Suscripción de webhook (``/webhooks.json``)."""

    model_config = ConfigDict(extra="ignore")

    id: Optional[int] = None
    topic: str
    address: str
    format: str = "json"
