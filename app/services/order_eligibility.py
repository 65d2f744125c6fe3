"""
Predicados de elegibilidad de pedidos para la reconciliación.
"""

from typing import Callable, Optional

from app.api.v1.schemas.shopify_schemas import ShopifyRestOrder

EligibilityPredicate = Callable[[ShopifyRestOrder], bool]


def always_eligible(order: ShopifyRestOrder) -> bool:
    return True


class TagMarkerEligibility:
    """
    Un pedido es elegible si sus tags, en minúsculas, contienen el marcador.

    La búsqueda es por subcadena sobre el string completo de tags, así que el
    marcador ``samita-wholesale`` coincide con ``"Wholesale, SAMITA-Wholesale"``.
    """

    def __init__(self, marker: str):
        if not marker or not marker.strip():
            raise ValueError("El marcador de tags no puede estar vacío")
        self.marker = marker.strip().lower()

    def __call__(self, order: ShopifyRestOrder) -> bool:
        return self.marker in (order.tags or "").lower()

    def __repr__(self):
        return f"TagMarkerEligibility(marker='{self.marker}')"


def build_eligibility_predicate(marker: Optional[str]) -> EligibilityPredicate:
    """
    Construye el predicado a partir de la configuración.

    Args:
        marker: Valor de ORDER_TAG_MARKER; None desactiva el filtro

    Returns:
        EligibilityPredicate: Predicado a aplicar sobre el pedido completo
    """
    if marker:
        return TagMarkerEligibility(marker)
    return always_eligible
