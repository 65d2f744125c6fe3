"""
Utilidades para ``note_attributes`` de pedidos y draft orders.

Los atributos que la app de entregas (Zapiet) escribe en el draft order no
se copian solos al pedido creado a partir de él; estas funciones filtran los
atributos relevantes del draft y los combinan con los del pedido.
"""

from typing import Iterable, List, Optional

from app.api.v1.schemas.shopify_schemas import NoteAttribute

ZAPIET_ATTRIBUTE_NAMES = frozenset({"Delivery-Location-Id", "Delivery-Date", "Checkout-Method"})


def filter_note_attributes(
    attributes: Iterable[NoteAttribute], allowed_names: Optional[Iterable[str]] = None
) -> List[NoteAttribute]:
    """
    Conserva solo los atributos cuyo nombre está en la lista permitida.

    Args:
        attributes: Atributos de origen (normalmente los del draft order)
        allowed_names: Nombres permitidos (por defecto los de Zapiet)

    Returns:
        List[NoteAttribute]: Atributos permitidos, en su orden original
    """
    allowed = ZAPIET_ATTRIBUTE_NAMES if allowed_names is None else frozenset(allowed_names)
    return [attribute for attribute in attributes if attribute.name and attribute.name in allowed]


def merge_note_attributes(
    existing: Iterable[NoteAttribute], incoming: Iterable[NoteAttribute]
) -> List[NoteAttribute]:
    """
    Combina atributos por nombre (upsert).

    Los atributos existentes mantienen su orden y posición; un atributo
    entrante con un nombre ya presente sobrescribe el valor en esa posición,
    y uno con nombre nuevo se agrega al final. Los atributos sin nombre no se
    indexan ni se copian. Un valor entrante nulo se escribe como "".

    Args:
        existing: Atributos actuales del pedido
        incoming: Atributos a aplicar

    Returns:
        List[NoteAttribute]: Nueva lista combinada (las entradas no se mutan)
    """
    merged = list(existing)
    positions = {}
    for index, attribute in enumerate(merged):
        if attribute.name:
            positions[attribute.name] = index

    for attribute in incoming:
        if not attribute.name:
            continue
        updated = NoteAttribute(name=attribute.name, value=attribute.value if attribute.value is not None else "")
        index = positions.get(attribute.name)
        if index is None:
            positions[attribute.name] = len(merged)
            merged.append(updated)
        else:
            merged[index] = updated

    return merged


def note_attributes_differ(current: Iterable[NoteAttribute], proposed: Iterable[NoteAttribute]) -> bool:
    """Comparación estructural, sensible al orden y a los valores."""
    return [attribute.model_dump() for attribute in current] != [attribute.model_dump() for attribute in proposed]
