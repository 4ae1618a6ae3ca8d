"""
CardAggregate construction and Scryfall merge.

Skeletons carry whatever partial card data Moxfield reports. Merging a
Scryfall record replaces the card-detail, visual, market and game field groups
as a whole from that one record; tag fields are never touched here.
"""

from dataclasses import replace
from typing import Any
from uuid import uuid4

from deckxport.models.card_aggregate import CardAggregate
from deckxport.models.deck import DeckEntry

# Separator Scryfall uses when joining face texts
FACE_TEXT_SEPARATOR = "\n//\n"


def placeholder_id(entry: DeckEntry) -> str:
    """Synthesized id for a card whose Scryfall id is not known yet."""
    return f"{entry.board.value}-{entry.name}-{uuid4().hex[:8]}"


def _str_or_none(value: Any) -> str | None:
    return None if value is None else str(value)


def _float(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def _moxfield_image_uris(card: dict[str, Any]) -> dict[str, str] | None:
    uris = {
        size: str(card[key])
        for size, key in (("normal", "image_normal"), ("large", "image_large"))
        if card.get(key)
    }
    return uris or None


def _clean_prices(prices: Any) -> dict[str, str] | None:
    """Non-null prices as strings (Scryfall reports missing prices as null)."""
    if not isinstance(prices, dict):
        return None
    cleaned = {currency: str(value) for currency, value in prices.items() if value is not None}
    return cleaned or None


def create_initial_aggregate(entry: DeckEntry) -> CardAggregate:
    """Build a skeleton aggregate from a deck entry."""
    card = entry.card_data

    return CardAggregate(
        id=entry.scryfall_id or placeholder_id(entry),
        name=entry.name,
        moxfield_id=entry.moxfield_id,
        scryfall_id=entry.scryfall_id,
        set=entry.set_code,
        set_name=entry.set_name,
        collector_number=entry.collector_number,
        quantity=entry.quantity,
        board=entry.board,
        is_foil=entry.is_foil,
        is_alter=entry.is_alter,
        condition=entry.condition,
        language=entry.language,
        mana_cost=_str_or_none(card.get("mana_cost")),
        cmc=_float(card.get("cmc")),
        type_line=str(card.get("type_line") or ""),
        oracle_text=_str_or_none(card.get("oracle_text")),
        power=_str_or_none(card.get("power")),
        toughness=_str_or_none(card.get("toughness")),
        loyalty=_str_or_none(card.get("loyalty")),
        colors=list(card.get("colors") or []),
        color_identity=list(card.get("color_identity") or []),
        image_uris=_moxfield_image_uris(card),
        prices=_clean_prices(card.get("prices")),
        rarity=str(card.get("rarity") or "common"),
    )


def _faces(record: dict[str, Any]) -> list[dict[str, Any]]:
    faces = record.get("card_faces")
    return [face for face in faces if isinstance(face, dict)] if isinstance(faces, list) else []


def _front_face_value(record: dict[str, Any], key: str) -> Any:
    """Top-level value, falling back to the front face for multi-face cards."""
    value = record.get(key)
    if value is None:
        faces = _faces(record)
        if faces:
            value = faces[0].get(key)
    return value


def image_uris_for(record: dict[str, Any]) -> dict[str, str] | None:
    uris = _front_face_value(record, "image_uris")
    return {size: str(uri) for size, uri in uris.items()} if isinstance(uris, dict) else None


def oracle_text_for(record: dict[str, Any]) -> str | None:
    """Oracle text, joining face texts for multi-face cards."""
    if record.get("oracle_text") is not None:
        return str(record["oracle_text"])

    texts = [str(face["oracle_text"]) for face in _faces(record) if face.get("oracle_text")]
    return FACE_TEXT_SEPARATOR.join(texts) if texts else None


def enrich_with_scryfall_data(aggregate: CardAggregate, record: dict[str, Any]) -> CardAggregate:
    """
    Return a copy of ``aggregate`` filled in from a Scryfall record.

    Deck context (quantity, board, finish, condition, language) and tag
    fields are kept. Print identity comes from the record, since that is the
    printing later tag lookups will describe.
    """
    scryfall_id = _str_or_none(record.get("id")) or aggregate.scryfall_id
    legalities = record.get("legalities")

    return replace(
        aggregate,
        id=scryfall_id or aggregate.id,
        scryfall_id=scryfall_id,
        oracle_id=_str_or_none(record.get("oracle_id")),
        set=str(record.get("set") or ""),
        set_name=str(record.get("set_name") or ""),
        collector_number=str(record.get("collector_number") or ""),
        mana_cost=_str_or_none(_front_face_value(record, "mana_cost")),
        cmc=_float(record.get("cmc")),
        type_line=str(record.get("type_line") or ""),
        oracle_text=oracle_text_for(record),
        power=_str_or_none(_front_face_value(record, "power")),
        toughness=_str_or_none(_front_face_value(record, "toughness")),
        loyalty=_str_or_none(_front_face_value(record, "loyalty")),
        colors=list(_front_face_value(record, "colors") or []),
        color_identity=list(record.get("color_identity") or []),
        image_uris=image_uris_for(record),
        prices=_clean_prices(record.get("prices")),
        legalities=dict(legalities) if isinstance(legalities, dict) else None,
        rarity=str(record.get("rarity") or "common"),
        artist=_str_or_none(record.get("artist")),
        flavor_text=_str_or_none(_front_face_value(record, "flavor_text")),
        released_at=_str_or_none(record.get("released_at")),
    )
