"""
Moxfield deck payload parsing.

Resolves a raw deck response into a NormalizedDeck, whichever of the two
historical layouts it uses, and turns deck URLs into deck ids.
"""

import re
from typing import Any

from deckxport.models.card_aggregate import Board
from deckxport.models.deck import (
    DeckEntry,
    DeckPayload,
    NormalizedDeck,
    V2DeckPayload,
    V3DeckPayload,
)

MOXFIELD_DECK_URL_PATTERN = re.compile(r"moxfield\.com/decks/([a-zA-Z0-9_-]+)")
DECK_ID_PATTERN = re.compile(r"^[a-zA-Z0-9_-]+$")

# Response board key -> Board; Moxfield has used both companion spellings
BOARD_KEYS: dict[str, Board] = {
    "mainboard": Board.MAINBOARD,
    "sideboard": Board.SIDEBOARD,
    "commanders": Board.COMMANDER,
    "companion": Board.COMPANION,
    "companions": Board.COMPANION,
}

UNKNOWN_AUTHOR = "Unknown"
UNKNOWN_CARD = "Unknown Card"


class DeckPayloadError(ValueError):
    """Raised when a deck response matches neither known layout."""

    pass


# --- Deck references ---


def extract_deck_id_from_url(url: str) -> str | None:
    """Deck id from a Moxfield deck URL, or None if it isn't one."""
    match = MOXFIELD_DECK_URL_PATTERN.search(url)
    return match.group(1) if match else None


def is_valid_moxfield_url(url: str) -> bool:
    return MOXFIELD_DECK_URL_PATTERN.search(url) is not None


def sanitize_deck_id(deck_id: str) -> str | None:
    """Trimmed deck id, or None if it has characters Moxfield ids never use."""
    trimmed = deck_id.strip()
    return trimmed if DECK_ID_PATTERN.match(trimmed) else None


def build_moxfield_public_url(deck_id: str) -> str:
    return f"https://moxfield.com/decks/{deck_id}"


def resolve_deck_reference(reference: str) -> str:
    """
    Turn a deck URL or bare id into a deck id.

    Raises:
        DeckPayloadError: If the reference is neither
    """
    deck_id = extract_deck_id_from_url(reference) or sanitize_deck_id(reference)
    if not deck_id:
        raise DeckPayloadError(f"Not a Moxfield deck URL or id: {reference!r}")
    return deck_id


# --- Payload shapes ---


def parse_deck_payload(raw: Any) -> DeckPayload:
    """
    Classify a raw deck response.

    The nested ``boards`` layout wins when both are present.

    Raises:
        DeckPayloadError: If the response has no recognizable boards
    """
    if not isinstance(raw, dict):
        raise DeckPayloadError("Deck response is not an object")

    if isinstance(raw.get("boards"), dict):
        return V3DeckPayload(raw)

    if any(isinstance(raw.get(key), dict) for key in BOARD_KEYS):
        return V2DeckPayload(raw)

    raise DeckPayloadError("Deck response has no boards")


def normalize_deck(payload: DeckPayload) -> NormalizedDeck:
    """Flatten every board of a classified payload into deck entries."""
    raw = payload.raw
    entries: list[DeckEntry] = []

    for board_key, board in BOARD_KEYS.items():
        if isinstance(payload, V3DeckPayload):
            section = raw["boards"].get(board_key)
            cards = section.get("cards") if isinstance(section, dict) else None
        else:
            cards = raw.get(board_key)

        if not isinstance(cards, dict):
            continue

        for key, item in cards.items():
            if isinstance(item, dict):
                entries.append(
                    _parse_entry(item, board, key, keyed_by_name=isinstance(payload, V2DeckPayload))
                )

    return NormalizedDeck(
        name=str(raw.get("name") or "Untitled Deck"),
        format=raw.get("format"),
        author=_author(raw),
        entries=entries,
    )


def load_deck(raw: Any) -> NormalizedDeck:
    """Classify and normalize in one step."""
    return normalize_deck(parse_deck_payload(raw))


def _author(raw: dict[str, Any]) -> str:
    user = raw.get("createdByUser")
    if isinstance(user, dict) and user.get("userName"):
        return str(user["userName"])

    authors = raw.get("authors")
    if isinstance(authors, list) and authors and isinstance(authors[0], dict):
        name = authors[0].get("userName")
        if name:
            return str(name)

    return UNKNOWN_AUTHOR


def _first(*values: Any) -> str:
    """First non-empty value as a string, else empty string."""
    for value in values:
        if value not in (None, ""):
            return str(value)
    return ""


def _parse_entry(item: dict[str, Any], board: Board, key: str, *, keyed_by_name: bool) -> DeckEntry:
    card = item.get("card")
    if not isinstance(card, dict):
        card = {}

    name = _first(card.get("name"), key if keyed_by_name else None) or UNKNOWN_CARD

    try:
        quantity = int(item.get("quantity", 1))
    except (TypeError, ValueError):
        quantity = 1

    return DeckEntry(
        name=name,
        quantity=quantity,
        board=board,
        moxfield_id=_first(card.get("id"), None if keyed_by_name else key) or None,
        scryfall_id=_first(card.get("scryfall_id"), card.get("scryfallId")) or None,
        set_code=_first(item.get("set"), card.get("set")),
        set_name=_first(item.get("setName"), card.get("setName"), card.get("set_name")),
        collector_number=_first(
            item.get("collectorNumber"),
            card.get("collectorNumber"),
            card.get("cn"),
            card.get("collector_number"),
        ),
        is_foil=bool(item.get("isFoil")) or item.get("finish") == "foil",
        is_alter=bool(item.get("isAlter")),
        condition=item.get("condition"),
        language=item.get("language"),
        card_data=card,
    )
