from deckxport.parsers.moxfield import (
    DeckPayloadError,
    build_moxfield_public_url,
    extract_deck_id_from_url,
    is_valid_moxfield_url,
    load_deck,
    normalize_deck,
    parse_deck_payload,
    resolve_deck_reference,
    sanitize_deck_id,
)

__all__ = [
    "DeckPayloadError",
    "build_moxfield_public_url",
    "extract_deck_id_from_url",
    "is_valid_moxfield_url",
    "load_deck",
    "normalize_deck",
    "parse_deck_payload",
    "resolve_deck_reference",
    "sanitize_deck_id",
]
