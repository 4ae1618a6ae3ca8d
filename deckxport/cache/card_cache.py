"""
Card-domain access to the persistent cache.

Scryfall records are cached twice: by Scryfall id and by name. Tagger oracle
tags are cached by ``{set}_{collector_number}``.
"""

import logging
from collections.abc import Iterable
from typing import Any

from deckxport.cache.store import CacheNamespace, PersistentCache

logger = logging.getLogger(__name__)

# Separator Scryfall uses between face names of multi-face cards
FACE_SEPARATOR = " // "


def name_key(name: str) -> str:
    """Cache key for a card name (case and surrounding whitespace ignored)."""
    return name.strip().casefold()


def set_number_key(set_code: str, collector_number: str) -> str:
    """Cache key for a printing, e.g. ``tdc_312``."""
    return f"{set_code.strip().lower()}_{collector_number.strip()}"


def record_name_keys(record: dict[str, Any]) -> list[str]:
    """
    Name keys a Scryfall record should be reachable under.

    Multi-face cards are also keyed by their front face, since decks often
    list them that way.
    """
    name = record.get("name") or ""
    if not name:
        return []

    keys = [name_key(name)]
    if FACE_SEPARATOR in name:
        keys.append(name_key(name.split(FACE_SEPARATOR, 1)[0]))
    return list(dict.fromkeys(keys))


async def cache_cards(cache: PersistentCache, records: Iterable[dict[str, Any]]) -> int:
    """
    Cache Scryfall records by id and by name.

    Returns the number of records written.
    """
    by_id: dict[str, dict[str, Any]] = {}
    by_name: dict[str, dict[str, Any]] = {}

    for record in records:
        card_id = record.get("id")
        if card_id:
            by_id[str(card_id)] = record
        for key in record_name_keys(record):
            # Later records win on collisions
            by_name[key] = record

    await cache.put_many(CacheNamespace.CARDS_BY_ID, by_id)
    await cache.put_many(CacheNamespace.CARDS_BY_NAME, by_name)
    return len(by_id)


async def get_card_by_id(cache: PersistentCache, scryfall_id: str) -> dict[str, Any] | None:
    entry = await cache.get(CacheNamespace.CARDS_BY_ID, scryfall_id)
    return entry.payload if entry else None


async def get_cards_by_name(
    cache: PersistentCache, names: Iterable[str]
) -> dict[str, dict[str, Any]]:
    """
    Look up valid cached records for card names.

    Returns:
        Dict mapping each requested name (as given) to its cached record
    """
    keys_by_name = {name: name_key(name) for name in names}
    found = await cache.get_many(CacheNamespace.CARDS_BY_NAME, keys_by_name.values())
    return {name: found[key] for name, key in keys_by_name.items() if key in found}


async def cache_oracle_tags(
    cache: PersistentCache,
    set_code: str,
    collector_number: str,
    card_name: str,
    tags: list[str],
) -> None:
    """Cache oracle tags for a printing; an empty list is a valid result."""
    key = set_number_key(set_code, collector_number)
    await cache.put(CacheNamespace.ORACLE_TAGS, key, {"card_name": card_name, "tags": tags})


async def get_oracle_tags(
    cache: PersistentCache, set_code: str, collector_number: str
) -> list[str] | None:
    """Cached oracle tags for a printing, or None on a miss."""
    entry = await cache.get(CacheNamespace.ORACLE_TAGS, set_number_key(set_code, collector_number))
    if entry is None:
        return None
    return list(entry.payload.get("tags", []))


async def save_bulk_metadata(cache: PersistentCache, metadata: dict[str, Any]) -> None:
    """Remember Scryfall bulk-data file metadata, keyed by its ``type``."""
    await cache.put(CacheNamespace.BULK_METADATA, metadata["type"], metadata)


async def get_bulk_metadata(cache: PersistentCache, bulk_type: str) -> dict[str, Any] | None:
    entry = await cache.get(CacheNamespace.BULK_METADATA, bulk_type)
    return entry.payload if entry else None
