"""
Cache-first Scryfall lookups outside of a deck import.

Single cards and bulk-data file metadata are served from the persistent cache
while valid and fetched from Scryfall otherwise.
"""

import logging
from typing import Any

from deckxport.cache.card_cache import (
    cache_cards,
    get_bulk_metadata,
    get_card_by_id,
    save_bulk_metadata,
)
from deckxport.cache.store import PersistentCache
from deckxport.clients.scryfall import PREFERRED_BULK_TYPES, ScryfallClient

logger = logging.getLogger(__name__)


async def get_card(
    cache: PersistentCache, client: ScryfallClient, scryfall_id: str
) -> dict[str, Any]:
    """
    A Scryfall card record by id.

    A fetched record is cached by id and by name, so later imports find it too.

    Raises:
        ScryfallApiError: If the card is not cached and cannot be fetched
    """
    cached = await get_card_by_id(cache, scryfall_id)
    if cached is not None:
        logger.debug("Card %s served from cache", scryfall_id)
        return cached

    record = await client.fetch_card(scryfall_id)
    await cache_cards(cache, [record])
    return record


async def get_default_bulk_data(
    cache: PersistentCache, client: ScryfallClient
) -> dict[str, Any] | None:
    """
    Metadata of the preferred bulk-data file.

    Returns the cached metadata while valid, preferring ``default_cards``;
    otherwise asks Scryfall and caches the answer.

    Returns:
        Bulk file metadata, or None if Scryfall offers no usable file

    Raises:
        ScryfallApiError: If nothing is cached and the listing cannot be fetched
    """
    for bulk_type in PREFERRED_BULK_TYPES:
        cached = await get_bulk_metadata(cache, bulk_type)
        if cached is not None:
            return cached

    metadata = await client.get_default_bulk_data()
    if metadata is None:
        logger.warning("Scryfall lists none of the bulk files %s", ", ".join(PREFERRED_BULK_TYPES))
        return None

    await save_bulk_metadata(cache, metadata)
    logger.info(
        "Cached %s bulk metadata (updated %s)", metadata["type"], metadata.get("updated_at")
    )
    return metadata
