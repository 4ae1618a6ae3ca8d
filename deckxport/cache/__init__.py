from deckxport.cache.card_cache import (
    cache_cards,
    cache_oracle_tags,
    get_bulk_metadata,
    get_card_by_id,
    get_cards_by_name,
    get_oracle_tags,
    name_key,
    save_bulk_metadata,
    set_number_key,
)
from deckxport.cache.store import (
    DEFAULT_TTLS,
    CacheEntry,
    CacheNamespace,
    NamespaceStats,
    PersistentCache,
)

__all__ = [
    "CacheEntry",
    "CacheNamespace",
    "DEFAULT_TTLS",
    "NamespaceStats",
    "PersistentCache",
    "cache_cards",
    "cache_oracle_tags",
    "get_bulk_metadata",
    "get_card_by_id",
    "get_cards_by_name",
    "get_oracle_tags",
    "name_key",
    "save_bulk_metadata",
    "set_number_key",
]
