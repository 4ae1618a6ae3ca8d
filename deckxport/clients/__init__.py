from deckxport.clients.moxfield import MoxfieldApiError, MoxfieldClient
from deckxport.clients.rate_limiter import RateLimiter
from deckxport.clients.scryfall import (
    CardIdentifier,
    CollectionResult,
    FailedBatch,
    ScryfallApiError,
    ScryfallClient,
    card_names_to_identifiers,
    chunk_identifiers,
)
from deckxport.clients.tagger import TaggerApiError, TaggerClient, extract_oracle_tags

__all__ = [
    "CardIdentifier",
    "CollectionResult",
    "FailedBatch",
    "MoxfieldApiError",
    "MoxfieldClient",
    "RateLimiter",
    "ScryfallApiError",
    "ScryfallClient",
    "TaggerApiError",
    "TaggerClient",
    "card_names_to_identifiers",
    "chunk_identifiers",
    "extract_oracle_tags",
]
