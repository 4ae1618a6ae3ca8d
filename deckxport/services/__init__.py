"""
Deckxport services.

The deck aggregation pipeline and the pieces it is built from.
"""

from deckxport.services.card_lookup import get_card, get_default_bulk_data
from deckxport.services.circuit_breaker import CircuitBreaker
from deckxport.services.deck_aggregator import (
    CardCollectionSource,
    DeckAggregator,
    DeckSource,
    TagSource,
    aggregate_deck_data,
)
from deckxport.services.enrichment import create_initial_aggregate, enrich_with_scryfall_data
from deckxport.services.progress import (
    InvalidStageTransitionError,
    ProgressCallback,
    ProgressTracker,
)

__all__ = [
    "CardCollectionSource",
    "CircuitBreaker",
    "DeckAggregator",
    "DeckSource",
    "InvalidStageTransitionError",
    "ProgressCallback",
    "ProgressTracker",
    "TagSource",
    "aggregate_deck_data",
    "create_initial_aggregate",
    "enrich_with_scryfall_data",
    "get_card",
    "get_default_bulk_data",
]
