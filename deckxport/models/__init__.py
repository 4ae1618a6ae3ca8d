from deckxport.models.card_aggregate import (
    Board,
    CardAggregate,
    DeckImportProgress,
    DeckImportResult,
    ImportErrorEntry,
    ImportStage,
)
from deckxport.models.deck import (
    DeckEntry,
    DeckPayload,
    NormalizedDeck,
    V2DeckPayload,
    V3DeckPayload,
)
from deckxport.models.tagger import TaggerCard, TaggerTag, Tagging

__all__ = [
    "Board",
    "CardAggregate",
    "DeckEntry",
    "DeckImportProgress",
    "DeckImportResult",
    "DeckPayload",
    "ImportErrorEntry",
    "ImportStage",
    "NormalizedDeck",
    "TaggerCard",
    "TaggerTag",
    "Tagging",
    "V2DeckPayload",
    "V3DeckPayload",
]
