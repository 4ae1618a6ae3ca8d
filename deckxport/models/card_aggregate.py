"""
Unified card record and deck import progress/result models.

A CardAggregate starts as a skeleton built from Moxfield data and is filled in
by the Scryfall and Tagger stages of the import pipeline.
"""

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any


class Board(str, Enum):
    """Deck section a card belongs to."""

    MAINBOARD = "mainboard"
    SIDEBOARD = "sideboard"
    COMMANDER = "commander"
    COMPANION = "companion"


class ImportStage(str, Enum):
    """Stages of a deck import, in pipeline order."""

    IDLE = "idle"
    FETCH_DECK = "fetch-deck"
    ENRICH_CARDS = "enrich-cards"
    ENRICH_TAGS = "enrich-tags"
    COMPLETE = "complete"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self in (ImportStage.COMPLETE, ImportStage.ERROR)


@dataclass
class CardAggregate:
    """
    Single source of truth for one deck entry.

    Card detail, visual, market and game fields are replaced as a group when
    Scryfall data is merged, so they always describe one Scryfall snapshot.
    Tag fields are owned by the Tagger stage only.
    """

    # Identity
    id: str
    name: str

    # Source references
    moxfield_id: str | None = None
    scryfall_id: str | None = None
    oracle_id: str | None = None

    # Printing (set + collector number are required for Tagger lookups)
    set: str = ""
    set_name: str = ""
    collector_number: str = ""

    # Deck context
    quantity: int = 1
    board: Board = Board.MAINBOARD
    is_foil: bool = False
    is_alter: bool = False
    condition: str | None = None
    language: str | None = None

    # Card details
    mana_cost: str | None = None
    cmc: float = 0.0
    type_line: str = ""
    oracle_text: str | None = None
    power: str | None = None
    toughness: str | None = None
    loyalty: str | None = None
    colors: list[str] = field(default_factory=list)
    color_identity: list[str] = field(default_factory=list)

    # Visual and market data
    image_uris: dict[str, str] | None = None
    prices: dict[str, str] | None = None

    # Game data and metadata
    legalities: dict[str, str] | None = None
    rarity: str = "common"
    artist: str | None = None
    flavor_text: str | None = None
    released_at: str | None = None

    # Oracle tags
    oracle_tags: list[str] = field(default_factory=list)
    tagger_fetched: bool = False
    tagger_error: str | None = None

    @property
    def is_commander(self) -> bool:
        return self.board == Board.COMMANDER

    @property
    def is_companion(self) -> bool:
        return self.board == Board.COMPANION

    @property
    def has_print_identity(self) -> bool:
        """True if set and collector number are both known."""
        return bool(self.set) and bool(self.collector_number)


@dataclass(frozen=True, slots=True)
class ImportErrorEntry:
    """A recoverable (or fatal) failure recorded during an import."""

    card_name: str
    stage: ImportStage
    error: str


@dataclass(frozen=True)
class DeckImportProgress:
    """
    Immutable progress snapshot delivered to progress callbacks.

    Attributes:
        stage: Current pipeline stage
        cards_processed: Units of work finished in the current stage
        total_cards: Number of deck entries being imported
        current_card: Name of the card most recently worked on
        errors: All errors recorded so far, in order
    """

    stage: ImportStage = ImportStage.IDLE
    cards_processed: int = 0
    total_cards: int = 0
    current_card: str | None = None
    errors: tuple[ImportErrorEntry, ...] = ()


@dataclass
class DeckImportResult:
    """Outcome of a completed import."""

    cards: list[CardAggregate]
    deck_name: str
    deck_author: str
    format: str | None = None
    errors: list[ImportErrorEntry] = field(default_factory=list)

    def card_count(self) -> int:
        """Total copies across all boards."""
        return sum(card.quantity for card in self.cards)

    def errors_for_stage(self, stage: ImportStage) -> list[ImportErrorEntry]:
        return [entry for entry in self.errors if entry.stage == stage]

    def to_dict(self) -> dict[str, Any]:
        """Plain-JSON representation for export collaborators."""
        return {
            "deck_name": self.deck_name,
            "deck_author": self.deck_author,
            "format": self.format,
            "cards": [{**asdict(card), "board": card.board.value} for card in self.cards],
            "errors": [
                {"card_name": e.card_name, "stage": e.stage.value, "error": e.error}
                for e in self.errors
            ],
        }
