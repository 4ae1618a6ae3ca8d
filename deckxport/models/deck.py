"""
Moxfield deck payload shapes and the normalized deck they resolve to.

Moxfield has served two response layouts over time:
- v2: boards are top-level keys (``mainboard``, ``sideboard`` ...) keyed by card name
- v3: boards live under ``boards.<board>.cards`` keyed by Moxfield card id

Both are resolved once into a NormalizedDeck; nothing downstream looks at the
raw shapes.
"""

from dataclasses import dataclass, field
from typing import Any

from deckxport.models.card_aggregate import Board


@dataclass(frozen=True)
class V2DeckPayload:
    """Flat, name-keyed Moxfield deck response."""

    raw: dict[str, Any]


@dataclass(frozen=True)
class V3DeckPayload:
    """Nested, id-keyed ``boards`` Moxfield deck response."""

    raw: dict[str, Any]


DeckPayload = V2DeckPayload | V3DeckPayload


@dataclass(frozen=True, slots=True)
class DeckEntry:
    """
    One card line of a deck, as reported by Moxfield.

    Attributes:
        name: Card name
        quantity: Number of copies
        board: Deck section
        moxfield_id: Moxfield's id for the card, if reported
        scryfall_id: Scryfall id Moxfield associates with the printing, if reported
        set_code: Set code of the chosen printing
        set_name: Set name of the chosen printing
        collector_number: Collector number of the chosen printing
        card_data: Moxfield's partial card details (mana cost, type line ...)
    """

    name: str
    quantity: int
    board: Board
    moxfield_id: str | None = None
    scryfall_id: str | None = None
    set_code: str = ""
    set_name: str = ""
    collector_number: str = ""
    is_foil: bool = False
    is_alter: bool = False
    condition: str | None = None
    language: str | None = None
    card_data: dict[str, Any] = field(default_factory=dict)


@dataclass
class NormalizedDeck:
    """A Moxfield deck with every board flattened into entries."""

    name: str
    format: str | None
    author: str
    entries: list[DeckEntry] = field(default_factory=list)

    def unique_names(self) -> list[str]:
        """Distinct card names in first-seen order."""
        return list(dict.fromkeys(entry.name for entry in self.entries))
