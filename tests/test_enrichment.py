"""Tests for aggregate construction and Scryfall merge."""

from typing import Any

from deckxport.models.card_aggregate import Board
from deckxport.models.deck import DeckEntry
from deckxport.services.enrichment import (
    create_initial_aggregate,
    enrich_with_scryfall_data,
    oracle_text_for,
)


def _entry(**overrides: Any) -> DeckEntry:
    fields: dict[str, Any] = {"name": "Sol Ring", "quantity": 1, "board": Board.MAINBOARD}
    fields.update(overrides)
    return DeckEntry(**fields)


class TestCreateInitialAggregate:
    def test_uses_scryfall_id_when_known(self) -> None:
        aggregate = create_initial_aggregate(_entry(scryfall_id="abc"))

        assert aggregate.id == "abc"
        assert aggregate.scryfall_id == "abc"

    def test_placeholder_id(self) -> None:
        """Unknown cards get a board-and-name placeholder id."""
        aggregate = create_initial_aggregate(_entry(board=Board.SIDEBOARD))

        assert aggregate.id.startswith("sideboard-Sol Ring-")
        assert aggregate.scryfall_id is None

    def test_placeholder_ids_are_unique(self) -> None:
        first = create_initial_aggregate(_entry())
        second = create_initial_aggregate(_entry())

        assert first.id != second.id

    def test_copies_deck_context(self) -> None:
        aggregate = create_initial_aggregate(
            _entry(
                quantity=2,
                board=Board.COMMANDER,
                is_foil=True,
                condition="NM",
                language="ja",
                set_code="c21",
                collector_number="263",
            )
        )

        assert aggregate.quantity == 2
        assert aggregate.is_commander is True
        assert aggregate.is_foil is True
        assert (aggregate.condition, aggregate.language) == ("NM", "ja")
        assert aggregate.has_print_identity is True

    def test_partial_moxfield_details(self) -> None:
        aggregate = create_initial_aggregate(
            _entry(
                card_data={
                    "mana_cost": "{1}",
                    "cmc": 1,
                    "type_line": "Artifact",
                    "color_identity": [],
                    "image_normal": "https://assets.moxfield.net/sol-ring.jpg",
                    "prices": {"usd": 1.5, "eur": None},
                }
            )
        )

        assert aggregate.mana_cost == "{1}"
        assert aggregate.cmc == 1.0
        assert aggregate.type_line == "Artifact"
        assert aggregate.image_uris == {"normal": "https://assets.moxfield.net/sol-ring.jpg"}
        assert aggregate.prices == {"usd": "1.5"}
        assert aggregate.oracle_tags == []
        assert aggregate.tagger_fetched is False

    def test_companion(self) -> None:
        assert create_initial_aggregate(_entry(board=Board.COMPANION)).is_companion is True


class TestEnrichWithScryfallData:
    def test_overwrites_card_fields(self, sol_ring_record: dict[str, Any]) -> None:
        skeleton = create_initial_aggregate(
            _entry(quantity=3, card_data={"type_line": "Old Type", "rarity": "rare"})
        )

        enriched = enrich_with_scryfall_data(skeleton, sol_ring_record)

        assert enriched.id == sol_ring_record["id"]
        assert enriched.oracle_id == sol_ring_record["oracle_id"]
        assert (enriched.set, enriched.collector_number) == ("c21", "263")
        assert enriched.type_line == "Artifact"
        assert enriched.rarity == "uncommon"
        assert enriched.oracle_text == "{T}: Add {C}{C}."
        assert enriched.image_uris == sol_ring_record["image_uris"]
        assert enriched.prices == {"usd": "1.25", "eur": "0.90"}
        assert enriched.legalities == {"commander": "legal", "vintage": "restricted"}
        assert enriched.artist == "Mike Bierek"

    def test_keeps_deck_context(self, sol_ring_record: dict[str, Any]) -> None:
        skeleton = create_initial_aggregate(
            _entry(quantity=3, board=Board.SIDEBOARD, is_foil=True, moxfield_id="mx-sol")
        )

        enriched = enrich_with_scryfall_data(skeleton, sol_ring_record)

        assert enriched.quantity == 3
        assert enriched.board == Board.SIDEBOARD
        assert enriched.is_foil is True
        assert enriched.moxfield_id == "mx-sol"
        assert enriched.name == "Sol Ring"

    def test_does_not_touch_tags(self, sol_ring_record: dict[str, Any]) -> None:
        skeleton = create_initial_aggregate(_entry())
        skeleton.oracle_tags = ["mana-rock"]

        enriched = enrich_with_scryfall_data(skeleton, sol_ring_record)

        assert enriched.oracle_tags == ["mana-rock"]

    def test_returns_new_aggregate(self, sol_ring_record: dict[str, Any]) -> None:
        skeleton = create_initial_aggregate(_entry())

        enriched = enrich_with_scryfall_data(skeleton, sol_ring_record)

        assert enriched is not skeleton
        assert skeleton.scryfall_id is None

    def test_missing_fields_do_not_keep_stale_values(self) -> None:
        """Fields absent from the record are cleared, not left from Moxfield."""
        skeleton = create_initial_aggregate(_entry(card_data={"mana_cost": "{9}"}))

        enriched = enrich_with_scryfall_data(skeleton, {"id": "x", "name": "Sol Ring"})

        assert enriched.mana_cost is None
        assert enriched.image_uris is None

    def test_multi_face_fallbacks(self, delver_record: dict[str, Any]) -> None:
        """Face-level fields come from the front face; oracle text joins both."""
        skeleton = create_initial_aggregate(_entry(name="Delver of Secrets"))

        enriched = enrich_with_scryfall_data(skeleton, delver_record)

        assert enriched.mana_cost == "{U}"
        assert enriched.power == "1"
        assert enriched.colors == ["U"]
        assert enriched.image_uris == {
            "normal": "https://cards.scryfall.io/normal/front/delver.jpg"
        }
        assert enriched.oracle_text == "Look at the top card of your library.\n//\nFlying"


class TestOracleText:
    def test_no_text(self) -> None:
        assert oracle_text_for({"name": "Vanilla"}) is None
