"""Tests for card-domain cache helpers."""

from typing import Any

from deckxport.cache.card_cache import (
    cache_cards,
    cache_oracle_tags,
    get_bulk_metadata,
    get_card_by_id,
    get_cards_by_name,
    get_oracle_tags,
    name_key,
    record_name_keys,
    save_bulk_metadata,
    set_number_key,
)
from deckxport.cache.store import CacheNamespace, PersistentCache
from deckxport.config import ORACLE_TAGS_CACHE_TTL_SECONDS


class TestKeys:
    def test_name_key_ignores_case_and_whitespace(self) -> None:
        assert name_key("  Sol Ring ") == name_key("sol ring")

    def test_set_number_key(self) -> None:
        """Printing keys look like ``tdc_312``."""
        assert set_number_key("TDC", "312") == "tdc_312"

    def test_record_name_keys_single_face(self) -> None:
        assert record_name_keys({"name": "Sol Ring"}) == ["sol ring"]

    def test_record_name_keys_multi_face(self) -> None:
        """Multi-face cards are reachable by full name and by front face."""
        keys = record_name_keys({"name": "Delver of Secrets // Insectile Aberration"})

        assert keys == ["delver of secrets // insectile aberration", "delver of secrets"]

    def test_record_name_keys_nameless(self) -> None:
        assert record_name_keys({"id": "abc"}) == []


class TestCardRecords:
    async def test_cache_cards_by_id_and_name(
        self, cache: PersistentCache, sol_ring_record: dict[str, Any]
    ) -> None:
        """A cached record can be found by id and by name."""
        written = await cache_cards(cache, [sol_ring_record])

        assert written == 1
        assert await get_card_by_id(cache, sol_ring_record["id"]) == sol_ring_record
        assert await get_cards_by_name(cache, ["Sol Ring"]) == {"Sol Ring": sol_ring_record}

    async def test_lookup_keeps_requested_spelling(
        self, cache: PersistentCache, sol_ring_record: dict[str, Any]
    ) -> None:
        """Results are keyed by the names as requested."""
        await cache_cards(cache, [sol_ring_record])

        found = await get_cards_by_name(cache, ["SOL RING", "Mana Crypt"])

        assert found == {"SOL RING": sol_ring_record}

    async def test_front_face_lookup(
        self, cache: PersistentCache, delver_record: dict[str, Any]
    ) -> None:
        """Decks listing only the front face still hit the cache."""
        await cache_cards(cache, [delver_record])

        found = await get_cards_by_name(cache, ["Delver of Secrets"])

        assert found["Delver of Secrets"]["id"] == delver_record["id"]

    async def test_later_record_wins(self, cache: PersistentCache) -> None:
        """The most recently written record owns a name."""
        await cache_cards(cache, [{"id": "old", "name": "Sol Ring"}])
        await cache_cards(cache, [{"id": "new", "name": "Sol Ring"}])

        found = await get_cards_by_name(cache, ["Sol Ring"])

        assert found["Sol Ring"]["id"] == "new"

    async def test_by_id_and_by_name_are_separate(
        self, cache: PersistentCache, sol_ring_record: dict[str, Any]
    ) -> None:
        await cache_cards(cache, [sol_ring_record])

        assert await cache.get(CacheNamespace.CARDS_BY_ID, "sol ring") is None
        assert await cache.get(CacheNamespace.CARDS_BY_NAME, sol_ring_record["id"]) is None


class TestOracleTags:
    async def test_round_trip(self, cache: PersistentCache) -> None:
        await cache_oracle_tags(cache, "C21", "263", "Sol Ring", ["mana-rock", "ramp"])

        assert await get_oracle_tags(cache, "c21", "263") == ["mana-rock", "ramp"]

    async def test_empty_list_is_a_hit(self, cache: PersistentCache) -> None:
        """A card known to have no tags is cached as an empty list, not a miss."""
        await cache_oracle_tags(cache, "neo", "294", "Island", [])

        assert await get_oracle_tags(cache, "neo", "294") == []

    async def test_miss(self, cache: PersistentCache) -> None:
        assert await get_oracle_tags(cache, "neo", "1") is None

    async def test_expires_after_12_hours(self, cache: PersistentCache, clock) -> None:
        await cache_oracle_tags(cache, "c21", "263", "Sol Ring", ["mana-rock"])

        clock.advance(ORACLE_TAGS_CACHE_TTL_SECONDS)

        assert await get_oracle_tags(cache, "c21", "263") is None


class TestBulkMetadata:
    async def test_round_trip(self, cache: PersistentCache) -> None:
        metadata = {
            "type": "default_cards",
            "updated_at": "2024-01-01T10:00:00+00:00",
            "download_uri": "https://data.scryfall.io/default-cards.json",
        }
        await save_bulk_metadata(cache, metadata)

        assert await get_bulk_metadata(cache, "default_cards") == metadata
        assert await get_bulk_metadata(cache, "oracle_cards") is None
