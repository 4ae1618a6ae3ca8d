"""End-to-end import through the real clients against mocked upstreams."""

import json
from typing import Any

import httpx
import respx

from deckxport.cache.card_cache import get_oracle_tags
from deckxport.cache.store import PersistentCache
from deckxport.models.card_aggregate import DeckImportProgress, ImportStage
from deckxport.services.deck_aggregator import aggregate_deck_data


def _collection(request: httpx.Request, records: dict[str, dict[str, Any]]) -> httpx.Response:
    identifiers = json.loads(request.content)["identifiers"]
    return httpx.Response(
        200,
        json={
            "object": "list",
            "data": [records[i["name"]] for i in identifiers if i["name"] in records],
            "not_found": [i for i in identifiers if i["name"] not in records],
        },
    )


class TestAggregateDeckData:
    @respx.mock
    async def test_imports_deck(
        self,
        cache: PersistentCache,
        v3_deck_response: dict[str, Any],
        sol_ring_record: dict[str, Any],
    ) -> None:
        """Moxfield, Scryfall and Tagger responses are fused into aggregates."""
        respx.get("https://api2.moxfield.com/v3/decks/all/abc123").mock(
            return_value=httpx.Response(200, json=v3_deck_response)
        )
        respx.post("https://api.scryfall.com/cards/collection").mock(
            side_effect=lambda request: _collection(request, {"Sol Ring": sol_ring_record})
        )
        respx.post("https://tagger.scryfall.com/graphql").mock(
            return_value=httpx.Response(
                200,
                json={
                    "data": {
                        "card": {
                            "name": "Sol Ring",
                            "taggings": [
                                {
                                    "status": "GOOD_STANDING",
                                    "tag": {
                                        "name": "mana-rock",
                                        "namespace": "card",
                                        "status": "GOOD_STANDING",
                                        "ancestorTags": [],
                                    },
                                }
                            ],
                        }
                    }
                },
            )
        )
        snapshots: list[DeckImportProgress] = []

        result = await aggregate_deck_data(
            "https://moxfield.com/decks/abc123", on_progress=snapshots.append, cache=cache
        )

        assert result.deck_name == "Artifact Ramp"
        assert len(result.cards) == 3
        sol_ring = next(card for card in result.cards if card.name == "Sol Ring")
        assert sol_ring.id == sol_ring_record["id"]
        assert sol_ring.oracle_tags == ["mana-rock"]
        urza = next(card for card in result.cards if card.name == "Urza, Lord High Artificer")
        assert urza.is_commander is True
        assert {e.card_name for e in result.errors_for_stage(ImportStage.ENRICH_CARDS)} == {
            "Island",
            "Urza, Lord High Artificer",
        }
        assert snapshots[-1].stage == ImportStage.COMPLETE
        assert await get_oracle_tags(cache, "c21", "263") == ["mana-rock"]
