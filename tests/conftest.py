from typing import Any

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from deckxport.cache.store import PersistentCache
from deckxport.clients.rate_limiter import RateLimiter
from deckxport.models.db import Base


class FakeClock:
    """Settable clock returning epoch seconds."""

    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
async def async_engine():
    """Create an in-memory SQLite engine for testing."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def cache(async_engine, clock: FakeClock) -> PersistentCache:
    """Cache backed by the in-memory engine, on the fake clock."""
    session_factory = async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)
    return PersistentCache(session_factory, clock=clock)


@pytest.fixture
def no_delay() -> RateLimiter:
    """Rate limiter that never waits."""
    return RateLimiter(0)


@pytest.fixture
def sol_ring_record() -> dict[str, Any]:
    """Scryfall record for Sol Ring."""
    return {
        "object": "card",
        "id": "5f8287b1-5bb6-5f4c-ad17-316a40d5bb0c",
        "oracle_id": "6ad8011d-3471-4369-9d68-b264cc027487",
        "name": "Sol Ring",
        "set": "c21",
        "set_name": "Commander 2021",
        "collector_number": "263",
        "mana_cost": "{1}",
        "cmc": 1.0,
        "type_line": "Artifact",
        "oracle_text": "{T}: Add {C}{C}.",
        "colors": [],
        "color_identity": [],
        "image_uris": {
            "normal": "https://cards.scryfall.io/normal/front/5/f/sol-ring.jpg",
            "large": "https://cards.scryfall.io/large/front/5/f/sol-ring.jpg",
        },
        "prices": {"usd": "1.25", "usd_foil": None, "eur": "0.90"},
        "legalities": {"commander": "legal", "vintage": "restricted"},
        "rarity": "uncommon",
        "artist": "Mike Bierek",
        "released_at": "2021-04-23",
    }


@pytest.fixture
def delver_record() -> dict[str, Any]:
    """Scryfall record for a double-faced card."""
    return {
        "object": "card",
        "id": "11bf83bb-c95b-4b4f-9a56-ce7a1816307a",
        "oracle_id": "c1a0a8b5-4d61-4b3f-86c2-4b6c4cc1c1b3",
        "name": "Delver of Secrets // Insectile Aberration",
        "set": "isd",
        "set_name": "Innistrad",
        "collector_number": "51",
        "cmc": 1.0,
        "type_line": "Creature — Human Wizard // Creature — Human Insect",
        "color_identity": ["U"],
        "card_faces": [
            {
                "name": "Delver of Secrets",
                "mana_cost": "{U}",
                "oracle_text": "Look at the top card of your library.",
                "power": "1",
                "toughness": "1",
                "colors": ["U"],
                "image_uris": {"normal": "https://cards.scryfall.io/normal/front/delver.jpg"},
            },
            {
                "name": "Insectile Aberration",
                "mana_cost": "",
                "oracle_text": "Flying",
                "power": "3",
                "toughness": "2",
                "colors": ["U"],
                "image_uris": {"normal": "https://cards.scryfall.io/normal/back/delver.jpg"},
            },
        ],
        "prices": {"usd": "0.50"},
        "legalities": {"legacy": "legal"},
        "rarity": "common",
    }


@pytest.fixture
def v3_deck_response() -> dict[str, Any]:
    """Moxfield deck in the nested ``boards`` layout."""
    return {
        "id": "abc123",
        "name": "Artifact Ramp",
        "format": "commander",
        "createdByUser": {"userName": "brewer"},
        "boards": {
            "mainboard": {
                "count": 2,
                "cards": {
                    "mx-sol": {
                        "quantity": 1,
                        "card": {
                            "id": "mx-sol",
                            "scryfall_id": "5f8287b1-5bb6-5f4c-ad17-316a40d5bb0c",
                            "name": "Sol Ring",
                            "set": "c21",
                            "cn": "263",
                            "mana_cost": "{1}",
                            "cmc": 1,
                            "type_line": "Artifact",
                        },
                    },
                    "mx-island": {
                        "quantity": 30,
                        "isFoil": True,
                        "card": {"id": "mx-island", "name": "Island", "set": "neo", "cn": "294"},
                    },
                },
            },
            "sideboard": {"count": 0, "cards": {}},
            "commanders": {
                "count": 1,
                "cards": {
                    "mx-urza": {
                        "quantity": 1,
                        "card": {
                            "id": "mx-urza",
                            "name": "Urza, Lord High Artificer",
                            "set": "mh1",
                            "cn": "75",
                        },
                    }
                },
            },
        },
    }


@pytest.fixture
def v2_deck_response() -> dict[str, Any]:
    """Moxfield deck in the flat, name-keyed layout."""
    return {
        "name": "Old Deck",
        "format": "legacy",
        "authors": [{"userName": "veteran"}],
        "mainboard": {
            "Brainstorm": {"quantity": 4, "card": {"name": "Brainstorm", "set": "ice"}},
            "Delver of Secrets": {"quantity": 4},
        },
        "sideboard": {
            "Force of Will": {
                "quantity": 2,
                "finish": "foil",
                "card": {"collectorNumber": "28", "set": "all", "setName": "Alliances"},
            }
        },
        "companions": {
            "Lurrus of the Dream-Den": {
                "quantity": 1,
                "card": {
                    "name": "Lurrus of the Dream-Den",
                    "set": "iko",
                    "collector_number": "226",
                },
            }
        },
    }
