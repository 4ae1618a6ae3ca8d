"""FastAPI dependencies shared by the routers."""

from collections.abc import AsyncGenerator

from deckxport.cache.store import PersistentCache
from deckxport.clients.moxfield import MoxfieldClient
from deckxport.clients.scryfall import ScryfallClient
from deckxport.clients.tagger import TaggerClient
from deckxport.db.database import async_session_factory, engine
from deckxport.services.deck_aggregator import DeckAggregator

# The cache is shared by every request; its tables are created at startup
_cache = PersistentCache(async_session_factory, engine=engine)


def get_cache() -> PersistentCache:
    return _cache


async def get_aggregator() -> AsyncGenerator[DeckAggregator, None]:
    """Aggregator with fresh upstream clients, closed after the request."""
    async with (
        MoxfieldClient() as moxfield,
        ScryfallClient() as scryfall,
        TaggerClient() as tagger,
    ):
        yield DeckAggregator(get_cache(), moxfield, scryfall, tagger)


async def get_scryfall_client() -> AsyncGenerator[ScryfallClient, None]:
    async with ScryfallClient() as client:
        yield client


async def get_moxfield_client() -> AsyncGenerator[MoxfieldClient, None]:
    async with MoxfieldClient() as client:
        yield client
