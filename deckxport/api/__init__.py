from deckxport.api.cache import router as cache_router
from deckxport.api.cards import router as cards_router
from deckxport.api.decks import router as decks_router
from deckxport.api.health import router as health_router
from deckxport.api.imports import router as imports_router

__all__ = [
    "cache_router",
    "cards_router",
    "decks_router",
    "health_router",
    "imports_router",
]
