from deckxport.db.database import (
    async_session_factory,
    create_cache_engine,
    create_session_factory,
    get_session,
    init_db,
)

__all__ = [
    "async_session_factory",
    "create_cache_engine",
    "create_session_factory",
    "get_session",
    "init_db",
]
