from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from importlib.metadata import version as pkg_version

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from deckxport.api import (
    cache_router,
    cards_router,
    decks_router,
    health_router,
    imports_router,
)
from deckxport.config import settings
from deckxport.db.database import init_db


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    await init_db()
    yield


app = FastAPI(
    title=settings.app_name,
    version=pkg_version("deckxport"),
    lifespan=lifespan,
)

app.include_router(cache_router)
app.include_router(cards_router)
app.include_router(decks_router)
app.include_router(health_router)
app.include_router(imports_router)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)
