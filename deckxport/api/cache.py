"""
Cache maintenance endpoints.

Inspect, sweep and clear the persistent card cache.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from deckxport.api.dependencies import get_cache
from deckxport.cache.store import CacheNamespace, PersistentCache

router = APIRouter(prefix="/cache", tags=["cache"])


class NamespaceStatsResponse(BaseModel):
    total: int
    valid: int
    expired: int
    oldest: float | None = None
    newest: float | None = None


class CacheStatsResponse(BaseModel):
    """Entry counts per namespace."""

    namespaces: dict[str, NamespaceStatsResponse]


class RemovedResponse(BaseModel):
    """Entries removed, per namespace where applicable."""

    removed: dict[str, int]
    total: int


@router.get("/stats", response_model=CacheStatsResponse)
async def cache_stats(
    cache: Annotated[PersistentCache, Depends(get_cache)],
) -> CacheStatsResponse:
    stats = await cache.stats()
    return CacheStatsResponse(
        namespaces={
            namespace.value: NamespaceStatsResponse(
                total=entry.total,
                valid=entry.valid,
                expired=entry.expired,
                oldest=entry.oldest,
                newest=entry.newest,
            )
            for namespace, entry in stats.items()
        }
    )


@router.post("/sweep", response_model=RemovedResponse)
async def sweep_cache(
    cache: Annotated[PersistentCache, Depends(get_cache)],
) -> RemovedResponse:
    """Delete expired entries in every namespace."""
    swept = await cache.sweep_all_expired()
    removed = {namespace.value: count for namespace, count in swept.items()}
    return RemovedResponse(removed=removed, total=sum(removed.values()))


@router.delete("", response_model=RemovedResponse)
async def clear_cache(
    cache: Annotated[PersistentCache, Depends(get_cache)],
    namespace: Annotated[CacheNamespace | None, Query()] = None,
) -> RemovedResponse:
    """
    Delete every entry, or every entry of one namespace.

    Valid and expired entries alike are removed.
    """
    count = await cache.clear(namespace)
    key = namespace.value if namespace else "all"
    return RemovedResponse(removed={key: count}, total=count)
