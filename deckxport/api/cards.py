"""
Card lookup endpoints.

Scryfall search, single cards by id, and bulk-data file metadata. Cards and
bulk metadata are served from the persistent cache while valid.
"""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field

from deckxport.api.dependencies import get_cache, get_scryfall_client
from deckxport.cache.store import PersistentCache
from deckxport.clients.scryfall import ScryfallApiError, ScryfallClient
from deckxport.services.card_lookup import get_card, get_default_bulk_data

router = APIRouter(prefix="/cards", tags=["cards"])


class CardSearchResponse(BaseModel):
    """One page of search results."""

    query: str
    page: int
    total_cards: int
    has_more: bool
    cards: list[dict[str, Any]] = Field(default_factory=list)


class BulkDataResponse(BaseModel):
    type: str
    download_uri: str | None = None
    updated_at: str | None = None
    size: int | None = None


def _upstream_error(e: ScryfallApiError) -> HTTPException:
    if e.status_code in (status.HTTP_400_BAD_REQUEST, status.HTTP_404_NOT_FOUND):
        return HTTPException(status_code=e.status_code, detail=str(e))
    return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))


@router.get("/search", response_model=CardSearchResponse)
async def search_cards(
    client: Annotated[ScryfallClient, Depends(get_scryfall_client)],
    q: Annotated[str, Query(min_length=1, description="Scryfall search syntax")],
    page: Annotated[int, Query(ge=1)] = 1,
) -> CardSearchResponse:
    """Search Scryfall. An invalid query is a 400; no matches is an empty page."""
    try:
        listing = await client.search_cards(q, page=page)
    except ScryfallApiError as e:
        raise _upstream_error(e) from e

    return CardSearchResponse(
        query=q,
        page=page,
        total_cards=int(listing.get("total_cards") or len(listing["data"])),
        has_more=bool(listing.get("has_more")),
        cards=listing["data"],
    )


@router.get("/bulk-data", response_model=BulkDataResponse)
async def bulk_data(
    cache: Annotated[PersistentCache, Depends(get_cache)],
    client: Annotated[ScryfallClient, Depends(get_scryfall_client)],
) -> BulkDataResponse:
    """Metadata of the preferred Scryfall bulk-data file."""
    try:
        metadata = await get_default_bulk_data(cache, client)
    except ScryfallApiError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e)) from e

    if metadata is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="No usable bulk data file listed"
        )

    return BulkDataResponse(
        type=metadata["type"],
        download_uri=metadata.get("download_uri"),
        updated_at=metadata.get("updated_at"),
        size=metadata.get("size"),
    )


@router.get("/{scryfall_id}")
async def card_by_id(
    scryfall_id: str,
    cache: Annotated[PersistentCache, Depends(get_cache)],
    client: Annotated[ScryfallClient, Depends(get_scryfall_client)],
) -> dict[str, Any]:
    """A Scryfall card record by id."""
    try:
        return await get_card(cache, client, scryfall_id)
    except ScryfallApiError as e:
        raise _upstream_error(e) from e
