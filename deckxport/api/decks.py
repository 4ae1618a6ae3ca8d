"""
Moxfield deck listing endpoints.

Lists a user's public decks so one can be picked for import.
"""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field

from deckxport.api.dependencies import get_moxfield_client
from deckxport.clients.moxfield import MAX_USER_DECKS_PAGE_SIZE, MoxfieldApiError, MoxfieldClient
from deckxport.parsers.moxfield import build_moxfield_public_url

router = APIRouter(prefix="/decks", tags=["decks"])


class DeckSummaryResponse(BaseModel):
    """A deck as listed on a user's profile."""

    deck_id: str
    name: str
    format: str | None = None
    url: str


class UserDecksResponse(BaseModel):
    """Response model for one page of a user's decks."""

    username: str
    page: int
    total_results: int
    total_pages: int
    decks: list[DeckSummaryResponse] = Field(default_factory=list)


def _summary(deck: dict[str, Any]) -> DeckSummaryResponse | None:
    deck_id = deck.get("publicId") or deck.get("id")
    if not deck_id:
        return None
    return DeckSummaryResponse(
        deck_id=str(deck_id),
        name=str(deck.get("name") or "Untitled Deck"),
        format=deck.get("format"),
        url=deck.get("publicUrl") or build_moxfield_public_url(str(deck_id)),
    )


@router.get("/users/{username}", response_model=UserDecksResponse)
async def list_user_decks(
    username: str,
    client: Annotated[MoxfieldClient, Depends(get_moxfield_client)],
    page_size: Annotated[int, Query(ge=1, le=MAX_USER_DECKS_PAGE_SIZE)] = 20,
    page: Annotated[int, Query(ge=1)] = 1,
) -> UserDecksResponse:
    """
    One page of a user's public decks.

    404 if Moxfield does not know the user, 502 if Moxfield is unreachable.
    """
    try:
        listing = await client.fetch_user_decks(username, page_size=page_size, page=page)
    except MoxfieldApiError as e:
        code = status.HTTP_404_NOT_FOUND if e.is_not_found else status.HTTP_502_BAD_GATEWAY
        raise HTTPException(status_code=code, detail=str(e)) from e

    decks: list[DeckSummaryResponse] = []
    entries = listing.get("data")
    for deck in entries if isinstance(entries, list) else []:
        summary = _summary(deck) if isinstance(deck, dict) else None
        if summary is not None:
            decks.append(summary)

    return UserDecksResponse(
        username=username,
        page=int(listing.get("pageNumber") or page),
        total_results=int(listing.get("totalResults") or len(decks)),
        total_pages=int(listing.get("totalPages") or 1),
        decks=decks,
    )
