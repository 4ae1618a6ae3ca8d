"""
Deck import endpoint.

Runs the full aggregation pipeline for one Moxfield deck and returns the
enriched cards with any per-card errors.
"""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from deckxport.api.dependencies import get_aggregator
from deckxport.clients.moxfield import MoxfieldApiError
from deckxport.parsers.moxfield import DeckPayloadError, resolve_deck_reference
from deckxport.services.deck_aggregator import DeckAggregator

router = APIRouter(prefix="/imports", tags=["imports"])


class ImportRequest(BaseModel):
    """Request model for importing a deck."""

    deck: str = Field(
        ...,
        min_length=1,
        description="Moxfield deck URL or deck id",
        examples=["https://moxfield.com/decks/abc123"],
    )


class ImportErrorResponse(BaseModel):
    card_name: str
    stage: str
    error: str


class ImportResponse(BaseModel):
    """Response model for a completed import."""

    deck_name: str
    deck_author: str
    format: str | None = None
    card_count: int
    cards: list[dict[str, Any]] = Field(default_factory=list)
    errors: list[ImportErrorResponse] = Field(default_factory=list)


@router.post("", response_model=ImportResponse)
async def import_deck(
    request: ImportRequest,
    aggregator: Annotated[DeckAggregator, Depends(get_aggregator)],
) -> ImportResponse:
    """
    Import and enrich a deck.

    Card-level failures are reported in ``errors``; only a deck that cannot be
    fetched fails the request: 400 for a malformed reference, 404 if Moxfield
    does not have the deck, 502 if Moxfield is unreachable or its response
    is unusable.
    """
    try:
        deck_id = resolve_deck_reference(request.deck)
    except DeckPayloadError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e

    try:
        result = await aggregator.aggregate_deck(deck_id)
    except MoxfieldApiError as e:
        code = status.HTTP_404_NOT_FOUND if e.is_not_found else status.HTTP_502_BAD_GATEWAY
        raise HTTPException(status_code=code, detail=str(e)) from e
    except DeckPayloadError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e)) from e

    data = result.to_dict()
    return ImportResponse(
        deck_name=data["deck_name"],
        deck_author=data["deck_author"],
        format=data["format"],
        card_count=result.card_count(),
        cards=data["cards"],
        errors=[ImportErrorResponse(**entry) for entry in data["errors"]],
    )
