"""
Scryfall API client.

Fetches authoritative card records. The collection endpoint accepts at most
MAX_COLLECTION_SIZE identifiers per call; ``fetch_collection_batched`` splits
larger requests into concurrent chunks and merges their results.

API docs: https://scryfall.com/docs/api/cards/collection
"""

import asyncio
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

import httpx

from deckxport.clients.base import ApiClient
from deckxport.clients.rate_limiter import RateLimiter
from deckxport.config import MAX_COLLECTION_SIZE, SCRYFALL_REQUEST_DELAY_SECONDS, settings

logger = logging.getLogger(__name__)

# One of {id}, {name}, {name, set}, {set, collector_number}
CardIdentifier = dict[str, str]

# Bulk file types in order of preference
PREFERRED_BULK_TYPES = ("default_cards", "oracle_cards")


class ScryfallApiError(Exception):
    """Raised when a Scryfall request fails or is rejected before sending."""

    def __init__(self, message: str, status_code: int | None = None, details: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.details = details


@dataclass
class FailedBatch:
    """A collection chunk whose request failed."""

    identifiers: list[CardIdentifier]
    error: ScryfallApiError


@dataclass
class CollectionResult:
    """
    Merged outcome of one or more collection requests.

    Attributes:
        found: Card records returned by Scryfall
        not_found: Identifiers Scryfall could not resolve
        warnings: Warnings reported by Scryfall
        failed_batches: Chunks whose request failed outright
    """

    found: list[dict[str, Any]] = field(default_factory=list)
    not_found: list[CardIdentifier] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    failed_batches: list[FailedBatch] = field(default_factory=list)

    @property
    def total_cards(self) -> int:
        return len(self.found)

    @property
    def all_failed(self) -> bool:
        """True if every chunk failed (nothing was resolved either way)."""
        return bool(self.failed_batches) and not self.found and not self.not_found

    def merge(self, other: "CollectionResult") -> None:
        self.found.extend(other.found)
        self.not_found.extend(other.not_found)
        self.warnings.extend(other.warnings)
        self.failed_batches.extend(other.failed_batches)


def card_names_to_identifiers(names: Iterable[str]) -> list[CardIdentifier]:
    return [{"name": name} for name in names]


def chunk_identifiers(
    identifiers: list[CardIdentifier], size: int = MAX_COLLECTION_SIZE
) -> list[list[CardIdentifier]]:
    """Split identifiers into contiguous chunks of at most ``size``."""
    return [identifiers[i : i + size] for i in range(0, len(identifiers), size)]


class ScryfallClient(ApiClient):
    """Rate-limited Scryfall client."""

    def __init__(
        self,
        base_url: str | None = None,
        *,
        http_client: httpx.AsyncClient | None = None,
        rate_limiter: RateLimiter | None = None,
    ) -> None:
        super().__init__(
            base_url or settings.scryfall_api_base,
            request_delay=SCRYFALL_REQUEST_DELAY_SECONDS,
            http_client=http_client,
            rate_limiter=rate_limiter,
        )

    async def _send(self, method: str, path: str, action: str, **kwargs: Any) -> Any:
        """
        Make a request and decode its JSON body.

        Raises:
            ScryfallApiError: On network failure, non-2xx status, or bad JSON
        """
        try:
            response = await self._request(method, f"{self.base_url}{path}", **kwargs)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            raise ScryfallApiError(
                f"Failed to {action}: HTTP {e.response.status_code}",
                status_code=e.response.status_code,
                details=e.response.text,
            ) from e
        except httpx.RequestError as e:
            raise ScryfallApiError(f"Network error trying to {action}: {e}") from e
        except ValueError as e:
            raise ScryfallApiError(f"Invalid JSON trying to {action}: {e}") from e

    async def fetch_collection(self, identifiers: list[CardIdentifier]) -> CollectionResult:
        """
        Fetch up to MAX_COLLECTION_SIZE cards in a single request.

        Raises:
            ScryfallApiError: If too many identifiers are given (nothing is sent),
                or the request fails
        """
        if not identifiers:
            return CollectionResult()

        if len(identifiers) > MAX_COLLECTION_SIZE:
            raise ScryfallApiError(
                f"Collection request exceeds maximum size of {MAX_COLLECTION_SIZE} cards"
            )

        data = await self._send(
            "POST", "/cards/collection", "fetch card collection", json={"identifiers": identifiers}
        )
        if not isinstance(data, dict) or not isinstance(data.get("data"), list):
            raise ScryfallApiError("Unexpected card collection response", details=data)

        cards = data["data"]
        not_found = data.get("not_found") or []
        if not all(isinstance(card, dict) for card in cards) or not isinstance(not_found, list):
            raise ScryfallApiError("Unexpected card collection response", details=data)

        return CollectionResult(
            found=list(cards),
            not_found=list(not_found),
            warnings=list(data.get("warnings") or []),
        )

    async def fetch_collection_batched(
        self, identifiers: list[CardIdentifier]
    ) -> CollectionResult:
        """
        Fetch any number of cards, one concurrent request per chunk.

        A failed chunk is reported in ``failed_batches``; the other chunks'
        results are still merged.
        """
        result = CollectionResult()
        if not identifiers:
            return result

        batches = chunk_identifiers(identifiers)
        logger.info("Fetching %d cards from Scryfall in %d batches", len(identifiers), len(batches))

        outcomes = await asyncio.gather(
            *(self.fetch_collection(batch) for batch in batches), return_exceptions=True
        )

        for batch, outcome in zip(batches, outcomes, strict=True):
            if isinstance(outcome, ScryfallApiError):
                logger.warning("Scryfall batch of %d failed: %s", len(batch), outcome)
                result.failed_batches.append(FailedBatch(identifiers=batch, error=outcome))
            elif isinstance(outcome, BaseException):
                raise outcome
            else:
                result.merge(outcome)

        logger.info(
            "Scryfall returned %d cards, %d not found, %d failed batches",
            len(result.found),
            len(result.not_found),
            len(result.failed_batches),
        )
        return result

    async def fetch_card(self, scryfall_id: str) -> dict[str, Any]:
        """Fetch a single card by Scryfall id."""
        data: dict[str, Any] = await self._send("GET", f"/cards/{scryfall_id}", "fetch card")
        return data

    async def search_cards(self, query: str, page: int = 1) -> dict[str, Any]:
        """
        Run a Scryfall full-text search.

        Args:
            query: Scryfall search syntax, e.g. ``"t:artifact mv=1"``
            page: 1-based result page

        Returns:
            Scryfall list object (``data``, ``has_more``, ``total_cards``);
            an empty list when nothing matches

        Raises:
            ScryfallApiError: If the query is invalid or the request fails
        """
        try:
            data = await self._send(
                "GET", "/cards/search", "search cards", params={"q": query, "page": page}
            )
        except ScryfallApiError as e:
            # Scryfall answers a search without matches with a 404
            if e.status_code == 404:
                return {"object": "list", "total_cards": 0, "has_more": False, "data": []}
            raise

        if not isinstance(data, dict) or not isinstance(data.get("data"), list):
            raise ScryfallApiError("Unexpected card search response", details=data)
        return data

    async def fetch_bulk_data_info(self) -> list[dict[str, Any]]:
        """List Scryfall's bulk data files."""
        data = await self._send("GET", "/bulk-data", "fetch bulk data info")
        if not isinstance(data, dict) or not isinstance(data.get("data"), list):
            raise ScryfallApiError("Unexpected bulk data response", details=data)
        return [entry for entry in data["data"] if isinstance(entry, dict)]

    async def get_default_bulk_data(self) -> dict[str, Any] | None:
        """
        Metadata of the most useful bulk file.

        Prefers ``default_cards``, falls back to ``oracle_cards``.
        """
        files = {entry.get("type"): entry for entry in await self.fetch_bulk_data_info()}
        for bulk_type in PREFERRED_BULK_TYPES:
            if bulk_type in files:
                return files[bulk_type]
        return None
