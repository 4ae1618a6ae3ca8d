"""
Moxfield API client.

Moxfield has no official public API documentation; endpoints are the ones
its own site uses.
"""

import logging
from typing import Any
from urllib.parse import quote, urlencode

import httpx

from deckxport.clients.base import ApiClient
from deckxport.clients.rate_limiter import RateLimiter
from deckxport.config import MOXFIELD_REQUEST_DELAY_SECONDS, settings

logger = logging.getLogger(__name__)

# Moxfield rejects larger pages
MAX_USER_DECKS_PAGE_SIZE = 100


class MoxfieldApiError(Exception):
    """
    Raised when a deck cannot be fetched.

    ``status_code`` is None for network failures; 404 means the deck does not
    exist or is private.
    """

    def __init__(self, message: str, status_code: int | None = None, error: str | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.error = error

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404


class MoxfieldClient(ApiClient):
    """Fetches decks from Moxfield."""

    def __init__(
        self,
        base_url: str | None = None,
        *,
        http_client: httpx.AsyncClient | None = None,
        rate_limiter: RateLimiter | None = None,
    ) -> None:
        super().__init__(
            base_url or settings.moxfield_api_base,
            request_delay=MOXFIELD_REQUEST_DELAY_SECONDS,
            http_client=http_client,
            rate_limiter=rate_limiter,
        )

    async def _get_json(self, url: str, what: str) -> dict[str, Any]:
        """
        GET a Moxfield endpoint and decode its JSON object.

        Raises:
            MoxfieldApiError: If the request fails or the body is not a JSON object
        """
        try:
            response = await self._request("GET", url)
        except httpx.RequestError as e:
            raise MoxfieldApiError(
                f"Failed to fetch {what}: {e}", status_code=None, error="NETWORK_ERROR"
            ) from e

        if response.is_error:
            message = f"Failed to fetch {what}: HTTP {response.status_code}"
            error_code = None
            try:
                body = response.json()
            except ValueError:
                body = None
            if isinstance(body, dict):
                message = body.get("message") or message
                error_code = body.get("error")
            raise MoxfieldApiError(message, status_code=response.status_code, error=error_code)

        try:
            data = response.json()
        except ValueError as e:
            raise MoxfieldApiError(f"Invalid {what} response: {e}", error="PARSE_ERROR") from e

        if not isinstance(data, dict):
            raise MoxfieldApiError(
                f"Invalid {what} response: expected an object", error="PARSE_ERROR"
            )

        return data

    async def fetch_deck(self, deck_id: str) -> dict[str, Any]:
        """
        Fetch a public deck by id.

        Returns:
            Raw deck JSON in whichever shape Moxfield served

        Raises:
            MoxfieldApiError: If the request fails or the body is not JSON
        """
        logger.info("Fetching Moxfield deck %s", deck_id)
        return await self._get_json(f"{self.base_url}/v3/decks/all/{deck_id}", "deck")

    async def fetch_user_decks(
        self, username: str, page_size: int = 20, page: int = 1
    ) -> dict[str, Any]:
        """
        Fetch one page of a user's public decks.

        Args:
            username: Moxfield user name
            page_size: Decks per page, 1 to MAX_USER_DECKS_PAGE_SIZE
            page: 1-based page number

        Returns:
            Raw paginated listing (``pageNumber``, ``totalResults``, ``data`` ...)

        Raises:
            ValueError: If the page size or number is out of range
            MoxfieldApiError: If the request fails; 404 for an unknown user
        """
        if not 1 <= page_size <= MAX_USER_DECKS_PAGE_SIZE:
            raise ValueError(f"page_size must be between 1 and {MAX_USER_DECKS_PAGE_SIZE}")
        if page < 1:
            raise ValueError("page must be at least 1")

        logger.info("Fetching Moxfield decks of %s (page %d)", username, page)
        query = urlencode({"pageSize": page_size, "pageNumber": page})
        url = f"{self.base_url}/v3/users/{quote(username, safe='')}/decks?{query}"
        return await self._get_json(url, "user decks")
