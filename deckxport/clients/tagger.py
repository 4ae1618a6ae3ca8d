"""
Scryfall Tagger GraphQL client.

Tagger holds community-maintained functional ("oracle") tags. Cards are looked
up by printing (set code + collector number). Tagger is not an official API and
is prone to outages, so callers should stop after repeated failures.
"""

import logging
from typing import Any

import httpx
from pydantic import ValidationError

from deckxport.clients.base import ApiClient
from deckxport.clients.rate_limiter import RateLimiter
from deckxport.config import TAGGER_REQUEST_DELAY_SECONDS, settings
from deckxport.models.tagger import GOOD_STANDING, TaggerCard

logger = logging.getLogger(__name__)

TAGGER_ORIGIN = "https://tagger.scryfall.com"

FETCH_CARD_QUERY = """
query FetchCard(
  $set: String!
  $number: String!
  $back: Boolean = false
  $moderatorView: Boolean = false
) {
  card: cardBySet(set: $set, number: $number, back: $back) {
    name
    oracleId
    set
    collectorNumber
    taggings(moderatorView: $moderatorView) {
      status
      type
      weight
      tag {
        ...TagAttrs
        ancestorTags {
          ...TagAttrs
        }
      }
    }
  }
}

fragment TagAttrs on Tag {
  name
  slug
  namespace
  status
  type
}
"""


class TaggerApiError(Exception):
    """Raised when a Tagger lookup fails (transport, HTTP, GraphQL or schema)."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


def extract_oracle_tags(card: TaggerCard) -> list[str]:
    """
    Oracle tag names of a card that are in good standing.

    A tag counts only if the tagging, the tag, and every ancestor of the tag
    are in good standing. Order is preserved and duplicates dropped.
    """
    tags: list[str] = []
    for tagging in card.taggings:
        if tagging.status is not None and tagging.status != GOOD_STANDING:
            continue
        if not tagging.tag.is_oracle_tag:
            continue
        if not tagging.tag.in_good_standing():
            continue
        tags.append(tagging.tag.name)
    return list(dict.fromkeys(tags))


class TaggerClient(ApiClient):
    """Fetches card taggings from Tagger, one printing per request."""

    def __init__(
        self,
        graphql_url: str | None = None,
        *,
        csrf_token: str | None = None,
        session_cookie: str | None = None,
        http_client: httpx.AsyncClient | None = None,
        rate_limiter: RateLimiter | None = None,
    ) -> None:
        super().__init__(
            graphql_url or settings.tagger_graphql_url,
            request_delay=TAGGER_REQUEST_DELAY_SECONDS,
            http_client=http_client,
            rate_limiter=rate_limiter,
        )
        self.csrf_token = csrf_token if csrf_token is not None else settings.tagger_csrf_token
        self.session_cookie = (
            session_cookie if session_cookie is not None else settings.tagger_session_cookie
        )

    def _headers(self, set_code: str, number: str) -> dict[str, str]:
        headers = {"Content-Type": "application/json", "Accept": "*/*"}
        if self.csrf_token:
            headers["X-CSRF-Token"] = self.csrf_token
            headers["Origin"] = TAGGER_ORIGIN
            headers["Referer"] = f"{TAGGER_ORIGIN}/card/{set_code}/{number}"
        if self.session_cookie:
            headers["Cookie"] = self.session_cookie
        return headers

    async def fetch_card_tags(
        self, set_code: str, collector_number: str, back: bool = False
    ) -> TaggerCard | None:
        """
        Fetch a printing's taggings.

        Args:
            set_code: Set code (e.g. "dom")
            collector_number: Collector number within the set
            back: Fetch the back face of a double-faced card

        Returns:
            The card, or None if Tagger does not know the printing

        Raises:
            TaggerApiError: If the request fails or the response is unusable
        """
        body = {
            "query": FETCH_CARD_QUERY,
            "variables": {
                "set": set_code.lower(),
                "number": collector_number,
                "back": back,
                "moderatorView": False,
            },
            "operationName": "FetchCard",
        }
        logger.debug("Fetching Tagger tags for %s/%s", set_code, collector_number)

        try:
            response = await self._request(
                "POST",
                self.base_url,
                json=body,
                headers=self._headers(set_code, collector_number),
            )
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            raise TaggerApiError(
                f"Tagger API error: HTTP {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e
        except httpx.RequestError as e:
            raise TaggerApiError(f"Failed to reach Tagger API: {e}") from e
        except ValueError as e:
            raise TaggerApiError(f"Invalid Tagger response: {e}") from e

        return _parse_card_response(data)


def _parse_card_response(data: Any) -> TaggerCard | None:
    if not isinstance(data, dict):
        raise TaggerApiError("Invalid Tagger response: expected an object")

    if data.get("success") is False:
        raise TaggerApiError(f"Tagger API error: {data.get('message', 'unknown error')}")

    errors = data.get("errors")
    if errors:
        messages = "; ".join(
            str(err.get("message", err)) if isinstance(err, dict) else str(err) for err in errors
        )
        raise TaggerApiError(f"Tagger GraphQL errors: {messages}")

    payload = data.get("data")
    if payload is None:
        return None
    if not isinstance(payload, dict):
        raise TaggerApiError("Invalid Tagger response: data is not an object")

    card = payload.get("card")
    if card is None:
        return None
    if not isinstance(card, dict):
        raise TaggerApiError("Invalid Tagger response: card is not an object")

    try:
        return TaggerCard.model_validate(card)
    except ValidationError as e:
        raise TaggerApiError(f"Invalid Tagger card payload: {e}") from e
