"""
Deck aggregation pipeline.

Turns a Moxfield deck reference into a list of CardAggregates in three
sequential stages:

1. fetch-deck: fetch and normalize the deck, build skeleton aggregates.
   Any failure here aborts the import.
2. enrich-cards: merge Scryfall records, from the by-name cache first and one
   batched collection request for the rest.
3. enrich-tags: attach Tagger oracle tags one card at a time, from the
   by-set-number cache first, stopping lookups after repeated failures.

Per-card failures in stages 2 and 3 are recorded as error entries; the import
still completes with every card present.
"""

import logging
from typing import Any, Protocol

from deckxport.cache.card_cache import (
    cache_cards,
    cache_oracle_tags,
    get_cards_by_name,
    get_oracle_tags,
    name_key,
    record_name_keys,
)
from deckxport.cache.store import PersistentCache
from deckxport.clients.moxfield import MoxfieldApiError, MoxfieldClient
from deckxport.clients.scryfall import (
    CardIdentifier,
    CollectionResult,
    ScryfallApiError,
    ScryfallClient,
    card_names_to_identifiers,
)
from deckxport.clients.tagger import TaggerApiError, TaggerClient, extract_oracle_tags
from deckxport.config import MAX_CONSECUTIVE_TAGGER_ERRORS
from deckxport.models.card_aggregate import (
    CardAggregate,
    DeckImportResult,
    ImportStage,
)
from deckxport.models.tagger import TaggerCard
from deckxport.parsers.moxfield import DeckPayloadError, load_deck, resolve_deck_reference
from deckxport.services.circuit_breaker import CircuitBreaker
from deckxport.services.enrichment import create_initial_aggregate, enrich_with_scryfall_data
from deckxport.services.progress import ProgressCallback, ProgressTracker

logger = logging.getLogger(__name__)

# Error entry card names for failures that are not about one card
DECK_IMPORT = "Deck import"
BATCH_REQUEST = "Batch request"

CARD_NOT_FOUND_ERROR = "not found"
MISSING_PRINT_IDENTITY_ERROR = "Missing set or collector number"
TAGGER_CARD_UNKNOWN_ERROR = "Not found in Tagger database"
TAGGER_STOPPED_ERROR = "Stopped fetching tags after repeated errors"


class DeckSource(Protocol):
    async def fetch_deck(self, deck_id: str) -> dict[str, Any]: ...


class CardCollectionSource(Protocol):
    async def fetch_collection_batched(
        self, identifiers: list[CardIdentifier]
    ) -> CollectionResult: ...


class TagSource(Protocol):
    async def fetch_card_tags(
        self, set_code: str, collector_number: str, back: bool = False
    ) -> TaggerCard | None: ...


class DeckAggregator:
    """
    Runs deck imports against one cache and one set of upstream clients.

    Each ``aggregate_deck`` call has its own progress state and its own
    circuit breaker, so an instance may be reused across imports.
    """

    def __init__(
        self,
        cache: PersistentCache,
        deck_client: DeckSource,
        collection_client: CardCollectionSource,
        tag_client: TagSource,
        *,
        max_consecutive_tag_errors: int = MAX_CONSECUTIVE_TAGGER_ERRORS,
    ) -> None:
        self.cache = cache
        self.deck_client = deck_client
        self.collection_client = collection_client
        self.tag_client = tag_client
        self.max_consecutive_tag_errors = max_consecutive_tag_errors

    async def aggregate_deck(
        self, deck_ref: str, on_progress: ProgressCallback | None = None
    ) -> DeckImportResult:
        """
        Import a deck.

        Args:
            deck_ref: Moxfield deck id or deck URL
            on_progress: Called with a progress snapshot after every change

        Returns:
            All aggregates, enriched as far as possible, plus recorded errors

        Raises:
            MoxfieldApiError: If the deck cannot be fetched
            DeckPayloadError: If the reference or the deck response is unusable
        """
        tracker = ProgressTracker([on_progress] if on_progress else [])

        tracker.enter_stage(ImportStage.FETCH_DECK)
        try:
            deck_id = resolve_deck_reference(deck_ref)
            deck = load_deck(await self.deck_client.fetch_deck(deck_id))
        except (MoxfieldApiError, DeckPayloadError) as e:
            logger.error("Deck import failed for %s: %s", deck_ref, e)
            tracker.fail(DECK_IMPORT, str(e))
            raise

        aggregates = [create_initial_aggregate(entry) for entry in deck.entries]
        tracker.update(total_cards=len(aggregates))
        logger.info(
            "Fetched deck %r by %s: %d entries", deck.name, deck.author, len(aggregates)
        )

        try:
            aggregates = await self._enrich_cards(aggregates, deck.unique_names(), tracker)
            await self._enrich_tags(aggregates, tracker)
        except Exception as e:
            tracker.fail(DECK_IMPORT, str(e))
            raise

        tracker.enter_stage(ImportStage.COMPLETE)
        errors = tracker.errors
        logger.info("Imported %r: %d cards, %d errors", deck.name, len(aggregates), len(errors))

        return DeckImportResult(
            cards=aggregates,
            deck_name=deck.name,
            deck_author=deck.author,
            format=deck.format,
            errors=errors,
        )

    # --- Stage 2 ---

    async def _enrich_cards(
        self, aggregates: list[CardAggregate], names: list[str], tracker: ProgressTracker
    ) -> list[CardAggregate]:
        tracker.enter_stage(ImportStage.ENRICH_CARDS)

        cached = await get_cards_by_name(self.cache, names)
        records: dict[str, dict[str, Any]] = {
            name_key(name): record for name, record in cached.items()
        }

        uncached = [name for name in names if name not in cached]
        logger.info("Card data: %d names cached, %d to fetch", len(cached), len(uncached))

        chunk_errors: dict[str, str | None] = {}
        if uncached:
            fetched, chunk_errors = await self._fetch_records(uncached, tracker)
            records.update(fetched)

        enriched: list[CardAggregate] = []
        for index, aggregate in enumerate(aggregates, start=1):
            key = name_key(aggregate.name)
            record = records.get(key)
            if record is not None:
                enriched.append(enrich_with_scryfall_data(aggregate, record))
            else:
                enriched.append(aggregate)
                # None means the whole batch failed and was recorded once already
                error = chunk_errors.get(key, CARD_NOT_FOUND_ERROR)
                if error is not None:
                    logger.warning("No card data for %s: %s", aggregate.name, error)
                    tracker.record_error(aggregate.name, ImportStage.ENRICH_CARDS, error)
            tracker.advance(index, aggregate.name)

        return enriched

    async def _fetch_records(
        self, names: list[str], tracker: ProgressTracker
    ) -> tuple[dict[str, dict[str, Any]], dict[str, str | None]]:
        """
        Fetch uncached names from Scryfall and cache what comes back.

        Returns:
            Records by name key, and the error for each name key whose chunk
            failed (None when the whole request failed)
        """
        try:
            result = await self.collection_client.fetch_collection_batched(
                card_names_to_identifiers(names)
            )
        except ScryfallApiError as e:
            logger.warning("Card data request failed: %s", e)
            tracker.record_error(BATCH_REQUEST, ImportStage.ENRICH_CARDS, str(e))
            return {}, dict.fromkeys(map(name_key, names))

        if result.found:
            await cache_cards(self.cache, result.found)

        records = {key: record for record in result.found for key in record_name_keys(record)}
        chunk_errors: dict[str, str | None] = {}

        if result.all_failed:
            error = str(result.failed_batches[0].error)
            logger.warning("Every card data batch failed: %s", error)
            tracker.record_error(BATCH_REQUEST, ImportStage.ENRICH_CARDS, error)
            chunk_errors = dict.fromkeys(map(name_key, names))
        else:
            for batch in result.failed_batches:
                for identifier in batch.identifiers:
                    chunk_errors[name_key(identifier["name"])] = str(batch.error)

        tracker.update(current_card=None)
        return records, chunk_errors

    # --- Stage 3 ---

    async def _enrich_tags(self, aggregates: list[CardAggregate], tracker: ProgressTracker) -> None:
        tracker.enter_stage(ImportStage.ENRICH_TAGS)

        lookups = [aggregate for aggregate in aggregates if aggregate.has_print_identity]
        missing = [aggregate for aggregate in aggregates if not aggregate.has_print_identity]

        processed = 0
        for aggregate in missing:
            self._mark_tags(aggregate, tracker, error=MISSING_PRINT_IDENTITY_ERROR)
            processed += 1
            tracker.advance(processed, aggregate.name)

        breaker = CircuitBreaker(self.max_consecutive_tag_errors)
        for aggregate in lookups:
            await self._fetch_tags(aggregate, breaker, tracker)
            processed += 1
            tracker.advance(processed, aggregate.name)

        logger.info(
            "Tags: %d cards looked up, %d without printing, breaker %s",
            len(lookups),
            len(missing),
            "open" if breaker.is_open else "closed",
        )

    async def _fetch_tags(
        self, aggregate: CardAggregate, breaker: CircuitBreaker, tracker: ProgressTracker
    ) -> None:
        cached = await get_oracle_tags(self.cache, aggregate.set, aggregate.collector_number)
        if cached is not None:
            self._mark_tags(aggregate, tracker, tags=cached)
            return

        if breaker.is_open:
            self._mark_tags(aggregate, tracker, error=TAGGER_STOPPED_ERROR)
            return

        try:
            card = await self.tag_client.fetch_card_tags(aggregate.set, aggregate.collector_number)
        except TaggerApiError as e:
            if breaker.record_failure():
                logger.warning(
                    "Tagger failed %d times in a row; skipping remaining lookups",
                    breaker.consecutive_failures,
                )
            self._mark_tags(aggregate, tracker, error=str(e))
            return

        breaker.record_success()

        if card is None:
            self._mark_tags(aggregate, tracker, error=TAGGER_CARD_UNKNOWN_ERROR)
            return

        tags = extract_oracle_tags(card)
        await cache_oracle_tags(
            self.cache, aggregate.set, aggregate.collector_number, aggregate.name, tags
        )
        self._mark_tags(aggregate, tracker, tags=tags)

    @staticmethod
    def _mark_tags(
        aggregate: CardAggregate,
        tracker: ProgressTracker,
        *,
        tags: list[str] | None = None,
        error: str | None = None,
    ) -> None:
        aggregate.oracle_tags = list(tags or [])
        aggregate.tagger_fetched = True
        aggregate.tagger_error = error
        if error is not None:
            logger.debug("No tags for %s: %s", aggregate.name, error)
            tracker.record_error(aggregate.name, ImportStage.ENRICH_TAGS, error)


async def aggregate_deck_data(
    deck_ref: str,
    on_progress: ProgressCallback | None = None,
    cache: PersistentCache | None = None,
) -> DeckImportResult:
    """
    Import a deck with clients built from settings.

    Args:
        deck_ref: Moxfield deck id or deck URL
        on_progress: Optional progress callback
        cache: Cache to use; a settings-configured cache is opened (and closed)
            when omitted
    """
    owns_cache = cache is None
    if cache is None:
        cache = PersistentCache.from_url()
        await cache.init()

    try:
        async with (
            MoxfieldClient() as moxfield,
            ScryfallClient() as scryfall,
            TaggerClient() as tagger,
        ):
            aggregator = DeckAggregator(cache, moxfield, scryfall, tagger)
            return await aggregator.aggregate_deck(deck_ref, on_progress)
    finally:
        if owns_cache:
            await cache.close()
