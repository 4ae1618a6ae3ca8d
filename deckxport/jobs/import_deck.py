"""
Import a Moxfield deck from the command line.

Runs the full enrichment pipeline, logs progress as it goes and prints a
per-stage summary (or the whole result as JSON with ``--json``).
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from deckxport.cache.store import PersistentCache
from deckxport.models.card_aggregate import DeckImportProgress, DeckImportResult, ImportStage
from deckxport.services.deck_aggregator import aggregate_deck_data

logger = logging.getLogger(__name__)


def log_progress(progress: DeckImportProgress) -> None:
    """Progress callback that logs at most once per processed card."""
    if progress.current_card:
        logger.debug(
            "[%s] %d/%d %s",
            progress.stage.value,
            progress.cards_processed,
            progress.total_cards,
            progress.current_card,
        )


def summarize(result: DeckImportResult) -> str:
    lines = [
        f"{result.deck_name} by {result.deck_author} ({result.format or 'unknown format'})",
        f"Cards: {result.card_count()} ({len(result.cards)} entries)",
        f"Tagged: {sum(1 for card in result.cards if card.oracle_tags)}",
    ]
    for stage in (ImportStage.ENRICH_CARDS, ImportStage.ENRICH_TAGS):
        errors = result.errors_for_stage(stage)
        lines.append(f"{stage.value} errors: {len(errors)}")
        lines.extend(f"  {entry.card_name}: {entry.error}" for entry in errors)
    return "\n".join(lines)


async def run_import(
    deck_ref: str, output: Path | None = None, cache_url: str | None = None
) -> DeckImportResult:
    """
    Import a deck and optionally write the result as JSON.

    Args:
        deck_ref: Moxfield deck URL or id
        output: File to write the JSON result to
        cache_url: Cache database URL; defaults to settings
    """
    logger.info("Importing deck %s...", deck_ref)

    cache = PersistentCache.from_url(cache_url)
    await cache.init()
    try:
        result = await aggregate_deck_data(deck_ref, on_progress=log_progress, cache=cache)
    except Exception as e:
        logger.error("Failed to import deck %s: %s", deck_ref, e)
        raise
    finally:
        await cache.close()

    if output is not None:
        output.write_text(json.dumps(result.to_dict(), indent=2), encoding="utf-8")
        logger.info("Wrote %d cards to %s", len(result.cards), output)

    return result


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="Import and enrich a Moxfield deck")
    parser.add_argument("deck", help="Moxfield deck URL or deck id")
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Write the full result as JSON to this file",
    )
    parser.add_argument(
        "--cache-url",
        default=None,
        help="Cache database URL (default: DECKXPORT_CACHE_DATABASE_URL)",
    )
    parser.add_argument("--verbose", action="store_true", help="Log every processed card")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        result = asyncio.run(run_import(args.deck, output=args.output, cache_url=args.cache_url))
    except Exception:
        sys.exit(1)

    print(summarize(result))


if __name__ == "__main__":
    main()
