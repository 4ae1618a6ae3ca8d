"""
Remove expired entries from the card cache.

Expired entries are already ignored on read; this reclaims their space.
"""

import asyncio
import logging

from deckxport.cache.store import CacheNamespace, PersistentCache

logger = logging.getLogger(__name__)


async def run_sweep(cache_url: str | None = None) -> dict[CacheNamespace, int]:
    """
    Sweep every namespace.

    Returns:
        Dict mapping namespace to number of entries removed
    """
    cache = PersistentCache.from_url(cache_url)
    await cache.init()
    try:
        removed = await cache.sweep_all_expired()
    finally:
        await cache.close()

    for namespace, count in removed.items():
        logger.info("%s: removed %d expired entries", namespace.value, count)
    logger.info("Cache sweep complete. Total removed: %d", sum(removed.values()))
    return removed


def main() -> None:
    """CLI entry point."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    asyncio.run(run_sweep())


if __name__ == "__main__":
    main()
