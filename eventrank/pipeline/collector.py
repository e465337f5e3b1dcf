"""Concurrent collection of envelopes from several event sources.

Every source is awaited with its own timeout. A source that raises or times
out is reported as one failed envelope; nothing is retried.
"""

import asyncio
import logging
from collections.abc import Sequence

from eventrank.core.schemas import ScrapingResult
from eventrank.platforms.base import EventSource

logger = logging.getLogger(__name__)


async def collect_results(
    sources: Sequence[EventSource],
    query: str,
    location: str,
    timeout_seconds: float = 30.0,
) -> list[ScrapingResult]:
    """Fetch from all sources concurrently, flattening their envelopes in source order."""
    batches = await asyncio.gather(
        *(_fetch_one(s, query, location, timeout_seconds) for s in sources)
    )
    results = [r for batch in batches for r in batch]
    failed = sum(1 for r in results if not r.success)
    logger.info(
        "Collected %d envelope(s) from %d source(s), %d failed",
        len(results), len(sources), failed,
    )
    return results


async def _fetch_one(
    source: EventSource,
    query: str,
    location: str,
    timeout_seconds: float,
) -> list[ScrapingResult]:
    try:
        return await asyncio.wait_for(source.fetch(query, location), timeout=timeout_seconds)
    except TimeoutError:
        error = f"timed out after {timeout_seconds:g}s"
        logger.warning("Source '%s' %s", source.platform_id, error)
    except Exception as e:
        error = str(e) or type(e).__name__
        logger.warning("Source '%s' failed: %s", source.platform_id, error, exc_info=True)
    return [
        ScrapingResult(
            success=False,
            error=error,
            platform=source.platform_id,
            query=query,
            location=location,
        )
    ]
