"""Concurrent aggregation of every theater's listings into one feed."""

import asyncio
import logging
from collections.abc import Sequence
from datetime import date

from marquee.config import settings
from marquee.scrapers import BaseScraper, Event, get_all_scrapers
from marquee.utils.dates import to_minutes

logger = logging.getLogger(__name__)

# Sort position of SEE_TIMES (and any unreadable time): ahead of every
# timed showing on the same date, including one at 12:00 AM
UNTIMED_SORT_MINUTES = -1


def sort_key(event: Event) -> tuple[date, int]:
    """Order by date, then by time of day on a 24-hour clock."""
    minutes = to_minutes(event.time)
    return event.date, UNTIMED_SORT_MINUTES if minutes is None else minutes


def sort_events(events: list[Event]) -> list[Event]:
    """Stable sort, so equal keys keep source order."""
    return sorted(events, key=sort_key)


async def _run_scraper(
    scraper: BaseScraper, today: date | None, timeout: float
) -> list[Event]:
    """Run one scraper, turning a timeout or stray exception into no events."""
    try:
        events = await asyncio.wait_for(scraper.fetch_events(today), timeout=timeout)
    except asyncio.TimeoutError:
        logger.error(f"✗ {scraper.name} failed: timed out after {timeout}s")
        return []
    except Exception as e:
        logger.error(f"✗ {scraper.name} failed: {e}", exc_info=True)
        return []

    logger.info(f"✓ {scraper.name}: {len(events)} events")
    return list(events)


async def aggregate(
    scrapers: Sequence[BaseScraper] | None = None,
    today: date | None = None,
    timeout: float | None = None,
) -> list[Event]:
    """
    Fetch every theater concurrently and merge the results.

    A failing, empty or hung source only removes its own events from the
    feed; this function never raises. No deduplication happens across
    sources: two theaters producing the same identifier both stay in.

    Args:
        scrapers: Scrapers to run (defaults to every registered theater)
        today: Reference date passed to each scraper
        timeout: Per-scraper limit in seconds (defaults to settings.adapter_timeout)

    Returns:
        Events sorted by date, then time
    """
    if scrapers is None:
        scrapers = get_all_scrapers()
    timeout = timeout if timeout is not None else settings.adapter_timeout

    logger.info(f"Aggregating showtimes from {len(scrapers)} theaters")

    results = await asyncio.gather(
        *(_run_scraper(scraper, today, timeout) for scraper in scrapers),
        return_exceptions=True,
    )

    all_events: list[Event] = []
    for scraper, result in zip(scrapers, results):
        if isinstance(result, BaseException):
            # Only reachable if _run_scraper itself was cancelled mid-flight
            logger.error(f"✗ {scraper.name} failed: {result!r}")
            continue
        all_events.extend(result)

    feed = sort_events(all_events)
    logger.info(f"Aggregation complete: {len(feed)} events")
    return feed
