"""Scraper registry for mapping theaters to scraper classes."""

import logging
from typing import Type

from marquee.scrapers.bam import BAMScraper
from marquee.scrapers.base import BaseScraper, ExtractionStrategy
from marquee.scrapers.film_forum import FilmForumScraper
from marquee.scrapers.ifc import IFCScraper
from marquee.scrapers.low_cinema import LowCinemaScraper
from marquee.scrapers.metrograph import MetrographScraper
from marquee.scrapers.models import SEE_TIMES, Event, Theater, make_event_id

# Registry mapping theaters to scraper classes, in feed order
SCRAPER_REGISTRY: dict[Theater, Type[BaseScraper]] = {
    Theater.METROGRAPH: MetrographScraper,
    Theater.BAM: BAMScraper,
    Theater.LOW_CINEMA: LowCinemaScraper,
    Theater.IFC: IFCScraper,
    Theater.FILM_FORUM: FilmForumScraper,
}


def get_scraper(
    theater: Theater | str, logger: logging.Logger | None = None
) -> BaseScraper | None:
    """
    Get a scraper instance for a theater.

    Args:
        theater: Theater enum member, display name ("IFC Center") or slug ("ifc")
        logger: Optional logger passed through to the scraper

    Returns:
        Scraper instance or None if the theater is not supported
    """
    if not isinstance(theater, Theater):
        theater = next(
            (t for t in Theater if theater in (t.value, t.slug)),
            None,
        )
    scraper_class = SCRAPER_REGISTRY.get(theater) if theater else None
    if scraper_class:
        return scraper_class(logger=logger)
    return None


def get_all_scrapers(logger: logging.Logger | None = None) -> list[BaseScraper]:
    """Instantiate every registered scraper."""
    return [scraper_class(logger=logger) for scraper_class in SCRAPER_REGISTRY.values()]


__all__ = [
    "SCRAPER_REGISTRY",
    "SEE_TIMES",
    "get_scraper",
    "get_all_scrapers",
    "make_event_id",
    "BaseScraper",
    "ExtractionStrategy",
    "Event",
    "Theater",
    "BAMScraper",
    "FilmForumScraper",
    "IFCScraper",
    "LowCinemaScraper",
    "MetrographScraper",
]
