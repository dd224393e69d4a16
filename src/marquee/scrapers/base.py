"""Base scraper interface for all cinema scrapers."""

import asyncio
import logging
import re
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable
from dataclasses import dataclass, replace
from datetime import date

import httpx
from bs4 import BeautifulSoup, Tag

from marquee.config import settings
from marquee.scrapers.models import Event, Theater
from marquee.utils.text import absolute_url, clean_text, normalise_title, truncate

logger = logging.getLogger(__name__)

DESCRIPTION_LIMIT = 300


@dataclass(frozen=True)
class ExtractionStrategy:
    """One way of reading events out of a source document."""

    name: str
    extract: Callable[[BeautifulSoup, date], list[Event]]


@dataclass(frozen=True)
class FilmDetails:
    """Fields lifted from a film's detail page."""

    image_url: str | None = None
    description: str | None = None


class BaseScraper(ABC):
    """
    Abstract base class for all cinema scrapers.

    Subclasses declare the listing URL and an ordered list of extraction
    strategies. The first strategy that yields any events wins, so a site
    redesign that breaks the preferred selectors degrades to a broader scan
    instead of an empty feed.

    ``fetch_events`` must never raise: network errors, non-200 responses and
    parse failures are logged and produce an empty list.
    """

    theater: Theater
    LISTING_URL: str

    def __init__(self, logger: logging.Logger | None = None) -> None:
        """
        Args:
            logger: Logger for diagnostics (defaults to the module logger)
        """
        self.logger = logger or logging.getLogger(type(self).__module__)

    @property
    def name(self) -> str:
        return self.theater.value

    @property
    def headers(self) -> dict[str, str]:
        return {
            "User-Agent": settings.user_agent,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            "Accept-Language": "en-US,en;q=0.5",
        }

    @abstractmethod
    def strategies(self) -> list[ExtractionStrategy]:
        """Extraction strategies in priority order."""

    async def fetch_events(self, today: date | None = None) -> list[Event]:
        """
        Fetch and normalise this theater's listings.

        Args:
            today: Reference date for date inference (defaults to today)

        Returns:
            List of events within the listings horizon

        Raises:
            Never. Errors are logged and an empty list is returned.
        """
        today = today or date.today()
        try:
            async with httpx.AsyncClient(
                timeout=settings.scrape_timeout,
                headers=self.headers,
                follow_redirects=True,
            ) as client:
                response = await client.get(self.LISTING_URL)
                if response.status_code != 200:
                    self.logger.error(f"{self.name}: HTTP {response.status_code}")
                    return []

                html = response.text
                self.logger.debug(f"{self.name}: Fetched listing page ({len(html)} bytes)")

                events = self.parse_listing(html, today)
                if events:
                    events = await self.enrich(client, events)

        except Exception as e:
            self.logger.error(f"{self.name} scraper error: {e}", exc_info=True)
            return []

        self.logger.info(f"{self.name}: Found {len(events)} events")
        return events

    def parse_listing(self, html: str, today: date) -> list[Event]:
        """Run the fallback chain over a listing document."""
        soup = BeautifulSoup(html, "html.parser")
        events = run_strategies(self.strategies(), soup, today, self.name, self.logger)
        if not events:
            self._log_diagnostics(soup, html)
        return dedupe_events(events)

    async def enrich(self, client: httpx.AsyncClient, events: list[Event]) -> list[Event]:
        """
        Fill in missing poster/synopsis data from detail pages.

        Scrapers that have nothing to add return the events unchanged.
        """
        return events

    async def _fetch_details(
        self, client: httpx.AsyncClient, urls: Iterable[str]
    ) -> dict[str, FilmDetails]:
        """
        Fetch detail pages concurrently and parse each one.

        At most ``settings.max_detail_pages`` pages are requested, with
        ``settings.detail_concurrency`` in flight. A page that fails is
        logged and left out of the result; it never fails the listing.
        """
        unique_urls = list(dict.fromkeys(urls))[: settings.max_detail_pages]
        if not unique_urls:
            return {}

        semaphore = asyncio.Semaphore(settings.detail_concurrency)

        async def fetch_one(url: str) -> FilmDetails | None:
            async with semaphore:
                response = await client.get(url)
            if response.status_code != 200:
                self.logger.warning(
                    f"{self.name}: Detail page {url} returned {response.status_code}"
                )
                return None
            return self.parse_detail(response.text, url)

        results = await asyncio.gather(
            *(fetch_one(url) for url in unique_urls), return_exceptions=True
        )

        details: dict[str, FilmDetails] = {}
        for url, result in zip(unique_urls, results):
            if isinstance(result, BaseException):
                self.logger.warning(f"{self.name}: Failed to fetch detail page {url}: {result}")
            elif result is not None:
                details[url] = result

        self.logger.debug(f"{self.name}: Enriched {len(details)}/{len(unique_urls)} detail pages")
        return details

    def parse_detail(self, html: str, url: str) -> FilmDetails:
        """Extract the Open Graph poster and description from a detail page."""
        soup = BeautifulSoup(html, "html.parser")

        image_url = None
        og_image = soup.find("meta", attrs={"property": "og:image"})
        if isinstance(og_image, Tag):
            image_url = absolute_url(str(og_image.get("content", "")), url)

        description = None
        og_description = soup.find("meta", attrs={"property": "og:description"})
        if isinstance(og_description, Tag):
            description = clean_text(str(og_description.get("content", ""))) or None

        return FilmDetails(
            image_url=image_url,
            description=truncate(description, DESCRIPTION_LIMIT) if description else None,
        )

    @staticmethod
    def apply_details(
        events: list[Event],
        details: dict[str, FilmDetails],
        key: Callable[[Event], str | None],
    ) -> list[Event]:
        """
        Rebuild events with detail-page data, keeping listing data that exists.

        Args:
            events: Events from the listing page
            details: Parsed detail pages keyed by URL
            key: Maps an event to the detail URL it belongs to
        """
        enriched: list[Event] = []
        for event in events:
            film_details = details.get(key(event) or "")
            if film_details is None:
                enriched.append(event)
                continue
            enriched.append(
                replace(
                    event,
                    image_url=event.image_url or film_details.image_url,
                    description=event.description or film_details.description,
                )
            )
        return enriched

    def normalise_title(self, title: str | None) -> str:
        """
        Normalize a film title using the standard normalization function.

        Args:
            title: Raw film title from cinema website

        Returns:
            Normalized title
        """
        return normalise_title(title)

    def _log_diagnostics(self, soup: BeautifulSoup, html: str) -> None:
        """Log what the page looked like when no strategy matched."""
        self.logger.warning(f"{self.name}: No extraction strategy produced events")
        self.logger.debug(f"{self.name}: HTML preview (first 500 chars): {html[:500]}")

        classes: set[str] = set()
        for el in soup.find_all(class_=True):
            for cls in el.get("class", []):
                if re.search(r"showtime|schedule|film|movie|event|screening|date", cls, re.I):
                    classes.add(cls)
        self.logger.debug(
            f"{self.name}: Relevant classes: {', '.join(sorted(classes)) or 'none'}"
        )


def run_strategies(
    strategies: list[ExtractionStrategy],
    soup: BeautifulSoup,
    today: date,
    source: str,
    log: logging.Logger = logger,
) -> list[Event]:
    """
    Return the events from the first strategy that produces any.

    A strategy that raises is logged and treated as having found nothing.
    """
    for strategy in strategies:
        try:
            events = strategy.extract(soup, today)
        except Exception as e:
            log.warning(f"{source}: Strategy '{strategy.name}' failed: {e}")
            continue

        if events:
            log.debug(f"{source}: Strategy '{strategy.name}' found {len(events)} events")
            return events
        log.debug(f"{source}: Strategy '{strategy.name}' found nothing")

    return []


def dedupe_events(events: list[Event]) -> list[Event]:
    """Drop repeated identifiers, keeping the first occurrence."""
    seen: set[str] = set()
    unique: list[Event] = []
    for event in events:
        if event.id in seen:
            continue
        seen.add(event.id)
        unique.append(event)
    return unique


def text_of(tag: Tag | None) -> str:
    """Get clean text from a tag, or "" when the tag is missing."""
    if tag is None:
        return ""
    return clean_text(tag.get_text(separator=" "))
