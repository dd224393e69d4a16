"""Low Cinema scraper using BeautifulSoup HTML parsing."""

from datetime import date

from bs4 import BeautifulSoup, Tag

from marquee.config import settings
from marquee.scrapers.base import BaseScraper, ExtractionStrategy, text_of
from marquee.scrapers.models import Event, Theater
from marquee.utils.dates import (
    parse_date_text,
    parse_iso_date,
    parse_iso_time,
    parse_time,
    within_horizon,
)
from marquee.utils.text import absolute_url

BASE_URL = "https://lowcinema.com"

TITLE_SELECTOR = "h2, h3, .title, .event-title, .film-title"
WHEN_SELECTOR = ".date, .time, time, .datetime, .event-date, .event-time"


class LowCinemaScraper(BaseScraper):
    """
    Scraper for Low Cinema (Ridgewood).

    The calendar page is a generic CMS event listing rather than a cinema
    ticketing system, so the markup is the least predictable of all the
    sources. Three readings are tried in turn:

    1. event cards (``.calendar-event``, ``.event``, ``.screening``)
    2. ``<article>`` elements
    3. every ``<time>`` element, read together with its enclosing block

    A card is only kept when both a date and a time can be read from it.
    """

    theater = Theater.LOW_CINEMA
    LISTING_URL = f"{BASE_URL}/calendar"

    def strategies(self) -> list[ExtractionStrategy]:
        return [
            ExtractionStrategy(
                "event cards",
                lambda soup, today: self._extract_cards(
                    soup.select(".calendar-event, .event, .screening"), today
                ),
            ),
            ExtractionStrategy(
                "articles",
                lambda soup, today: self._extract_cards(soup.select("article"), today),
            ),
            ExtractionStrategy("time elements", self._extract_time_elements),
        ]

    def _extract_cards(self, cards: list[Tag], today: date) -> list[Event]:
        events: list[Event] = []
        for card in cards:
            try:
                events.extend(self._parse_card(card, today))
            except Exception as e:
                self.logger.warning(f"Low Cinema: Failed to parse event: {e}")
        return events

    def _extract_time_elements(self, soup: BeautifulSoup, today: date) -> list[Event]:
        blocks: list[Tag] = []
        for time_el in soup.find_all("time"):
            block = time_el.find_parent(["li", "div", "section"])
            if isinstance(block, Tag) and block not in blocks:
                blocks.append(block)
        return self._extract_cards(blocks, today)

    def _parse_card(self, card: Tag, today: date) -> list[Event]:
        """Parse one listing block; dropped unless a date and a time resolve."""
        film = self.normalise_title(text_of(card.select_one(TITLE_SELECTOR)))
        if not film:
            return []

        days, time = self._parse_when(card, today)
        if not days or not time:
            return []

        link = (
            card.select_one('a[href*="ticket"]')
            or card.select_one('a[href*="event"]')
            or card.find("a")
        )
        detail_url = absolute_url(str(link.get("href", "")), BASE_URL) if isinstance(link, Tag) else None
        ticket_url = detail_url or self.LISTING_URL

        img = card.find("img")
        image_url = None
        if isinstance(img, Tag):
            image_url = absolute_url(str(img.get("src") or img.get("data-src") or ""), BASE_URL)

        description = text_of(card.select_one("p, .description")) or None

        return [
            Event(
                film=film,
                theater=self.theater,
                date=day,
                time=time,
                ticket_url=ticket_url,
                detail_url=detail_url,
                image_url=image_url,
                description=description,
            )
            for day in days
        ]

    def _parse_when(self, card: Tag, today: date) -> tuple[list[date], str | None]:
        """
        Read the showing date(s) and time from a card.

        A machine-readable ``<time datetime>`` wins; otherwise the date/time
        elements are read as text, and as a last resort the whole card.
        """
        horizon = settings.horizon_days
        when_text = " ".join(text_of(el) for el in card.select(WHEN_SELECTOR))

        time_el = card.find("time", attrs={"datetime": True})
        if isinstance(time_el, Tag):
            stamp = str(time_el.get("datetime", ""))
            day = parse_iso_date(stamp)
            # date-only stamps leave the time to the printed text
            time = parse_iso_time(stamp) or parse_time(when_text)
            if day is not None:
                in_range = [day] if within_horizon(day, today, horizon) else []
                return in_range, time

        for text in (when_text, text_of(card)):
            if not text:
                continue
            parsed = parse_date_text(text, today, horizon)
            if parsed is None:
                continue
            candidates = parsed if isinstance(parsed, list) else [parsed]
            days = [d for d in candidates if within_horizon(d, today, horizon)]
            return days, parse_time(text)

        return [], None
