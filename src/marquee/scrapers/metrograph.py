"""Metrograph scraper using BeautifulSoup HTML parsing."""

import re
from collections import defaultdict
from datetime import date

from bs4 import BeautifulSoup, Tag

from marquee.config import settings
from marquee.scrapers.base import BaseScraper, ExtractionStrategy, text_of
from marquee.scrapers.models import Event, Theater
from marquee.utils.dates import parse_month_day, parse_time, to_minutes, within_horizon
from marquee.utils.text import absolute_url


BASE_URL = "https://metrograph.com"


class MetrographScraper(BaseScraper):
    """
    Scraper for Metrograph (Lower East Side).

    The film page lists one card per film::

        div.homepage-in-theater-movie
          h3.movie_title > a          title + detail link
          div.showtimes
            h5.sr-only / h6           date label ("Tue Feb 17")
            div.film_day > a          time links ("3:00pm") to the ticket page
          h5                          "Director: ..." / "1976 / 114min / DCP"
          p.synopsis

    Cards are read in full; if the card class disappears, any
    ``div.showtimes`` block is paired with the closest preceding title.
    """

    theater = Theater.METROGRAPH
    LISTING_URL = f"{BASE_URL}/film/"

    def strategies(self) -> list[ExtractionStrategy]:
        return [
            ExtractionStrategy("film cards", self._extract_cards),
            ExtractionStrategy("showtime blocks", self._extract_showtime_blocks),
        ]

    def _extract_cards(self, soup: BeautifulSoup, today: date) -> list[Event]:
        events: list[Event] = []
        for card in soup.select("div.homepage-in-theater-movie"):
            try:
                events.extend(self._parse_card(card, today))
            except Exception as e:
                self.logger.warning(f"Metrograph: Failed to parse film card: {e}")
        return events

    def _extract_showtime_blocks(self, soup: BeautifulSoup, today: date) -> list[Event]:
        events: list[Event] = []
        for block in soup.select("div.showtimes"):
            try:
                title_link = block.find_previous(
                    lambda t: t.name in ("h2", "h3") and t.find("a") is not None
                )
                if not isinstance(title_link, Tag):
                    continue
                link = title_link.find("a")
                film = self.normalise_title(text_of(link))
                if not film:
                    continue
                film_url = absolute_url(str(link.get("href", "")), BASE_URL) or self.LISTING_URL
                events.extend(
                    self._parse_showtimes(block, film, film_url, None, None, today)
                )
            except Exception as e:
                self.logger.warning(f"Metrograph: Failed to parse showtime block: {e}")
        return events

    def _parse_card(self, card: Tag, today: date) -> list[Event]:
        """Parse a single film card into events, one per showtime."""
        link = card.select_one("h3.movie_title a")
        film = self.normalise_title(text_of(link))
        if not film or link is None:
            return []

        film_url = absolute_url(str(link.get("href", "")), BASE_URL) or self.LISTING_URL

        img = card.find("img")
        image_url = None
        if isinstance(img, Tag):
            image_url = absolute_url(str(img.get("src") or img.get("data-src") or ""), BASE_URL)

        synopsis = text_of(card.select_one("p.synopsis"))
        director = None
        for h5 in card.find_all("h5"):
            m = re.search(r"Director:\s*(.+)", text_of(h5), re.IGNORECASE)
            if m:
                director = m.group(1).strip()

        # The director leads the description so director preferences can match it
        if director:
            credit = f"Directed by {director}."
            description = f"{credit} {synopsis}" if synopsis else credit
        else:
            description = synopsis or None

        block = card.select_one("div.showtimes")
        if block is None:
            return []
        return self._parse_showtimes(block, film, film_url, image_url, description, today)

    def _parse_showtimes(
        self,
        block: Tag,
        film: str,
        film_url: str,
        image_url: str | None,
        description: str | None,
        today: date,
    ) -> list[Event]:
        """Walk date headers and their time links inside a showtimes block."""
        times_by_date: dict[date, list[tuple[str, str]]] = defaultdict(list)
        current_date: date | None = None

        for child in block.children:
            if not isinstance(child, Tag):
                continue

            classes = child.get("class") or []
            if (child.name == "h5" and "sr-only" in classes) or child.name == "h6":
                current_date = parse_month_day(text_of(child), today)
                continue

            if child.name == "div" and "film_day" in classes and current_date:
                for a in child.find_all("a"):
                    time = parse_time(text_of(a))
                    if not time:
                        continue
                    ticket_url = absolute_url(str(a.get("href", "")), BASE_URL) or film_url
                    times_by_date[current_date].append((time, ticket_url))

        events: list[Event] = []
        for day, entries in times_by_date.items():
            if not within_horizon(day, today, settings.horizon_days):
                continue
            all_times = tuple(
                sorted(dict.fromkeys(t for t, _ in entries), key=lambda t: to_minutes(t) or 0)
            )
            for time, ticket_url in entries:
                events.append(
                    Event(
                        film=film,
                        theater=self.theater,
                        date=day,
                        time=time,
                        ticket_url=ticket_url,
                        detail_url=film_url,
                        image_url=image_url,
                        description=description,
                        all_times=all_times,
                    )
                )
        return events
