"""IFC Center scraper using BeautifulSoup HTML parsing."""

from datetime import date

import httpx
from bs4 import BeautifulSoup, Tag

from marquee.config import settings
from marquee.scrapers.base import BaseScraper, ExtractionStrategy, text_of
from marquee.scrapers.models import Event, Theater
from marquee.utils.dates import parse_month_day, parse_time, within_horizon
from marquee.utils.text import absolute_url

BASE_URL = "https://www.ifccenter.com"


class IFCScraper(BaseScraper):
    """
    Scraper for IFC Center (Greenwich Village).

    The homepage contains server-rendered daily schedule blocks::

        div.daily-schedule.wed
          h3                            "Wed Feb 18"
          ul > li > div.details
            h3 > a[href]                film title + film page
            ul.times > li > a[href]     "7:30 pm" + ticket URL

    One event is emitted per showtime, each carrying the film's full list
    of times for that day. Film pages are fetched for a synopsis and poster
    because the schedule only has titles.
    """

    theater = Theater.IFC
    LISTING_URL = BASE_URL

    def strategies(self) -> list[ExtractionStrategy]:
        return [
            ExtractionStrategy("daily schedule blocks", self._extract_daily_schedules),
            ExtractionStrategy("film details with date headers", self._extract_flat),
        ]

    async def enrich(self, client: httpx.AsyncClient, events: list[Event]) -> list[Event]:
        urls = [
            e.detail_url
            for e in events
            if e.detail_url and (e.description is None or e.image_url is None)
        ]
        details = await self._fetch_details(client, urls)
        return self.apply_details(events, details, key=lambda e: e.detail_url)

    def _extract_daily_schedules(self, soup: BeautifulSoup, today: date) -> list[Event]:
        events: list[Event] = []
        for day_block in soup.select("div.daily-schedule"):
            header = day_block.find("h3", recursive=False)
            day = parse_month_day(text_of(header), today)
            if day is None or not within_horizon(day, today, settings.horizon_days):
                continue

            for details in day_block.select("div.details"):
                try:
                    events.extend(self._parse_details(details, day))
                except Exception as e:
                    self.logger.warning(f"IFC Center: Failed to parse film entry: {e}")
        return events

    def _extract_flat(self, soup: BeautifulSoup, today: date) -> list[Event]:
        """Attribute each film entry to the closest date header before it."""
        events: list[Event] = []
        for details in soup.select("div.details"):
            try:
                header = details.find_previous(
                    lambda t: t.name in ("h2", "h3", "h4")
                    and parse_month_day(text_of(t), today) is not None
                )
                day = parse_month_day(text_of(header), today) if header else None
                if day is None or not within_horizon(day, today, settings.horizon_days):
                    continue
                events.extend(self._parse_details(details, day))
            except Exception as e:
                self.logger.warning(f"IFC Center: Failed to parse film entry: {e}")
        return events

    def _parse_details(self, details: Tag, day: date) -> list[Event]:
        """Parse a film entry into one event per showtime."""
        link = details.select_one("h3 a")
        film = self.normalise_title(text_of(link))
        if not film or link is None:
            return []

        film_url = absolute_url(str(link.get("href", "")), BASE_URL) or BASE_URL

        img = details.find("img")
        image_url = absolute_url(str(img.get("src", "")), BASE_URL) if isinstance(img, Tag) else None
        description = text_of(details.select_one("p, .description, .synopsis")) or None

        entries: list[tuple[str, str]] = []
        for a in details.select("ul.times li a"):
            time = parse_time(text_of(a))
            if not time:
                continue
            ticket_url = absolute_url(str(a.get("href", "")), BASE_URL) or film_url
            entries.append((time, ticket_url))

        all_times = tuple(dict.fromkeys(time for time, _ in entries))
        return [
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
            for time, ticket_url in entries
        ]
