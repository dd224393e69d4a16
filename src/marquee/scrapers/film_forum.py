"""Film Forum scraper using BeautifulSoup HTML parsing."""

import re
from datetime import date

import httpx
from bs4 import BeautifulSoup, Comment, Tag

from marquee.config import settings
from marquee.scrapers.base import (
    DESCRIPTION_LIMIT,
    BaseScraper,
    ExtractionStrategy,
    FilmDetails,
    text_of,
)
from marquee.scrapers.models import SEE_TIMES, Event, Theater
from marquee.utils.dates import (
    nearest_weekday,
    parse_closing_day,
    parse_date_range,
    parse_time,
    resolve_weekday_date,
    weekday_number,
    within_horizon,
)
from marquee.utils.text import absolute_url, truncate

BASE_URL = "https://filmforum.org"
TICKETS_URL = "https://my.filmforum.org/events"

_FILM_HREF = re.compile(r"/film/")


class FilmForumScraper(BaseScraper):
    """
    Scraper for Film Forum (West Houston Street).

    Every page carries a "Playing This Week" box::

        div#tabs
          ul > li.sat > a[href="#tabs-0"]       weekday of each tab
          div#tabs-0
            <!-- 21 -->                          day of month
            p
              strong > a[href="/film/..."]       title (strong may add a director prefix)
              span 12:15  span 2:30              bare times, no AM/PM

    If the weekly box is missing, the now-playing list is read instead and
    each film's run ("MUST END THURSDAY", "Feb 6 – Feb 19") becomes one
    SEE_TIMES event per day.
    """

    theater = Theater.FILM_FORUM
    LISTING_URL = f"{BASE_URL}/now_playing"

    def strategies(self) -> list[ExtractionStrategy]:
        return [
            ExtractionStrategy("weekly schedule tabs", self._extract_week_tabs),
            ExtractionStrategy("now playing runs", self._extract_runs),
        ]

    async def enrich(self, client: httpx.AsyncClient, events: list[Event]) -> list[Event]:
        urls = [e.detail_url for e in events if e.detail_url]
        details = await self._fetch_details(client, urls)
        return self.apply_details(events, details, key=lambda e: e.detail_url)

    def parse_detail(self, html: str, url: str) -> FilmDetails:
        """Film pages put the synopsis in the first paragraph of ``.copy``."""
        details = super().parse_detail(html, url)
        soup = BeautifulSoup(html, "html.parser")
        copy = text_of(soup.select_one(".copy > p"))
        if not copy:
            return details
        return FilmDetails(
            image_url=details.image_url,
            description=truncate(copy, DESCRIPTION_LIMIT),
        )

    # ------------------------------------------------------------------
    # Weekly schedule tabs
    # ------------------------------------------------------------------

    def _extract_week_tabs(self, soup: BeautifulSoup, today: date) -> list[Event]:
        tab_days: list[tuple[str, int]] = []
        for li in soup.select("#tabs > ul > li"):
            link = li.find("a")
            tab_id = str(link.get("href", "")).lstrip("#") if isinstance(link, Tag) else ""
            weekday = next(
                (weekday_number(c) for c in li.get("class") or [] if weekday_number(c) is not None),
                None,
            )
            if weekday is None:
                weekday = weekday_number(text_of(link))
            if tab_id and weekday is not None:
                tab_days.append((tab_id, weekday))

        if not tab_days:
            self.logger.debug("Film Forum: Could not find tab day-of-week headers")
            return []

        events: list[Event] = []
        for tab_id, weekday in tab_days:
            panel = soup.find(id=tab_id)
            if not isinstance(panel, Tag):
                continue

            day = self._resolve_tab_date(panel, weekday, today)
            if not within_horizon(day, today, settings.horizon_days):
                continue

            for p in panel.find_all("p"):
                try:
                    events.extend(self._parse_schedule_entry(p, day))
                except Exception as e:
                    self.logger.warning(f"Film Forum: Failed to parse schedule entry: {e}")
        return events

    def _resolve_tab_date(self, panel: Tag, weekday: int, today: date) -> date:
        """Use the <!-- DD --> comment when present, else the weekday alone."""
        comment = panel.find(
            string=lambda s: isinstance(s, Comment) and re.fullmatch(r"\s*\d{1,2}\s*", s)
        )
        if comment:
            return resolve_weekday_date(weekday, int(str(comment).strip()), today)
        return nearest_weekday(weekday, today)

    def _parse_schedule_entry(self, p: Tag, day: date) -> list[Event]:
        """Parse a <p> holding one film and its bare showtimes."""
        links = p.select("strong > a")
        title_links = [a for a in links if _FILM_HREF.search(str(a.get("href", "")))]
        if not title_links:
            return []
        title_link = title_links[-1]

        raw_film = self.normalise_title(text_of(title_link))
        if not raw_film:
            return []

        # "Giuseppe De Santis' BITTER RICE": the strong holds a director prefix
        strong = title_link.find_parent("strong")
        strong_text = self.normalise_title(text_of(strong))
        film = strong_text if len(strong_text) > len(raw_film) else raw_film

        series_link = p.select_one('a[href*="/series/"]')
        series = text_of(series_link)
        if series and series not in film:
            film = f"{film} ({series})"

        film_url, ticket_url = self._film_urls(str(title_link.get("href", "")))

        times = [t for t in (parse_time(text_of(span)) for span in p.find_all("span")) if t]
        all_times = tuple(dict.fromkeys(times))

        return [
            Event(
                film=film,
                theater=self.theater,
                date=day,
                time=time,
                ticket_url=ticket_url,
                detail_url=film_url,
                all_times=all_times,
            )
            for time in all_times
        ]

    # ------------------------------------------------------------------
    # Now playing runs
    # ------------------------------------------------------------------

    def _extract_runs(self, soup: BeautifulSoup, today: date) -> list[Event]:
        events: list[Event] = []
        for heading in soup.find_all(["h2", "h3"]):
            try:
                events.extend(self._parse_run(heading, today))
            except Exception as e:
                self.logger.warning(f"Film Forum: Failed to parse now playing entry: {e}")
        return events

    def _parse_run(self, heading: Tag, today: date) -> list[Event]:
        link = heading.find("a", href=_FILM_HREF)
        if not isinstance(link, Tag):
            return []
        film = self.normalise_title(text_of(link))
        if not film:
            return []

        run_text = self._run_text(heading)

        horizon = settings.horizon_days
        days = parse_closing_day(run_text, today, horizon)
        if days is None:
            days = parse_date_range(run_text, today, horizon)
        if not days:
            return []

        film_url, ticket_url = self._film_urls(str(link.get("href", "")))
        return [
            Event(
                film=film,
                theater=self.theater,
                date=day,
                time=SEE_TIMES,
                ticket_url=ticket_url,
                detail_url=film_url,
            )
            for day in days
        ]

    @staticmethod
    def _run_text(heading: Tag) -> str:
        """
        Text describing one film's run.

        Uses the enclosing block when it holds only this film. Otherwise the
        films share a container, so take the heading and its following
        siblings up to the next heading.
        """
        block = heading.find_parent(["article", "li", "div"])
        if block is not None and len(block.find_all("a", href=_FILM_HREF)) == 1:
            return text_of(block)

        parts = [text_of(heading)]
        for sibling in heading.find_next_siblings():
            if sibling.name in ("h2", "h3") or sibling.find(["h2", "h3"]):
                break
            parts.append(text_of(sibling))
        return " ".join(p for p in parts if p)

    def _film_urls(self, href: str) -> tuple[str, str]:
        """Return (film page, ticket page) for a /film/<slug> link."""
        film_url = absolute_url(href, BASE_URL) or self.LISTING_URL
        slug = href.rstrip("/").split("/")[-1]
        ticket_url = f"{TICKETS_URL}/{slug}" if slug else film_url
        return film_url, ticket_url
