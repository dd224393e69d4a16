"""Tests for concurrent aggregation across theaters."""

import asyncio
import logging
from datetime import date, timedelta
from unittest.mock import patch

from conftest import make_event, mock_http_client, mock_response
from marquee.scrapers.bam import BAMScraper
from marquee.scrapers.base import BaseScraper
from marquee.scrapers.models import SEE_TIMES, Event, Theater
from marquee.services.aggregator import aggregate, sort_events

TODAY = date(2026, 2, 17)


class StubScraper(BaseScraper):
    """Scraper that returns canned events without touching the network."""

    def __init__(
        self,
        theater: Theater,
        events: list[Event] | None = None,
        error: Exception | None = None,
        delay: float = 0,
    ) -> None:
        super().__init__()
        self.theater = theater
        self.events = events or []
        self.error = error
        self.delay = delay

    def strategies(self):
        return []

    async def fetch_events(self, today=None):
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error
        return self.events


def events_for(theater: Theater, count: int) -> list[Event]:
    return [
        make_event(film=f"Film {i}", theater=theater, day=TODAY + timedelta(days=i))
        for i in range(count)
    ]


class TestAggregate:
    async def test_failed_source_only_loses_its_own_events(self, caplog) -> None:
        scrapers = [
            StubScraper(Theater.METROGRAPH, events_for(Theater.METROGRAPH, 5)),
            BAMScraper(),
            StubScraper(Theater.IFC, events_for(Theater.IFC, 3)),
        ]
        mock_client = mock_http_client(mock_response(status_code=500))

        with caplog.at_level(logging.INFO):
            with patch("httpx.AsyncClient", return_value=mock_client):
                events = await aggregate(scrapers, today=TODAY)

        assert len(events) == 8
        assert {e.theater for e in events} == {Theater.METROGRAPH, Theater.IFC}
        assert "BAM Rose Cinemas: HTTP 500" in caplog.text
        assert "Aggregation complete: 8 events" in caplog.text

    async def test_raising_scraper_is_contained(self, caplog) -> None:
        scrapers = [
            StubScraper(Theater.LOW_CINEMA, error=RuntimeError("boom")),
            StubScraper(Theater.FILM_FORUM, events_for(Theater.FILM_FORUM, 2)),
        ]

        with caplog.at_level(logging.ERROR):
            events = await aggregate(scrapers, today=TODAY)

        assert len(events) == 2
        assert "✗ Low Cinema failed: boom" in caplog.text

    async def test_hung_scraper_times_out(self, caplog) -> None:
        scrapers = [
            StubScraper(Theater.METROGRAPH, events_for(Theater.METROGRAPH, 1), delay=5),
            StubScraper(Theater.IFC, events_for(Theater.IFC, 2)),
        ]

        with caplog.at_level(logging.ERROR):
            events = await aggregate(scrapers, today=TODAY, timeout=0.05)

        assert [e.theater for e in events] == [Theater.IFC, Theater.IFC]
        assert "Metrograph failed: timed out" in caplog.text

    async def test_all_sources_empty(self) -> None:
        scrapers = [StubScraper(t) for t in Theater]
        assert await aggregate(scrapers, today=TODAY) == []

    async def test_merged_feed_is_sorted(self) -> None:
        late = make_event(film="Late Show", theater=Theater.METROGRAPH, time="11:00 PM")
        early = make_event(film="Early Show", theater=Theater.IFC, time="1:00 AM")
        tomorrow = make_event(film="Tomorrow", day=TODAY + timedelta(days=1), time="10:00 AM")
        scrapers = [
            StubScraper(Theater.METROGRAPH, [tomorrow, late]),
            StubScraper(Theater.IFC, [early]),
        ]

        events = await aggregate(scrapers, today=TODAY)

        assert [e.film for e in events] == ["Early Show", "Late Show", "Tomorrow"]


class TestSortEvents:
    def test_orders_by_date_then_clock_time(self) -> None:
        events = [
            make_event(film="C", day=TODAY + timedelta(days=1), time="9:00 AM"),
            make_event(film="B", time="11:00 PM"),
            make_event(film="A", time="1:00 AM"),
        ]
        assert [e.film for e in sort_events(events)] == ["A", "B", "C"]

    def test_noon_sorts_after_morning(self) -> None:
        events = [make_event(film="Noon", time="12:00 PM"), make_event(film="Morning", time="11:30 AM")]
        assert [e.film for e in sort_events(events)] == ["Morning", "Noon"]

    def test_see_times_sorts_first_on_its_day(self) -> None:
        events = [
            make_event(film="Midnight", time="12:00 AM"),
            make_event(film="Run", theater=Theater.BAM, time=SEE_TIMES),
            make_event(film="Yesterday's Late Show", day=TODAY - timedelta(days=1), time="11:00 PM"),
        ]
        assert [e.film for e in sort_events(events)] == ["Yesterday's Late Show", "Run", "Midnight"]

    def test_equal_keys_keep_source_order(self) -> None:
        events = [
            make_event(film="First", theater=Theater.BAM, time=SEE_TIMES),
            make_event(film="Second", theater=Theater.FILM_FORUM, time=SEE_TIMES),
        ]
        assert [e.film for e in sort_events(events)] == ["First", "Second"]
