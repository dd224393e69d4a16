"""Showtimes API endpoint."""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Response

from marquee.config import settings
from marquee.schemas import EventResponse, ShowtimesResponse
from marquee.scrapers.models import Event
from marquee.services.aggregator import aggregate

logger = logging.getLogger(__name__)
router = APIRouter()

Loader = Callable[[], Awaitable[list[Event]]]


class ShowtimesCache:
    """
    Holds the last aggregated feed for ``ttl`` seconds.

    Concurrent requests on an expired cache share a single aggregation run.
    """

    def __init__(self, loader: Loader = aggregate, ttl: float | None = None) -> None:
        self.loader = loader
        self.ttl = settings.showtimes_cache_seconds if ttl is None else ttl
        self._events: list[Event] | None = None
        self._fetched_at: datetime | None = None
        self._expires: float = 0.0
        self._lock = asyncio.Lock()

    @property
    def fetched_at(self) -> datetime | None:
        return self._fetched_at

    def is_fresh(self) -> bool:
        return self._events is not None and time.monotonic() < self._expires

    def invalidate(self) -> None:
        self._events = None
        self._expires = 0.0

    async def get(self) -> list[Event]:
        if self.is_fresh():
            return self._events

        async with self._lock:
            # Another request may have refreshed while we waited
            if self.is_fresh():
                return self._events

            logger.info("Showtimes cache expired, aggregating")
            events = await self.loader()
            self._events = events
            self._fetched_at = datetime.now(timezone.utc)
            self._expires = time.monotonic() + self.ttl
            return events


_cache = ShowtimesCache()


def get_showtimes_cache() -> ShowtimesCache:
    return _cache


@router.get(
    "/showtimes",
    response_model=ShowtimesResponse,
    response_model_by_alias=True,
    response_model_exclude_none=True,
)
async def get_showtimes(
    response: Response,
    cache: ShowtimesCache = Depends(get_showtimes_cache),
) -> ShowtimesResponse:
    """
    Get the merged showtime feed for every theater.

    The feed is sorted by date, then by start time, with "See Times" entries
    first on their day. Responses may be served from cache for up to an hour.
    """
    events = await cache.get()

    ttl = int(cache.ttl)
    response.headers["Cache-Control"] = (
        f"public, s-maxage={ttl}, stale-while-revalidate={ttl * 2}"
    )

    return ShowtimesResponse(
        showtimes=[EventResponse.model_validate(e) for e in events],
        timestamp=cache.fetched_at or datetime.now(timezone.utc),
        count=len(events),
    )
