"""Shared test fixtures."""

from datetime import date
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import FastAPI

from marquee.api.routes import health, notify, showtimes
from marquee.scrapers.models import Event, Theater

# Fixed reference date for parsing tests: Tuesday 17 February 2026
TODAY = date(2026, 2, 17)


@pytest.fixture
def test_app() -> FastAPI:
    """Minimal FastAPI app without CORS or logging setup, for API tests."""
    app = FastAPI()
    app.include_router(health.router)
    app.include_router(showtimes.router, prefix="/api")
    app.include_router(notify.router, prefix="/api")
    return app


def make_event(
    film: str = "Taxi Driver",
    theater: Theater = Theater.IFC,
    day: date = TODAY,
    time: str = "7:30 PM",
    description: str | None = None,
    ticket_url: str = "https://www.ifccenter.com/films/taxi-driver/",
) -> Event:
    return Event(
        film=film,
        theater=theater,
        date=day,
        time=time,
        ticket_url=ticket_url,
        description=description,
    )


def mock_response(text: str = "", status_code: int = 200) -> MagicMock:
    response = MagicMock()
    response.text = text
    response.status_code = status_code
    return response


def mock_http_client(*responses_or_errors) -> AsyncMock:
    """
    An httpx.AsyncClient stand-in whose ``get`` returns the given responses in order.

    Pass a dict of URL → response (or exception) instead to answer by URL.
    """
    client = AsyncMock()
    if len(responses_or_errors) == 1 and isinstance(responses_or_errors[0], dict):
        by_url = responses_or_errors[0]

        async def get(url, *args, **kwargs):
            result = by_url.get(url)
            if result is None:
                return mock_response(status_code=404)
            if isinstance(result, BaseException):
                raise result
            return result

        client.get = AsyncMock(side_effect=get)
    else:
        client.get = AsyncMock(side_effect=list(responses_or_errors))
    client.__aenter__ = AsyncMock(return_value=client)
    client.__aexit__ = AsyncMock(return_value=False)
    return client
