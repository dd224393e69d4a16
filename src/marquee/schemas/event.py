"""Pydantic schemas for the showtimes feed."""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from marquee.scrapers.models import Theater


class EventResponse(BaseModel):
    """A single showtime, serialized with the camelCase field names the front end reads."""

    model_config = ConfigDict(
        from_attributes=True, alias_generator=to_camel, populate_by_name=True
    )

    id: str
    film: str
    theater: Theater
    date: date
    time: str
    ticket_url: str
    detail_url: str | None = None
    image_url: str | None = None
    description: str | None = None
    all_times: list[str] | None = None
    popularity: int | None = None


class ShowtimesResponse(BaseModel):
    """Response for the showtimes endpoint."""

    showtimes: list[EventResponse]
    timestamp: datetime
    count: int


class NotifyResponse(BaseModel):
    """Summary of a notification run."""

    message: str
    total_events: int
    total_subscribers: int
    subscribers_notified: int
    total_matches_sent: int
    failures: int
