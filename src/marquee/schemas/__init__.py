"""Pydantic schemas for API requests and responses."""

from marquee.schemas.event import EventResponse, NotifyResponse, ShowtimesResponse

__all__ = [
    "EventResponse",
    "NotifyResponse",
    "ShowtimesResponse",
]
