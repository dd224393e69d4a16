"""Data models for scrapers."""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum

from marquee.utils.dates import parse_time
from marquee.utils.text import slugify

# Displayed instead of a clock time when a source only publishes run dates
SEE_TIMES = "See Times"


class Theater(str, Enum):
    """Supported venues. The value is the display name used in the feed."""

    METROGRAPH = "Metrograph"
    BAM = "BAM Rose Cinemas"
    LOW_CINEMA = "Low Cinema"
    IFC = "IFC Center"
    FILM_FORUM = "Film Forum"

    @property
    def slug(self) -> str:
        return _THEATER_SLUGS[self]


_THEATER_SLUGS: dict[Theater, str] = {
    Theater.METROGRAPH: "metrograph",
    Theater.BAM: "bam",
    Theater.LOW_CINEMA: "lowcinema",
    Theater.IFC: "ifc",
    Theater.FILM_FORUM: "filmforum",
}


def make_event_id(theater: Theater, film: str, day: date, time: str) -> str:
    """
    Build the stable identifier of a showing.

    Lower-cased, whitespace turned into hyphens and punctuation removed, so
    re-scraping an unchanged listing always yields the same id:

        make_event_id(Theater.IFC, "Taxi Driver", date(2026, 2, 18), "7:30 PM")
        → "ifc-taxi-driver-2026-02-18-730-pm"
    """
    parts = [theater.slug, slugify(film), day.isoformat(), slugify(time)]
    return "-".join(p for p in parts if p)


@dataclass(frozen=True)
class Event:
    """
    A single screening, normalised from any source.

    This is the output format that all scrapers must return. Instances are
    immutable; enrichment from detail pages builds a new Event with
    ``dataclasses.replace``.
    """

    film: str  # Film title as it appears on the cinema website
    theater: Theater
    date: date
    time: str  # "7:30 PM", or SEE_TIMES when the source has no times
    ticket_url: str  # Absolute URL to buy tickets or see times
    detail_url: str | None = None  # Film page on the cinema website
    image_url: str | None = None
    description: str | None = None
    all_times: tuple[str, ...] | None = None  # Every time for this film/theater/date
    popularity: int | None = None  # 0-100 where a source exposes it
    id: str = field(init=False)

    def __post_init__(self) -> None:
        """Validate fields and derive the identifier."""
        if not self.film.strip():
            raise ValueError("film title must not be empty")
        if not self.ticket_url.startswith(("http://", "https://")):
            raise ValueError(f"ticket_url must be absolute: {self.ticket_url!r}")
        if self.time != SEE_TIMES and parse_time(self.time) != self.time:
            raise ValueError(f"time must be a display time or {SEE_TIMES!r}: {self.time!r}")
        if self.popularity is not None and not 0 <= self.popularity <= 100:
            raise ValueError(f"popularity must be between 0 and 100: {self.popularity}")
        if self.all_times is not None and not isinstance(self.all_times, tuple):
            object.__setattr__(self, "all_times", tuple(self.all_times))

        object.__setattr__(
            self, "id", make_event_id(self.theater, self.film, self.date, self.time)
        )

    @property
    def has_time(self) -> bool:
        return self.time != SEE_TIMES
