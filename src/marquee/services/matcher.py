"""Preference matching of showtimes against subscriber interests."""

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import Enum

from marquee.scrapers.models import Event

# "dir. Martin Scorsese", "Directed by Agnès Varda", "Director: Wong Kar-wai".
# The credit ends at punctuation or where the cast list begins.
_DIRECTOR_CREDIT_RE = re.compile(
    r"\b(?:directed\s+by|dir\.|director:)\s*[^.,;|\n]+?"
    r"(?=\s+(?:and|with|starring|featuring)\b|[.,;|\n]|$)",
    re.IGNORECASE,
)


class PreferenceKind(str, Enum):
    FILM = "film"
    DIRECTOR = "director"
    ACTOR = "actor"


@dataclass(frozen=True)
class Preference:
    """A subscriber's interest, e.g. ``Preference(PreferenceKind.DIRECTOR, "Scorsese")``."""

    kind: PreferenceKind
    value: str
    id: str | None = None


@dataclass(frozen=True)
class MatchedEvent:
    """An event together with the preferences it satisfied."""

    event: Event
    matched_preferences: tuple[Preference, ...]


def match(event: Event, preferences: Iterable[Preference]) -> list[Preference]:
    """
    Return the preferences an event satisfies, in the order given.

    Matching is a case-insensitive substring test:

    - film: against the film title
    - director: against the title and the description, since listings put
      directors in either ("Giuseppe De Santis' BITTER RICE")
    - actor: against the description with director credits removed, so
      "dir. Martin Scorsese" is not read as a cast member

    An event without a description can only match on its title. A blank
    preference value never matches.
    """
    film = event.film.casefold()
    description = (event.description or "").casefold()
    combined = f"{film} {description}"
    cast_text = _DIRECTOR_CREDIT_RE.sub(" ", description)

    matched: list[Preference] = []
    for pref in preferences:
        value = pref.value.strip().casefold()
        if not value:
            continue

        if pref.kind == PreferenceKind.FILM:
            haystack = film
        elif pref.kind == PreferenceKind.DIRECTOR:
            haystack = combined
        elif pref.kind == PreferenceKind.ACTOR:
            haystack = cast_text
        else:
            continue

        if value in haystack:
            matched.append(pref)
    return matched


def find_matches(
    events: Iterable[Event], preferences: Sequence[Preference]
) -> list[MatchedEvent]:
    """Pair each event with its matched preferences, skipping events with none."""
    results: list[MatchedEvent] = []
    for event in events:
        matched = match(event, preferences)
        if matched:
            results.append(MatchedEvent(event=event, matched_preferences=tuple(matched)))
    return results
