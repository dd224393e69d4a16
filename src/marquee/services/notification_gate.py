"""Notification gate between match results and the subscriber collaborators.

Storage of subscribers and of the notification log, and delivery of the
notifications themselves, live outside this package. They are reached
through the two protocols below; the in-memory store and the logging
dispatcher are the defaults used by the API and the tests.
"""

import logging
from collections import defaultdict
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Protocol, TypedDict

from marquee.scrapers.models import Event
from marquee.services.matcher import MatchedEvent, Preference, find_matches

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Subscriber:
    id: str
    email: str
    name: str | None = None
    active: bool = True
    preferences: tuple[Preference, ...] = field(default_factory=tuple)


class SubscriberStore(Protocol):
    """Subscriber profiles plus the log of what each has been told about."""

    async def list_active_subscribers(self) -> list[Subscriber]: ...

    async def already_notified(self, subscriber_id: str, event_ids: Sequence[str]) -> set[str]:
        """Return the subset of ``event_ids`` already sent to this subscriber."""
        ...

    async def record_notifications(
        self, subscriber_id: str, matches: Sequence[MatchedEvent]
    ) -> None: ...


class NotificationDispatcher(Protocol):
    async def send(self, subscriber: Subscriber, matches: Sequence[MatchedEvent]) -> None: ...


class NotifyReport(TypedDict):
    total_events: int
    total_subscribers: int
    subscribers_notified: int
    total_matches_sent: int
    failures: int


class InMemorySubscriberStore:
    """Process-local SubscriberStore; nothing survives a restart."""

    def __init__(self, subscribers: Sequence[Subscriber] = ()) -> None:
        self.subscribers: list[Subscriber] = list(subscribers)
        self.notified: dict[str, set[str]] = defaultdict(set)

    async def list_active_subscribers(self) -> list[Subscriber]:
        return [s for s in self.subscribers if s.active]

    async def already_notified(self, subscriber_id: str, event_ids: Sequence[str]) -> set[str]:
        return self.notified[subscriber_id].intersection(event_ids)

    async def record_notifications(
        self, subscriber_id: str, matches: Sequence[MatchedEvent]
    ) -> None:
        self.notified[subscriber_id].update(m.event.id for m in matches)


class LoggingDispatcher:
    """Dispatcher that only logs what would have been sent."""

    async def send(self, subscriber: Subscriber, matches: Sequence[MatchedEvent]) -> None:
        for m in matches:
            reasons = ", ".join(f"{p.kind.value}: {p.value}" for p in m.matched_preferences)
            logger.info(
                f"Notify {subscriber.email}: {m.event.film} at {m.event.theater.value} "
                f"on {m.event.date} {m.event.time} ({reasons})"
            )


async def filter_unnotified(
    subscriber: Subscriber,
    matches: Sequence[MatchedEvent],
    store: SubscriberStore,
) -> list[MatchedEvent]:
    """Drop matches this subscriber has already been notified about."""
    if not matches:
        return []
    notified_ids = await store.already_notified(subscriber.id, [m.event.id for m in matches])
    return [m for m in matches if m.event.id not in notified_ids]


async def run_notifications(
    events: Sequence[Event],
    store: SubscriberStore,
    dispatcher: NotificationDispatcher,
) -> NotifyReport:
    """
    Match the feed against every active subscriber and send what is new.

    Matches are recorded only after a successful send, so a failed delivery
    is retried on the next run. One subscriber's failure does not stop the
    others.
    """
    subscribers = await store.list_active_subscribers()
    logger.info(f"Found {len(subscribers)} active subscribers")

    report: NotifyReport = {
        "total_events": len(events),
        "total_subscribers": len(subscribers),
        "subscribers_notified": 0,
        "total_matches_sent": 0,
        "failures": 0,
    }

    for subscriber in subscribers:
        if not subscriber.preferences:
            continue

        matches = find_matches(events, subscriber.preferences)
        new_matches = await filter_unnotified(subscriber, matches, store)
        if not new_matches:
            continue

        try:
            await dispatcher.send(subscriber, new_matches)
            await store.record_notifications(subscriber.id, new_matches)
        except Exception as e:
            logger.error(f"Failed to notify {subscriber.email}: {e}", exc_info=True)
            report["failures"] += 1
            continue

        report["subscribers_notified"] += 1
        report["total_matches_sent"] += len(new_matches)
        logger.info(f"Sent {len(new_matches)} matches to {subscriber.email}")

    logger.info(
        f"Notification run complete: {report['subscribers_notified']} subscribers, "
        f"{report['total_matches_sent']} matches"
    )
    return report
