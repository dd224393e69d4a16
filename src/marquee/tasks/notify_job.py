"""Notification job: scrape every theater, then notify matching subscribers."""

import logging

from marquee.services.aggregator import aggregate
from marquee.services.notification_gate import (
    NotificationDispatcher,
    NotifyReport,
    SubscriberStore,
    run_notifications,
)

logger = logging.getLogger(__name__)


async def run_notify_job(
    store: SubscriberStore, dispatcher: NotificationDispatcher
) -> NotifyReport:
    """Aggregate the feed and run it through the notification gate.

    Triggered over HTTP by an external scheduler; nothing here schedules
    itself.
    """
    logger.info("Notification job started")

    events = await aggregate()
    logger.info(f"Scraped {len(events)} total showtimes")

    if not events:
        logger.warning("No showtimes found, skipping notifications")
        return {
            "total_events": 0,
            "total_subscribers": 0,
            "subscribers_notified": 0,
            "total_matches_sent": 0,
            "failures": 0,
        }

    return await run_notifications(events, store, dispatcher)
