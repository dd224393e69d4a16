"""Notification trigger endpoint, called by an external scheduler."""

import logging
import secrets

from fastapi import APIRouter, Depends, Header, HTTPException

from marquee.config import settings
from marquee.schemas import NotifyResponse
from marquee.services.notification_gate import (
    InMemorySubscriberStore,
    LoggingDispatcher,
    NotificationDispatcher,
    SubscriberStore,
)
from marquee.tasks.notify_job import run_notify_job

logger = logging.getLogger(__name__)
router = APIRouter()

_store = InMemorySubscriberStore()
_dispatcher = LoggingDispatcher()


def get_subscriber_store() -> SubscriberStore:
    return _store


def get_dispatcher() -> NotificationDispatcher:
    return _dispatcher


def verify_secret(authorization: str | None = Header(default=None)) -> None:
    """Require ``Authorization: Bearer <notify_secret>`` when a secret is configured."""
    if not settings.notify_secret:
        return
    expected = f"Bearer {settings.notify_secret}"
    if authorization is None or not secrets.compare_digest(authorization, expected):
        logger.warning("Rejected notify request with missing or bad secret")
        raise HTTPException(status_code=401, detail="Unauthorized")


@router.post(
    "/notify",
    response_model=NotifyResponse,
    dependencies=[Depends(verify_secret)],
)
async def trigger_notify(
    store: SubscriberStore = Depends(get_subscriber_store),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
) -> NotifyResponse:
    """Scrape every theater and notify subscribers about new matches."""
    report = await run_notify_job(store, dispatcher)

    if report["total_events"] == 0:
        message = "No showtimes found"
    else:
        message = f"Notified {report['subscribers_notified']} subscribers"

    return NotifyResponse(message=message, **report)
