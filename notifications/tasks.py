from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Union

from celery import shared_task

from .models import EventType, EventTypeLike, Recipient
from .service import send_notification

LOGGER = logging.getLogger(__name__)


@shared_task(name="notifications.tasks.deliver_notification", ignore_result=True)
def deliver_notification(event_type: str, recipient: Dict[str, Any]) -> None:
    """Run the fan-out for one recipient inside a worker."""
    send_notification(event_type, Recipient.from_dict(recipient))


def enqueue_notification(event_type: EventTypeLike, recipient: Union[Recipient, Mapping[str, Any]]) -> bool:
    """Hand a notification to the worker pool without waiting for delivery.

    Returns False (and logs) when the task could not be published, e.g.
    because the broker is down; the caller's request is never failed.
    """
    try:
        payload = recipient.to_dict() if isinstance(recipient, Recipient) else dict(recipient)
        deliver_notification.delay(EventType(event_type).value, payload)
    except Exception as exc:
        LOGGER.exception("Failed to enqueue '%s' notification: %s", event_type, exc)
        return False
    return True
