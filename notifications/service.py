from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Any, Callable, Dict, Mapping, Optional, Tuple, Union

from . import channels, config
from .models import EventData, EventType, EventTypeLike, Recipient, SendResult

LOGGER = logging.getLogger(__name__)

ChannelSender = Callable[[EventType, str, EventData], SendResult]

# One pool per channel so a hung provider only exhausts its own workers.
_executors: Dict[str, ThreadPoolExecutor] = {}
_executor_lock = threading.Lock()


def _get_executor(channel: str) -> ThreadPoolExecutor:
    with _executor_lock:
        executor = _executors.get(channel)
        if executor is None:
            executor = ThreadPoolExecutor(
                max_workers=config.max_workers(),
                thread_name_prefix=f"notify-{channel}",
            )
            _executors[channel] = executor
        return executor


def shutdown_executor(wait_for_pending: bool = False) -> None:
    """Stop every channel pool. A later send_notification starts new ones.

    Called from the Celery worker_shutdown signal; other long-running hosts
    should call it on exit.
    """
    with _executor_lock:
        executors = list(_executors.values())
        _executors.clear()
    for executor in executors:
        executor.shutdown(wait=wait_for_pending)


def _contact_value(contact: Any, *names: str) -> Optional[str]:
    for name in names:
        if isinstance(contact, Mapping):
            value = contact.get(name)
        else:
            value = getattr(contact, name, None)
        if value:
            return str(value)
    return None


def build_recipient(contact: Any, data: Union[EventData, Mapping[str, Any], None]) -> Recipient:
    """Assemble a recipient from a user record (mapping or object) and event data."""
    email = _contact_value(contact, "email")
    return Recipient(
        user_id=_contact_value(contact, "user_id", "userId", "id") or email or "",
        email=email,
        phone=_contact_value(contact, "phone"),
        push_token=_contact_value(contact, "push_token", "pushToken"),
        data=data if isinstance(data, EventData) else EventData.from_mapping(data),
    )


def _planned_sends(recipient: Recipient) -> Dict[str, Tuple[ChannelSender, str]]:
    planned: Dict[str, Tuple[ChannelSender, str]] = {}
    if recipient.email:
        planned["email"] = (channels.send_email, recipient.email)
    if recipient.phone:
        if config.sms_enabled():
            planned["sms"] = (channels.send_sms, recipient.phone)
        else:
            LOGGER.debug("TWILIO_ENABLED is off; no SMS for %s", recipient.user_id)
    if recipient.push_token:
        planned["push"] = (channels.send_push_notification, recipient.push_token)
    return planned


def _log_outcome(event_type: EventType, channel: str, recipient: Recipient, future: Future) -> None:
    try:
        result = future.result()
    except Exception:
        LOGGER.exception("%s notification '%s' raised for %s", channel, event_type.value, recipient.user_id)
        return
    if not result.success:
        LOGGER.warning(
            "%s notification '%s' was not delivered to %s: %s",
            channel,
            event_type.value,
            recipient.user_id,
            result.message,
        )


def send_notification(event_type: EventTypeLike, recipient: Union[Recipient, Mapping[str, Any]]) -> None:
    """Send ``event_type`` on every channel the recipient has a destination for.

    Each channel runs in its own worker; a failing or slow channel never
    blocks or cancels the others. Nothing is returned and nothing is raised:
    a lost notification must not fail the business operation that caused it.
    """
    try:
        event = EventType(event_type)
        if not isinstance(recipient, Recipient):
            recipient = Recipient.from_dict(recipient)
        planned = _planned_sends(recipient)
        if not planned:
            LOGGER.info("No destinations for '%s' notification to %s", event.value, recipient.user_id)
            return

        futures = {
            _get_executor(name).submit(sender, event, destination, recipient.data): name
            for name, (sender, destination) in planned.items()
        }
        done, pending = wait(futures, timeout=config.channel_timeout())
        for future in done:
            _log_outcome(event, futures[future], recipient, future)
        for future in pending:
            LOGGER.warning(
                "%s notification '%s' for %s timed out; abandoning",
                futures[future],
                event.value,
                recipient.user_id,
            )
    except Exception:
        LOGGER.exception("Failed to dispatch '%s' notification", event_type)
