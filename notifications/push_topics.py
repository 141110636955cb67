"""Direct device and topic sends over the shared Firebase app.

The dispatcher only ever targets a single device token; these helpers are
for broadcast-style pushes (e.g. service announcements) and topic
membership management.
"""
from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Sequence, Union

from firebase_admin import messaging

from . import config
from .channels import get_firebase_app
from .formatting import stringify_data
from .models import SendResult

LOGGER = logging.getLogger(__name__)

NOT_CONFIGURED = "Push service not configured"

Tokens = Union[str, Sequence[str]]


def _message(title: str, body: str, data: Optional[Mapping[str, Any]], **target) -> messaging.Message:
    payload = stringify_data(data or {})
    payload.setdefault("click_action", config.PUSH_CLICK_ACTION)
    return messaging.Message(
        notification=messaging.Notification(title=title, body=body),
        data=payload,
        **target,
    )


def send_to_device(token: str, title: str, body: str, data: Optional[Mapping[str, Any]] = None) -> SendResult:
    app = get_firebase_app()
    if app is None:
        return SendResult(False, NOT_CONFIGURED)
    try:
        messaging.send(_message(title, body, data, token=token), app=app)
    except Exception as exc:
        LOGGER.exception("Failed to send to device: %s", exc)
        return SendResult(False, str(exc))
    return SendResult(True)


def send_to_topic(topic: str, title: str, body: str, data: Optional[Mapping[str, Any]] = None) -> SendResult:
    app = get_firebase_app()
    if app is None:
        return SendResult(False, NOT_CONFIGURED)
    try:
        messaging.send(_message(title, body, data, topic=topic), app=app)
    except Exception as exc:
        LOGGER.exception("Failed to send to topic %s: %s", topic, exc)
        return SendResult(False, str(exc))
    LOGGER.info("Sent push '%s' to topic %s", title, topic)
    return SendResult(True)


def _token_list(tokens: Tokens) -> list:
    return [tokens] if isinstance(tokens, str) else list(tokens)


def _membership_result(action: str, topic: str, response) -> SendResult:
    if response.failure_count:
        reasons = "; ".join(err.reason for err in response.errors)
        LOGGER.warning(
            "Topic %s for %s failed for %d token(s): %s",
            action,
            topic,
            response.failure_count,
            reasons,
        )
        return SendResult(response.success_count > 0, reasons)
    return SendResult(True)


def subscribe_to_topic(tokens: Tokens, topic: str) -> SendResult:
    app = get_firebase_app()
    if app is None:
        return SendResult(False, NOT_CONFIGURED)
    try:
        response = messaging.subscribe_to_topic(_token_list(tokens), topic, app=app)
    except Exception as exc:
        LOGGER.exception("Failed to subscribe to topic %s: %s", topic, exc)
        return SendResult(False, str(exc))
    return _membership_result("subscribe", topic, response)


def unsubscribe_from_topic(tokens: Tokens, topic: str) -> SendResult:
    app = get_firebase_app()
    if app is None:
        return SendResult(False, NOT_CONFIGURED)
    try:
        response = messaging.unsubscribe_from_topic(_token_list(tokens), topic, app=app)
    except Exception as exc:
        LOGGER.exception("Failed to unsubscribe from topic %s: %s", topic, exc)
        return SendResult(False, str(exc))
    return _membership_result("unsubscribe", topic, response)
