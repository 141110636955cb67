"""Celery application factory for background notification delivery."""
from __future__ import annotations

import logging
import os

from celery import Celery, signals

from notifications import channels, service

LOGGER = logging.getLogger(__name__)

LOCAL_REDIS_URL = "redis://localhost:6379/0"


def broker_url() -> str:
    return os.getenv("CELERY_BROKER_URL") or os.getenv("REDIS_URL") or LOCAL_REDIS_URL


def create_celery_app() -> Celery:
    """Create and configure the Celery app for the project."""
    broker = broker_url()
    celery_app = Celery(
        "shipping_notifications",
        broker=broker,
        backend=os.getenv("CELERY_RESULT_BACKEND") or broker,
        include=["notifications.tasks"],
    )

    celery_app.conf.update(
        task_serializer="json",
        result_serializer="json",
        accept_content=["json"],
        timezone=os.getenv("CELERY_TIMEZONE", "UTC"),
        enable_utc=True,
        task_ignore_result=True,
        task_soft_time_limit=int(os.getenv("NOTIFY_TASK_SOFT_TIME_LIMIT", "60")),
    )

    return celery_app


@signals.worker_shutdown.connect
def release_notification_resources(**_):
    """Drain the channel pools and drop provider clients when the worker stops."""
    LOGGER.info("Celery worker shutting down; releasing notification clients")
    service.shutdown_executor(wait_for_pending=True)
    channels.reset_clients()


celery_app = create_celery_app()
