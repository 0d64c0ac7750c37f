"""Celery application for background notifications."""

import logging
import os

from celery import Celery
from celery.signals import worker_process_init


REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")

celery = Celery("task-manager", broker=REDIS_URL, backend=REDIS_URL)

celery.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    task_time_limit=60,
    task_soft_time_limit=45,
    worker_hijack_root_logger=False,  # OTel manages logging
)

celery.autodiscover_tasks(["task_manager.jobs"])


@worker_process_init.connect
def init_worker_telemetry(**kwargs) -> None:
    """Initialize telemetry in each forked worker process."""
    if os.getenv("OTEL_SDK_DISABLED"):
        return

    from task_manager.telemetry import get_otel_log_handler, setup_telemetry

    setup_telemetry()

    handler = get_otel_log_handler()
    if handler:
        jobs_logger = logging.getLogger("task_manager.jobs")
        jobs_logger.setLevel(logging.DEBUG)
        if handler not in jobs_logger.handlers:
            jobs_logger.addHandler(handler)

    logging.getLogger("task_manager.jobs").info("Worker telemetry initialized")
