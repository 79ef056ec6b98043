"""
Celery application configuration
"""
from celery import Celery

from app.config import get_settings

settings = get_settings()

celery_app = Celery(
    "video_metadata_api",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
    include=[
        "app.queue.tasks",
    ],
)

celery_app.conf.update(
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],
    timezone="UTC",
    enable_utc=True,
    task_default_queue="youtube",
    task_time_limit=settings.CELERY_TASK_TIME_LIMIT,
    worker_prefetch_multiplier=settings.CELERY_WORKER_PREFETCH_MULTIPLIER,
    worker_concurrency=settings.CELERY_WORKER_CONCURRENCY,
    # at-least-once: подтверждение после выполнения, повторная доставка при падении воркера
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    task_ignore_result=True,
)

import app.queue.signals  # noqa: F401,E402 - register Celery signal handlers
