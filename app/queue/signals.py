"""
Celery signals: логирование и метрики задач fetchNextPage
"""
import logging

from celery.signals import after_setup_logger, task_failure, task_retry, task_success

from app.monitoring.metrics import track_continuation_job
from app.queue.scheduler import FETCH_NEXT_PAGE_TASK

logger = logging.getLogger(__name__)


def _is_fetch_next_page(sender) -> bool:
    return getattr(sender, "name", None) == FETCH_NEXT_PAGE_TASK


@after_setup_logger.connect
def setup_worker_logging(logger=None, **kwargs):
    """JSON-формат логов воркера, как у API."""
    from app.config import get_settings
    from app.logging_config import JSONFormatter

    if logger is None or not get_settings().LOG_JSON:
        return
    for handler in logger.handlers:
        handler.setFormatter(JSONFormatter())


@task_success.connect
def task_success_handler(sender=None, result=None, **kwargs):
    """Задача завершилась: страница в кэше."""
    if not _is_fetch_next_page(sender):
        return
    track_continuation_job("completed")
    logger.info("fetchNextPage completed: %s", result)


@task_retry.connect
def task_retry_handler(sender=None, request=None, reason=None, **kwargs):
    """Повтор по политике autoretry (UpstreamError, CacheStoreError)."""
    if not _is_fetch_next_page(sender):
        return
    task_id = getattr(request, "id", None)
    logger.warning(
        "fetchNextPage retry task_id=%s: %s", task_id, reason,
        extra={"task_id": task_id},
    )


@task_failure.connect
def task_failure_handler(sender=None, task_id=None, exception=None, **kwargs):
    """Окончательная ошибка: видна только в логах и метриках."""
    if not _is_fetch_next_page(sender):
        return
    track_continuation_job("failed")
    logger.error(
        "fetchNextPage failed task_id=%s: %s", task_id, exception or "Unknown error",
        extra={"task_id": task_id},
    )
