"""
Next-page continuation scheduler: publishes fetchNextPage jobs to the Celery queue.
"""
import asyncio
import logging
from functools import partial
from typing import Optional

from celery import Celery

from app.schemas.youtube import ContinuationJob

logger = logging.getLogger(__name__)

FETCH_NEXT_PAGE_TASK = "fetchNextPage"
YOUTUBE_QUEUE = "youtube"


class PageScheduler:
    """Постановка задач догрузки страниц комментариев в очередь youtube."""

    def __init__(self, celery: Optional[Celery] = None, queue: str = YOUTUBE_QUEUE) -> None:
        if celery is None:
            from app.queue.celery_app import celery_app as celery
        self._celery = celery
        self.queue = queue

    async def schedule(self, job: ContinuationJob) -> str:
        """
        Отправить задачу в брокер (publish блокирующий, выполняется в executor).
        Возвращает id задачи Celery.
        """
        send = partial(
            self._celery.send_task,
            FETCH_NEXT_PAGE_TASK,
            kwargs={"payload": job.to_payload()},
            queue=self.queue,
        )
        result = await asyncio.get_running_loop().run_in_executor(None, send)
        logger.info(
            "Scheduled %s for video=%s page_token=%s",
            FETCH_NEXT_PAGE_TASK, job.video_id, job.page_token,
            extra={"video_id": job.video_id, "page_token": job.page_token},
        )
        return result.id
