from celery import Celery

from budgetdash.core.config import settings
from budgetdash.core.logging import configure_logging

configure_logging(settings.ENV)

celery_app = Celery("budgetdash", broker=settings.REDIS_URL, backend=settings.REDIS_URL, include=["budgetdash.worker.tasks"])
celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone=settings.TZ,
    task_acks_late=True,
    worker_prefetch_multiplier=1,
    task_always_eager=settings.ENV == "test",
)
