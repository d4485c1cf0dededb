"""
Celery application for async task processing
"""
from celery import Celery
from celery.signals import setup_logging

from jobboard.core.config import settings
from jobboard.core.logging_config import configure_logging

celery_app = Celery(
    "jobboard",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
    include=[
        "jobboard.tasks.resume_tasks",
    ],
)

# Analysis is fire-and-forget: acknowledged on receipt, never retried,
# bounded by a hard time limit. A lost worker leaves the record to a
# manual reprocess.
celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_always_eager=settings.CELERY_TASK_ALWAYS_EAGER,
    task_ignore_result=True,
    task_acks_late=False,
    task_time_limit=settings.ANALYSIS_TASK_TIME_LIMIT,
    task_soft_time_limit=max(settings.ANALYSIS_TASK_TIME_LIMIT - 30, 1),
    worker_prefetch_multiplier=4,
    worker_max_tasks_per_child=1000,
)


@setup_logging.connect
def _configure_worker_logging(**kwargs):
    """Keep Celery from installing its own root handlers"""
    configure_logging()
