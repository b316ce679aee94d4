from celery import Celery
from pathlab.core.config import settings

celery_app = Celery(
    "pathlab_tasks",
    broker=settings.REDIS_URL,
    backend=settings.REDIS_URL,
    include=["pathlab.tasks.email_tasks"],
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_acks_late=True,
    task_routes={
        "pathlab.tasks.email_tasks.*": {"queue": "email"},
    },
)
