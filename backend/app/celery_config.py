from celery import Celery

from app.core.config import (
    CELERY_BROKER_URL,
    CELERY_RESULT_BACKEND,
    CELERY_TASK_QUEUE,
)

celery_app = Celery(
    "signal_ledger_tasks",
    broker=CELERY_BROKER_URL,
    backend=CELERY_RESULT_BACKEND,
    include=["app.tasks"],
)

# Tasks must stay idempotent: acks are late and redelivery is enabled.
celery_app.conf.update(
    task_default_queue=CELERY_TASK_QUEUE,
    task_routes={"app.tasks.*": {"queue": CELERY_TASK_QUEUE}},
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],
    timezone="UTC",
    enable_utc=True,
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    task_track_started=True,
    task_default_retry_delay=60,
    worker_prefetch_multiplier=1,
    worker_max_tasks_per_child=500,
    result_expires=24 * 3600,
    broker_connection_retry_on_startup=True,
    broker_connection_max_retries=10,
    result_backend_transport_options={"retry_on_timeout": True, "max_retries": 3},
)
