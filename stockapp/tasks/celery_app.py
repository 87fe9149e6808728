from celery import Celery

from stockapp.config import get_settings

settings = get_settings()

# Create Celery application
celery_app = Celery(
    "stockapp",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
    include=["stockapp.tasks.stock_tasks"]
)

# Celery configuration
celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,

    # Task settings
    task_track_started=True,
    task_time_limit=60,
    task_soft_time_limit=45,
    task_always_eager=settings.CELERY_TASK_ALWAYS_EAGER,
    task_eager_propagates=True,

    # Worker settings
    worker_prefetch_multiplier=1,

    # Retry settings
    task_acks_late=True,
    task_reject_on_worker_lost=True,
)
