from celery import Celery

from app.config import settings

celery_app = Celery(
    "energy_aggregation",
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=["app.workers.tasks"],
)

celery_app.conf.update(
    # Serialisation
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    # Timezone
    timezone="UTC",
    enable_utc=True,
    # Reliability
    task_acks_late=True,       # Ack after the load finishes
    worker_prefetch_multiplier=1,
    # Keep load summaries for 24 hours
    result_expires=86400,
)
