from celery import Celery
from kombu import Queue

from app.platform.config import settings


def create_celery_app() -> Celery:
    """
    Create and configure the Celery application.

    Only used with SCHEDULER_BACKEND=celery: beat fires the two scan triggers,
    a single worker on the scan.orchestration queue runs them.

    Queue Structure:
    - scan.orchestration: drain pending scans / schedule due websites
    """
    celery_app = Celery(
        "webpulse",
        broker=settings.CELERY_BROKER_URL,
        backend=settings.CELERY_RESULT_BACKEND,
    )

    celery_app.conf.update(
        task_serializer=settings.CELERY_TASK_SERIALIZER,
        result_serializer=settings.CELERY_RESULT_SERIALIZER,
        accept_content=[settings.CELERY_ACCEPT_CONTENT],
        timezone="UTC",
        enable_utc=True,
        task_track_started=True,
        task_time_limit=settings.CELERY_TASK_TIME_LIMIT,
        result_expires=3600,  # Results expire after 1 hour

        task_routes={
            "app.features.scan.workers.tasks.drain_pending_scans": {"queue": "scan.orchestration"},
            "app.features.scan.workers.tasks.schedule_due_scans": {"queue": "scan.orchestration"},
            "app.features.scan.workers.tasks.run_scan": {"queue": "scan.orchestration"},
        },
        task_queues=(
            Queue("default"),
            Queue("scan.orchestration"),
        ),
        task_default_queue="default",

        # One audit at a time per worker process
        worker_prefetch_multiplier=1,
        worker_concurrency=1,

        beat_schedule={
            "drain-pending-scans": {
                "task": "app.features.scan.workers.tasks.drain_pending_scans",
                "schedule": float(settings.DRAIN_INTERVAL_SECONDS),  # every 5 minutes
            },
            "schedule-due-scans": {
                "task": "app.features.scan.workers.tasks.schedule_due_scans",
                "schedule": float(settings.SCHEDULE_INTERVAL_SECONDS),  # every hour
            },
        },
    )

    celery_app.autodiscover_tasks(["app.features.scan.workers"])

    return celery_app


# Global Celery app instance
celery_app = create_celery_app()
