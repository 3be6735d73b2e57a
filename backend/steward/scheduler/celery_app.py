from celery import Celery
from celery.schedules import crontab
from celery.signals import after_setup_logger

from steward.core.config import settings
from steward.core.logging import quiet_libraries

app = Celery("steward", include=["steward.tasks.github_sync"])
app.conf.broker_url = settings.CELERY_BROKER_URL
app.conf.result_backend = settings.CELERY_RESULT_BACKEND
app.conf.timezone = settings.CELERY_TIMEZONE
app.conf.enable_utc = True

app.conf.beat_schedule = {
    "sync-maintainers": {
        "task": "steward.tasks.github_sync.sync_maintainers",
        "schedule": crontab(
            hour=settings.SYNC_HOUR,
            minute=settings.SYNC_MINUTE,
        ),
    },
}


@after_setup_logger.connect
def _configure_worker_logging(logger, *args, **kwargs):
    quiet_libraries()
