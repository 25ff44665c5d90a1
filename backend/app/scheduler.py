import logging

from celery.schedules import crontab

from app.celery_config import celery_app
from app.tasks import dedupe_campaign_counters_task, purge_expired_notifications_task

logger = logging.getLogger(__name__)


@celery_app.on_after_configure.connect
def setup_periodic_tasks(sender, **kwargs):
    logger.info("Setting up periodic tasks...")

    sender.add_periodic_task(
        crontab(minute=0),  # Hourly
        dedupe_campaign_counters_task.s(),
        name="dedupe-campaign-counters"
    )

    sender.add_periodic_task(
        crontab(hour=2, minute=0),  # Daily at 2:00 AM
        purge_expired_notifications_task.s(),
        name="purge-expired-notifications"
    )

    logger.info("Periodic tasks configured successfully")
