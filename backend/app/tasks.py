import asyncio
import logging

from app.celery_config import celery_app
from app.db.init import init_db
from app.services.aggregator import counters
from app.services.notifications import purge_expired

logger = logging.getLogger(__name__)


async def _dedupe_campaign_counters() -> int:
    await init_db()
    logger.info("=== DEDUPE_CAMPAIGN_COUNTERS_TASK STARTED ===")
    repaired = await counters.dedupe_distinct_sets()
    logger.info(f"=== DEDUPE_CAMPAIGN_COUNTERS_TASK COMPLETED: {repaired} campaigns repaired ===")
    return repaired


async def _purge_expired_notifications() -> int:
    await init_db()
    logger.info("=== PURGE_EXPIRED_NOTIFICATIONS_TASK STARTED ===")
    deleted = await purge_expired()
    logger.info(f"=== PURGE_EXPIRED_NOTIFICATIONS_TASK COMPLETED: {deleted} deleted ===")
    return deleted


@celery_app.task(name="app.tasks.dedupe_campaign_counters_task", acks_late=True, max_retries=3)
def dedupe_campaign_counters_task():
    """
    Removes duplicate actor ids from campaign reach sets. Runs hourly; new
    writes use $addToSet so this only repairs legacy rows.
    """
    try:
        return asyncio.run(_dedupe_campaign_counters())
    except Exception as e:
        logger.error(f"Error in dedupe_campaign_counters_task: {e}", exc_info=True)
        raise


@celery_app.task(name="app.tasks.purge_expired_notifications_task", acks_late=True, max_retries=3)
def purge_expired_notifications_task():
    """Deletes notifications whose expires_at has passed. Runs daily."""
    try:
        return asyncio.run(_purge_expired_notifications())
    except Exception as e:
        logger.error(f"=== PURGE_EXPIRED_NOTIFICATIONS_TASK FAILED ===")
        logger.error(f"Error: {e}", exc_info=True)
        raise
