import asyncio
import logging

from celery.signals import worker_process_init

from app.celery_config import celery_app
from app.core.logging import configure_logging
from app.db.init import init_db
import app.scheduler  # noqa: F401  registers the beat schedule

# Entry point for `celery -A app.celery_worker.celery worker`.

configure_logging()
logger = logging.getLogger(__name__)

DB_INIT_ATTEMPTS = 3
DB_INIT_BACKOFF_SECONDS = 5


async def _init_db_with_retry():
    for attempt in range(1, DB_INIT_ATTEMPTS + 1):
        try:
            await init_db()
            return
        except Exception as e:
            if attempt == DB_INIT_ATTEMPTS:
                raise
            logger.warning(f"[WORKER] Database init attempt {attempt} failed ({e}), retrying")
            await asyncio.sleep(DB_INIT_BACKOFF_SECONDS * attempt)


@worker_process_init.connect
def on_worker_init(**kwargs):
    """Bind Beanie models in each forked worker before it takes tasks."""
    try:
        asyncio.run(_init_db_with_retry())
        logger.info("[WORKER] Ledger models ready in worker process")
    except Exception as e:
        logger.critical(f"[WORKER] Could not reach MongoDB, stopping worker: {e}", exc_info=True)
        raise SystemExit(1)


celery = celery_app
