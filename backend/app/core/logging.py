import logging

from app.core.config import LOG_LEVEL

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str = LOG_LEVEL) -> None:
    """Configure root logging once for the API process and the Celery worker."""
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)
    # Motor/pymongo heartbeat chatter drowns the ledger logs at DEBUG
    logging.getLogger("pymongo").setLevel(logging.WARNING)
