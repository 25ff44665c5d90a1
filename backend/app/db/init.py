import logging

from beanie import init_beanie
from motor.motor_asyncio import AsyncIOMotorClient

from app.core.config import DB_NAME, MONGO_URI
from app.models.email_campaign import EmailCampaign
from app.models.ledger_entry import ActivityEvent, AuditLog
from app.models.notification import Notification
from app.models.user import User

logger = logging.getLogger(__name__)

DOCUMENT_MODELS = [User, AuditLog, ActivityEvent, EmailCampaign, Notification]

_client = None


async def init_db(client=None):
    """
    Connect Beanie to MongoDB. A pre-built client (e.g. an in-memory one)
    can be handed in instead of dialing MONGO_URI.
    """
    global _client
    try:
        logger.info("Initializing database connection...")
        if client is None:
            client = AsyncIOMotorClient(MONGO_URI)
            await client.admin.command("ping")
            logger.info("MongoDB connection test successful.")

        await init_beanie(database=client[DB_NAME], document_models=DOCUMENT_MODELS)
        _client = client
        logger.info("MongoDB connection established and Beanie initialized.")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}", exc_info=True)
        raise


def get_database():
    if _client is None:
        raise RuntimeError("Database has not been initialized")
    return _client[DB_NAME]
