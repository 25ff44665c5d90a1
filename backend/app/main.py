import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.audit_logs import router as audit_logs_router
from app.api.campaigns import router as campaigns_router
from app.api.events import router as events_router
from app.api.notifications import router as notifications_router
from app.api.tracking import router as tracking_router
from app.api.users import router as users_router
from app.core.config import CORS_ORIGINS
from app.core.logging import configure_logging
from app.db.init import get_database, init_db

configure_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("=== APPLICATION STARTUP ===")
    try:
        await init_db()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}", exc_info=True)
        raise
    logger.info("API endpoints available:")
    logger.info("  - /api/audit-logs: Audit ledger and stats")
    logger.info("  - /api/events: Per-user activity events")
    logger.info("  - /api/notifications: Notifications and stats")
    logger.info("  - /api/email-campaigns: Campaign reach counters")
    logger.info("  - /api/track/open, /api/track/click: Email tracking")
    logger.info("=== APPLICATION STARTUP COMPLETE ===")

    yield

    logger.info("=== APPLICATION SHUTDOWN ===")


app = FastAPI(title="Signal Ledger API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/")
async def root():
    return {"message": "Signal Ledger API"}


@app.get("/health")
async def health_check():
    try:
        await get_database().command("ping")
        db_status = "healthy"
    except Exception as e:
        db_status = f"unhealthy: {str(e)}"

    return {
        "status": "healthy" if db_status == "healthy" else "degraded",
        "database": db_status,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


app.include_router(audit_logs_router, prefix="/api", tags=["audit-logs"])
app.include_router(events_router, prefix="/api", tags=["events"])
app.include_router(notifications_router, prefix="/api", tags=["notifications"])
app.include_router(campaigns_router, prefix="/api", tags=["email-campaigns"])
app.include_router(users_router, prefix="/api", tags=["users"])
app.include_router(tracking_router, prefix="/api", tags=["tracking"])
