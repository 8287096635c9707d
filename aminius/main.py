import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import config
from .database import Database
from .domain.agents.router import lookups_router
from .domain.agents.router import router as agents_router
from .domain.analytics.router import router as analytics_router
from .domain.appointments.router import router as appointments_router
from .domain.clients.router import router as clients_router
from .domain.notes.router import router as notes_router
from .domain.notifications.router import router as notifications_router
from .domain.policies.router import router as policies_router
from .domain.reminders.router import router as reminders_router
from .domain.search.router import router as search_router
from .errors import register_exception_handlers
from .seed import seed_lookups

# Configure logging
logging.basicConfig(
    level=getattr(logging, config.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Reduce verbosity of third-party libraries
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)


def create_app(database: Optional[Database] = None) -> FastAPI:
    """
    Build the API. Tests pass their own Database; otherwise one is built from
    DATABASE_URL when the app starts.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Application starting up...")
        db = database or Database()
        try:
            db.create_all()
            logger.info("Database tables created successfully")
        except Exception as e:
            # Ignore "already exists" errors from race conditions between workers
            error_msg = str(e)
            if "already exists" in error_msg or "duplicate key" in error_msg:
                logger.info("Database tables already exist (created by another worker)")
            else:
                logger.error(f"Failed to create database tables: {e}")
                raise

        with db.session_scope() as session:
            seed_lookups(session)

        app.state.database = db
        yield
        logger.info("Application shutting down...")
        if database is None:
            db.dispose()

    app = FastAPI(title="AminiUs Agent API", version="1.0.0", lifespan=lifespan)

    register_exception_handlers(app)

    # CORS Configuration
    logger.info(f"CORS allowed origins: {config.ALLOWED_ORIGINS}")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
        allow_headers=["*"],
    )

    app.include_router(agents_router)
    app.include_router(lookups_router)
    app.include_router(clients_router)
    app.include_router(appointments_router)
    app.include_router(policies_router)
    app.include_router(reminders_router)
    app.include_router(notes_router)
    app.include_router(search_router)
    app.include_router(analytics_router)
    app.include_router(notifications_router)

    @app.get("/")
    def root():
        return {"message": "AminiUs Agent API is running"}

    @app.get("/health")
    def health():
        return {"status": "healthy", "environment": config.ENVIRONMENT}

    return app


app = create_app()
