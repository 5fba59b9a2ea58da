import logging
from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from users_api.core.config import Settings, settings as default_settings
from users_api.core.database import Database
from users_api.core.logging_config import configure_logging, log_requests
from users_api.core.security import CredentialService
from users_api.api.errors import register_exception_handlers
from users_api.api.routes import auth, users

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Composition root.

    Builds the database gateway and credential service once and hands them
    to requests through app.state; nothing else holds them globally.
    """
    settings = settings or default_settings
    configure_logging(settings.LOG_LEVEL)

    database = Database(settings.DATABASE_URL)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if settings.CREATE_TABLES:
            # In production the schema already exists; create_all skips existing tables
            database.create_all()
        logger.info("Users API started")
        yield
        # Close pooled connections on shutdown
        database.dispose()

    app = FastAPI(
        title="Users API",
        description="CRUD for users, their locations and credentials, with token login",
        version="1.0.0",
        lifespan=lifespan
    )
    app.state.settings = settings
    app.state.database = database
    app.state.credentials = CredentialService(settings)

    # CORS middleware - allows frontend to make requests to backend
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.middleware("http")(log_requests)
    register_exception_handlers(app)

    app.include_router(auth.router, prefix=settings.API_PREFIX)
    app.include_router(users.router, prefix=settings.API_PREFIX)

    @app.get("/")
    async def root():
        """Root endpoint - API information"""
        return {"message": "Awesome it works"}

    @app.get("/health")
    async def health():
        """Health check endpoint - used by monitoring/deployment tools"""
        return {"status": "healthy"}

    return app


app = create_app()
