"""FastAPI application — main entry point."""

import structlog
from contextlib import asynccontextmanager

from fastapi import FastAPI

from accounts_api.config import get_settings
from accounts_api.core.exceptions import setup_exception_handlers
from accounts_api.core.logging import configure_logging
from accounts_api.core.middleware import setup_middleware
from accounts_api.infrastructure.database import close_client, ensure_indexes, get_database

# Import routers
from accounts_api.interfaces.api.auth import router as auth_router
from accounts_api.interfaces.api.users import router as users_router

settings = get_settings()

# Configure logging immediately
configure_logging()
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan — startup and shutdown events."""
    logger.info("Starting Accounts API...", env=settings.ENVIRONMENT)

    db = get_database()
    await ensure_indexes(db)

    from accounts_api.application.services.auth_service import ensure_admin_user
    from accounts_api.infrastructure.repositories.user_repository import MongoUserRepository
    await ensure_admin_user(MongoUserRepository(db))

    yield

    close_client()
    logger.info("Accounts API stopped")


app = FastAPI(
    title="Accounts API",
    description="User accounts — create, paginated list, fetch, update and soft delete",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/swagger",
    swagger_ui_parameters={"persistAuthorization": True},
)

# Correlation ID, request logging, security headers, CORS
setup_middleware(app)

# Error responses
setup_exception_handlers(app)

# Include routers
app.include_router(auth_router)
app.include_router(users_router)


@app.get("/")
def root():
    return {
        "name": "Accounts API",
        "version": "1.0.0",
        "status": "running",
        "docs": "/swagger",
    }


@app.get("/health")
def health():
    return {"status": "healthy"}
