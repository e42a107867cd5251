"""FastAPI application — main entry point."""

import structlog
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from stepwise.config import get_settings
from stepwise.infrastructure.database import engine, Base
from stepwise.core.logging import configure_logging
from stepwise.core.middleware import setup_middleware
from stepwise.core.exceptions import AppError, global_exception_handler

# Import all models so SQLAlchemy knows about them
from stepwise.domain.models.user import User  # noqa: F401
from stepwise.domain.models.demo import Demo  # noqa: F401
from stepwise.domain.models.step import Step  # noqa: F401
from stepwise.domain.models.hotspot import Hotspot  # noqa: F401

# Import routers
from stepwise.interfaces.api.auth import router as auth_router
from stepwise.interfaces.api.demos import router as demos_router
from stepwise.interfaces.api.steps import router as steps_router
from stepwise.interfaces.api.hotspots import router as hotspots_router
from stepwise.interfaces.api.uploads import router as uploads_router

settings = get_settings()

# Configure logging immediately
configure_logging()
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan — startup and shutdown events."""
    logger.info("Starting Stepwise...", env=settings.ENVIRONMENT)

    # Create DB tables (dev only, production schemas are migrated separately)
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created/verified")

    yield

    logger.info("Stepwise stopped")


app = FastAPI(
    title="Stepwise",
    description="API Backend — interactive product demos built from screenshots",
    version="1.0.0",
    lifespan=lifespan,
)

# Setup Middleware (Correlation ID, Logging)
setup_middleware(app)

# Domain errors go through the router's exception middleware, anything else
# through the server error middleware
app.add_exception_handler(AppError, global_exception_handler)
app.add_exception_handler(Exception, global_exception_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(auth_router)
app.include_router(demos_router)
app.include_router(steps_router)
app.include_router(hotspots_router)
app.include_router(uploads_router)


@app.get("/")
def root():
    return {
        "name": "Stepwise",
        "version": "1.0.0",
        "status": "running",
        "docs": "/docs",
    }


@app.get("/health")
def health():
    return {"status": "healthy"}
