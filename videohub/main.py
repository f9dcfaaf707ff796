"""
VideoHub API - FastAPI application entry point.
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import get_settings
from .database import engine, Base
from .errors import VideoHubError
from .logging_config import api_logger
from .middleware import SecurityHeadersMiddleware, RequestLoggingMiddleware
from .responses import domain_exception_handler, unexpected_exception_handler
from . import models  # noqa: F401  registers the tables on Base.metadata
from .routes import (
    auth_router,
    accounts_router,
    videos_router,
    admin_router,
    youtube_router,
    health_router,
)

settings = get_settings()

# Create tables (in production, use Alembic migrations instead)
Base.metadata.create_all(bind=engine)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle - startup and shutdown"""
    api_logger.info("VideoHub API starting", environment=settings.environment)
    yield  # App is running
    engine.dispose()
    api_logger.info("VideoHub API stopped")


app = FastAPI(
    title=settings.app_name,
    description="Multi-account video review and publishing backend",
    version="1.0.0",
    docs_url="/api/docs" if settings.debug else None,
    redoc_url="/api/redoc" if settings.debug else None,
    lifespan=lifespan,
)

# Domain errors become structured error bodies
app.add_exception_handler(VideoHubError, domain_exception_handler)
app.add_exception_handler(Exception, unexpected_exception_handler)

# Security headers middleware
app.add_middleware(SecurityHeadersMiddleware)

# Request logging middleware (only in debug mode)
if settings.debug:
    app.add_middleware(RequestLoggingMiddleware)

# CORS - Properly configured with specific methods
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=[
        "Authorization",
        "Content-Type",
        "Accept",
        "Origin",
        "X-Requested-With",
    ],
    max_age=3600,  # Cache preflight requests for 1 hour
)

# Routes
app.include_router(auth_router)
app.include_router(accounts_router)
app.include_router(videos_router)
app.include_router(admin_router)
app.include_router(youtube_router)
app.include_router(health_router)


@app.get("/")
def root():
    """Root endpoint points at the API docs."""
    return {
        "message": settings.app_name,
        "docs": "/api/docs" if settings.debug else "Disabled in production",
    }
