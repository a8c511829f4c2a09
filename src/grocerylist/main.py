"""FastAPI application entry point."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from grocerylist.config import get_settings
from grocerylist.logging_config import configure_logging, get_logger
from grocerylist.routers import grocery_router

settings = get_settings()

# Configure logging on module load
configure_logging(settings.log_level)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan handler for startup and shutdown events."""
    logger.info(f"Starting Grocerylist API ({settings.environment})")
    if settings.smart_merge_enabled:
        logger.info(f"Smart merge enabled: {settings.smart_merge_url}")
    else:
        logger.info("Smart merge disabled, using local combiner only")

    yield

    logger.info("Shutting down Grocerylist API")


app = FastAPI(
    title="Grocerylist API",
    description="Consolidated grocery lists for planned recipes",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(grocery_router)


@app.get("/health")
async def health_check() -> dict:
    """Basic health check endpoint."""
    return {"status": "ok", "service": "grocerylist-api"}


@app.get("/")
async def root() -> dict:
    """Root endpoint with API information."""
    return {
        "name": "Grocerylist API",
        "version": "0.1.0",
        "docs": "/docs",
        "health": "/health",
    }
