"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.config import settings
from app.database import engine, Base
from app.errors import AggregatorError, NotFoundError, ValidationError
from app.models.enums import PLATFORM_ORDER
from app.routes.alerts import router as alerts_router
from app.routes.listings import router as listings_router

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    logger.info("Starting Listing Aggregator...")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Locations: {settings.locations}, categories: {settings.categories}")

    # Create tables (for development; use Alembic migrations in production)
    if settings.environment == "development":
        Base.metadata.create_all(bind=engine)

    yield

    logger.info("Shutting down Listing Aggregator...")


app = FastAPI(
    title="Listing Aggregator",
    description="Aggregates second-hand marketplace listings and alerts users on matches",
    version="1.0.0",
    lifespan=lifespan,
)

app.include_router(listings_router)
app.include_router(alerts_router)


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=404, content={"success": False, "error": str(exc)})


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=400, content={"success": False, "error": str(exc)})


@app.exception_handler(AggregatorError)
async def aggregator_error_handler(request: Request, exc: AggregatorError):
    logger.error(f"Unhandled error on {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"success": False, "error": str(exc)})


@app.get("/")
async def root():
    return {
        "status": "healthy",
        "app": "Listing Aggregator",
        "version": "1.0.0",
    }


@app.get("/health")
async def health_check():
    """Detailed health check."""
    return {
        "status": "healthy",
        "environment": settings.environment,
        "platforms": [p.value for p in PLATFORM_ORDER if settings.platform_enabled(p.value)],
        "scheduler_enabled": settings.scheduler_enabled,
    }
