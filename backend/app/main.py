"""Main FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.endpoints.scan import router as scan_router
from app.api.schemas import HealthResponse, RootResponse
from app.core.config import settings
from app.services.quote_service import quote_service

API_VERSION = "0.1.0"

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Applies the configured log level and reports the quote source mode on
    startup; there are no connections to open.
    """
    # Startup
    logging.getLogger().setLevel(settings.log_level.upper())
    logger.info(f"Starting OptionScan backend ({settings.environment})...")
    if quote_service.has_credentials:
        logger.info("Polygon API key configured - live previous-close quotes enabled")
    elif settings.is_production:
        logger.warning("POLYGON_API_KEY not set in production - spot prices come from the fallback table")
    else:
        logger.info("POLYGON_API_KEY not set - spot prices come from the fallback table")

    yield

    # Shutdown
    logger.info("Shutting down OptionScan backend...")


# Create FastAPI application
app = FastAPI(
    title="OptionScan API",
    description="Theoretical option strategy scanner",
    version=API_VERSION,
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Create API v1 router with version prefix
api_v1 = APIRouter(prefix="/api/v1")
api_v1.include_router(scan_router)

# Include v1 router in main app
app.include_router(api_v1)


@app.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """
    Health check endpoint for Docker and load balancers.

    Returns:
        HealthResponse: Health status
    """
    return HealthResponse(status="healthy", environment=settings.environment)


@app.get("/", response_model=RootResponse)
async def root() -> RootResponse:
    """
    Root endpoint.

    Returns:
        RootResponse: API information
    """
    return RootResponse(
        message="OptionScan API",
        version=API_VERSION,
        docs="/docs",
    )
