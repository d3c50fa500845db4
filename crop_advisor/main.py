"""
FastAPI application entry point.
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address
from starlette.concurrency import run_in_threadpool

from crop_advisor.config import settings
from crop_advisor.infrastructure.advice_client import AdviceServiceClient
from crop_advisor.middleware.error_handler import ErrorHandlerMiddleware
from crop_advisor.api.v1.routers import crops, model
from crop_advisor.services.application.model_lifecycle import ModelLifecycle

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)

# Rate limiter
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[f"{settings.rate_limit_requests}/minute"],
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Creates the model lifecycle and advice client on startup and closes the
    advice client on shutdown.
    """
    # Startup
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Log level: {settings.log_level}")
    logger.info(f"Model config: trees={settings.model_num_trees}, "
                f"max_depth={settings.model_max_depth}, "
                f"min_samples_split={settings.model_min_samples_split}")
    logger.info(f"Rate limit: {settings.rate_limit_requests} requests/minute")

    app.state.model_lifecycle = ModelLifecycle.from_settings(settings)
    app.state.advice_client = AdviceServiceClient()
    if not app.state.advice_client.is_configured:
        logger.info("Advice service URL not set; recommendations will omit advice")

    if settings.model_warmup_on_startup:
        await run_in_threadpool(app.state.model_lifecycle.get_classifier)

    yield

    # Shutdown
    logger.info("Shutting down application...")
    await app.state.advice_client.close()
    logger.info("Shutdown complete")


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="""
    Crop Recommendation API

    This API ranks candidate crops for a field from its soil and climate
    features using a random forest trained on a synthetic agronomic corpus.

    ## Features

    - **Crop Ranking**: Confidence-ranked crops from soil pH, N/P/K, temperature,
      humidity and rainfall
    - **Description Parsing**: Best-effort features from a free-text land description
    - **Advice**: Optional natural-language recommendation from an external
      advice service, degrading gracefully when it is unavailable
    - **Model Evaluation**: Held-out accuracy, per-crop accuracy and confusion matrix
    - **Rate Limiting**: Protects the API from abuse

    ## Classifier

    1. Generates 50 noisy samples around each of 8 crop centroids
    2. Grows each tree on a bootstrap resample of the corpus
    3. Splits nodes on the lowest weighted Gini impurity among 3 randomly drawn features
    4. Stops at the maximum depth or below the minimum split size
    5. Ranks crops by the fraction of trees voting for them
    """,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

# Add rate limiter to app state
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)

# Add CORS middleware with configurable origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Add global error handling middleware
app.add_middleware(ErrorHandlerMiddleware)

# Include routers
app.include_router(crops.router, prefix="/api/v1")
app.include_router(model.router, prefix="/api/v1")


@app.get("/", tags=["health"])
async def root():
    """
    Root endpoint for health check.

    Returns:
        Status message
    """
    return {
        "status": "healthy",
        "service": settings.app_name,
        "version": settings.app_version,
    }


@app.get("/health", tags=["health"])
async def health_check():
    """
    Health check endpoint.

    Returns:
        Health status and whether the model has been trained
    """
    lifecycle = getattr(app.state, "model_lifecycle", None)
    return {
        "status": "healthy",
        "service": settings.app_name,
        "model_ready": bool(lifecycle and lifecycle.is_ready),
    }
