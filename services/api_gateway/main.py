"""FastAPI application main entry point."""

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from services.api_gateway.limiter import limiter
from services.api_gateway.pricing_routes import router as pricing_router
from services.api_gateway.schemas import HealthResponse
from shared.config import get_config
from shared.exceptions import ConfigurationError, PricingError
from shared.logging_setup import get_logger, setup_logging

config = get_config()
setup_logging()
logger = get_logger(__name__)

API_VERSION = "1.0.0"

app = FastAPI(
    title="Dynamic Pricing API",
    description="Price rule evaluation and expiry markdown suggestions",
    version=API_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json"
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# CORS middleware - enforce strict origin validation outside dev
allowed_origins = config.api.allowed_origins or []
if config.environment != "dev" and ("*" in allowed_origins or not allowed_origins):
    raise ConfigurationError(
        "CORS allowed_origins must be explicitly set (no wildcards) in production. "
        "Set API__ALLOWED_ORIGINS environment variable."
    )

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "X-Requested-With"],
)

app.include_router(pricing_router)


@app.exception_handler(PricingError)
async def pricing_error_handler(request: Request, exc: PricingError):
    """Reject inputs the pricing engine refuses to evaluate."""
    logger.warning("Pricing request rejected", path=request.url.path, error=str(exc))
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": type(exc).__name__,
            "message": str(exc),
            "status_code": status.HTTP_400_BAD_REQUEST,
        }
    )


@app.get("/", response_model=HealthResponse)
async def root():
    """Root endpoint."""
    return HealthResponse(status="ok", version=API_VERSION)


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint."""
    return HealthResponse(status="ok", version=API_VERSION)


if __name__ == "__main__":
    import uvicorn

    logger.info("Starting pricing API", host=config.api.host, port=config.api.port)
    uvicorn.run(app, host=config.api.host, port=config.api.port)
