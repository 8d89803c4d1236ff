import logging
import os
import uuid

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import LocationSettings
from core.exceptions import RateLimitError
from core.http.session import cleanup_session
from location.api import router as location_router
from location.ratelimit import FixedWindowRateLimiter
from location.services.location_service import LocationService

# Basic logging configuration
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
)
logger = logging.getLogger(__name__)

DEV_CORS_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:5173",
    "http://127.0.0.1:3000",
    "http://127.0.0.1:5173",
]


def create_app(
    settings: LocationSettings | None = None,
    *,
    location_service: LocationService | None = None,
    rate_limiter: FixedWindowRateLimiter | None = None,
) -> FastAPI:
    """
    Build the application with its own service, cache and limiter instances.

    Tests pass ``location_service`` / ``rate_limiter`` to run against fakes
    and isolated counters.
    """
    settings = settings or LocationSettings.from_env()
    app = FastAPI(title="AasPaas Location Service")

    app.state.settings = settings
    app.state.location_service = location_service or LocationService.from_settings(
        settings
    )
    app.state.rate_limiter = rate_limiter or FixedWindowRateLimiter(
        window_ms=settings.rate_window_ms,
        per_client_max=settings.rate_per_client_max,
        global_max=settings.rate_global_max,
        max_tracked_clients=settings.max_tracked_clients,
    )

    # CORS Middleware Configuration
    if settings.cors_origins:
        origins = list(settings.cors_origins)
        logger.info("CORS configured with specific origins: %s", origins)
    else:
        origins = DEV_CORS_ORIGINS
        logger.warning(
            "CORS_ALLOWED_ORIGINS not set. Using development defaults: %s",
            origins,
        )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["GET", "OPTIONS"],
        allow_headers=["*"],
    )

    app.include_router(location_router)

    @app.on_event("shutdown")
    async def shutdown_event():
        """Clean up resources when shutting down."""
        await cleanup_session()
        logger.info("Application shutdown completed successfully")

    # --- Global Exception Handlers ---
    @app.exception_handler(RateLimitError)
    async def rate_limit_handler(request: Request, exc: RateLimitError):
        retry_after = int(exc.details.get("retry_after", 1))
        return JSONResponse(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            content={
                "error": exc.message,
                "scope": exc.details.get("scope"),
                "retry_after": retry_after,
            },
            headers={"Retry-After": str(retry_after)},
        )

    @app.exception_handler(404)
    async def not_found_handler(request: Request, exc: HTTPException):
        """Handle 404 Not Found errors."""
        logger.warning("404 Not Found: %s. Detail: %s", request.url, exc.detail)
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"error": "Not found", "detail": exc.detail},
        )

    @app.exception_handler(500)
    async def internal_error_handler(request: Request, exc: Exception):
        """Handle 500 Internal Server Error errors."""
        error_id = str(uuid.uuid4())
        logger.error(
            "Internal Server Error (ID: %s): Request %s %s failed. Exception: %s",
            error_id,
            request.method,
            request.url,
            str(exc),
            exc_info=True,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": "Internal server error",
                "error_id": error_id,
                "detail": str(exc),
            },
        )

    return app


app = create_app()


# --- Main Execution Block ---
if __name__ == "__main__":
    import uvicorn

    port = int(os.getenv("PORT", "8080"))
    uvicorn.run(
        "app:app",
        host="0.0.0.0",
        port=port,
        log_level="info",
        reload=True,
    )
