"""
Main application entry point for the patient dashboard backend.

This module builds the FastAPI application: shared services on the
application state, middleware, exception handlers and every enabled
resource router under the API prefix.

Usage:
    - Direct: python -m patient_dashboard.main
    - ASGI server: uvicorn patient_dashboard.main:create_app --factory
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import APIRouter, FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from patient_dashboard import __version__
from patient_dashboard.api import APIResponse, install_exception_handlers, register_resource_module, respond
from patient_dashboard.common.auth.jwt import JWTConfig, TokenService
from patient_dashboard.common.auth.password import PasswordHasher
from patient_dashboard.common.db.connection import ConnectionManager
from patient_dashboard.common.logger import app_logger, configure_logger
from patient_dashboard.common.rate_limiter import RateLimiter, RateLimitMiddleware
from patient_dashboard.config import Settings, load_settings_or_exit
from patient_dashboard.database.init_db import initialize_database
from patient_dashboard.medications.router import router as medications_router
from patient_dashboard.middleware import RequestLoggingMiddleware
from patient_dashboard.shipments.router import router as shipments_router
from patient_dashboard.users.router import router as auth_router
from patient_dashboard.weight_entries.router import router as weight_entries_router

# Setup module logger
logger = app_logger.getChild("main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    FastAPI application lifespan context manager.

    Connects to the database (with retries) and creates the schema on
    startup; releases the pool and the rate limiter client on shutdown.
    """
    settings: Settings = app.state.settings

    logger.info("Application startup sequence initiated.")
    manager = ConnectionManager.from_settings(settings)
    await manager.connect()
    await initialize_database(manager)
    app.state.db = manager
    logger.info(f"Application started in {settings.ENV} mode")

    yield

    logger.info("Application shutdown sequence initiated.")
    await app.state.rate_limiter.close()
    await manager.dispose()
    logger.info("Application shutdown sequence complete.")


def build_api_router(settings: Settings) -> APIRouter:
    """
    Build the router mounted under the API prefix.

    Resource routers are included only when their feature flag is on.
    """
    main_router = APIRouter()
    register_resource_module(main_router, "auth", auth_router)

    if settings.ENABLE_WEIGHT_TRACKING:
        register_resource_module(main_router, "weight-entries", weight_entries_router)
    if settings.ENABLE_MEDICATION_MANAGEMENT:
        register_resource_module(main_router, "medications", medications_router)
    if settings.ENABLE_SHIPMENT_TRACKING:
        register_resource_module(main_router, "shipments", shipments_router)

    return main_router


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure a FastAPI application instance.

    Args:
        settings: Settings to use; loaded from the environment when omitted

    Returns:
        Configured FastAPI application
    """
    settings = settings or load_settings_or_exit()
    configure_logger(
        level=settings.LOG_LEVEL,
        use_json=settings.LOG_JSON,
        log_file=settings.LOG_FILE,
    )

    app = FastAPI(
        title=settings.PROJECT_NAME,
        description="Patient dashboard API: weight tracking, medications and shipments",
        version=__version__,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.token_service = TokenService(JWTConfig(
        secret_key=settings.JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM,
        access_token_expires=settings.JWT_EXPIRES_IN,
        refresh_token_expires=settings.REFRESH_TOKEN_EXPIRES_IN,
        token_issuer=settings.JWT_ISSUER,
    ))
    app.state.password_hasher = PasswordHasher(settings.BCRYPT_SALT_ROUNDS)
    app.state.rate_limiter = RateLimiter.from_url(settings.REDIS_URL)

    # Last added runs first: CORS, then request logging, then the rate limit
    app.add_middleware(
        RateLimitMiddleware,
        limiter=app.state.rate_limiter,
        max_requests=settings.RATE_LIMIT_MAX_REQUESTS,
        period=settings.rate_limit_period,
        path_prefixes=(settings.API_PREFIX,),
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Request-ID"],
        expose_headers=["X-Request-ID", "X-Response-Time"],
    )

    install_exception_handlers(app)

    app.include_router(build_api_router(settings), prefix=settings.API_PREFIX)

    @app.get("/health")
    async def health(request: Request):
        """Liveness plus database reachability."""
        db_ok = await request.app.state.db.ping()
        data = {
            "status": "ok" if db_ok else "degraded",
            "environment": settings.ENV,
            "version": __version__,
            "database": "connected" if db_ok else "disconnected",
        }
        if not db_ok:
            body = APIResponse.error("Service degraded", error="Service unavailable")
            body["data"] = data
            return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content=body)
        return respond(data, "Service is healthy")

    @app.get("/api")
    async def api_info():
        """API information."""
        return APIResponse.success(
            {
                "name": settings.PROJECT_NAME,
                "version": __version__,
                "prefix": settings.API_PREFIX,
                "features": {
                    "weightTracking": settings.ENABLE_WEIGHT_TRACKING,
                    "medicationManagement": settings.ENABLE_MEDICATION_MANAGEMENT,
                    "shipmentTracking": settings.ENABLE_SHIPMENT_TRACKING,
                },
            },
            "Patient Dashboard API",
        )

    logger.info(f"Application created with {len(app.routes)} routes")
    return app


def main() -> None:
    """Run the server with uvicorn."""
    import uvicorn

    settings = load_settings_or_exit()
    logger.info(f"Starting server on {settings.HOST}:{settings.PORT}")
    uvicorn.run(
        "patient_dashboard.main:create_app",
        factory=True,
        host=settings.HOST,
        port=settings.PORT,
        reload=not settings.is_production and settings.ENV != "test",
        log_level=settings.LOG_LEVEL.lower(),
    )


# Entry point for running the application directly
if __name__ == "__main__":
    main()
