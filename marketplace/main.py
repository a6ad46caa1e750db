from typing import Optional
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from marketplace.api.routers import analytics, properties
from marketplace.core.config import Settings
from marketplace.core.database import Database
from marketplace.core.exceptions import (
    Conflict, GenerationExhausted, NotFound, StorageError, ValidationFailed
)
from marketplace.core.logging import setup_logging
import logging

logger = logging.getLogger(__name__)


async def validation_failed_handler(request: Request, exc: ValidationFailed):
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "detail": "Validation failed",
            "errors": [error.to_dict() for error in exc.errors],
        },
    )


async def not_found_handler(request: Request, exc: NotFound):
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)})


async def conflict_handler(request: Request, exc: Conflict):
    return JSONResponse(status_code=status.HTTP_409_CONFLICT, content={"detail": str(exc)})


async def internal_error_handler(request: Request, exc: Exception):
    # The cause was logged where it was raised; callers only see a generic failure
    logger.error(f"Request {request.method} {request.url.path} failed: {exc!r}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


def create_app(settings: Optional[Settings] = None, database: Optional[Database] = None) -> FastAPI:
    """Build the API with one database client for its whole lifetime"""
    settings = settings or Settings()
    setup_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)

    app = FastAPI(
        title="Real Estate Marketplace API",
        description="Property listings with validation, lifecycle and analytics",
        version="1.0.0"
    )
    app.state.settings = settings
    app.state.db = database or Database.from_settings(settings)

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(ValidationFailed, validation_failed_handler)
    app.add_exception_handler(NotFound, not_found_handler)
    app.add_exception_handler(Conflict, conflict_handler)
    app.add_exception_handler(GenerationExhausted, internal_error_handler)
    app.add_exception_handler(StorageError, internal_error_handler)

    # Include routers
    app.include_router(properties.router, prefix="/api/v1/properties", tags=["properties"])
    app.include_router(analytics.router, prefix="/api/v1/analytics", tags=["analytics"])

    @app.on_event("shutdown")
    async def shutdown_event():
        """Release pooled connections"""
        app.state.db.dispose()
        logger.info("Application shutdown completed successfully")

    @app.get("/")
    async def root():
        return {"message": "Real Estate Marketplace API"}

    @app.get("/health")
    async def health_check():
        """Health check endpoint that verifies the database"""
        health_status = {"status": "healthy", "services": {}}
        try:
            with app.state.db.engine.connect() as connection:
                connection.execute(text("SELECT 1"))
            health_status["services"]["database"] = "healthy"
        except Exception as e:
            logger.error(f"Database health check failed: {e}")
            health_status["status"] = "unhealthy"
            health_status["services"]["database"] = "unhealthy"
        return health_status

    return app
