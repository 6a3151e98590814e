from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from paytiko_gateway.core.config import Settings, get_settings
from paytiko_gateway.core.database import DatabaseManager
from paytiko_gateway.core.exceptions import ProcessingError, ValidationError, field_errors
from paytiko_gateway.core.logging import get_logger, setup_logging
from paytiko_gateway.core.redis_client import RedisClient
from paytiko_gateway.events.dispatcher import EventDispatcher
from paytiko_gateway.events.listeners import register_listeners
from paytiko_gateway.api.v1.router import api_router

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle application startup and shutdown."""
    settings: Settings = app.state.settings

    app.state.db = DatabaseManager(settings)
    app.state.redis = None
    if settings.EVENTS_QUEUE:
        app.state.redis = RedisClient(settings.REDIS_URL, settings.REDIS_MAX_CONNECTIONS)
        await app.state.redis.connect()

    register_listeners(
        app.state.event_dispatcher,
        settings,
        app.state.db.session_factory,
        app.state.redis,
    )
    logger.info("Paytiko Gateway startup completed", environment=settings.ENVIRONMENT)

    yield

    if app.state.redis is not None:
        await app.state.redis.disconnect()
    await app.state.db.close_connections()
    logger.info("Paytiko Gateway shutdown completed")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    setup_logging(settings)

    app = FastAPI(
        title=settings.APP_NAME,
        description="""
        **Paytiko Gateway Integration**

        - Hosted payment page creation with signed requests
        - Inbound webhook verification, parsing and event dispatch
        - Webhook resync: by order, by date range, status polling, manual replay
        """,
        version=settings.VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.event_dispatcher = EventDispatcher()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router, prefix="/v1")

    @app.get("/")
    async def root():
        """Root endpoint with service information."""
        return {
            "service": settings.APP_NAME,
            "version": settings.VERSION,
            "environment": settings.ENVIRONMENT,
            "status": "running",
            "docs_url": "/docs",
            "health_check": "/v1/health",
            "webhook_url": "/v1/webhooks/paytiko",
        }

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=422,
            content={
                "success": False,
                "error": "Validation failed",
                "errors": field_errors(exc.errors()),
            },
        )

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError):
        return JSONResponse(
            status_code=422,
            content={"success": False, "error": "Validation failed", "errors": exc.errors},
        )

    @app.exception_handler(ProcessingError)
    async def processing_error_handler(request: Request, exc: ProcessingError):
        return JSONResponse(
            status_code=400,
            content={"success": False, "error": exc.message, "transaction_id": exc.transaction_id},
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        """HTTP exception handler."""
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "success": False,
                "error": exc.detail,
                "status_code": exc.status_code
            }
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Global exception handler."""
        logger.error("Unhandled exception", error=str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "error": "Internal server error",
                "details": str(exc) if settings.DEBUG else "An unexpected error occurred"
            }
        )

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    _settings = get_settings()
    uvicorn.run(
        "paytiko_gateway.main:app",
        host="0.0.0.0",
        port=8000,
        reload=_settings.DEBUG,
        log_level=_settings.LOG_LEVEL.lower()
    )
