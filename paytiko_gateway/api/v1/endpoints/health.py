from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import text

from paytiko_gateway.core.config import Settings, get_settings
from paytiko_gateway.core.database import get_async_session
from paytiko_gateway.schemas.common import HealthCheckResponse

router = APIRouter()

SERVICE_NAME = "paytiko-gateway"


@router.get("/", response_model=HealthCheckResponse, response_model_exclude_none=True)
async def health_check(settings: Settings = Depends(get_settings)):
    """Basic health check endpoint."""
    return {
        "status": "healthy",
        "service": SERVICE_NAME,
        "version": settings.VERSION,
        "environment": settings.ENVIRONMENT
    }


@router.get("/detailed")
async def detailed_health_check(
    request: Request,
    session: AsyncSession = Depends(get_async_session),
    settings: Settings = Depends(get_settings),
):
    """Detailed health check including dependencies."""
    health_status = {
        "status": "healthy",
        "service": SERVICE_NAME,
        "version": settings.VERSION,
        "environment": settings.ENVIRONMENT,
        "checks": {}
    }

    # Database check
    try:
        await session.execute(text("SELECT 1"))
        health_status["checks"]["database"] = {"status": "healthy", "message": "Database connection OK"}
    except Exception as e:
        health_status["checks"]["database"] = {"status": "unhealthy", "message": f"Database error: {str(e)}"}
        health_status["status"] = "unhealthy"

    # Redis is only used when events are forwarded
    redis_client = getattr(request.app.state, "redis", None)
    if redis_client is not None:
        try:
            await redis_client.ping()
            health_status["checks"]["redis"] = {"status": "healthy", "message": "Redis connection OK"}
        except Exception as e:
            health_status["checks"]["redis"] = {"status": "unhealthy", "message": f"Redis error: {str(e)}"}
            health_status["status"] = "unhealthy"

    health_status["checks"]["paytiko"] = {
        "status": "healthy" if settings.PAYTIKO_MERCHANT_SECRET_KEY else "unhealthy",
        "core_url": settings.PAYTIKO_CORE_URL,
        "signature_verification": settings.PAYTIKO_VERIFY_WEBHOOK_SIGNATURE,
    }
    if not settings.PAYTIKO_MERCHANT_SECRET_KEY:
        health_status["status"] = "unhealthy"

    if health_status["status"] == "unhealthy":
        raise HTTPException(status_code=503, detail=health_status)

    return health_status
