from fastapi import APIRouter
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
import redis

from stockapp.database import engine
from stockapp.utils.cache import cache_service

router = APIRouter(prefix="/health", tags=["Health"])


@router.get(
    "/",
    summary="Health check",
    description="Basic health check endpoint."
)
def health_check():
    """Simple health check."""
    return {"status": "healthy"}


@router.get(
    "/ready",
    summary="Readiness check",
    description="Check if the database and the Redis cache are reachable."
)
def readiness_check():
    """
    Readiness check for all dependencies.

    The Redis check is skipped when caching is disabled.
    """
    checks = {
        "database": False,
        "redis": None
    }

    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
            checks["database"] = True
    except SQLAlchemyError as e:
        checks["database_error"] = str(e)

    if cache_service.enabled:
        checks["redis"] = False
        try:
            cache_service.client.ping()
            checks["redis"] = True
        except redis.RedisError as e:
            checks["redis_error"] = str(e)

    all_healthy = checks["database"] and checks["redis"] is not False

    return {
        "status": "ready" if all_healthy else "not_ready",
        "checks": checks
    }
