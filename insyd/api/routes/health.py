"""Health check: pings the database."""

from datetime import datetime, timezone

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from insyd.api.schemas import HealthResponse
from insyd.logging import get_logger
from insyd.persistence import PersistenceError, ping_database

router = APIRouter(tags=["health"])

logger = get_logger(__name__, component="api")


@router.get("/health", response_model=HealthResponse)
def health_check():
    try:
        ping_database()
    except PersistenceError as e:
        logger.error(f"Health check failed: {e}", extra={"event": "health.failure"})
        return JSONResponse(status_code=500, content={"error": "Database connection failed"})
    return HealthResponse(status="healthy", timestamp=datetime.now(timezone.utc))
