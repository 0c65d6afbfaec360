import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from backend.app.core import redis_client as redis_module
from backend.app.db.session import get_booking_repository
from backend.app.services.bookings import BookingRepository


logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/healthz")
async def healthz() -> dict[str, bool]:
    """Basic liveness probe."""
    return {"ok": True}


@router.get("/readiness")
async def readiness(repository: BookingRepository = Depends(get_booking_repository)) -> JSONResponse:
    """Report whether Postgres and Redis answer; 503 names the failing ones."""
    checks = {"database": True, "redis": True}

    try:
        await repository.ping()
    except Exception:
        logger.warning("Readiness: database ping failed", exc_info=True)
        checks["database"] = False

    if redis_module.redis_client is None:
        checks["redis"] = False
    else:
        try:
            await redis_module.redis_client.ping()
        except Exception:
            logger.warning("Readiness: redis ping failed", exc_info=True)
            checks["redis"] = False

    ready = all(checks.values())
    return JSONResponse({"ready": ready, "checks": checks}, status_code=200 if ready else 503)
