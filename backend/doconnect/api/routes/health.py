"""Health & Readiness Checks - liveness plus database and upload-storage readiness.

Invariants:
    - GET /api/v1/health/ always returns 200 if process is up (liveness)
    - GET /api/v1/health/ready returns 503 naming every failed dependency:
      "database" (SELECT 1 fails) and/or "storage" (uploads cannot be created)
"""

import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

import doconnect.infrastructure.database as database
from doconnect.api.dependencies import get_image_storage
from doconnect.services.image_storage import ImageStorageService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/health", tags=["health"])


@router.get("/", status_code=status.HTTP_200_OK)
async def health_check():
    return {"status": "healthy", "service": "doconnect-api"}


@router.get("/ready")
async def readiness_check(
    storage: ImageStorageService = Depends(get_image_storage),
):
    """Readiness: questions and answers need both the database and upload storage."""
    manager = database.db_manager
    checks = {
        "database": await manager.health_check() if manager else False,
        "storage": await storage.is_writable(),
    }
    failed = sorted(name for name, ok in checks.items() if not ok)
    body = {
        "status": "not_ready" if failed else "ready",
        "checks": {
            name: "healthy" if ok else "unavailable" for name, ok in checks.items()
        },
    }
    if failed:
        logger.warning(f"Readiness failed: {', '.join(failed)}")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={**body, "failed": failed},
        )
    return body
