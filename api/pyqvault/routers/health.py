from fastapi import APIRouter, HTTPException, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from datetime import datetime
import platform

from ..config import settings
from ..config.database import get_db, ping_db
from ..utils import s3_utils
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/health", tags=["health"])


@router.get("")
async def health_check(db: Session = Depends(get_db)):
    """Check database connectivity and report which integrations are configured"""
    try:
        ping_db(db)
        database = {"connected": True}
    except Exception as e:
        logger.error(f"Database health check failed: {str(e)}")
        database = {"connected": False, "error": str(e)}

    missing_storage = s3_utils.missing_storage_vars()
    body = {
        "status": "healthy" if database["connected"] else "unhealthy",
        "timestamp": datetime.utcnow().isoformat(),
        "environment": settings.ENV,
        "python_version": platform.python_version(),
        "database": database,
        "configuration": {
            "database": bool(settings.DATABASE_URL),
            "storage": not missing_storage,
            "storage_missing": missing_storage,
            "admin": bool(settings.ADMIN_EMAIL and settings.ADMIN_PASSWORD),
            "require_auth": settings.REQUIRE_AUTH,
        },
    }
    return JSONResponse(status_code=200 if database["connected"] else 503, content=body)


@router.get("/storage")
async def storage_health():
    """Round-trip to the storage provider with a bucket HEAD"""
    try:
        details = s3_utils.ping_storage()
        return {
            "success": True,
            "message": "Storage connection successful",
            "storage": details,
        }
    except s3_utils.StorageError as e:
        logger.error(f"Storage health check failed: {str(e)}")
        raise HTTPException(
            status_code=500,
            detail={"success": False, "error": "Storage connection failed", "details": str(e)}
        )
