import logging
from datetime import datetime, timedelta
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import func
from sqlalchemy.orm import Session

from ..config.database import get_db
from ..core.security import require_panel_user
from ..models.file import File
from ..utils.file_utils import bytes_to_mb

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/dashboard",
    tags=["dashboard"],
    dependencies=[Depends(require_panel_user)]
)

TOP_LIMIT = 5
RECENT_FILES_LIMIT = 10


def _count_by(db: Session, column, key: str, limit: int = None, by_value: bool = False) -> List[Dict[str, Any]]:
    """Group files by a column into [{key: value, count: n}]"""
    count = func.count(File.id)
    query = db.query(column, count).group_by(column)
    if by_value:
        query = query.order_by(column.asc())
    else:
        query = query.order_by(count.desc(), column.asc())
    if limit:
        query = query.limit(limit)
    return [{key: value, "count": n} for value, n in query.all()]


@router.get("/stats")
async def get_dashboard_stats(db: Session = Depends(get_db)) -> Dict[str, Any]:
    """Aggregate counts and the latest uploads for the dashboard.

    Day boundaries are UTC, matching how upload dates are stored.
    """
    try:
        now = datetime.utcnow()
        today = now.replace(hour=0, minute=0, second=0, microsecond=0)
        tomorrow = today + timedelta(days=1)

        total_files = db.query(File).count()
        recent_uploads = db.query(File).filter(File.upload_date >= now - timedelta(days=7)).count()
        today_uploads = (
            db.query(File)
            .filter(File.upload_date >= today, File.upload_date < tomorrow)
            .count()
        )
        total_bytes = db.query(func.coalesce(func.sum(File.file_size), 0)).scalar() or 0

        recent_files = (
            db.query(File)
            .order_by(File.upload_date.desc(), File.id.desc())
            .limit(RECENT_FILES_LIMIT)
            .all()
        )

        return {
            "success": True,
            "data": {
                "overview": {
                    "totalFiles": total_files,
                    "recentUploads": recent_uploads,
                    "todayUploads": today_uploads,
                    "totalStorageUsed": bytes_to_mb(int(total_bytes)),
                },
                "filesByType": _count_by(db, File.file_type, "type"),
                "topColleges": _count_by(db, File.college_name, "name", limit=TOP_LIMIT),
                "topCourses": _count_by(db, File.course_name, "name", limit=TOP_LIMIT),
                "filesByYear": _count_by(db, File.year, "year", by_value=True),
                "recentFiles": [
                    {
                        "id": f.id,
                        "fileName": f.file_name,
                        "collegeName": f.college_name,
                        "courseName": f.course_name,
                        "fileType": f.file_type,
                        "uploadDate": f.upload_date.isoformat() if f.upload_date else None,
                    }
                    for f in recent_files
                ],
            },
        }

    except Exception as exc:
        logger.error("Failed to build dashboard stats: %s", exc)
        raise HTTPException(
            status_code=500,
            detail={"success": False, "error": "Failed to fetch dashboard statistics", "details": str(exc)}
        ) from exc
