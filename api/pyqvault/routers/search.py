import logging
from fastapi import APIRouter, HTTPException, Depends
from sqlalchemy import or_
from sqlalchemy.orm import Session

from ..config.database import get_db
from ..core.security import require_panel_user
from ..models.file import File
from ..utils.db_utils import icontains

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/search",
    tags=["search"],
    dependencies=[Depends(require_panel_user)]
)

MIN_QUERY_LENGTH = 2
SUGGESTIONS_PER_FIELD = 5
MAX_SUGGESTIONS = 10
MAX_GLOBAL_RESULTS = 50

# (suggestion type, column) in output order
SUGGESTION_FIELDS = (
    ("college", File.college_name),
    ("course", File.course_name),
    ("branch", File.branch),
)

GLOBAL_SEARCH_COLUMNS = (
    File.file_name,
    File.original_file_name,
    File.college_name,
    File.course_name,
    File.branch,
    File.year,
    File.semester,
)


def get_suggestions(db: Session, query: str) -> list:
    """Distinct college/course/branch values containing the query"""
    suggestions = []
    for suggestion_type, column in SUGGESTION_FIELDS:
        values = (
            db.query(column)
            .filter(icontains(column, query))
            .distinct()
            .order_by(column.asc())
            .limit(SUGGESTIONS_PER_FIELD)
            .all()
        )
        suggestions.extend({"type": suggestion_type, "value": value} for (value,) in values)
    return suggestions[:MAX_SUGGESTIONS]


def search_files(db: Session, query: str) -> list:
    return (
        db.query(File)
        .filter(or_(*(icontains(column, query) for column in GLOBAL_SEARCH_COLUMNS)))
        .order_by(File.upload_date.desc(), File.id.desc())
        .limit(MAX_GLOBAL_RESULTS)
        .all()
    )


@router.get("")
async def search(q: str = "", type: str = "all", db: Session = Depends(get_db)):
    """Autocomplete suggestions (type=suggestions) or file search (type=global)"""
    try:
        query = q.strip()

        if type == "suggestions":
            if len(query) < MIN_QUERY_LENGTH:
                return {"suggestions": []}
            return {"suggestions": get_suggestions(db, query)}

        if type == "global":
            if len(query) < MIN_QUERY_LENGTH:
                return {"files": [], "totalCount": 0}
            files = search_files(db, query)
            logger.debug(f"Global search '{query}' matched {len(files)} files")
            return {
                "files": [f.to_summary() for f in files],
                "totalCount": len(files),
                "query": query,
            }

        raise HTTPException(status_code=400, detail="Invalid search type")
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Search error: {str(e)}")
        raise HTTPException(
            status_code=500,
            detail=f"Failed to perform search: {str(e)}"
        )
