import logging
from fastapi import APIRouter, HTTPException, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Optional

from ..config.database import get_db
from ..core.security import require_panel_user
from ..models.college import (
    CollegeCreate, CollegeUpdate, CollegeImportRequest, REQUIRED_COLLEGE_FIELDS,
)
from ..services.college_service import CollegeService, CollegeConflictError
from ..utils.db_utils import pagination_info

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/colleges",
    tags=["colleges"],
    dependencies=[Depends(require_panel_user)]
)


@router.get("")
async def get_colleges(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=500),
    search: str = "",
    type: str = "",
    category: str = "",
    state: str = "",
    isActive: Optional[bool] = None,
    db: Session = Depends(get_db)
):
    try:
        service = CollegeService(db)
        colleges, total = service.list_colleges(
            page=page,
            limit=limit,
            search=search.strip(),
            college_type=type.strip(),
            category=category.strip(),
            state=state.strip(),
            is_active=isActive,
        )
        return {
            "colleges": [college.to_dict() for college in colleges],
            "pagination": pagination_info(page, limit, total, "totalItems"),
        }
    except Exception as e:
        logger.error(f"Error fetching colleges: {str(e)}")
        raise HTTPException(
            status_code=500,
            detail=f"Failed to fetch colleges: {str(e)}"
        )


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_college(college_data: CollegeCreate, db: Session = Depends(get_db)):
    try:
        missing = [f for f in REQUIRED_COLLEGE_FIELDS if not getattr(college_data, f)]
        if missing:
            raise HTTPException(
                status_code=400,
                detail=f"Missing required fields: {', '.join(missing)}"
            )

        college = CollegeService(db).create_college(college_data)
        return {
            "success": True,
            "college": college.to_dict(),
            "message": "College created successfully",
        }
    except CollegeConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error creating college: {str(e)}")
        raise HTTPException(
            status_code=500,
            detail=f"Failed to create college: {str(e)}"
        )


@router.put("")
async def update_college(college_data: CollegeUpdate, db: Session = Depends(get_db)):
    try:
        if college_data.id is None:
            raise HTTPException(status_code=400, detail="College ID is required")

        blank = [
            f for f in REQUIRED_COLLEGE_FIELDS
            if f in college_data.model_fields_set and not getattr(college_data, f)
        ]
        if blank:
            raise HTTPException(
                status_code=400,
                detail=f"Fields cannot be empty: {', '.join(blank)}"
            )

        college = CollegeService(db).update_college(college_data.id, college_data)
        if not college:
            raise HTTPException(status_code=404, detail="College not found")

        return {
            "success": True,
            "college": college.to_dict(),
            "message": "College updated successfully",
        }
    except CollegeConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error updating college: {str(e)}")
        raise HTTPException(
            status_code=500,
            detail=f"Failed to update college: {str(e)}"
        )


@router.delete("")
async def delete_college(id: Optional[int] = None, db: Session = Depends(get_db)):
    try:
        if id is None:
            raise HTTPException(status_code=400, detail="College ID is required")

        if not CollegeService(db).delete_college(id):
            raise HTTPException(status_code=404, detail="College not found")

        return {"success": True, "message": "College deleted successfully"}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error deleting college: {str(e)}")
        raise HTTPException(
            status_code=500,
            detail=f"Failed to delete college: {str(e)}"
        )


@router.get("/dropdown")
async def get_college_dropdown(db: Session = Depends(get_db)):
    """Active colleges as select options"""
    try:
        return {"success": True, "colleges": CollegeService(db).get_dropdown_options()}
    except Exception as e:
        logger.error(f"Error fetching college dropdown: {str(e)}")
        raise HTTPException(
            status_code=500,
            detail={"success": False, "error": "Failed to fetch colleges", "details": str(e)}
        )


@router.post("/bulk-import")
async def bulk_import_colleges(payload: CollegeImportRequest, db: Session = Depends(get_db)):
    """Upsert a batch of colleges by code or name; bad items are skipped"""
    try:
        if not isinstance(payload.colleges, list):
            raise HTTPException(
                status_code=400,
                detail="Invalid data format. Expected array of colleges."
            )

        results = CollegeService(db).bulk_import(payload.colleges)
        logger.info(
            f"Bulk import finished: {results['inserted']} inserted, "
            f"{results['updated']} updated, {results['skipped']} skipped"
        )
        return {
            "success": True,
            "message": "Bulk import completed",
            "results": results,
        }
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Bulk import error: {str(e)}")
        raise HTTPException(
            status_code=500,
            detail={"error": "Failed to import colleges", "details": str(e)}
        )


@router.get("/bulk-import")
async def get_college_statistics(db: Session = Depends(get_db)):
    try:
        return {"success": True, "statistics": CollegeService(db).get_statistics()}
    except Exception as e:
        logger.error(f"Error fetching college statistics: {str(e)}")
        raise HTTPException(
            status_code=500,
            detail={"error": "Failed to fetch statistics", "details": str(e)}
        )
