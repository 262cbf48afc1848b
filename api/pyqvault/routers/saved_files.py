import logging
from fastapi import APIRouter, HTTPException, Depends, Query, status
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from typing import Optional

from ..config import settings
from ..config.database import get_db
from ..core.security import require_panel_user
from ..models.saved_file import SavedFileCreate, SavedFileUpdate, SAVED_FILE_CATEGORIES
from ..utils.db_utils import (
    get_file_by_id, get_files_by_ids, get_saved_file, get_saved_file_by_id,
    list_saved_files, count_saved_by_category, create_saved_file, delete_saved_file,
    pagination_info,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/saved-files",
    tags=["saved-files"],
    dependencies=[Depends(require_panel_user)]
)


def _user_id(user_id: Optional[str]) -> str:
    # TODO: take the owner from the authenticated session once per-user login exists
    return (user_id or "").strip() or settings.DEFAULT_USER_ID


@router.get("")
async def get_saved_files(
    userId: Optional[str] = None,
    category: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(12, ge=1, le=100),
    db: Session = Depends(get_db)
):
    """A user's bookmarks, newest first, with per-category counts"""
    try:
        user_id = _user_id(userId)
        if category and category != "all" and category not in SAVED_FILE_CATEGORIES:
            raise HTTPException(
                status_code=400,
                detail=f"Invalid category. Must be one of: all, {', '.join(SAVED_FILE_CATEGORIES)}"
            )

        saved, total = list_saved_files(db, user_id, category, page, limit)
        files = get_files_by_ids(db, [s.file_id for s in saved])

        # Bookmarks whose file was deleted are not returned
        saved_files = [
            s.to_dict(file=files[s.file_id].to_dict())
            for s in saved if s.file_id in files
        ]

        return {
            "savedFiles": saved_files,
            "pagination": pagination_info(page, limit, total, "totalSaved"),
            "categoryCounts": count_saved_by_category(db, user_id),
        }
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error fetching saved files: {str(e)}")
        raise HTTPException(
            status_code=500,
            detail=f"Failed to fetch saved files: {str(e)}"
        )


@router.post("", status_code=status.HTTP_201_CREATED)
async def save_file(saved_data: SavedFileCreate, db: Session = Depends(get_db)):
    try:
        if not saved_data.fileId:
            raise HTTPException(status_code=400, detail="File ID is required")

        user_id = _user_id(saved_data.userId)

        db_file = get_file_by_id(db, saved_data.fileId)
        if not db_file:
            raise HTTPException(status_code=404, detail="File not found")

        if get_saved_file(db, saved_data.fileId, user_id):
            raise HTTPException(status_code=409, detail="File already saved")

        try:
            saved = create_saved_file(db, {
                "file_id": saved_data.fileId,
                "user_id": user_id,
                "category": saved_data.category,
                "tags": [tag.strip() for tag in saved_data.tags if tag.strip()],
                "notes": saved_data.notes,
            })
        except IntegrityError:
            raise HTTPException(status_code=409, detail="File already saved")

        logger.info(f"User {user_id} saved file {db_file.id} as {saved.category}")
        return {
            "message": "File saved successfully",
            "savedFile": saved.to_dict(file=db_file.to_dict()),
        }
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error saving file: {str(e)}")
        raise HTTPException(
            status_code=500,
            detail=f"Failed to save file: {str(e)}"
        )


@router.delete("")
async def unsave_file(
    fileId: Optional[int] = None,
    userId: Optional[str] = None,
    db: Session = Depends(get_db)
):
    """Remove a bookmark by the file it points at"""
    try:
        if not fileId:
            raise HTTPException(status_code=400, detail="File ID is required")

        user_id = _user_id(userId)
        saved = get_saved_file(db, fileId, user_id)
        if not saved:
            raise HTTPException(status_code=404, detail="Saved file not found")

        delete_saved_file(db, saved)
        logger.info(f"User {user_id} removed saved file {fileId}")
        return {"message": "File removed from saved list"}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error removing saved file: {str(e)}")
        raise HTTPException(
            status_code=500,
            detail=f"Failed to remove saved file: {str(e)}"
        )


@router.put("/{saved_id}")
async def update_saved_file(
    saved_id: int,
    update_data: SavedFileUpdate,
    db: Session = Depends(get_db)
):
    try:
        user_id = _user_id(update_data.userId)
        saved = get_saved_file_by_id(db, saved_id, user_id)
        if not saved:
            raise HTTPException(status_code=404, detail="Saved file not found")

        if update_data.category is not None:
            saved.category = update_data.category
        if update_data.tags is not None:
            saved.tags = [tag.strip() for tag in update_data.tags if tag.strip()]
        if update_data.notes is not None:
            saved.notes = update_data.notes

        try:
            db.commit()
            db.refresh(saved)
        except Exception:
            db.rollback()
            raise

        files = get_files_by_ids(db, [saved.file_id])
        file_dict = files[saved.file_id].to_dict() if saved.file_id in files else None
        return {
            "message": "Saved file updated successfully",
            "savedFile": saved.to_dict(file=file_dict),
        }
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error updating saved file: {str(e)}")
        raise HTTPException(
            status_code=500,
            detail=f"Failed to update saved file: {str(e)}"
        )


@router.delete("/{saved_id}")
async def delete_saved_file_by_id(
    saved_id: int,
    userId: Optional[str] = None,
    db: Session = Depends(get_db)
):
    try:
        user_id = _user_id(userId)
        saved = get_saved_file_by_id(db, saved_id, user_id)
        if not saved:
            raise HTTPException(status_code=404, detail="Saved file not found")

        delete_saved_file(db, saved)
        return {"message": "Saved file removed successfully"}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error removing saved file: {str(e)}")
        raise HTTPException(
            status_code=500,
            detail=f"Failed to remove saved file: {str(e)}"
        )
