import io
import logging
from fastapi import APIRouter, HTTPException, UploadFile, File as FileForm, Form, Depends, Query, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from typing import Optional

from ..config import settings
from ..config.database import get_db
from ..core.security import require_panel_user
from ..models.file import (
    FileCreate, FileUpdate, FileDelete,
    FILE_TYPES, PAPER_TYPES, REQUIRED_FILE_FIELDS,
)
from ..utils.db_utils import (
    build_file_filters, list_files, get_file_by_id,
    create_file_record, update_file_record, delete_file_record, pagination_info,
)
from ..utils.file_utils import is_valid_file_type, get_mime_type, format_file_size
from ..utils.s3_utils import (
    StorageError, build_storage_key, upload_file_to_s3, delete_file_from_s3,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/files",
    tags=["files"],
    dependencies=[Depends(require_panel_user)]
)

# Fields a metadata-only create must carry on top of the upload form fields
STORED_OBJECT_FIELDS = ("fileName", "originalFileName", "fileUrl", "storageKey")


def _storage_error_body(error: StorageError) -> dict:
    """Translate a storage failure into {error, details, hint}"""
    message = str(error)
    lowered = message.lower()
    if "not available" in lowered or "missing environment" in lowered:
        error_msg = "Cloud storage is not configured"
        hint = "Administrator: set AWS_ACCESS_KEY_ID, AWS_SECRET_ACCESS_KEY, AWS_REGION and S3_BUCKET_NAME"
    elif "accessdenied" in lowered or "credentials" in lowered or "forbidden" in lowered:
        error_msg = "Cloud storage authentication failed"
        hint = "Administrator: check the AWS credentials and the bucket policy"
    elif "timeout" in lowered or "timed out" in lowered:
        error_msg = "Upload timeout"
        hint = "File may be too large or connection is slow"
    else:
        error_msg = "Failed to upload file to cloud storage"
        hint = "Please try again. Contact support if this issue persists"
    return {"error": error_msg, "details": message, "hint": hint}


def _remove_object_quietly(storage_key: str) -> None:
    try:
        delete_file_from_s3(storage_key)
        logger.info(f"Removed storage object: {storage_key}")
    except StorageError as e:
        logger.error(f"Failed to remove storage object {storage_key}: {str(e)}")


@router.get("")
async def get_files(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    collegeName: Optional[str] = None,
    courseName: Optional[str] = None,
    fileType: Optional[str] = None,
    year: Optional[str] = None,
    branch: Optional[str] = None,
    semester: Optional[str] = None,
    paperType: Optional[str] = None,
    db: Session = Depends(get_db)
):
    """List files with filters, newest first"""
    try:
        filters = build_file_filters(
            college_name=collegeName,
            course_name=courseName,
            file_type=fileType,
            year=year,
            branch=branch,
            semester=semester,
            paper_type=paperType,
        )
        files, total = list_files(db, filters, page, limit)

        return {
            "files": [f.to_dict() for f in files],
            "pagination": pagination_info(page, limit, total, "totalFiles"),
        }
    except Exception as e:
        logger.error(f"Error fetching files: {str(e)}")
        raise HTTPException(
            status_code=500,
            detail=f"Failed to fetch files: {str(e)}"
        )


@router.get("/{file_id}")
async def get_file(file_id: int, db: Session = Depends(get_db)):
    db_file = get_file_by_id(db, file_id)
    if not db_file:
        raise HTTPException(status_code=404, detail="File not found")
    return {"file": db_file.to_dict()}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_file(file_data: FileCreate, db: Session = Depends(get_db)):
    """Register metadata for an object that is already in storage"""
    try:
        data = file_data.model_dump(exclude_none=True)
        missing = [f for f in REQUIRED_FILE_FIELDS + STORED_OBJECT_FIELDS if not data.get(f)]
        if missing:
            raise HTTPException(
                status_code=400,
                detail=f"Missing required fields: {', '.join(missing)}"
            )

        db_file = create_file_record(db, data)
        logger.info(f"Created file record {db_file.id}: {db_file.file_name}")
        return {"success": True, "file": db_file.to_dict()}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error creating file record: {str(e)}")
        raise HTTPException(
            status_code=500,
            detail=f"Failed to create file: {str(e)}"
        )


@router.put("")
async def update_file(file_data: FileUpdate, db: Session = Depends(get_db)):
    try:
        if file_data.id is None:
            raise HTTPException(status_code=400, detail="File ID is required")

        db_file = get_file_by_id(db, file_data.id)
        if not db_file:
            raise HTTPException(status_code=404, detail="File not found")

        data = file_data.model_dump(exclude_unset=True, exclude={"id"})
        blank = [key for key, value in data.items() if value is None or value == ""]
        if blank:
            raise HTTPException(
                status_code=400,
                detail=f"Fields cannot be empty: {', '.join(blank)}"
            )

        db_file = update_file_record(db, db_file, data)
        logger.info(f"Updated file {db_file.id}: {', '.join(data) or 'no changes'}")
        return {"success": True, "file": db_file.to_dict()}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error updating file: {str(e)}")
        raise HTTPException(
            status_code=500,
            detail=f"Failed to update file: {str(e)}"
        )


@router.delete("")
async def delete_file(file_data: Optional[FileDelete] = None, db: Session = Depends(get_db)):
    """Delete the record, then its storage object (best-effort)"""
    try:
        if not file_data or not file_data.fileId:
            raise HTTPException(status_code=400, detail="File ID is required")

        db_file = get_file_by_id(db, file_data.fileId)
        if not db_file:
            raise HTTPException(status_code=404, detail="File not found")

        storage_key = db_file.storage_key
        delete_file_record(db, db_file)
        logger.info(f"Deleted file record {file_data.fileId}")

        if storage_key:
            _remove_object_quietly(storage_key)

        return {"success": True, "message": "File deleted successfully"}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error deleting file: {str(e)}")
        raise HTTPException(
            status_code=500,
            detail=f"Failed to delete file: {str(e)}"
        )


@router.post("/upload", status_code=status.HTTP_201_CREATED)
async def upload_file(
    file: Optional[UploadFile] = FileForm(None),
    collegeName: Optional[str] = Form(None),
    courseName: Optional[str] = Form(None),
    year: Optional[str] = Form(None),
    branch: Optional[str] = Form(None),
    fileType: Optional[str] = Form(None),
    semester: Optional[str] = Form(None),
    paperType: Optional[str] = Form(None),
    db: Session = Depends(get_db)
):
    """Upload a document to S3 and record its metadata"""
    try:
        if file is None or not file.filename:
            raise HTTPException(status_code=400, detail="No file provided")

        content = await file.read()
        max_mb = settings.MAX_FILE_SIZE // (1024 * 1024)
        if len(content) > settings.MAX_FILE_SIZE:
            raise HTTPException(
                status_code=413,
                detail=f"File too large. Maximum size is {max_mb}MB"
            )

        fields = {
            "collegeName": collegeName,
            "courseName": courseName,
            "year": year,
            "branch": branch,
            "fileType": fileType,
            "semester": semester,
            "paperType": paperType,
        }
        fields = {key: (value or "").strip() for key, value in fields.items()}
        if any(not fields[key] for key in REQUIRED_FILE_FIELDS):
            raise HTTPException(status_code=400, detail="All fields required")

        if fields["fileType"] not in FILE_TYPES:
            raise HTTPException(
                status_code=400,
                detail=f"Invalid fileType. Must be one of: {', '.join(FILE_TYPES)}"
            )
        if fields["paperType"] not in PAPER_TYPES:
            raise HTTPException(
                status_code=400,
                detail=f"Invalid paperType. Must be one of: {', '.join(PAPER_TYPES)}"
            )
        if not is_valid_file_type(file.filename, settings.ALLOWED_EXTENSIONS):
            raise HTTPException(
                status_code=400,
                detail=f"Invalid file type. Allowed: {', '.join(sorted(settings.ALLOWED_EXTENSIONS))}"
            )

        storage_key = build_storage_key(
            fields["collegeName"], fields["courseName"], fields["fileType"], file.filename
        )
        content_type = file.content_type or get_mime_type(file.filename)
        logger.info(f"Uploading {file.filename} ({format_file_size(len(content))}) to {storage_key}")

        try:
            file_url = upload_file_to_s3(io.BytesIO(content), storage_key, content_type)
        except StorageError as e:
            logger.error(f"Storage upload failed for {file.filename}: {str(e)}")
            return JSONResponse(status_code=500, content=_storage_error_body(e))

        try:
            db_file = create_file_record(db, {
                **fields,
                "fileName": file.filename,
                "originalFileName": file.filename,
                "fileUrl": file_url,
                "storageKey": storage_key,
                "fileSize": len(content),
                "contentType": content_type,
            })
        except Exception as e:
            logger.error(f"Saving file record failed, removing uploaded object: {str(e)}")
            _remove_object_quietly(storage_key)
            raise HTTPException(
                status_code=500,
                detail={"error": "Failed to upload file", "details": str(e), "hint": "Please try again"}
            )

        logger.info(f"Upload complete: file {db_file.id} at {file_url}")
        return {"success": True, "file": db_file.to_dict()}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Upload error: {str(e)}")
        raise HTTPException(
            status_code=500,
            detail={"error": "Failed to upload file", "details": str(e), "hint": "Please try again"}
        )
