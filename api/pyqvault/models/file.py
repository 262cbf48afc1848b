from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy import Column, DateTime, Integer, String

from ..config.database import Base

FILE_TYPES = ("notes", "pyq")
PAPER_TYPES = ("normal", "back")

# Form/body fields every File must carry
REQUIRED_FILE_FIELDS = (
    "collegeName", "courseName", "year", "branch",
    "fileType", "semester", "paperType",
)


class File(Base):
    """An uploaded study file: notes or a previous year question paper."""

    __tablename__ = "files"

    id = Column(Integer, primary_key=True, index=True)
    college_name = Column(String, nullable=False, index=True)
    course_name = Column(String, nullable=False, index=True)
    year = Column(String, nullable=False)
    branch = Column(String, nullable=False)
    file_type = Column(String, nullable=False, index=True)  # notes | pyq
    file_name = Column(String, nullable=False)
    original_file_name = Column(String, nullable=False)
    file_url = Column(String, nullable=False)
    storage_key = Column(String, nullable=False)  # S3 object key
    semester = Column(String, nullable=False)
    paper_type = Column(String, nullable=False)  # normal | back
    file_size = Column(Integer, nullable=True)  # bytes
    content_type = Column(String, nullable=True)
    upload_date = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "collegeName": self.college_name,
            "courseName": self.course_name,
            "year": self.year,
            "branch": self.branch,
            "fileType": self.file_type,
            "fileName": self.file_name,
            "originalFileName": self.original_file_name,
            "fileUrl": self.file_url,
            "storageKey": self.storage_key,
            "semester": self.semester,
            "paperType": self.paper_type,
            "fileSize": self.file_size,
            "contentType": self.content_type,
            "uploadDate": self.upload_date.isoformat() if self.upload_date else None,
        }

    def to_summary(self) -> dict:
        """Trimmed shape used by search results and the dashboard."""
        return {
            "id": self.id,
            "fileName": self.file_name,
            "originalFileName": self.original_file_name,
            "collegeName": self.college_name,
            "courseName": self.course_name,
            "branch": self.branch,
            "year": self.year,
            "semester": self.semester,
            "fileType": self.file_type,
            "uploadDate": self.upload_date.isoformat() if self.upload_date else None,
        }


class FileCreate(BaseModel):
    """Metadata for an object that is already in storage."""

    model_config = ConfigDict(str_strip_whitespace=True, populate_by_name=True)

    collegeName: Optional[str] = None
    courseName: Optional[str] = None
    year: Optional[str] = None
    branch: Optional[str] = None
    fileType: Optional[Literal["notes", "pyq"]] = None
    semester: Optional[str] = None
    paperType: Optional[Literal["normal", "back"]] = None
    fileName: Optional[str] = None
    originalFileName: Optional[str] = None
    fileUrl: Optional[str] = None
    storageKey: Optional[str] = None
    fileSize: Optional[int] = Field(None, ge=0)
    contentType: Optional[str] = None


class FileUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    id: Optional[int] = None
    collegeName: Optional[str] = None
    courseName: Optional[str] = None
    year: Optional[str] = None
    branch: Optional[str] = None
    fileType: Optional[Literal["notes", "pyq"]] = None
    semester: Optional[str] = None
    paperType: Optional[Literal["normal", "back"]] = None
    fileName: Optional[str] = None


class FileDelete(BaseModel):
    fileId: Optional[int] = None


# camelCase API field -> ORM column
FILE_FIELD_MAP = {
    "collegeName": "college_name",
    "courseName": "course_name",
    "year": "year",
    "branch": "branch",
    "fileType": "file_type",
    "semester": "semester",
    "paperType": "paper_type",
    "fileName": "file_name",
    "originalFileName": "original_file_name",
    "fileUrl": "file_url",
    "storageKey": "storage_key",
    "fileSize": "file_size",
    "contentType": "content_type",
}
