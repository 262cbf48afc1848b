from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy import Column, DateTime, Index, Integer, JSON, String, UniqueConstraint

from ..config.database import Base

SAVED_FILE_CATEGORIES = ("important", "to-review", "favorite", "archive")
SavedFileCategory = Literal["important", "to-review", "favorite", "archive"]


class SavedFile(Base):
    """A user's bookmark of a File."""

    __tablename__ = "saved_files"
    __table_args__ = (
        # A user can't save the same file twice
        UniqueConstraint("file_id", "user_id", name="uq_saved_files_file_user"),
        Index("ix_saved_files_user_saved_at", "user_id", "saved_at"),
        Index("ix_saved_files_user_category", "user_id", "category"),
    )

    id = Column(Integer, primary_key=True, index=True)
    # Plain reference: deleting a File leaves its bookmarks behind
    file_id = Column(Integer, nullable=False, index=True)
    user_id = Column(String, nullable=False, index=True)
    saved_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    tags = Column(JSON, nullable=False, default=list)
    notes = Column(String(500), nullable=True)
    category = Column(String, nullable=False, default="favorite")
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self, file: Optional[dict] = None) -> dict:
        return {
            "id": self.id,
            "fileId": file if file is not None else self.file_id,
            "userId": self.user_id,
            "savedAt": self.saved_at.isoformat() if self.saved_at else None,
            "tags": self.tags or [],
            "notes": self.notes or "",
            "category": self.category,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }


class SavedFileCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    fileId: Optional[int] = None
    userId: Optional[str] = None
    category: SavedFileCategory = "favorite"
    tags: List[str] = Field(default_factory=list)
    notes: str = Field("", max_length=500)


class SavedFileUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    userId: Optional[str] = None
    category: Optional[SavedFileCategory] = None
    tags: Optional[List[str]] = None
    notes: Optional[str] = Field(None, max_length=500)
